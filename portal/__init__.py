"""
Multi-tenant admin portal backend.

Companies onboard through a setup wizard, invite their users, and manage
browser shortcuts; identity is delegated to a pluggable auth provider and
persistence to a pluggable document store.
"""

__version__ = "0.1.0"
