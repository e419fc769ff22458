"""
External service integrations: SES email and Sentry error tracking.
"""

from portal.integrations.email import EmailService
from portal.integrations.sentry import init_sentry

__all__ = ["EmailService", "init_sentry"]
