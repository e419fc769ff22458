"""
Storage abstractions.

Integration Points:
- DocumentStore → Cloud Firestore (production) or in-memory (dev/tests)
- DataStore → typed repository used by every service
"""

from __future__ import annotations

import logging

from portal.config import Settings
from portal.core.errors import StorageError
from portal.storage.base import Collections, DocumentStore
from portal.storage.datastore import DataStore, domain_shortcuts
from portal.storage.memory import InMemoryDocumentStore

logger = logging.getLogger(__name__)


def create_document_store(settings: Settings) -> DocumentStore:
    """Pick the document store named by DB_PROVIDER."""
    provider = settings.db_provider.lower()

    if provider == "memory":
        return InMemoryDocumentStore()

    if provider == "firestore":
        from portal.storage.firestore import FirestoreDocumentStore

        logger.info(f"Using Firestore (project={settings.firestore_project_id or 'default'})")
        return FirestoreDocumentStore(
            project_id=settings.firestore_project_id,
            credentials_path=settings.google_application_credentials,
        )

    if provider in ("postgres", "mysql"):
        raise StorageError(f"Database provider '{provider}' is not implemented")

    raise StorageError(f"Unsupported database provider: {provider}")


def create_data_store(settings: Settings) -> DataStore:
    return DataStore(create_document_store(settings))


__all__ = [
    "Collections",
    "DocumentStore",
    "InMemoryDocumentStore",
    "DataStore",
    "domain_shortcuts",
    "create_document_store",
    "create_data_store",
]
