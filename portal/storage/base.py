"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory → Firestore, later SQL) without changing the
services that use them.

Documents are plain dicts. Filters are `(field, op, value)` triples where
`op` is one of `==`, `<`, `<=`, `>`, `>=`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


Filter = tuple[str, str, Any]

FILTER_OPS = ("==", "<", "<=", ">", ">=")


# =============================================================================
# Document Store Interface
# =============================================================================


class DocumentStore(ABC):
    """
    Storage for structured documents keyed by id within a collection.

    Firestore Implementation: google-cloud-firestore AsyncClient
    Local Implementation: in-memory dicts

    Implementations must be safe for concurrent use by many requests.
    """

    @abstractmethod
    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        """Create or replace a document (upsert)."""
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query documents with optional filters, ordering and paging."""
        pass

    @abstractmethod
    async def delete_many(self, collection: str, ids: list[str]) -> int:
        """Delete several documents in one batch. Returns how many were given."""
        pass

    async def count(self, collection: str, filters: list[Filter] | None = None) -> int:
        """Count matching documents."""
        return len(await self.query(collection, filters))

    async def close(self) -> None:
        """Release client resources."""
        return None


# =============================================================================
# Collection Names
# =============================================================================


class Collections:
    """Standard collection names."""

    COMPANIES = "companies"
    USERS = "users"
    INVITATIONS = "invitations"
    SHORTCUTS = "browser_shortcuts"
    SUBSCRIPTIONS = "subscriptions"
    SETUP_PROGRESS = "company_setup_progress"
