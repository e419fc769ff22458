"""
In-memory storage implementation for development and tests.

Works without any external services. Every operation holds a single
asyncio lock, and documents are copied on the way in and out so callers
never share mutable state with the store.
"""

from __future__ import annotations

import asyncio
import copy
import operator
from typing import Any

from portal.core.errors import StorageError
from portal.storage.base import FILTER_OPS, DocumentStore, Filter


_OPERATORS = {
    "==": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _matches(doc: dict[str, Any], filters: list[Filter]) -> bool:
    for field, op, value in filters:
        current = doc.get(field)
        if op == "==":
            if current != value:
                return False
            continue
        # Range filters never match missing values (same as Firestore)
        if current is None or not _OPERATORS[op](current, value):
            return False
    return True


def _sort_key(field: str):
    def key(doc: dict[str, Any]):
        value = doc.get(field)
        return (value is None, value)
    return key


class InMemoryDocumentStore(DocumentStore):
    """In-memory document storage."""

    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        async with self._lock:
            self._data.setdefault(collection, {})[id] = copy.deepcopy(data)

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._data.get(collection, {}).get(id)
            return copy.deepcopy(doc) if doc is not None else None

    async def delete(self, collection: str, id: str) -> bool:
        async with self._lock:
            return self._data.get(collection, {}).pop(id, None) is not None

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        for _, op, _ in filters or []:
            if op not in FILTER_OPS:
                raise StorageError(f"Unsupported filter operator: {op}")

        async with self._lock:
            results = [
                doc for doc in self._data.get(collection, {}).values()
                if _matches(doc, filters or [])
            ]

            if order_by:
                results.sort(key=_sort_key(order_by), reverse=descending)

            results = results[offset:]
            if limit is not None:
                results = results[:limit]

            return copy.deepcopy(results)

    async def delete_many(self, collection: str, ids: list[str]) -> int:
        async with self._lock:
            docs = self._data.get(collection, {})
            return sum(1 for id in ids if docs.pop(id, None) is not None)
