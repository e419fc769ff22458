"""
Firestore document store.

Setup:
    DB_PROVIDER=firestore
    FIRESTORE_PROJECT_ID=my-gcp-project
    GOOGLE_APPLICATION_CREDENTIALS=/path/to/service-account.json  (optional
    on GCP, where default credentials are available)
"""

from __future__ import annotations

import logging
from typing import Any

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from portal.core.errors import StorageError
from portal.storage.base import DocumentStore, Filter

logger = logging.getLogger(__name__)

# Firestore rejects write batches larger than this
BATCH_LIMIT = 500


class FirestoreDocumentStore(DocumentStore):
    """Document storage backed by Cloud Firestore."""

    def __init__(self, project_id: str, credentials_path: str = "", client: Any | None = None):
        if client is not None:
            self.client = client
        elif credentials_path:
            self.client = firestore.AsyncClient.from_service_account_json(credentials_path, project=project_id)
        else:
            self.client = firestore.AsyncClient(project=project_id or None)

    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        try:
            await self.client.collection(collection).document(id).set(data)
        except GoogleAPICallError as e:
            logger.error(f"Firestore save failed ({collection}/{id}): {e}")
            raise StorageError(str(e)) from e

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        try:
            snapshot = await self.client.collection(collection).document(id).get()
        except GoogleAPICallError as e:
            logger.error(f"Firestore get failed ({collection}/{id}): {e}")
            raise StorageError(str(e)) from e
        return snapshot.to_dict() if snapshot.exists else None

    async def delete(self, collection: str, id: str) -> bool:
        ref = self.client.collection(collection).document(id)
        try:
            snapshot = await ref.get()
            if not snapshot.exists:
                return False
            await ref.delete()
        except GoogleAPICallError as e:
            logger.error(f"Firestore delete failed ({collection}/{id}): {e}")
            raise StorageError(str(e)) from e
        return True

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        query = self.client.collection(collection)
        for field, op, value in filters or []:
            query = query.where(filter=FieldFilter(field, op, value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        try:
            return [snapshot.to_dict() async for snapshot in query.stream()]
        except GoogleAPICallError as e:
            logger.error(f"Firestore query failed ({collection}): {e}")
            raise StorageError(str(e)) from e

    async def delete_many(self, collection: str, ids: list[str]) -> int:
        ref = self.client.collection(collection)
        try:
            for start in range(0, len(ids), BATCH_LIMIT):
                batch = self.client.batch()
                for id in ids[start:start + BATCH_LIMIT]:
                    batch.delete(ref.document(id))
                await batch.commit()
        except GoogleAPICallError as e:
            logger.error(f"Firestore batch delete failed ({collection}): {e}")
            raise StorageError(str(e)) from e
        return len(ids)
