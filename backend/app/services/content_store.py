"""Content store — admin CRUD over the training content collections."""

import logging
from datetime import datetime, timezone
from typing import Any

from google.cloud import firestore
from google.cloud.firestore import AsyncClient

from app.models.content import COLLECTIONS

logger = logging.getLogger(__name__)


def _to_item(doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
    return {"id": doc_id, **data}


class ContentStore:
    """Firestore-backed storage for visualizations, breathwork and AOMI content.

    Documents are stored in camelCase with ``createdAt``/``updatedAt``
    timestamps; ``content_type`` is one of the keys of ``COLLECTIONS``.
    """

    def __init__(self, client: AsyncClient):
        self._client = client

    def _collection(self, content_type: str):
        return self._client.collection(COLLECTIONS[content_type])

    async def list_all(self, content_type: str) -> list[dict[str, Any]]:
        query = self._collection(content_type).order_by(
            "createdAt", direction=firestore.Query.DESCENDING
        )
        return [_to_item(doc.id, doc.to_dict() or {}) async for doc in query.stream()]

    async def get(self, content_type: str, doc_id: str) -> dict[str, Any] | None:
        snapshot = await self._collection(content_type).document(doc_id).get()
        if not snapshot.exists:
            return None
        return _to_item(snapshot.id, snapshot.to_dict() or {})

    async def create(self, content_type: str, data: dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        _, doc_ref = await self._collection(content_type).add(
            {**data, "createdAt": now, "updatedAt": now}
        )
        logger.info("Created %s document %s", content_type, doc_ref.id)
        return doc_ref.id

    async def update(self, content_type: str, doc_id: str, data: dict[str, Any]) -> None:
        await self._collection(content_type).document(doc_id).update(
            {**data, "updatedAt": datetime.now(timezone.utc)}
        )
        logger.info("Updated %s document %s", content_type, doc_id)

    async def delete(self, content_type: str, doc_id: str) -> None:
        await self._collection(content_type).document(doc_id).delete()
        logger.info("Deleted %s document %s", content_type, doc_id)

    async def count(self, content_type: str) -> int:
        return len([doc async for doc in self._collection(content_type).stream()])

    async def stats(self) -> dict[str, int]:
        return {content_type: await self.count(content_type) for content_type in COLLECTIONS}
