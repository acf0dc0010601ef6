"""User document store — per-user Firestore documents holding the billing map."""

import logging
from typing import Any

from google.cloud.firestore import AsyncClient

from app.config import settings
from app.models.billing import BillingRecord

logger = logging.getLogger(__name__)


class UserStore:
    """Reads and merge-writes ``{users_collection}/{uid}`` documents.

    All writes use ``set(..., merge=True)``: fields not named in a write are
    preserved, nested maps are merged key by key.
    """

    def __init__(self, client: AsyncClient, collection: str | None = None):
        self._client = client
        self._collection = collection or settings.users_collection

    def _doc(self, uid: str):
        return self._client.collection(self._collection).document(uid)

    async def get_user(self, uid: str) -> dict[str, Any] | None:
        snapshot = await self._doc(uid).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def get_billing(self, uid: str) -> BillingRecord:
        """Return the user's billing sub-record (empty record if absent)."""
        data = await self.get_user(uid) or {}
        return BillingRecord.model_validate(data.get("billing") or {})

    async def merge_billing(
        self,
        uid: str,
        fields: dict[str, Any],
        subscription: dict[str, Any] | None = None,
    ) -> None:
        """Merge camelCase ``fields`` into the billing map.

        ``subscription`` optionally merges the cross-platform ``subscription``
        map that the mobile app reads.
        """
        payload: dict[str, Any] = {"billing": fields}
        if subscription is not None:
            payload["subscription"] = subscription
        await self._doc(uid).set(payload, merge=True)
        logger.info("Merged billing fields %s for user %s", sorted(fields), uid)
