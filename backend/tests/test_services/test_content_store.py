"""Tests for ContentStore against the in-memory Firestore."""

from datetime import datetime, timezone

import pytest

from app.services.content_store import ContentStore


@pytest.mark.asyncio
async def test_create_get_update_delete(content_store: ContentStore, firestore_db):
    doc_id = await content_store.create("breathwork", {"slug": "box", "name": "Box Breathing"})

    stored = firestore_db.collection("swift_breathwork_techniques").docs[doc_id]
    assert stored["createdAt"] == stored["updatedAt"]

    item = await content_store.get("breathwork", doc_id)
    assert item["id"] == doc_id
    assert item["name"] == "Box Breathing"

    await content_store.update("breathwork", doc_id, {"name": "Box Breathing 4-4-4-4"})
    updated = await content_store.get("breathwork", doc_id)
    assert updated["name"] == "Box Breathing 4-4-4-4"
    assert updated["slug"] == "box"
    assert updated["updatedAt"] >= updated["createdAt"]

    await content_store.delete("breathwork", doc_id)
    assert await content_store.get("breathwork", doc_id) is None


@pytest.mark.asyncio
async def test_list_newest_first(content_store: ContentStore, firestore_db):
    firestore_db.collection("swift_aomi_techniques").docs.update(
        {
            "older": {"slug": "serve", "name": "Serve", "createdAt": datetime(2025, 1, 1, tzinfo=timezone.utc)},
            "newer": {"slug": "volley", "name": "Volley", "createdAt": datetime(2025, 3, 1, tzinfo=timezone.utc)},
        }
    )

    items = await content_store.list_all("aomi")

    assert [item["id"] for item in items] == ["newer", "older"]


@pytest.mark.asyncio
async def test_stats_counts_each_collection(content_store: ContentStore):
    await content_store.create("visualizations", {"title": "Pre-game"})
    await content_store.create("visualizations", {"title": "Recovery"})
    await content_store.create("breathwork", {"slug": "box", "name": "Box"})

    assert await content_store.stats() == {"visualizations": 2, "breathwork": 1, "aomi": 0}
