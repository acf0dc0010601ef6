"""Admin content API — CRUD for visualization, breathwork and AOMI content."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError

from app.api.deps import get_content_store, require_admin
from app.auth.firebase import VerifiedUser
from app.models.content import CONTENT_MODELS, ContentType
from app.services.content_store import ContentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _validate(content_type: str, data: dict[str, Any]) -> dict[str, Any]:
    """Validate ``data`` against the content model; return camelCase fields."""
    model = CONTENT_MODELS[content_type]
    try:
        item = model.model_validate(data)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Invalid content",
                "details": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
            },
        ) from e
    return item.model_dump(by_alias=True)


async def _get_or_404(store: ContentStore, content_type: str, doc_id: str) -> dict[str, Any]:
    item = await store.get(content_type, doc_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{content_type} item {doc_id} not found",
        )
    return item


@router.get("/stats")
async def get_stats(
    admin: VerifiedUser = Depends(require_admin),
    store: ContentStore = Depends(get_content_store),
) -> dict[str, int]:
    """Document counts per content collection."""
    return await store.stats()


@router.get("/{content_type}")
async def list_content(
    content_type: ContentType,
    admin: VerifiedUser = Depends(require_admin),
    store: ContentStore = Depends(get_content_store),
) -> list[dict[str, Any]]:
    """List all items, newest first."""
    return await store.list_all(content_type)


@router.post("/{content_type}", status_code=status.HTTP_201_CREATED)
async def create_content(
    content_type: ContentType,
    data: dict[str, Any] = Body(...),
    admin: VerifiedUser = Depends(require_admin),
    store: ContentStore = Depends(get_content_store),
) -> dict[str, str]:
    """Create an item and return its generated id."""
    doc_id = await store.create(content_type, _validate(content_type, data))
    logger.info("Admin %s created %s item %s", admin.uid, content_type, doc_id)
    return {"id": doc_id}


@router.get("/{content_type}/{doc_id}")
async def get_content(
    content_type: ContentType,
    doc_id: str,
    admin: VerifiedUser = Depends(require_admin),
    store: ContentStore = Depends(get_content_store),
) -> dict[str, Any]:
    return await _get_or_404(store, content_type, doc_id)


@router.patch("/{content_type}/{doc_id}")
async def update_content(
    content_type: ContentType,
    doc_id: str,
    data: dict[str, Any] = Body(...),
    admin: VerifiedUser = Depends(require_admin),
    store: ContentStore = Depends(get_content_store),
) -> dict[str, bool]:
    """Partially update an item; the merged result must still be valid."""
    existing = await _get_or_404(store, content_type, doc_id)
    stored = {k: v for k, v in existing.items() if k not in ("id", "createdAt", "updatedAt")}
    await store.update(content_type, doc_id, _validate(content_type, {**stored, **data}))
    logger.info("Admin %s updated %s item %s", admin.uid, content_type, doc_id)
    return {"success": True}


@router.delete("/{content_type}/{doc_id}")
async def delete_content(
    content_type: ContentType,
    doc_id: str,
    admin: VerifiedUser = Depends(require_admin),
    store: ContentStore = Depends(get_content_store),
) -> dict[str, bool]:
    await _get_or_404(store, content_type, doc_id)
    await store.delete(content_type, doc_id)
    logger.info("Admin %s deleted %s item %s", admin.uid, content_type, doc_id)
    return {"success": True}
