"""LiveKit token proxy — forwards room token requests to the Cloud Function."""

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_bearer_token, get_http_client
from app.config import settings
from app.schemas.proxy import LivekitTokenRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/livekit", tags=["livekit"])


@router.post("/token")
async def get_token(
    body: LivekitTokenRequest,
    token: str = Depends(get_bearer_token),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    """Fetch a LiveKit access token for ``roomName`` as ``identity``."""
    if not body.room_name or not body.identity:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing roomName or identity",
        )

    logger.info("Fetching LiveKit token for room: %s", body.room_name)

    try:
        response = await http.post(
            settings.livekit_token_url,
            json={
                "roomName": body.room_name,
                "identity": body.identity,
                "metadata": body.metadata or "{}",
            },
            headers={"Authorization": f"Bearer {token}"},
        )
        if not response.is_success:
            logger.error("LiveKit token service error %s: %s", response.status_code, response.text)
            raise HTTPException(
                status_code=response.status_code,
                detail={"error": "Failed to get LiveKit token", "details": response.text},
            )

        data = response.json()
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("LiveKit token proxy error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    logger.info("LiveKit token received for room: %s", data.get("roomName") if isinstance(data, dict) else None)
    return data
