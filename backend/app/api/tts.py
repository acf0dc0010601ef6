"""TTS proxy — forwards generation requests to the Cloud Run TTS service.

The browser cannot call the TTS service directly (CORS), so the request
body and the caller's bearer token are relayed unchanged.
"""

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.deps import get_bearer_token, get_http_client
from app.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tts", tags=["tts"])


@router.post("/generate")
async def generate(
    request: Request,
    token: str = Depends(get_bearer_token),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    """Relay a TTS generation request and return the service's JSON."""
    try:
        body = await request.json()
        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object")

        segments = body.get("segments")
        logger.info(
            "Forwarding TTS request: user=%s session=%s segments=%s voice=%s",
            body.get("userId"),
            body.get("sessionId"),
            len(segments) if isinstance(segments, list) else None,
            body.get("voice"),
        )

        response = await http.post(
            settings.tts_api_endpoint,
            json=body,
            headers={"Authorization": f"Bearer {token}"},
        )
        if not response.is_success:
            logger.error("TTS service error %s: %s", response.status_code, response.text)
            raise HTTPException(
                status_code=response.status_code,
                detail=f"TTS service error: {response.text}",
            )

        data = response.json()
        if isinstance(data, dict):
            logger.info(
                "TTS response received: duration=%s segments=%s audio_length=%s",
                data.get("durationSeconds"),
                data.get("segmentCount"),
                len(data.get("audioData") or ""),
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("TTS proxy error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "TTS generation failed",
        ) from e

    return data
