"""Personalization endpoint — sport-specific values for visualization scripts."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from langchain_core.language_models import BaseChatModel
from pydantic import ValidationError

from app.api.deps import get_bearer_token, get_personalization_model
from app.schemas.proxy import PersonalizeRequest, PersonalizeResponse
from app.services.personalization import DEFAULT_VALUES, personalize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["personalize"])


@router.post("/personalize", response_model=PersonalizeResponse)
async def personalize_values(
    request: Request,
    token: str = Depends(get_bearer_token),
    model: BaseChatModel = Depends(get_personalization_model),
) -> PersonalizeResponse:
    """Generate placeholder values; falls back to generic defaults on any failure.

    Only a missing ``sport`` is rejected; an unreadable body still gets the
    defaults.
    """
    try:
        data = await request.json()
    except ValueError:
        logger.warning("Personalize request body is not JSON, using defaults")
        return PersonalizeResponse(values=DEFAULT_VALUES)
    if not isinstance(data, dict):
        logger.warning("Personalize request body is not an object, using defaults")
        return PersonalizeResponse(values=DEFAULT_VALUES)

    if not data.get("sport"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Sport is required",
        )

    try:
        body = PersonalizeRequest.model_validate(data)
    except ValidationError:
        logger.warning("Invalid personalize request %s, using defaults", data)
        return PersonalizeResponse(values=DEFAULT_VALUES)

    values = await personalize(model, body.sport, body.skill)
    return PersonalizeResponse(values=values)
