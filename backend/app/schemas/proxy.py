"""Request/response schemas for the proxy endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.services.personalization import PersonalizationValues


class PersonalizeRequest(BaseModel):
    sport: str | None = None
    skill: str | None = None


class PersonalizeResponse(BaseModel):
    values: PersonalizationValues


class LivekitTokenRequest(BaseModel):
    """Body of a LiveKit room token request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    room_name: str | None = None
    identity: str | None = None
    metadata: str | dict[str, Any] | None = None
