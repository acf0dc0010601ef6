"""Admin-managed training content stored in Firestore."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DifficultyLevel = Literal["beginner", "intermediate", "advanced"]
ContentType = Literal["visualizations", "breathwork", "aomi"]

# Collection names are prefixed with swift_ to match the mobile app's collections.
COLLECTIONS: dict[str, str] = {
    "visualizations": "swift_visualization_templates",
    "breathwork": "swift_breathwork_techniques",
    "aomi": "swift_aomi_techniques",
}


class _FirestoreModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VisualizationTemplate(_FirestoreModel):
    """Guided visualization script with sport placeholders."""

    title: str = Field(..., min_length=1)
    description: str = ""
    category: str = ""
    supported_sports: list[str] = Field(default_factory=list)
    duration_minutes: int = Field(0, ge=0)
    difficulty_level: DifficultyLevel = "beginner"
    placeholders: list[str] = Field(default_factory=list)
    script_text: str = ""
    is_active: bool = True


class BreathworkTechnique(_FirestoreModel):
    slug: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    purpose: str = ""
    category: str = ""
    steps: list[str] = Field(default_factory=list)
    when_to_use: list[str] = Field(default_factory=list)
    duration_rounds: str = ""
    is_active: bool = True


class AomiLoop(_FirestoreModel):
    """One observation + imagery loop of an AOMI session."""

    loop_number: int
    loop_name: str
    observation_focus: str = ""
    imagery_focus: str = ""
    observation_duration_seconds: int = 0
    imagery_duration_seconds: int = 0


class AomiTechnique(_FirestoreModel):
    """Action observation + motor imagery technique."""

    slug: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    sport: str = ""
    purpose: str = ""
    benefits: list[str] = Field(default_factory=list)
    when_to_use: list[str] = Field(default_factory=list)
    video_guidance: str = ""
    duration_minutes: int = Field(0, ge=0)
    difficulty_level: DifficultyLevel = "beginner"
    is_active: bool = True
    loops: list[AomiLoop] = Field(default_factory=list)


CONTENT_MODELS: dict[str, type[_FirestoreModel]] = {
    "visualizations": VisualizationTemplate,
    "breathwork": BreathworkTechnique,
    "aomi": AomiTechnique,
}
