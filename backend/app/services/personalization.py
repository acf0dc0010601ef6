"""Sport-specific placeholder values for visualization scripts, via an LLM."""

import json
import logging
import os

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_litellm import ChatLiteLLM
from pydantic import BaseModel

from app.config import settings

logger = logging.getLogger(__name__)


class PersonalizationValues(BaseModel):
    """Values substituted into a visualization script's placeholders."""

    sport: str
    environment: str
    sounds: str
    gear: str
    victory_action: str
    training_action: str
    skill: str
    body_sensation: str
    crowd: str
    coach_voice: str


DEFAULT_VALUES = PersonalizationValues(
    sport="your sport",
    environment="your training space",
    sounds="the sounds around you",
    gear="your equipment",
    victory_action="celebrating your success",
    training_action="practicing your technique",
    skill="your key skill",
    body_sensation="feeling strong and focused",
    crowd="supporters watching",
    coach_voice="trust your training",
)


def create_personalization_model() -> ChatLiteLLM:
    """Create the LLM used for personalization (LiteLLM routes by model prefix)."""
    if settings.gemini_api_key:
        os.environ["GEMINI_API_KEY"] = settings.gemini_api_key
    return ChatLiteLLM(
        model=settings.default_llm_model,
        temperature=0.7,
        max_tokens=1024,
    )


def build_prompt(sport: str, skill: str | None = None) -> str:
    skill_line = f"Specific skill focus: {skill}" if skill else ""
    skill_hint = f" (focus on: {skill})" if skill else ""
    return f"""You are helping personalize a mental training visualization script for an athlete.

Sport: {sport}
{skill_line}

Generate realistic, vivid, and sport-specific values for these placeholders. Keep each value concise (1-2 sentences max). Make them feel authentic to someone who actually plays {sport}.

Return ONLY a JSON object with these exact keys (no markdown, no explanation):
{{
  "sport": "{sport}",
  "environment": "description of the competition/training environment",
  "sounds": "specific ambient sounds during competition",
  "gear": "equipment and uniform details",
  "victory_action": "how the athlete celebrates after winning/scoring",
  "training_action": "a common training drill or practice activity",
  "skill": "the key skill being visualized{skill_hint}",
  "body_sensation": "physical feeling when performing at peak",
  "crowd": "description of spectators/audience",
  "coach_voice": "motivational phrase a coach might say"
}}"""


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ```)."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


async def generate_values(model: BaseChatModel, sport: str, skill: str | None = None) -> PersonalizationValues:
    """Ask the model for placeholder values.

    Raises:
        ValueError: The model returned no text, or text that is not the
            expected JSON object.
    """
    response = await model.ainvoke([HumanMessage(content=build_prompt(sport, skill))])
    text = response.content if isinstance(response.content, str) else ""
    if not text.strip():
        raise ValueError("No response from model")

    # pydantic.ValidationError is a ValueError subclass
    values = PersonalizationValues.model_validate(json.loads(strip_code_fences(text)))
    logger.info("Generated personalization values for sport: %s", sport)
    return values


async def personalize(model: BaseChatModel, sport: str, skill: str | None = None) -> PersonalizationValues:
    """Best-effort personalization: any failure yields ``DEFAULT_VALUES``."""
    try:
        return await generate_values(model, sport, skill)
    except Exception:
        logger.exception("Personalization failed for sport %s, using defaults", sport)
        return DEFAULT_VALUES
