"""Maps AI layer results and failures onto HTTP semantics."""

import datetime

from fastapi import HTTPException

from pitchdeck.core import ai_generators
from pitchdeck.core.exceptions import AIGenerationError
from pitchdeck.schemas.ai import (
    AIHealth,
    AssistantReply,
    AssistantRequest,
    DeckInputs,
    GeneratedDeck,
    GeneratedSlide,
    ImageSuggestionsRead,
    RegenerateSlideRequest,
    SuggestImagesRequest,
)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


async def generate_deck(inputs: DeckInputs) -> GeneratedDeck:
    try:
        outline = await ai_generators.generate_deck_outline(inputs)
    except AIGenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return GeneratedDeck(outline=outline.outline, slides=outline.slides, inputs=inputs)


async def regenerate_slide(payload: RegenerateSlideRequest) -> GeneratedSlide:
    try:
        return await ai_generators.regenerate_slide(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIGenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))


async def suggest_images(payload: SuggestImagesRequest) -> ImageSuggestionsRead:
    suggestions = await ai_generators.suggest_images(payload)
    return ImageSuggestionsRead(suggestions=suggestions)


async def ai_assistant(payload: AssistantRequest) -> AssistantReply:
    if not payload.message or not payload.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    try:
        response, intent = await ai_generators.ai_assistant(payload)
    except AIGenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return AssistantReply(response=response, intent=intent, timestamp=_now())


async def health() -> AIHealth:
    healthy = await ai_generators.health_check()
    return AIHealth(status="healthy" if healthy else "unhealthy", timestamp=_now())
