"""AI router: stateless content generation, no database access."""

from fastapi import APIRouter, Depends

from pitchdeck.api.deps import get_token_claims
from pitchdeck.controllers import ai_controller
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
from pitchdeck.schemas.auth import IdentityClaims
from pitchdeck.schemas.common import ApiResponse

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/generate-deck", response_model=ApiResponse[GeneratedDeck])
async def generate_deck(
    payload: DeckInputs,
    claims: IdentityClaims = Depends(get_token_claims),
):
    """Draft a nine-slide deck from company details without saving it."""
    return ApiResponse(data=await ai_controller.generate_deck(payload))


@router.post("/regenerate-slide", response_model=ApiResponse[GeneratedSlide])
async def regenerate_slide(
    payload: RegenerateSlideRequest,
    claims: IdentityClaims = Depends(get_token_claims),
):
    return ApiResponse(data=await ai_controller.regenerate_slide(payload))


@router.post("/suggest-images", response_model=ApiResponse[ImageSuggestionsRead])
async def suggest_images(
    payload: SuggestImagesRequest,
    claims: IdentityClaims = Depends(get_token_claims),
):
    return ApiResponse(data=await ai_controller.suggest_images(payload))


@router.post("/ai-assistant", response_model=ApiResponse[AssistantReply])
async def ai_assistant(
    payload: AssistantRequest,
    claims: IdentityClaims = Depends(get_token_claims),
):
    """Refine slide content, write speaker notes, or answer a pitch question."""
    return ApiResponse(data=await ai_controller.ai_assistant(payload))


@router.post("/health", response_model=ApiResponse[AIHealth])
async def ai_health():
    return ApiResponse(data=await ai_controller.health())
