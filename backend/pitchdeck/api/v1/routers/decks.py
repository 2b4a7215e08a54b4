import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.api.deps import get_current_user, get_db
from pitchdeck.controllers import deck_controller
from pitchdeck.models.user import User
from pitchdeck.schemas.ai import DeckInputs
from pitchdeck.schemas.common import ApiResponse
from pitchdeck.schemas.deck import (
    DeckCreate,
    DeckRead,
    DeckSummary,
    DeckUpdate,
    ReorderSlidesRequest,
    SlideCreate,
    SlideUpdate,
)

router = APIRouter(prefix="/decks", tags=["decks"])


@router.get("", response_model=ApiResponse[list[DeckSummary]])
async def list_decks(
    status: Literal["all", "draft", "published", "archived"] = Query("all", description="Filter by status"),
    sort: Literal["recent", "title"] = Query("recent", description="Sort order"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's decks."""
    decks = await deck_controller.list_decks(user, db, filter_status=status, sort_by=sort)
    return ApiResponse(data=[DeckSummary.from_deck(deck) for deck in decks])


@router.post("", response_model=ApiResponse[DeckRead], status_code=status.HTTP_201_CREATED)
async def create_deck(
    payload: DeckCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deck = await deck_controller.create_deck(user, payload, db)
    return ApiResponse(message="Deck created successfully", data=DeckRead.model_validate(deck))


@router.post("/generate", response_model=ApiResponse[DeckRead], status_code=status.HTTP_201_CREATED)
async def generate_deck(
    payload: DeckInputs,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Draft a deck with AI from company details and save it as a new draft."""
    deck = await deck_controller.generate_deck(user, payload, db)
    return ApiResponse(message="Deck generated successfully", data=DeckRead.model_validate(deck))


@router.get("/{deck_id}", response_model=ApiResponse[DeckRead])
async def get_deck(
    deck_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deck = await deck_controller.get_deck(user, deck_id, db)
    return ApiResponse(data=DeckRead.model_validate(deck))


@router.put("/{deck_id}", response_model=ApiResponse[DeckRead])
async def update_deck(
    deck_id: uuid.UUID,
    payload: DeckUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a deck's details and, optionally, replace its slides."""
    deck = await deck_controller.update_deck(user, deck_id, payload, db)
    return ApiResponse(message="Deck updated successfully", data=DeckRead.model_validate(deck))


@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(
    deck_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await deck_controller.delete_deck(user, deck_id, db)


# ── Slides ────────────────────────────────────────────────────

@router.post("/{deck_id}/slides", response_model=ApiResponse[DeckRead], status_code=status.HTTP_201_CREATED)
async def add_slide(
    deck_id: uuid.UUID,
    payload: SlideCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deck = await deck_controller.add_slide(user, deck_id, payload, db)
    return ApiResponse(message="Slide added successfully", data=DeckRead.model_validate(deck))


@router.put("/{deck_id}/slides/{slide_id}", response_model=ApiResponse[DeckRead])
async def update_slide(
    deck_id: uuid.UUID,
    slide_id: str,
    payload: SlideUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deck = await deck_controller.update_slide(user, deck_id, slide_id, payload, db)
    return ApiResponse(message="Slide updated successfully", data=DeckRead.model_validate(deck))


@router.delete("/{deck_id}/slides/{slide_id}", response_model=ApiResponse[DeckRead])
async def delete_slide(
    deck_id: uuid.UUID,
    slide_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Remove a slide; the remaining slides are renumbered."""
    deck = await deck_controller.remove_slide(user, deck_id, slide_id, db)
    return ApiResponse(message="Slide deleted successfully", data=DeckRead.model_validate(deck))


@router.put("/{deck_id}/reorder-slides", response_model=ApiResponse[DeckRead])
async def reorder_slides(
    deck_id: uuid.UUID,
    payload: ReorderSlidesRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deck = await deck_controller.reorder_slides(user, deck_id, payload.slide_ids, db)
    return ApiResponse(message="Slides reordered successfully", data=DeckRead.model_validate(deck))
