import logging
import uuid

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.core import ai_generators
from pitchdeck.core.exceptions import AIGenerationError
from pitchdeck.core.outline import fallback_slides
from pitchdeck.models.deck import Deck, load_slides
from pitchdeck.models.user import User
from pitchdeck.schemas.ai import DeckInputs, GeneratedSlide
from pitchdeck.schemas.deck import (
    DeckCreate,
    DeckUpdate,
    Slide,
    SlideCreate,
    SlideIn,
    SlideUpdate,
)

logger = logging.getLogger(__name__)


# ── Slide helpers ─────────────────────────────────────────────

def new_slide_id() -> str:
    return f"slide-{uuid.uuid4().hex[:12]}"


def renumber(slides: list[dict]) -> list[dict]:
    """Assign contiguous 1-based orders in the current list order."""
    for position, slide in enumerate(slides, start=1):
        slide["order"] = position
    return slides


def prepare_slides(incoming: list[SlideIn]) -> list[dict]:
    """Validate client-supplied slides: fill missing ids, reject duplicates, sort by order."""
    slides = []
    seen: set[str] = set()
    for position, item in enumerate(incoming, start=1):
        slide_id = item.id or new_slide_id()
        if slide_id in seen:
            raise HTTPException(status_code=400, detail=f"Duplicate slide id: {slide_id}")
        seen.add(slide_id)
        data = item.model_dump()
        data["id"] = slide_id
        data["order"] = item.order if item.order is not None else position
        slides.append(Slide.model_validate(data).model_dump())

    slides.sort(key=lambda s: s["order"])
    return renumber(slides)


def generated_to_slides(generated: list[GeneratedSlide]) -> list[dict]:
    slides = []
    for position, item in enumerate(generated, start=1):
        slide = Slide(
            id=f"slide-{position}",
            title=item.title,
            content=item.content,
            type=item.type,
            order=position,
            image_prompts=[s.description for s in item.image_suggestions],
            image_suggestions=item.image_suggestions,
            speaker_notes=item.notes,
        )
        slides.append(slide.model_dump())
    return slides


def _copy_slides(deck: Deck) -> list[dict]:
    # fresh dicts so the JSON column sees a changed value on flush
    return sorted((dict(s) for s in load_slides(deck.slides)), key=lambda s: s.get("order") or 0)


def _find_slide(slides: list[dict], slide_id: str) -> int:
    for index, slide in enumerate(slides):
        if slide.get("id") == slide_id:
            return index
    raise HTTPException(status_code=404, detail="Slide not found")


async def _save_slides(deck: Deck, slides: list[dict], db: AsyncSession) -> Deck:
    deck.slides = slides
    flag_modified(deck, "slides")
    db.add(deck)
    await db.flush()
    await db.refresh(deck)
    return deck


# ── Deck CRUD ─────────────────────────────────────────────────

async def list_decks(
    user: User, db: AsyncSession, filter_status: str = "all", sort_by: str = "recent"
) -> list[Deck]:
    query = select(Deck).where(Deck.user_id == user.id)

    if filter_status != "all":
        query = query.where(Deck.status == filter_status)

    if sort_by == "title":
        query = query.order_by(Deck.title.asc())
    else:
        query = query.order_by(Deck.updated_at.desc())

    result = await db.execute(query)
    return result.scalars().all()


async def get_deck(user: User, deck_id: uuid.UUID, db: AsyncSession) -> Deck:
    deck = await db.get(Deck, deck_id)
    if not deck or deck.user_id != user.id:
        raise HTTPException(status_code=404, detail="Deck not found or access denied")
    return deck


async def create_deck(user: User, payload: DeckCreate, db: AsyncSession) -> Deck:
    deck = Deck(
        user_id=user.id,
        title=payload.title,
        description=payload.description,
        status="draft",
        slides=prepare_slides(payload.slides),
    )
    db.add(deck)
    await db.flush()
    await db.refresh(deck)
    return deck


async def generate_deck(user: User, inputs: DeckInputs, db: AsyncSession) -> Deck:
    """Draft a deck with the AI layer and store it; a fixed skeleton stands in on failure."""
    try:
        outline = await ai_generators.generate_deck_outline(inputs)
        generated = outline.slides
    except AIGenerationError as e:
        logger.warning("Falling back to skeleton deck for %s: %s", inputs.company, e)
        generated = []

    if not generated:
        generated = fallback_slides(inputs)

    deck = Deck(
        user_id=user.id,
        title=f"{inputs.company} Pitch Deck",
        description=f"AI-generated pitch deck for {inputs.company}",
        status="draft",
        slides=generated_to_slides(generated),
    )
    db.add(deck)
    await db.flush()
    await db.refresh(deck)
    logger.info("Stored generated deck %s (%d slides)", deck.id, len(deck.slides))
    return deck


async def update_deck(user: User, deck_id: uuid.UUID, payload: DeckUpdate, db: AsyncSession) -> Deck:
    deck = await get_deck(user, deck_id, db)
    if payload.title is not None:
        deck.title = payload.title
    if payload.description is not None:
        deck.description = payload.description
    if payload.status is not None:
        deck.status = payload.status
    if payload.slides is not None:
        return await _save_slides(deck, prepare_slides(payload.slides), db)

    db.add(deck)
    await db.flush()
    await db.refresh(deck)
    return deck


async def delete_deck(user: User, deck_id: uuid.UUID, db: AsyncSession) -> None:
    deck = await get_deck(user, deck_id, db)
    await db.delete(deck)
    await db.flush()


# ── Slide operations ──────────────────────────────────────────

async def add_slide(user: User, deck_id: uuid.UUID, payload: SlideCreate, db: AsyncSession) -> Deck:
    deck = await get_deck(user, deck_id, db)
    slides = _copy_slides(deck)

    existing = {s.get("id") for s in slides}
    slide_id = new_slide_id()
    while slide_id in existing:
        slide_id = new_slide_id()

    data = payload.model_dump()
    data["id"] = slide_id
    data["order"] = payload.order if payload.order is not None else len(slides) + 1
    slide = Slide.model_validate(data).model_dump()

    # insert before the slide currently holding that position
    slides.insert(min(max(slide["order"], 1), len(slides) + 1) - 1, slide)
    return await _save_slides(deck, renumber(slides), db)


async def update_slide(
    user: User, deck_id: uuid.UUID, slide_id: str, payload: SlideUpdate, db: AsyncSession
) -> Deck:
    deck = await get_deck(user, deck_id, db)
    slides = _copy_slides(deck)
    index = _find_slide(slides, slide_id)

    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "speaker_notes"
    }
    new_order = changes.pop("order", None)
    merged = Slide.model_validate({**slides[index], **changes, "id": slide_id}).model_dump()

    if new_order is not None:
        slides.pop(index)
        slides.insert(min(max(new_order, 1), len(slides) + 1) - 1, merged)
    else:
        slides[index] = merged
    return await _save_slides(deck, renumber(slides), db)


async def remove_slide(user: User, deck_id: uuid.UUID, slide_id: str, db: AsyncSession) -> Deck:
    deck = await get_deck(user, deck_id, db)
    slides = _copy_slides(deck)
    slides.pop(_find_slide(slides, slide_id))
    return await _save_slides(deck, renumber(slides), db)


async def reorder_slides(user: User, deck_id: uuid.UUID, slide_ids: list[str], db: AsyncSession) -> Deck:
    deck = await get_deck(user, deck_id, db)
    slides = _copy_slides(deck)
    by_id = {s.get("id"): s for s in slides}

    if len(set(slide_ids)) != len(slide_ids):
        raise HTTPException(status_code=400, detail="Duplicate slide ids in reorder request")
    for slide_id in slide_ids:
        if slide_id not in by_id:
            raise HTTPException(status_code=400, detail=f"Slide {slide_id} not found")
    if len(slide_ids) != len(slides):
        raise HTTPException(status_code=400, detail="Reorder request must include every slide")

    return await _save_slides(deck, renumber([by_id[slide_id] for slide_id in slide_ids]), db)
