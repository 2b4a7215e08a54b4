import json
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import Column, JSON, Text
from sqlmodel import Field, Relationship

from pitchdeck.models.base import BaseUUIDModel

if TYPE_CHECKING:
    from pitchdeck.models.user import User


class Deck(BaseUUIDModel, table=True):
    __tablename__ = "decks"

    user_id: UUID = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    title: str = Field(max_length=255)
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    status: str = Field(default="draft", max_length=20)  # draft, published, archived
    thumbnail: str | None = Field(default=None, max_length=500)

    # Ordered slide objects, stored as a JSON array
    slides: list[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False, default=list))

    # Relationships
    user: "User" = Relationship(back_populates="decks")


SLIDE_TYPES = ("title", "content", "image", "chart")


def load_slides(raw: Any) -> list[dict]:
    """Coerce whatever the slides column holds into a list of slide dicts.

    Older rows may carry a JSON-encoded string, ``null`` or a malformed
    value; all of those read as an empty deck rather than failing. Slides
    written before ids were required get ``slide-legacy-<n>`` from their
    position, so the id stays the same across reads until the deck is saved,
    and an unknown ``type`` reads as ``"content"``.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, list):
        return []

    slides = []
    seen: set[str] = set()
    for position, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            continue
        slide = dict(item)
        slide_id = slide.get("id")
        if not isinstance(slide_id, str) or not slide_id.strip() or slide_id in seen:
            slide_id = f"slide-legacy-{position}"
            while slide_id in seen:
                slide_id += "-x"
            slide["id"] = slide_id
        seen.add(slide_id)
        for key in ("title", "content"):
            if not isinstance(slide.get(key), str):
                slide[key] = ""
        if slide.get("type") not in SLIDE_TYPES:
            slide["type"] = "content"
        if not isinstance(slide.get("order"), int):
            slide["order"] = position
        if not isinstance(slide.get("image_suggestions"), list):
            slide.pop("image_suggestions", None)
        slides.append(slide)
    return slides
