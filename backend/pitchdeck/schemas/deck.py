import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from pitchdeck.models.deck import load_slides

SlideType = Literal["title", "content", "image", "chart"]
DeckStatus = Literal["draft", "published", "archived"]
ImageKind = Literal["stock", "icon", "chart", "diagram", "illustration"]

DEFAULT_THUMBNAIL = "bg-gradient-to-br from-blue-500 to-purple-600"


def _clean_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Title cannot be blank")
    return value


class ImageSuggestion(BaseModel):
    type: ImageKind
    description: str
    search_terms: list[str] = []
    alt_text: str = ""
    style: str | None = None


class Slide(BaseModel):
    id: str
    title: str = ""
    content: str = ""
    type: SlideType = "content"
    order: int = 0
    image_prompts: list[str] = []
    image_suggestions: list[ImageSuggestion] = []
    speaker_notes: str | None = None

    model_config = {"extra": "ignore"}


class SlideIn(BaseModel):
    """A slide supplied by the client; the id is optional and assigned when missing."""

    id: str | None = None
    title: str = ""
    content: str = ""
    type: SlideType = "content"
    order: int | None = None
    image_prompts: list[str] = []
    image_suggestions: list[ImageSuggestion] = []
    speaker_notes: str | None = None


class SlideCreate(BaseModel):
    title: str
    content: str = ""
    type: SlideType = "content"
    order: int | None = None
    image_prompts: list[str] = []
    image_suggestions: list[ImageSuggestion] = []
    speaker_notes: str | None = None


class SlideUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    type: SlideType | None = None
    order: int | None = None
    image_prompts: list[str] | None = None
    image_suggestions: list[ImageSuggestion] | None = None
    speaker_notes: str | None = None


class DeckCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    slides: list[SlideIn] = []

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _clean_title(v)


class DeckUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    slides: list[SlideIn] | None = None
    status: DeckStatus | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str | None) -> str | None:
        return None if v is None else _clean_title(v)


class ReorderSlidesRequest(BaseModel):
    slide_ids: list[str]


class DeckRead(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    description: str | None = None
    status: str
    thumbnail: str | None = None
    slides: list[Slide] = []
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = {"from_attributes": True}

    @field_validator("slides", mode="before")
    @classmethod
    def coerce_slides(cls, v):
        return load_slides(v)


class DeckSummary(DeckRead):
    """List entry shown on the dashboard."""

    slide_count: int = 0

    @classmethod
    def from_deck(cls, deck) -> "DeckSummary":
        summary = cls.model_validate(deck)
        summary.slide_count = len(summary.slides)
        summary.thumbnail = summary.thumbnail or DEFAULT_THUMBNAIL
        return summary
