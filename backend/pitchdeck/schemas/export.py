import datetime
from typing import Literal

from pydantic import BaseModel

from pitchdeck.schemas.deck import ImageSuggestion, SlideType

ExportTemplate = Literal["professional", "modern", "minimal"]


class ExportOptions(BaseModel):
    include_notes: bool = True
    template: ExportTemplate = "professional"
    watermark: str | None = None


class ExportSlide(BaseModel):
    title: str
    content: str
    type: SlideType = "content"
    notes: str | None = None
    image_suggestions: list[ImageSuggestion] = []


class ExportDeck(BaseModel):
    title: str
    description: str | None = None
    company_name: str
    created_at: datetime.datetime | None = None
    slides: list[ExportSlide] = []
