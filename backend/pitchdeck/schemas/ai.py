"""
Pydantic models for the AI content endpoints.

``RegeneratedSlideOutput`` and ``ImageSuggestionList`` double as the
structured output types of the pydantic-ai agents in
``pitchdeck.core.ai_generators``.
"""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, Field

from pitchdeck.schemas.deck import ImageSuggestion, SlideType

AssistType = Literal["refine", "speaker-notes", "general", "auto"]
AssistIntent = Literal["refine", "speaker-notes", "general"]


class DeckInputs(BaseModel):
    company: str = Field(min_length=1)
    industry: str = Field(min_length=1)
    problem: str
    solution: str
    model: str
    financials: str


class GeneratedSlide(BaseModel):
    title: str
    content: str
    type: SlideType = "content"
    image_suggestions: list[ImageSuggestion] = []
    notes: str | None = None


class DeckOutline(BaseModel):
    outline: str
    slides: list[GeneratedSlide]


class GeneratedDeck(DeckOutline):
    inputs: DeckInputs


class RegenerateSlideRequest(BaseModel):
    title: str
    content: str
    type: SlideType = "content"
    context: str | None = None


class RegeneratedSlideOutput(BaseModel):
    title: str
    content: str
    image_suggestions: list[ImageSuggestion] | None = None
    notes: str | None = None


class SuggestImagesRequest(BaseModel):
    title: str
    content: str
    type: SlideType = "content"


class ImageSuggestionList(BaseModel):
    suggestions: list[ImageSuggestion]


class ImageSuggestionsRead(BaseModel):
    suggestions: list[ImageSuggestion]


class AssistantRequest(BaseModel):
    message: str = ""
    slide_content: str | None = None
    slide_title: str | None = None
    context: str | None = None
    assist_type: AssistType = "auto"


class AssistantReply(BaseModel):
    response: str
    intent: AssistIntent
    timestamp: datetime.datetime


class AIHealth(BaseModel):
    status: Literal["healthy", "unhealthy"]
    timestamp: datetime.datetime
