"""
AI content agents for pitch decks.

Agents
------
- **deck_outline_agent**      – Free-text draft for a new nine-slide deck
- **slide_regen_agent**       – Structured rewrite of a single slide
- **image_suggestion_agent**  – Structured visual suggestions for a slide
- **assistant_agents**        – Refinement / speaker notes / general advice
- **health_agent**            – Minimal connectivity probe

Utility helpers build prompts, analyse slide content, detect the assistant
intent and clean up the plain-text replies.
"""

import logging
import random
import re
import string
import time
from dataclasses import dataclass

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from pitchdeck.core.config import settings
from pitchdeck.core.exceptions import AIGenerationError
from pitchdeck.core.outline import build_outline_slides, fallback_image_suggestions
from pitchdeck.schemas.ai import (
    AssistantRequest,
    AssistIntent,
    DeckInputs,
    DeckOutline,
    GeneratedSlide,
    ImageSuggestionList,
    RegenerateSlideRequest,
    RegeneratedSlideOutput,
    SuggestImagesRequest,
)
from pitchdeck.schemas.deck import ImageSuggestion

logger = logging.getLogger(__name__)


def openai_model(name: str) -> Model | str:
    """Bind *name* to the configured API key; without one, pydantic-ai falls back to the environment."""
    if settings.OPENAI_API_KEY:
        return OpenAIChatModel(name, provider=OpenAIProvider(api_key=settings.OPENAI_API_KEY))
    return f"openai:{name}"


_MAIN_MODEL = openai_model(settings.OPENAI_MODEL)
_FAST_MODEL = openai_model(settings.OPENAI_FAST_MODEL)

MIN_OUTLINE_SLIDES = 8


# ---------------------------------------------------------------------------
# 1.  Deck outline agent  (free-text draft)
# ---------------------------------------------------------------------------

_DECK_SYSTEM_PROMPT = """\
You are a top-tier pitch deck consultant with 15+ years of experience. Create \
unique, compelling content that tells a specific story for each company. Never \
use generic templates. Include realistic numbers, percentages, and concrete \
examples. Vary your approach for each generation.
"""

deck_outline_agent = Agent(
    model=_MAIN_MODEL,
    output_type=str,
    system_prompt=_DECK_SYSTEM_PROMPT,
    model_settings=ModelSettings(
        max_tokens=3000,
        temperature=0.9,
        presence_penalty=0.7,
        frequency_penalty=0.8,
    ),
    defer_model_check=True,
)


# ---------------------------------------------------------------------------
# 2.  Slide regeneration agent  (structured slide)
# ---------------------------------------------------------------------------

_REGEN_SYSTEM_PROMPT = """\
You are a pitch deck consultant who respects formatting preferences. Always \
maintain the original content structure and format while providing fresh \
perspectives.
"""

slide_regen_agent = Agent(
    model=_MAIN_MODEL,
    output_type=RegeneratedSlideOutput,
    system_prompt=_REGEN_SYSTEM_PROMPT,
    model_settings=ModelSettings(
        max_tokens=1000,
        temperature=0.8,
        presence_penalty=0.6,
        frequency_penalty=0.7,
    ),
    retries=2,
    defer_model_check=True,
)


# ---------------------------------------------------------------------------
# 3.  Image suggestion agent
# ---------------------------------------------------------------------------

image_suggestion_agent = Agent(
    model=_FAST_MODEL,
    output_type=ImageSuggestionList,
    system_prompt=(
        "You are a visual design expert. Suggest relevant, professional images "
        "for business presentations."
    ),
    model_settings=ModelSettings(max_tokens=600, temperature=0.6),
    defer_model_check=True,
)


# ---------------------------------------------------------------------------
# 4.  Assistant agents  (one per intent)
# ---------------------------------------------------------------------------

def _assistant_agent(system_prompt: str, max_tokens: int) -> Agent:
    return Agent(
        model=_MAIN_MODEL,
        output_type=str,
        system_prompt=system_prompt,
        model_settings=ModelSettings(
            max_tokens=max_tokens,
            temperature=0.6,
            presence_penalty=0.1,
            frequency_penalty=0.1,
        ),
        defer_model_check=True,
    )


assistant_agents: dict[str, Agent] = {
    "refine": _assistant_agent(
        "You are a pitch deck consultant. Provide improved slide content using "
        "clean, plain text formatting.",
        max_tokens=800,
    ),
    "speaker-notes": _assistant_agent(
        "You are a presentation coach. Create natural speaker notes using plain text only.",
        max_tokens=1200,
    ),
    "general": _assistant_agent(
        "You are a pitch deck consultant. Provide advice using plain text only.",
        max_tokens=1000,
    ),
}


# ---------------------------------------------------------------------------
# 5.  Health probe
# ---------------------------------------------------------------------------

health_agent = Agent(
    model=_FAST_MODEL,
    output_type=str,
    model_settings=ModelSettings(max_tokens=5),
    defer_model_check=True,
)


# ===================================================================
# Prompt builders and post-processing
# ===================================================================

def new_session_id(rng: random.Random | None = None) -> str:
    """Short base-36 token mixed into prompts so repeated calls diverge."""
    rng = rng or random.Random()
    alphabet = string.ascii_lowercase + string.digits
    return "".join(rng.choice(alphabet) for _ in range(6))


def build_deck_prompt(inputs: DeckInputs, session_id: str, timestamp_ms: int) -> str:
    return f"""
Create a detailed 9-slide pitch deck for {inputs.company}.

COMPANY DETAILS:
- Industry: {inputs.industry}
- Problem: {inputs.problem}
- Solution: {inputs.solution}
- Business Model: {inputs.model}
- Current Status: {inputs.financials}

Generate unique, specific content for each slide. Session: {session_id}-{timestamp_ms}

CRITICAL INSTRUCTIONS:
- DO NOT copy the input text word-for-word
- EXPAND with specific numbers, percentages, examples
- Make the Traction slide highly specific with growth metrics
- Each slide should be investor-ready with concrete details
- Vary your language and avoid repetitive phrases

Create these 9 slides:
1. Cover - Company introduction with tagline
2. Problem - Market pain points with specific data
3. Solution - Detailed approach with benefits
4. Market - TAM/SAM with growth rates
5. Product - Key features and capabilities
6. Business Model - Revenue streams with pricing
7. Traction - Specific growth metrics (be creative but realistic)
8. Competition - Competitive analysis
9. Funding - Investment ask and use of funds

For each slide, provide:
- A clear title
- 3-5 detailed bullet points with specific numbers
- Avoid generic phrases like "key metrics" or "main points"

Make it compelling for {inputs.industry} investors.
"""


@dataclass
class ContentAnalysis:
    has_bullet_points: bool
    is_narrative: bool
    length: int


def analyze_content_structure(content: str) -> ContentAnalysis:
    """Classify slide text as bulleted or narrative so rewrites keep the format."""
    trimmed = content.strip()
    has_bullets = any(marker in trimmed for marker in ("•", "-", "*"))
    return ContentAnalysis(
        has_bullet_points=has_bullets,
        is_narrative=len(trimmed) > 200 and not has_bullets,
        length=len(trimmed),
    )


_ALTERNATIVE_APPROACHES = {
    "title": ["storytelling approach", "problem-first narrative", "solution-centric positioning"],
    "content": ["data-driven framework", "customer-story approach", "competitive advantage focus"],
    "chart": ["visual-first presentation", "metrics-driven narrative", "growth-story framework"],
    "image": ["visual storytelling", "emotion-driven narrative", "brand-focused approach"],
}


def pick_alternative_approach(slide_type: str, rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    options = _ALTERNATIVE_APPROACHES.get(slide_type, _ALTERNATIVE_APPROACHES["content"])
    return rng.choice(options)


def validate_slide_data(request: RegenerateSlideRequest) -> None:
    """Raise ``ValueError`` when the slide cannot be regenerated."""
    if not request.title or not request.title.strip():
        raise ValueError("Slide title is required")
    if not request.content or not request.content.strip():
        raise ValueError("Slide content is required")


def build_regeneration_prompt(
    request: RegenerateSlideRequest,
    approach: str,
    timestamp_ms: int,
    analysis: ContentAnalysis,
) -> str:
    format_rules = []
    if analysis.has_bullet_points:
        format_rules.append("- MAINTAIN bullet point format")
    if analysis.is_narrative:
        format_rules.append("- MAINTAIN narrative paragraph format")
    format_rules.append("- Keep the same level of detail and structure")
    format_block = "\n".join(format_rules)

    return f"""
REGENERATE this slide with a fresh perspective while maintaining the SAME FORMAT:

ORIGINAL TITLE: {request.title}
ORIGINAL CONTENT: {request.content.strip()}
SLIDE TYPE: {request.type}
CONTEXT: {request.context or 'Business pitch deck slide'}

FORMAT REQUIREMENTS:
{format_block}

NEW APPROACH: {approach}
SESSION: regen-{timestamp_ms}

Return the slide with title, content, image_suggestions, and notes.
Focus on clarity and investor impact while preserving the original format.
"""


def build_image_suggestion_prompt(request: SuggestImagesRequest) -> str:
    return f"""
Analyze this slide and suggest 2-3 relevant visuals:

TITLE: {request.title}
CONTENT: {request.content}
TYPE: {request.type}

Give each suggestion a type, description, search_terms, alt_text, and style.
Focus on visuals that support the message and engage investors.
"""


_SPEAKER_NOTES_KEYWORDS = (
    "speaker notes", "presentation script", "what should i say", "how do i present", "talking points",
)
_REFINEMENT_KEYWORDS = (
    "improve", "refine", "make better", "rewrite", "enhance", "fix", "update", "revise",
)


def detect_intent(message: str, explicit_type: str | None = None) -> AssistIntent:
    """Resolve the assistant intent; an explicit type other than ``auto`` wins."""
    if explicit_type and explicit_type != "auto":
        return explicit_type

    lowered = message.lower()
    if any(keyword in lowered for keyword in _SPEAKER_NOTES_KEYWORDS):
        return "speaker-notes"
    if any(keyword in lowered for keyword in _REFINEMENT_KEYWORDS):
        return "refine"
    return "general"


def _has_text(value: str | None) -> bool:
    return bool(value and value.strip())


def _build_refine_prompt(request: AssistantRequest) -> str:
    title_line = f'SLIDE TITLE: "{request.slide_title}"' if _has_text(request.slide_title) else ""
    context_line = f"CONTEXT: {request.context}" if request.context else ""

    if _has_text(request.slide_content):
        return f"""
IMPROVE THIS SLIDE CONTENT:

USER REQUEST: {request.message}
{title_line}

CURRENT CONTENT:
{request.slide_content}

{context_line}

Requirements:
- Make it more specific and investor-focused
- Add concrete numbers, percentages, or examples where appropriate
- Use professional language that resonates with investors
- Keep the core message but make it more impactful
- Maintain the same format (bullet points vs paragraphs)

Provide the improved content, then explain what you changed.
"""
    return f"""
SLIDE CONTENT SUGGESTIONS:

USER REQUEST: {request.message}
{title_line}
{context_line}

Suggest what should be included on this slide for investors.
"""


def _build_speaker_notes_prompt(request: AssistantRequest) -> str:
    has_content = _has_text(request.slide_content)
    title_line = f'SLIDE TITLE: "{request.slide_title}"' if _has_text(request.slide_title) else ""
    content_block = f"SLIDE CONTENT:\n{request.slide_content}" if has_content else "No slide content provided"
    guidance = (
        "Base the talking points directly on the slide content provided."
        if has_content
        else "Create general guidance for presenting this type of slide effectively."
    )
    return f"""
CREATE SPEAKER NOTES:

USER REQUEST: {request.message}
{title_line}
{content_block}

Create conversational speaker notes with:
- Opening transition
- Main talking points with supporting details
- Smooth transition to next slide
- Potential investor questions with response suggestions

{guidance}
"""


def _build_general_prompt(request: AssistantRequest) -> str:
    title_line = f'SLIDE: "{request.slide_title}"' if request.slide_title else ""
    content_block = f"CURRENT CONTENT:\n{request.slide_content}" if request.slide_content else ""
    return f"""
PITCH DECK ADVICE:

USER QUESTION: {request.message}
{title_line}
{content_block}

Provide specific, actionable advice for improving this pitch deck content.
Focus on making the pitch more compelling for investors.
"""


def build_assistant_prompt(intent: AssistIntent, request: AssistantRequest) -> str:
    if intent == "refine":
        return _build_refine_prompt(request)
    if intent == "speaker-notes":
        return _build_speaker_notes_prompt(request)
    return _build_general_prompt(request)


_EMOJI_RE = re.compile(
    "[\U0001F600-\U0001F64F\U0001F300-\U0001F5FF\U0001F680-\U0001F6FF"
    "\U0001F1E0-\U0001F1FF\u2600-\u26FF\u2700-\u27BF]"
)


def clean_response_formatting(text: str) -> str:
    """Strip markdown and emoji so replies paste cleanly into a slide."""
    cleaned = text.strip()

    cleaned = re.sub(r"\*\*(.*?)\*\*", r"\1", cleaned)
    cleaned = re.sub(r"\*(.*?)\*", r"\1", cleaned)
    cleaned = re.sub(r"#{1,6}\s", "", cleaned)
    cleaned = re.sub(r"`(.*?)`", r"\1", cleaned)

    cleaned = _EMOJI_RE.sub("", cleaned)

    cleaned = re.sub(r"^[•\-*]\s*", "• ", cleaned, flags=re.MULTILINE)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    cleaned = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", cleaned)

    return cleaned.strip()


def _now_ms() -> int:
    return int(time.time() * 1000)


# ===================================================================
# Operations
# ===================================================================

async def generate_deck_outline(inputs: DeckInputs, rng: random.Random | None = None) -> DeckOutline:
    """Draft a nine-slide deck for *inputs*.

    The LLM draft is merged into fixed slide templates by
    ``build_outline_slides``. Raises ``AIGenerationError`` on any failure.
    """
    rng = rng or random.Random()
    prompt = build_deck_prompt(inputs, new_session_id(rng), _now_ms())

    try:
        result = await deck_outline_agent.run(prompt)
        ai_text = (result.output or "").strip()
        if not ai_text:
            raise AIGenerationError("No content generated from AI")

        slides = build_outline_slides(ai_text, inputs, rng)
        if len(slides) < MIN_OUTLINE_SLIDES:
            raise AIGenerationError("Insufficient slides generated")
    except Exception as e:
        logger.warning("Deck outline generation failed for %s: %s", inputs.company, e)
        raise AIGenerationError(f"AI generation failed: {e}") from e

    logger.info("Generated %d-slide outline for %s", len(slides), inputs.company)
    return DeckOutline(
        outline=f"AI-generated pitch deck for {inputs.company} - {ai_text[:200]}...",
        slides=slides,
    )


async def regenerate_slide(request: RegenerateSlideRequest, rng: random.Random | None = None) -> GeneratedSlide:
    """Rewrite one slide with a fresh angle while keeping its format.

    Raises ``ValueError`` for blank input and ``AIGenerationError`` when the
    LLM call fails.
    """
    validate_slide_data(request)

    approach = pick_alternative_approach(request.type, rng)
    analysis = analyze_content_structure(request.content)
    prompt = build_regeneration_prompt(request, approach, _now_ms(), analysis)

    try:
        result = await slide_regen_agent.run(prompt)
    except Exception as e:
        logger.warning("Slide regeneration failed for %r: %s", request.title, e)
        raise AIGenerationError(f"Slide regeneration failed: {e}") from e

    output: RegeneratedSlideOutput = result.output
    if not output.title.strip() or not output.content.strip():
        raise AIGenerationError("Invalid response structure from AI")

    return GeneratedSlide(
        title=output.title,
        content=output.content,
        type=request.type,
        image_suggestions=output.image_suggestions or fallback_image_suggestions(request.type),
        notes=output.notes or f"Speaker notes for {output.title}",
    )


async def suggest_images(request: SuggestImagesRequest) -> list[ImageSuggestion]:
    """Ask the LLM for visuals; any failure yields the static list for the slide type."""
    try:
        result = await image_suggestion_agent.run(build_image_suggestion_prompt(request))
        return result.output.suggestions
    except Exception as e:
        logger.warning("Image suggestion failed, using fallback list: %s", e)
        return fallback_image_suggestions(request.type)


async def ai_assistant(request: AssistantRequest) -> tuple[str, AssistIntent]:
    """Answer an editor question. Returns the cleaned reply and the intent used."""
    intent = detect_intent(request.message, request.assist_type)
    prompt = build_assistant_prompt(intent, request)

    try:
        result = await assistant_agents[intent].run(prompt)
    except Exception as e:
        logger.warning("AI assistant failed (%s): %s", intent, e)
        raise AIGenerationError(f"AI Assistant failed: {e}") from e

    if not result.output or not result.output.strip():
        raise AIGenerationError("AI Assistant failed: No response generated")
    return clean_response_formatting(result.output), intent


async def health_check() -> bool:
    """Return ``True`` when the LLM answers a tiny probe."""
    try:
        result = await health_agent.run("Test")
        return bool(result.output)
    except Exception:
        logger.warning("LLM health check failed", exc_info=True)
        return False
