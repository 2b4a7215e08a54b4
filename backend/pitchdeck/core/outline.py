"""
Deck outline assembly.

The LLM drafts free text for a new deck; this module turns that text into
the nine slides the editor works with. Each slide is a fixed template filled
with the founder's inputs, a line lifted from the LLM draft, and locally
generated placeholder metrics so two decks for the same company never read
the same.

Also home to the static image-suggestion tables used whenever the LLM is
not consulted (or fails) and the fallback deck built without any LLM help.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone

from pitchdeck.schemas.ai import DeckInputs, GeneratedSlide
from pitchdeck.schemas.deck import ImageSuggestion

# Lines carrying these markers are headings, not content
_HEADING_MARKERS = ("Slide", "###", "**")
_MIN_LINE_LENGTH = 20


class MetricGenerator:
    """Pseudorandom placeholder numbers for drafted slides.

    Pass a seeded ``random.Random`` to make a deck reproducible.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def metric(self, low: int, high: int, cap: int | None = None) -> int:
        """A value drawn from ``[low, high)`` nudged by up to ten either way."""
        base = self.rng.randrange(low, high) if high > low else low
        value = max(1, base + self.rng.randrange(-10, 10))
        if cap is not None:
            value = min(value, cap)
        return value

    def percent(self, low: int, high: int) -> int:
        return self.metric(low, high, cap=100)

    def growth_rate(self) -> int:
        return self.rng.randrange(180, 330)

    def revenue_k(self) -> int:
        return self.rng.randrange(50, 250)

    def active_users(self) -> int:
        return self.rng.randrange(1000, 5000)


def extract_line(ai_text: str, section: str, fallback: str, rng: random.Random) -> str:
    """Pick one content line from the LLM draft for *section*.

    Lines mentioning the section win; otherwise any content line will do.
    One of the first three candidates is chosen at random. Returns
    *fallback* when the draft has no usable line.
    """
    candidates = [
        line for line in ai_text.split("\n")
        if len(line) > _MIN_LINE_LENGTH and not any(m in line for m in _HEADING_MARKERS)
    ]
    if not candidates:
        return fallback

    on_topic = [line for line in candidates if section.lower() in line.lower()]
    pool = (on_topic or candidates)[:3]
    return rng.choice(pool).strip()


def _bullets(*lines: str) -> str:
    return "\n".join(f"• {line}" for line in lines)


def build_outline_slides(
    ai_text: str,
    inputs: DeckInputs,
    rng: random.Random | None = None,
    year: int | None = None,
) -> list[GeneratedSlide]:
    """Merge the LLM draft and the founder's inputs into nine slides."""
    rng = rng or random.Random()
    m = MetricGenerator(rng)
    year = year or datetime.now(timezone.utc).year
    company = inputs.company
    industry = inputs.industry
    industry_lower = industry.lower()

    def draft(section: str, fallback: str) -> str:
        return extract_line(ai_text, section, fallback, rng)

    return [
        GeneratedSlide(
            title="Company Overview",
            content=f"{company} - Pioneering {industry} Innovation\n\n" + _bullets(
                f"Disrupting traditional {industry_lower} with cutting-edge technology",
                f"Founded in {year} with {m.metric(18, 36)} months of R&D",
                f"Targeting ${m.metric(50, 500)}B global market opportunity",
                f"Pre-revenue startup with {m.metric(8, 24)} month runway",
                f"Team of {m.metric(5, 15)} engineers and domain experts",
            ),
            type="title",
            image_suggestions=image_suggestions_for("startup"),
        ),
        GeneratedSlide(
            title="Market Challenge",
            content=f"Critical Industry Pain Points:\n\n{draft('problem', inputs.problem)}\n\n" + _bullets(
                f"Market inefficiencies cost industry ${m.metric(10, 100)}B annually",
                f"{m.percent(65, 85)}% of companies struggle with current solutions",
                f"Legacy systems fail {m.percent(40, 70)}% of critical operations",
                f"Average company loses {m.percent(15, 40)}% efficiency due to these issues",
            ),
            type="content",
            image_suggestions=image_suggestions_for("problem"),
        ),
        GeneratedSlide(
            title="Our Solution",
            content=f"{company} Revolutionary Platform:\n\n{draft('solution', inputs.solution)}\n\n" + _bullets(
                f"Delivers {m.metric(3, 8)}x faster processing than competitors",
                f"Reduces operational costs by {m.percent(35, 70)}%",
                f"Proprietary algorithms with {m.percent(92, 99)}% accuracy",
                f"Cloud-native architecture supporting {m.metric(10, 100)}K+ concurrent users",
                "Real-time analytics with sub-second response times",
            ),
            type="content",
            image_suggestions=image_suggestions_for("solution"),
        ),
        GeneratedSlide(
            title="Market Opportunity",
            content=f"Massive {industry} Market Potential:\n\n" + _bullets(
                f"Total Addressable Market (TAM): ${m.metric(25, 150)}B globally",
                f"Serviceable Addressable Market (SAM): ${m.metric(5, 40)}B",
                f"Serviceable Obtainable Market (SOM): ${m.metric(1, 8)}B",
                f"Market growing at {m.percent(18, 35)}% CAGR through {year + 4}",
                f"Early adopter segment worth ${m.metric(500, 5000)}M",
                f"Expansion opportunities in {m.metric(12, 45)} international markets",
            ),
            type="chart",
            image_suggestions=image_suggestions_for("market"),
        ),
        GeneratedSlide(
            title="Product Platform",
            content=f"{company} Core Capabilities:\n\n" + _bullets(
                f"Advanced {industry_lower} analytics engine with ML/AI",
                f"Intuitive dashboard with {m.percent(90, 99)}% user satisfaction",
                "Mobile-first design supporting iOS and Android",
                f"API ecosystem with {m.metric(25, 100)}+ third-party integrations",
                "Enterprise security with SOC 2 Type II compliance",
                "Multi-tenant architecture supporting unlimited scaling",
            ),
            type="image",
            image_suggestions=image_suggestions_for("product"),
        ),
        GeneratedSlide(
            title="Business Model",
            content=f"Diversified Revenue Strategy:\n\n{draft('model', inputs.model)}\n\n" + _bullets(
                f"Subscription tiers: Starter (${m.metric(49, 199)}/month), "
                f"Pro (${m.metric(299, 699)}/month), Enterprise (custom)",
                f"Professional services: ${m.metric(150, 400)}/hour implementation",
                f"Data analytics premium: {m.percent(15, 30)}% revenue share",
                f"Gross margins: {m.percent(72, 88)}% across all products",
                f"Average customer LTV: ${m.metric(50, 200)}K",
            ),
            type="content",
            image_suggestions=image_suggestions_for("business model"),
        ),
        GeneratedSlide(
            title="Traction & Performance",
            content=f"Exceptional Early Results:\n\n{draft('traction', inputs.financials)}\n\n" + _bullets(
                f"{m.growth_rate()}% month-over-month user growth",
                f"{m.active_users()}+ active users across {m.metric(15, 40)} companies",
                f"${m.revenue_k()}K annual recurring revenue with {m.percent(88, 97)}% retention",
                f"{m.metric(4, 12)} enterprise partnerships signed in last quarter",
                f"Featured in {m.metric(6, 18)} major industry publications",
                f"{m.percent(92, 99)}% customer satisfaction score (NPS: {m.metric(65, 85)})",
            ),
            type="chart",
            image_suggestions=image_suggestions_for("traction"),
        ),
        GeneratedSlide(
            title="Competitive Landscape",
            content="Strong Competitive Position:\n\n" + _bullets(
                f"{m.metric(4, 12)} direct competitors with legacy approaches",
                f"{company} delivers {m.metric(2, 6)}x superior performance metrics",
                f"Proprietary IP portfolio with {m.metric(3, 9)} patents pending",
                f"First-mover advantage in AI-powered {industry_lower}",
                "Superior technology stack built by ex-Google, Microsoft and Amazon engineers",
                f"{m.metric(12, 30)} month technical lead over closest competitor",
            ),
            type="content",
            image_suggestions=image_suggestions_for("competition"),
        ),
        GeneratedSlide(
            title="Investment Opportunity",
            content="Series A Funding Initiative:\n\n" + "\n".join([
                f"• Raising: ${m.metric(3, 15)}M Series A investment round",
                f"• Pre-money valuation: ${m.metric(18, 75)}M based on comparable exits",
                "• Use of funds breakdown:",
                f"  - {m.percent(45, 65)}% Product development and engineering talent",
                f"  - {m.percent(20, 35)}% Sales, marketing, and customer acquisition",
                f"  - {m.percent(10, 25)}% Strategic partnerships and business development",
                f"• Projected {m.metric(18, 30)} month runway to profitability",
                f"• Clear path to ${m.metric(15, 75)}M ARR by Series B",
            ]),
            type="content",
            image_suggestions=image_suggestions_for("funding"),
        ),
    ]


# ── Static image suggestions ─────────────────────────────────

_PRESET_SUGGESTIONS: dict[str, list[dict]] = {
    "startup": [{
        "type": "stock",
        "description": "Modern startup team collaboration in tech office",
        "search_terms": ["startup", "team", "innovation", "technology"],
        "alt_text": "Diverse startup team working together",
        "style": "modern",
    }],
    "problem": [{
        "type": "chart",
        "description": "Industry problem statistics and impact visualization",
        "search_terms": ["problem", "statistics", "industry", "challenge"],
        "alt_text": "Chart showing industry challenges and their impact",
        "style": "professional",
    }],
    "solution": [{
        "type": "diagram",
        "description": "Solution architecture and technology stack",
        "search_terms": ["solution", "technology", "platform", "architecture"],
        "alt_text": "Technology platform architecture diagram",
        "style": "modern",
    }],
}

_FALLBACK_SUGGESTIONS: dict[str, list[dict]] = {
    "title": [{
        "type": "stock",
        "description": "Professional business imagery",
        "search_terms": ["business", "professional", "corporate"],
        "alt_text": "Business professional image",
        "style": "corporate",
    }],
    "content": [{
        "type": "icon",
        "description": "Relevant business icon",
        "search_terms": ["business", "concept", "professional"],
        "alt_text": "Business concept icon",
        "style": "minimalist",
    }],
    "chart": [{
        "type": "chart",
        "description": "Data visualization chart",
        "search_terms": ["chart", "graph", "data", "metrics"],
        "alt_text": "Data chart visualization",
        "style": "professional",
    }],
    "image": [{
        "type": "stock",
        "description": "Professional stock photo",
        "search_terms": ["professional", "business", "modern"],
        "alt_text": "Professional business image",
        "style": "modern",
    }],
}


def fallback_image_suggestions(slide_type: str) -> list[ImageSuggestion]:
    """Static suggestions for a slide type; unknown types get the content set."""
    entries = _FALLBACK_SUGGESTIONS.get(slide_type, _FALLBACK_SUGGESTIONS["content"])
    return [ImageSuggestion(**entry) for entry in entries]


def image_suggestions_for(topic: str) -> list[ImageSuggestion]:
    """Preset suggestions for a deck topic such as ``"problem"``."""
    entries = _PRESET_SUGGESTIONS.get(topic)
    if entries is None:
        return fallback_image_suggestions("content")
    return [ImageSuggestion(**entry) for entry in entries]


# ── Fallback deck ────────────────────────────────────────────

def fallback_slides(inputs: DeckInputs) -> list[GeneratedSlide]:
    """A plain nine-slide skeleton built from the inputs alone."""
    return [
        GeneratedSlide(
            title="Cover",
            content=f"{inputs.company}\n\n{inputs.industry} Innovation\n\nSeed Stage - Series A Ready",
            type="title",
        ),
        GeneratedSlide(
            title="Problem",
            content=inputs.problem + "\n\n" + _bullets(
                "Market pain points", "Current solutions are inadequate", "Large addressable market",
            ),
            image_suggestions=[ImageSuggestion(
                type="icon",
                description="Icon representing challenges or problems",
                search_terms=["problem", "challenge", "pain point", "frustration"],
                alt_text="Icon representing the problem being solved",
            )],
        ),
        GeneratedSlide(
            title="Solution",
            content=inputs.solution + "\n\n" + _bullets(
                "Unique value proposition", "Key differentiators", "Technology/approach overview",
            ),
            image_suggestions=[ImageSuggestion(
                type="diagram",
                description="Flow diagram showing the solution process",
                search_terms=["solution", "innovation", "process", "workflow"],
                alt_text="Diagram illustrating the solution approach",
            )],
        ),
        GeneratedSlide(
            title="Market Opportunity",
            content="Market Size: $X billion TAM\n\nTarget Market:\n" + _bullets(
                "Primary segment", "Secondary opportunities", "Growth projections",
            ),
        ),
        GeneratedSlide(
            title="Business Model",
            content=inputs.model + "\n\n" + _bullets("Revenue streams", "Pricing strategy", "Unit economics"),
        ),
        GeneratedSlide(
            title="Traction & Financials",
            content=inputs.financials + "\n\n" + _bullets(
                "Key metrics", "Growth trajectory", "Revenue projections",
            ),
            type="chart",
        ),
        GeneratedSlide(
            title="Competition",
            content="Competitive landscape analysis\n\n" + _bullets(
                "Direct competitors", "Indirect competitors", "Our competitive advantage",
            ),
        ),
        GeneratedSlide(
            title="Team",
            content="Meet the founding team\n\n" + _bullets(
                "CEO/Founder background", "Key team members", "Advisory board",
            ),
        ),
        GeneratedSlide(
            title="Funding Ask",
            content="Investment details\n\n" + _bullets(
                "Amount seeking: $X", "Use of funds", "Milestones to achieve",
            ),
        ),
    ]
