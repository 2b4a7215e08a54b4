"""
Deck export to PDF (fpdf2) and PPTX (python-pptx).

Both renderers are synchronous and CPU-bound; the export controller runs
them in a worker thread under a timeout.
"""

import io
import logging
import re
import time
from dataclasses import dataclass

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import PP_ALIGN
from pptx.util import Inches, Pt

from pitchdeck.models.deck import Deck
from pitchdeck.schemas.deck import DeckRead
from pitchdeck.schemas.export import ExportDeck, ExportOptions, ExportSlide

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class Palette:
    background: RGB
    title: RGB
    text: RGB
    accent: RGB
    muted: RGB


PALETTES: dict[str, Palette] = {
    "professional": Palette(
        background=(255, 255, 255),
        title=(31, 56, 100),
        text=(51, 51, 51),
        accent=(46, 117, 182),
        muted=(140, 140, 140),
    ),
    "modern": Palette(
        background=(18, 24, 38),
        title=(255, 255, 255),
        text=(220, 224, 232),
        accent=(99, 102, 241),
        muted=(120, 128, 150),
    ),
    "minimal": Palette(
        background=(255, 255, 255),
        title=(17, 17, 17),
        text=(68, 68, 68),
        accent=(153, 153, 153),
        muted=(180, 180, 180),
    ),
}


# ── Deck preparation ─────────────────────────────────────────

_TITLE_SUFFIX_RE = re.compile(r"\s*(pitch\s*deck|presentation|deck)\s*$", re.IGNORECASE)


def extract_company_name(title: str) -> str:
    """'Acme Pitch Deck' -> 'Acme'. Titles without such a suffix give 'Company'."""
    match = _TITLE_SUFFIX_RE.search(title or "")
    if not match:
        return "Company"
    return title[:match.start()].strip() or "Company"


def to_export_deck(deck: Deck) -> ExportDeck:
    """Snapshot a stored deck into the renderer input, slides in display order."""
    read = DeckRead.model_validate(deck)
    slides = sorted(read.slides, key=lambda s: s.order)
    return ExportDeck(
        title=read.title or "Untitled Presentation",
        description=read.description,
        company_name=extract_company_name(read.title),
        created_at=read.created_at,
        slides=[
            ExportSlide(
                title=slide.title or "Untitled Slide",
                content=slide.content,
                type=slide.type,
                notes=slide.speaker_notes,
                image_suggestions=slide.image_suggestions,
            )
            for slide in slides
        ],
    )


def export_filename(title: str, extension: str, timestamp_ms: int | None = None) -> str:
    safe_title = re.sub(r"[^a-zA-Z0-9]", "_", title)
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{safe_title}_{timestamp_ms}.{extension}"


@dataclass
class ContentLine:
    text: str
    level: int = 0
    bullet: bool = False


_BULLET_RE = re.compile(r"^([•\-*])\s*")


def parse_content(content: str) -> list[ContentLine]:
    """Split slide text into lines; indented bullets become level-1 items."""
    lines = []
    for raw in (content or "").splitlines():
        if not raw.strip():
            continue
        indent = len(raw) - len(raw.lstrip(" \t"))
        stripped = raw.strip()
        match = _BULLET_RE.match(stripped)
        if match:
            lines.append(ContentLine(text=stripped[match.end():], level=1 if indent >= 2 else 0, bullet=True))
        else:
            lines.append(ContentLine(text=stripped))
    return lines


def slide_notes(slide: ExportSlide, options: ExportOptions) -> str | None:
    if options.include_notes and slide.notes and slide.notes.strip():
        return slide.notes.strip()
    return None


def visual_hint(slide: ExportSlide) -> str | None:
    """Placeholder caption for image and chart slides."""
    if slide.type not in ("image", "chart"):
        return None
    if slide.image_suggestions:
        return f"[Visual: {slide.image_suggestions[0].description}]"
    return "[Chart placeholder]" if slide.type == "chart" else "[Image placeholder]"


# ── PDF ──────────────────────────────────────────────────────

_LATIN1_REPLACEMENTS = {
    "\u2022": "-",
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",
    "\u2014": "-",
    "\u2026": "...",
    "\u00a0": " ",
}


def pdf_safe(text: str) -> str:
    """Core PDF fonts only cover latin-1."""
    for char, replacement in _LATIN1_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", "replace").decode("latin-1")


class DeckPDF(FPDF):
    def __init__(self, palette: Palette, watermark: str | None = None):
        super().__init__(orientation="L", unit="mm", format="A4")
        self.palette = palette
        self.watermark = watermark
        self.set_auto_page_break(auto=True, margin=18)
        self.set_margins(20, 18, 20)

    def header(self):
        self.set_fill_color(*self.palette.background)
        self.rect(0, 0, self.w, self.h, style="F")
        if self.watermark:
            self.set_font("Helvetica", "B", 48)
            self.set_text_color(*self.palette.muted)
            x, y = self.w / 2 - 60, self.h / 2 + 20
            with self.rotation(30, x, y):
                self.text(x, y, pdf_safe(self.watermark))
        self.set_xy(self.l_margin, self.t_margin)

    def footer(self):
        self.set_y(-12)
        self.set_font("Helvetica", "", 9)
        self.set_text_color(*self.palette.muted)
        self.cell(0, 8, str(self.page_no()), align="R")


def _pdf_cover(pdf: DeckPDF, deck: ExportDeck) -> None:
    pdf.add_page()
    pdf.set_y(pdf.h / 3)
    pdf.set_font("Helvetica", "B", 32)
    pdf.set_text_color(*pdf.palette.title)
    pdf.multi_cell(0, 14, pdf_safe(deck.title), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)
    pdf.set_font("Helvetica", "", 16)
    pdf.set_text_color(*pdf.palette.accent)
    pdf.multi_cell(0, 9, pdf_safe(deck.company_name), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    if deck.description:
        pdf.ln(4)
        pdf.set_font("Helvetica", "", 12)
        pdf.set_text_color(*pdf.palette.text)
        pdf.multi_cell(0, 7, pdf_safe(deck.description), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    if deck.created_at:
        pdf.ln(4)
        pdf.set_font("Helvetica", "", 10)
        pdf.set_text_color(*pdf.palette.muted)
        pdf.multi_cell(0, 6, deck.created_at.strftime("%B %d, %Y"), align="C",
                       new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _pdf_slide(pdf: DeckPDF, slide: ExportSlide, number: int, options: ExportOptions) -> None:
    pdf.add_page()
    palette = pdf.palette

    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(*palette.muted)
    pdf.cell(0, 6, f"Slide {number}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font("Helvetica", "B", 24)
    pdf.set_text_color(*palette.title)
    pdf.multi_cell(0, 12, pdf_safe(slide.title or "Untitled"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_draw_color(*palette.accent)
    pdf.set_line_width(0.8)
    pdf.line(pdf.l_margin, pdf.get_y() + 2, pdf.l_margin + 40, pdf.get_y() + 2)
    pdf.ln(8)

    pdf.set_font("Helvetica", "", 14)
    pdf.set_text_color(*palette.text)
    for line in parse_content(slide.content):
        indent = 8 * line.level
        text = f"- {line.text}" if line.bullet else line.text
        pdf.set_x(pdf.l_margin + indent)
        pdf.multi_cell(0, 8, pdf_safe(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(1)

    hint = visual_hint(slide)
    if hint:
        pdf.ln(4)
        pdf.set_font("Helvetica", "I", 11)
        pdf.set_text_color(*palette.accent)
        pdf.multi_cell(0, 7, pdf_safe(hint), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    notes = slide_notes(slide, options)
    if notes:
        pdf.ln(6)
        pdf.set_font("Helvetica", "B", 10)
        pdf.set_text_color(*palette.muted)
        pdf.cell(0, 6, "Speaker notes", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", "", 10)
        pdf.multi_cell(0, 5, pdf_safe(notes), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def render_pdf(deck: ExportDeck, options: ExportOptions) -> bytes:
    """Render a cover page plus one landscape page per slide."""
    pdf = DeckPDF(PALETTES[options.template], watermark=options.watermark)
    pdf.set_title(pdf_safe(deck.title))
    pdf.set_author(pdf_safe(deck.company_name))

    _pdf_cover(pdf, deck)
    for number, slide in enumerate(deck.slides, start=1):
        _pdf_slide(pdf, slide, number, options)

    logger.info("Rendered PDF for %r (%d slides)", deck.title, len(deck.slides))
    return bytes(pdf.output())


# ── PPTX ─────────────────────────────────────────────────────

SLIDE_WIDTH = Inches(13.333)
SLIDE_HEIGHT = Inches(7.5)


def _set_background(slide, palette: Palette) -> None:
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = RGBColor(*palette.background)


def _style_runs(text_frame, palette_color: RGB, size: int, bold: bool = False) -> None:
    for paragraph in text_frame.paragraphs:
        for run in paragraph.runs:
            run.font.size = Pt(size)
            run.font.bold = bold
            run.font.color.rgb = RGBColor(*palette_color)


def _add_watermark(slide, text: str, palette: Palette) -> None:
    box = slide.shapes.add_textbox(Inches(0.5), SLIDE_HEIGHT - Inches(0.8), SLIDE_WIDTH - Inches(1), Inches(0.5))
    paragraph = box.text_frame.paragraphs[0]
    paragraph.text = text
    paragraph.alignment = PP_ALIGN.RIGHT
    _style_runs(box.text_frame, palette.muted, 12)


def _add_visual_placeholder(slide, hint: str, palette: Palette) -> None:
    box = slide.shapes.add_textbox(Inches(8.6), Inches(1.8), Inches(4.2), Inches(3.8))
    box.fill.solid()
    box.fill.fore_color.rgb = RGBColor(*palette.accent)
    frame = box.text_frame
    frame.word_wrap = True
    frame.paragraphs[0].text = hint
    frame.paragraphs[0].alignment = PP_ALIGN.CENTER
    _style_runs(frame, (255, 255, 255), 14)


def _pptx_title_slide(prs, slide_data: ExportSlide, deck: ExportDeck, palette: Palette):
    slide = prs.slides.add_slide(prs.slide_layouts[0])
    _set_background(slide, palette)

    title_shape = slide.shapes.title
    title_shape.left, title_shape.top = Inches(0.8), Inches(2.2)
    title_shape.width, title_shape.height = SLIDE_WIDTH - Inches(1.6), Inches(1.5)
    title_shape.text = slide_data.title or deck.title
    _style_runs(title_shape.text_frame, palette.title, 40, bold=True)

    if len(slide.placeholders) > 1:
        subtitle = slide.placeholders[1]
        subtitle.left, subtitle.top = Inches(0.8), Inches(3.9)
        subtitle.width, subtitle.height = SLIDE_WIDTH - Inches(1.6), Inches(1.8)
        subtitle.text = slide_data.content or deck.company_name
        _style_runs(subtitle.text_frame, palette.accent, 20)
    return slide


def _pptx_content_slide(prs, slide_data: ExportSlide, palette: Palette):
    slide = prs.slides.add_slide(prs.slide_layouts[1])
    _set_background(slide, palette)
    hint = visual_hint(slide_data)

    title_shape = slide.shapes.title
    title_shape.left, title_shape.top = Inches(0.6), Inches(0.4)
    title_shape.width, title_shape.height = SLIDE_WIDTH - Inches(1.2), Inches(1.1)
    title_shape.text = slide_data.title or "Untitled"
    _style_runs(title_shape.text_frame, palette.title, 32, bold=True)

    body = slide.placeholders[1]
    body.left, body.top = Inches(0.6), Inches(1.7)
    body.width = Inches(7.7) if hint else SLIDE_WIDTH - Inches(1.2)
    body.height = Inches(5.0)

    frame = body.text_frame
    frame.clear()
    for i, line in enumerate(parse_content(slide_data.content)):
        paragraph = frame.paragraphs[0] if i == 0 else frame.add_paragraph()
        paragraph.text = line.text
        paragraph.level = line.level
    _style_runs(frame, palette.text, 18)

    if hint:
        _add_visual_placeholder(slide, hint, palette)
    return slide


def render_pptx(deck: ExportDeck, options: ExportOptions) -> bytes:
    """Render one widescreen slide per deck slide and return the .pptx bytes."""
    palette = PALETTES[options.template]
    prs = Presentation()
    prs.slide_width = SLIDE_WIDTH
    prs.slide_height = SLIDE_HEIGHT
    prs.core_properties.title = deck.title
    prs.core_properties.author = deck.company_name

    for slide_data in deck.slides:
        if slide_data.type == "title":
            slide = _pptx_title_slide(prs, slide_data, deck, palette)
        else:
            slide = _pptx_content_slide(prs, slide_data, palette)

        if options.watermark:
            _add_watermark(slide, options.watermark, palette)

        notes = slide_notes(slide_data, options)
        if notes:
            slide.notes_slide.notes_text_frame.text = notes

    buffer = io.BytesIO()
    prs.save(buffer)
    logger.info("Rendered PPTX for %r (%d slides)", deck.title, len(deck.slides))
    return buffer.getvalue()
