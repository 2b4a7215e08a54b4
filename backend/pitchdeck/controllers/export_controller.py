import asyncio
import logging
import uuid
from collections.abc import Callable

from fastapi import HTTPException
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.controllers.deck_controller import get_deck
from pitchdeck.core.config import settings
from pitchdeck.core.exporters import (
    PDF_MEDIA_TYPE,
    PPTX_MEDIA_TYPE,
    export_filename,
    render_pdf,
    render_pptx,
    to_export_deck,
)
from pitchdeck.models.user import User
from pitchdeck.schemas.export import ExportDeck, ExportOptions

logger = logging.getLogger(__name__)

_FORMATS: dict[str, tuple[str, str, Callable[[ExportDeck, ExportOptions], bytes]]] = {
    "pdf": ("PDF", PDF_MEDIA_TYPE, render_pdf),
    "pptx": ("PPTX", PPTX_MEDIA_TYPE, render_pptx),
}


async def render_with_timeout(
    renderer: Callable[[ExportDeck, ExportOptions], bytes],
    deck: ExportDeck,
    options: ExportOptions,
    timeout: float,
) -> bytes:
    """Run a blocking renderer in a worker thread; raise ``TimeoutError`` past *timeout*."""
    try:
        return await asyncio.wait_for(asyncio.to_thread(renderer, deck, options), timeout=timeout)
    except asyncio.TimeoutError:
        raise TimeoutError(f"export timed out after {timeout:g}s")


async def export_deck(
    user: User, deck_id: uuid.UUID, fmt: str, options: ExportOptions, db: AsyncSession
) -> Response:
    label, media_type, renderer = _FORMATS[fmt]
    deck = await get_deck(user, deck_id, db)
    export_data = to_export_deck(deck)

    try:
        payload = await render_with_timeout(renderer, export_data, options, settings.EXPORT_TIMEOUT_SECONDS)
    except Exception as e:
        logger.error("%s export failed for deck %s: %s", label, deck_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"{label} export failed: {e}")

    filename = export_filename(export_data.title, fmt)
    logger.info("Exported deck %s as %s (%d bytes)", deck_id, label, len(payload))
    return Response(
        content=payload,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )
