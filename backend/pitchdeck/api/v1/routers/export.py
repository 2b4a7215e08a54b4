import uuid

from fastapi import APIRouter, Body, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.api.deps import get_current_user, get_db
from pitchdeck.controllers import export_controller
from pitchdeck.models.user import User
from pitchdeck.schemas.export import ExportOptions

router = APIRouter(prefix="/export", tags=["export"])


@router.post("/pdf/{deck_id}")
async def export_pdf(
    deck_id: uuid.UUID,
    options: ExportOptions | None = Body(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Download the deck as a PDF."""
    return await export_controller.export_deck(user, deck_id, "pdf", options or ExportOptions(), db)


@router.post("/pptx/{deck_id}")
async def export_pptx(
    deck_id: uuid.UUID,
    options: ExportOptions | None = Body(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Download the deck as a PowerPoint file."""
    return await export_controller.export_deck(user, deck_id, "pptx", options or ExportOptions(), db)
