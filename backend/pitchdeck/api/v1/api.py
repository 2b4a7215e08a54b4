"""API v1: aggregates all routers under a single prefix."""

from fastapi import APIRouter

from pitchdeck.api.v1.routers import ai, decks, export, users
from pitchdeck.schemas.common import ErrorResponse

# Documented error envelope for every v1 route
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter(responses=ERROR_RESPONSES)
router.include_router(users.router)
router.include_router(decks.router)
router.include_router(ai.router)
router.include_router(export.router)
