"""
Shared FastAPI dependencies: single source of truth for DI.

All routers should import get_db, get_token_claims and get_current_user
from HERE, not directly from core.security or db.database.
"""

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.core.config import ModeEnum, settings
from pitchdeck.core.security import (
    extract_bearer_token,
    get_current_user as _require_user,
    get_token_claims as _require_claims,
    get_user_by_uid,
)
from pitchdeck.db.database import get_db as _get_db
from pitchdeck.models.user import User
from pitchdeck.schemas.auth import IdentityClaims

__all__ = ["get_db", "get_token_claims", "get_current_user"]

# Dev identity: consistent across restarts for dev testing
DEV_CLAIMS = IdentityClaims(
    uid="dev-user",
    email="dev@localhost.test",
    name="Development User",
)


async def get_db() -> AsyncSession:
    """Yield an async database session."""
    async for session in _get_db():
        yield session


def _dev_bypass(request: Request) -> bool:
    return settings.MODE == ModeEnum.development and extract_bearer_token(request) is None


async def get_token_claims(request: Request) -> IdentityClaims:
    """
    Require a verified identity token. In dev mode with no token, the fixed
    development identity is returned instead.
    """
    if _dev_bypass(request):
        return DEV_CLAIMS
    return await _require_claims(request)


async def _get_or_create_dev_user(db: AsyncSession) -> User:
    """Get or create the development test user."""
    user = await get_user_by_uid(DEV_CLAIMS.uid, db)
    if not user:
        user = User(
            firebase_uid=DEV_CLAIMS.uid,
            email=DEV_CLAIMS.email,
            name=DEV_CLAIMS.name,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
    return user


async def get_current_user(
    request: Request,
    claims: IdentityClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Require a verified token that maps to a synced user."""
    if _dev_bypass(request):
        return await _get_or_create_dev_user(db)
    return await _require_user(claims, db)
