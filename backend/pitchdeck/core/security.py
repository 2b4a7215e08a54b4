"""Identity verification against Firebase Authentication."""

import logging

import firebase_admin
from fastapi import Depends, HTTPException, Request
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from sqlalchemy import select
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.concurrency import run_in_threadpool

from pitchdeck.core.config import settings
from pitchdeck.db.database import get_db
from pitchdeck.models.user import User
from pitchdeck.schemas.auth import IdentityClaims

logger = logging.getLogger(__name__)


# ── Firebase app ─────────────────────────────────────────────

def get_firebase_app() -> firebase_admin.App:
    """Return the default Firebase app, initialising it on first use.

    Uses the service account from settings when all three fields are set,
    otherwise falls back to application default credentials.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None

    if settings.FIREBASE_PROJECT_ID and settings.FIREBASE_CLIENT_EMAIL and settings.FIREBASE_PRIVATE_KEY:
        credential = credentials.Certificate({
            "type": "service_account",
            "project_id": settings.FIREBASE_PROJECT_ID,
            "client_email": settings.FIREBASE_CLIENT_EMAIL,
            "private_key": settings.FIREBASE_PRIVATE_KEY,
            "token_uri": "https://oauth2.googleapis.com/token",
        })
        logger.info("Initialising Firebase app for project %s", settings.FIREBASE_PROJECT_ID)
        return firebase_admin.initialize_app(credential, options)

    logger.warning("Firebase service account not configured; using application default credentials")
    return firebase_admin.initialize_app(options=options)


# ── Token verification ───────────────────────────────────────

def claims_from_token(decoded: dict) -> IdentityClaims:
    """Map a decoded Firebase ID token to the claims the API uses."""
    uid = decoded.get("uid") or decoded.get("sub")
    email = decoded.get("email") or None
    if not uid:
        raise HTTPException(status_code=401, detail="Invalid token payload")
    name = decoded.get("name") or (email.split("@")[0] if email else uid)
    return IdentityClaims(uid=uid, email=email, name=name)


async def verify_id_token(token: str) -> IdentityClaims:
    """Verify a Firebase ID token. Raises 401 on any verification failure."""
    try:
        app = get_firebase_app()
        decoded = await run_in_threadpool(firebase_auth.verify_id_token, token, app)
    except Exception as e:
        logger.info("Rejected identity token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return claims_from_token(decoded)


def extract_bearer_token(request: Request) -> str | None:
    """Return the token from an ``Authorization: Bearer`` header, if any."""
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        return None
    return token.strip()


# ── FastAPI dependencies ─────────────────────────────────────

async def get_token_claims(request: Request) -> IdentityClaims:
    """FastAPI dependency: verifies the bearer token and returns its claims."""
    token = extract_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="No authorization token provided")
    return await verify_id_token(token)


async def get_user_by_uid(firebase_uid: str, db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.firebase_uid == firebase_uid))
    return result.scalar_one_or_none()


async def get_current_user(
    claims: IdentityClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency: resolves the synced user behind a verified token."""
    user = await get_user_by_uid(claims.uid, db)
    if not user:
        raise HTTPException(status_code=401, detail="User not found. Please log in again.")
    return user
