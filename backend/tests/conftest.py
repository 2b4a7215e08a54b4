"""
Pytest configuration and fixtures for the test suite.
"""
import os
from collections.abc import AsyncGenerator

import pytest
from fastapi import HTTPException, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# Set test environment before importing app
os.environ["MODE"] = "testing"
os.environ["ASYNC_DATABASE_URI"] = "sqlite+aiosqlite:///./test.db"
os.environ["OPENAI_API_KEY"] = "sk-test-not-a-real-key"

from pydantic_ai import models

from pitchdeck.api import deps
from pitchdeck.core.security import extract_bearer_token
from pitchdeck.main import app
from pitchdeck.models.deck import Deck
from pitchdeck.models.user import User
from pitchdeck.schemas.auth import IdentityClaims

# Never reach a real LLM from the test suite
models.ALLOW_MODEL_REQUESTS = False

ALICE = IdentityClaims(uid="uid-alice", email="alice@example.com", name="Alice Founder")
BOB = IdentityClaims(uid="uid-bob", email="bob@example.com", name="Bob Investor")
# phone sign-ins: verified, but no email on the token
PHONE_ONE = IdentityClaims(uid="uid-phone-1", email=None, name="uid-phone-1")
PHONE_TWO = IdentityClaims(uid="uid-phone-2", email=None, name="uid-phone-2")

# Bearer token -> identity, standing in for Firebase verification
TEST_IDENTITIES = {
    "alice-token": ALICE,
    "bob-token": BOB,
    "phone-token-1": PHONE_ONE,
    "phone-token-2": PHONE_TWO,
}


async def override_get_token_claims(request: Request) -> IdentityClaims:
    token = extract_bearer_token(request)
    if token is None:
        raise HTTPException(status_code=401, detail="No authorization token provided")
    if token not in TEST_IDENTITIES:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return TEST_IDENTITIES[token]


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client sharing the test session with the app."""

    async def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_token_claims] = override_get_token_claims
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def other_headers() -> dict:
    return {"Authorization": "Bearer bob-token"}


async def _make_user(db: AsyncSession, claims: IdentityClaims) -> User:
    user = User(firebase_uid=claims.uid, email=claims.email, name=claims.name)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest.fixture
async def test_user(db: AsyncSession) -> User:
    """The synced user behind ``auth_headers``."""
    return await _make_user(db, ALICE)


@pytest.fixture
async def other_user(db: AsyncSession) -> User:
    """The synced user behind ``other_headers``."""
    return await _make_user(db, BOB)


def make_slides(count: int = 3) -> list[dict]:
    return [
        {
            "id": f"s{i}",
            "title": f"Slide {i}",
            "content": f"• Point {i}",
            "type": "content",
            "order": i,
            "image_prompts": [],
            "image_suggestions": [],
            "speaker_notes": None,
        }
        for i in range(1, count + 1)
    ]


@pytest.fixture
async def test_deck(db: AsyncSession, test_user: User) -> Deck:
    """A three-slide deck owned by the test user."""
    deck = Deck(
        user_id=test_user.id,
        title="Acme Pitch Deck",
        description="Seed round deck",
        slides=make_slides(3),
    )
    db.add(deck)
    await db.flush()
    await db.refresh(deck)
    return deck


@pytest.fixture
async def other_user_deck(db: AsyncSession, other_user: User) -> Deck:
    deck = Deck(user_id=other_user.id, title="Bob's Deck", slides=make_slides(2))
    db.add(deck)
    await db.flush()
    await db.refresh(deck)
    return deck
