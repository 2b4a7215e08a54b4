"""
Tests for deck and slide endpoints.
"""

from unittest.mock import AsyncMock, patch

from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.core.exceptions import AIGenerationError
from pitchdeck.models.deck import Deck
from pitchdeck.models.user import User
from pitchdeck.schemas.ai import DeckOutline, GeneratedSlide
from pitchdeck.schemas.deck import DEFAULT_THUMBNAIL, ImageSuggestion

DECK_INPUTS = {
    "company": "Acme",
    "industry": "Logistics",
    "problem": "Freight booking is slow and opaque for small shippers",
    "solution": "Instant quotes and tracking in one dashboard",
    "model": "Monthly SaaS subscription",
    "financials": "12 paying pilots, $8K MRR",
}


def slide_ids(body: dict) -> list[str]:
    return [s["id"] for s in body["data"]["slides"]]


def slide_orders(body: dict) -> list[int]:
    return [s["order"] for s in body["data"]["slides"]]


class TestListDecks:
    """Tests for listing decks."""

    async def test_list_empty(self, client: AsyncClient, auth_headers: dict, test_user: User):
        response = await client.get("/api/v1/decks", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": None, "data": []}

    async def test_list_summary_fields(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        """Summaries carry the slide count and a default thumbnail."""
        response = await client.get("/api/v1/decks", headers=auth_headers)
        decks = response.json()["data"]
        assert len(decks) == 1
        assert decks[0]["title"] == "Acme Pitch Deck"
        assert decks[0]["slide_count"] == 3
        assert decks[0]["thumbnail"] == DEFAULT_THUMBNAIL

    async def test_list_only_own_decks(
        self, client: AsyncClient, auth_headers: dict, test_deck: Deck, other_user_deck: Deck
    ):
        response = await client.get("/api/v1/decks", headers=auth_headers)
        ids = [d["id"] for d in response.json()["data"]]
        assert ids == [str(test_deck.id)]

    async def test_list_status_filter(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.get("/api/v1/decks", headers=auth_headers, params={"status": "published"})
        assert response.json()["data"] == []
        response = await client.get("/api/v1/decks", headers=auth_headers, params={"status": "draft"})
        assert len(response.json()["data"]) == 1

    async def test_list_sorted_by_title(self, client: AsyncClient, auth_headers: dict, test_user: User):
        for title in ("Zeta", "Alpha", "Mid"):
            await client.post("/api/v1/decks", headers=auth_headers, json={"title": title})
        response = await client.get("/api/v1/decks", headers=auth_headers, params={"sort": "title"})
        assert [d["title"] for d in response.json()["data"]] == ["Alpha", "Mid", "Zeta"]

    async def test_list_unauthenticated(self, client: AsyncClient):
        response = await client.get("/api/v1/decks")
        assert response.status_code == 401


class TestDeckCrud:
    """Tests for creating, reading, updating and deleting decks."""

    async def test_create_assigns_missing_ids(self, client: AsyncClient, auth_headers: dict, test_user: User):
        response = await client.post(
            "/api/v1/decks",
            headers=auth_headers,
            json={"title": "New Deck", "slides": [{"title": "One"}, {"id": "keep", "title": "Two"}]},
        )
        assert response.status_code == 201
        body = response.json()
        ids = slide_ids(body)
        assert ids[1] == "keep"
        assert ids[0].startswith("slide-")
        assert slide_orders(body) == [1, 2]
        assert body["data"]["status"] == "draft"

    async def test_create_rejects_duplicate_ids(self, client: AsyncClient, auth_headers: dict, test_user: User):
        response = await client.post(
            "/api/v1/decks",
            headers=auth_headers,
            json={"title": "Dup", "slides": [{"id": "a", "title": "1"}, {"id": "a", "title": "2"}]},
        )
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Duplicate slide id: a"}

    async def test_create_requires_title(self, client: AsyncClient, auth_headers: dict, test_user: User):
        response = await client.post("/api/v1/decks", headers=auth_headers, json={"title": ""})
        assert response.status_code == 422

    async def test_create_rejects_blank_title(self, client: AsyncClient, auth_headers: dict, test_user: User):
        """A whitespace-only title is rejected rather than stored empty."""
        response = await client.post("/api/v1/decks", headers=auth_headers, json={"title": "   "})
        assert response.status_code == 422
        assert response.json()["success"] is False

    async def test_create_strips_title(self, client: AsyncClient, auth_headers: dict, test_user: User):
        response = await client.post("/api/v1/decks", headers=auth_headers, json={"title": "  Seed Round  "})
        assert response.status_code == 201
        assert response.json()["data"]["title"] == "Seed Round"

    async def test_create_requires_synced_user(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/v1/decks", headers=auth_headers, json={"title": "X"})
        assert response.status_code == 401

    async def test_get_deck(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.get(f"/api/v1/decks/{test_deck.id}", headers=auth_headers)
        assert response.status_code == 200
        assert slide_ids(response.json()) == ["s1", "s2", "s3"]

    async def test_get_deck_with_legacy_slides(
        self, client: AsyncClient, auth_headers: dict, test_user: User, db: AsyncSession
    ):
        """Stored slides missing an id or with an unknown type still read back."""
        deck = Deck(
            user_id=test_user.id,
            title="Old Deck",
            slides=[
                {"title": "Old", "content": "x", "order": 1},
                {"id": "kept", "title": "Chart", "type": "graph", "order": 2},
            ],
        )
        db.add(deck)
        await db.flush()

        response = await client.get(f"/api/v1/decks/{deck.id}", headers=auth_headers)
        assert response.status_code == 200
        slides = response.json()["data"]["slides"]
        assert slides[0]["id"].startswith("slide-")
        assert slides[0]["title"] == "Old"
        assert slides[1]["id"] == "kept"
        assert slides[1]["type"] == "content"

        again = await client.get(f"/api/v1/decks/{deck.id}", headers=auth_headers)
        assert slide_ids(again.json()) == slide_ids(response.json())

    async def test_update_legacy_slide_by_read_id(
        self, client: AsyncClient, auth_headers: dict, test_user: User, db: AsyncSession
    ):
        deck = Deck(user_id=test_user.id, title="Old Deck", slides=[{"title": "Old", "content": "x", "order": 1}])
        db.add(deck)
        await db.flush()

        listed = await client.get(f"/api/v1/decks/{deck.id}", headers=auth_headers)
        slide_id = slide_ids(listed.json())[0]
        response = await client.put(
            f"/api/v1/decks/{deck.id}/slides/{slide_id}", headers=auth_headers, json={"title": "New"}
        )
        assert response.status_code == 200
        assert response.json()["data"]["slides"][0]["id"] == slide_id
        assert response.json()["data"]["slides"][0]["title"] == "New"

    async def test_get_foreign_deck(self, client: AsyncClient, auth_headers: dict, other_user_deck: Deck, test_user: User):
        """Another user's deck looks exactly like a missing one."""
        response = await client.get(f"/api/v1/decks/{other_user_deck.id}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Deck not found or access denied"

    async def test_update_fields(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(
            f"/api/v1/decks/{test_deck.id}",
            headers=auth_headers,
            json={"title": "Renamed", "status": "published"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Renamed"
        assert data["status"] == "published"
        assert len(data["slides"]) == 3

    async def test_update_replaces_slides(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(
            f"/api/v1/decks/{test_deck.id}",
            headers=auth_headers,
            json={"slides": [{"id": "b", "title": "B", "order": 2}, {"id": "a", "title": "A", "order": 1}]},
        )
        body = response.json()
        assert slide_ids(body) == ["a", "b"]
        assert slide_orders(body) == [1, 2]

    async def test_update_rejects_blank_title(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(f"/api/v1/decks/{test_deck.id}", headers=auth_headers, json={"title": " \t "})
        assert response.status_code == 422
        response = await client.get(f"/api/v1/decks/{test_deck.id}", headers=auth_headers)
        assert response.json()["data"]["title"] == test_deck.title

    async def test_update_rejects_bad_status(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(f"/api/v1/decks/{test_deck.id}", headers=auth_headers, json={"status": "live"})
        assert response.status_code == 422

    async def test_delete_deck(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.delete(f"/api/v1/decks/{test_deck.id}", headers=auth_headers)
        assert response.status_code == 204
        response = await client.get(f"/api/v1/decks/{test_deck.id}", headers=auth_headers)
        assert response.status_code == 404

    async def test_delete_foreign_deck(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict, other_user_deck: Deck, test_user: User
    ):
        response = await client.delete(f"/api/v1/decks/{other_user_deck.id}", headers=auth_headers)
        assert response.status_code == 404
        response = await client.get(f"/api/v1/decks/{other_user_deck.id}", headers=other_headers)
        assert response.status_code == 200


class TestSlides:
    """Tests for slide-level operations."""

    async def test_add_slide_appends(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.post(
            f"/api/v1/decks/{test_deck.id}/slides",
            headers=auth_headers,
            json={"title": "Team", "content": "• Founders"},
        )
        assert response.status_code == 201
        body = response.json()
        ids = slide_ids(body)
        assert len(ids) == 4
        assert len(set(ids)) == 4
        assert body["data"]["slides"][-1]["title"] == "Team"
        assert slide_orders(body) == [1, 2, 3, 4]

    async def test_add_slide_at_position(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.post(
            f"/api/v1/decks/{test_deck.id}/slides",
            headers=auth_headers,
            json={"title": "Inserted", "order": 2},
        )
        titles = [s["title"] for s in response.json()["data"]["slides"]]
        assert titles == ["Slide 1", "Inserted", "Slide 2", "Slide 3"]

    async def test_update_slide(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(
            f"/api/v1/decks/{test_deck.id}/slides/s2",
            headers=auth_headers,
            json={"content": "• Updated", "speaker_notes": "Say this"},
        )
        assert response.status_code == 200
        slide = response.json()["data"]["slides"][1]
        assert slide["id"] == "s2"
        assert slide["title"] == "Slide 2"
        assert slide["content"] == "• Updated"
        assert slide["speaker_notes"] == "Say this"

    async def test_update_slide_persists(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        await client.put(f"/api/v1/decks/{test_deck.id}/slides/s1", headers=auth_headers, json={"title": "Hello"})
        response = await client.get(f"/api/v1/decks/{test_deck.id}", headers=auth_headers)
        assert response.json()["data"]["slides"][0]["title"] == "Hello"

    async def test_update_missing_slide(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(f"/api/v1/decks/{test_deck.id}/slides/nope", headers=auth_headers, json={})
        assert response.status_code == 404
        assert response.json()["error"] == "Slide not found"

    async def test_delete_slide_renumbers(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.delete(f"/api/v1/decks/{test_deck.id}/slides/s2", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert slide_ids(body) == ["s1", "s3"]
        assert slide_orders(body) == [1, 2]

    async def test_delete_missing_slide(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.delete(f"/api/v1/decks/{test_deck.id}/slides/nope", headers=auth_headers)
        assert response.status_code == 404

    async def test_reorder(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(
            f"/api/v1/decks/{test_deck.id}/reorder-slides",
            headers=auth_headers,
            json={"slide_ids": ["s3", "s1", "s2"]},
        )
        assert response.status_code == 200
        body = response.json()
        assert slide_ids(body) == ["s3", "s1", "s2"]
        assert slide_orders(body) == [1, 2, 3]

    async def test_reorder_unknown_id(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(
            f"/api/v1/decks/{test_deck.id}/reorder-slides",
            headers=auth_headers,
            json={"slide_ids": ["s3", "s1", "zz"]},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Slide zz not found"

    async def test_reorder_rejects_partial_list(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(
            f"/api/v1/decks/{test_deck.id}/reorder-slides",
            headers=auth_headers,
            json={"slide_ids": ["s3", "s1"]},
        )
        assert response.status_code == 400

    async def test_reorder_rejects_duplicates(self, client: AsyncClient, auth_headers: dict, test_deck: Deck):
        response = await client.put(
            f"/api/v1/decks/{test_deck.id}/reorder-slides",
            headers=auth_headers,
            json={"slide_ids": ["s1", "s1", "s2"]},
        )
        assert response.status_code == 400

    async def test_slide_ops_on_foreign_deck(
        self, client: AsyncClient, auth_headers: dict, other_user_deck: Deck, test_user: User
    ):
        response = await client.post(
            f"/api/v1/decks/{other_user_deck.id}/slides", headers=auth_headers, json={"title": "x"}
        )
        assert response.status_code == 404


class TestGenerateDeck:
    """Tests for AI-drafted decks saved to the user's account."""

    async def test_generate_persists_outline(self, client: AsyncClient, auth_headers: dict, test_user: User):
        outline = DeckOutline(
            outline="AI-generated pitch deck for Acme - ...",
            slides=[
                GeneratedSlide(
                    title=f"Slide {i}",
                    content="• text",
                    image_suggestions=[ImageSuggestion(type="icon", description=f"visual {i}")],
                    notes=f"notes {i}",
                )
                for i in range(1, 10)
            ],
        )
        with patch(
            "pitchdeck.core.ai_generators.generate_deck_outline", new=AsyncMock(return_value=outline)
        ):
            response = await client.post("/api/v1/decks/generate", headers=auth_headers, json=DECK_INPUTS)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["title"] == "Acme Pitch Deck"
        assert data["description"] == "AI-generated pitch deck for Acme"
        assert [s["id"] for s in data["slides"]] == [f"slide-{i}" for i in range(1, 10)]
        assert [s["order"] for s in data["slides"]] == list(range(1, 10))
        assert data["slides"][0]["image_prompts"] == ["visual 1"]
        assert data["slides"][0]["speaker_notes"] == "notes 1"

    async def test_generate_falls_back_on_ai_failure(self, client: AsyncClient, auth_headers: dict, test_user: User):
        with patch(
            "pitchdeck.core.ai_generators.generate_deck_outline",
            new=AsyncMock(side_effect=AIGenerationError("AI generation failed: timeout")),
        ):
            response = await client.post("/api/v1/decks/generate", headers=auth_headers, json=DECK_INPUTS)

        assert response.status_code == 201
        slides = response.json()["data"]["slides"]
        assert len(slides) == 9
        assert slides[0]["title"] == "Cover"
        assert "Acme" in slides[0]["content"]

    async def test_generate_validates_inputs(self, client: AsyncClient, auth_headers: dict, test_user: User):
        response = await client.post(
            "/api/v1/decks/generate", headers=auth_headers, json={**DECK_INPUTS, "company": ""}
        )
        assert response.status_code == 422
