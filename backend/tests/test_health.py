"""
Tests for root-level endpoints.
"""

from httpx import AsyncClient


async def test_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Pitch Deck API"}


async def test_unknown_route_uses_envelope(client: AsyncClient):
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found"}
