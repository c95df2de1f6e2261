"""Tests for health endpoints."""

from httpx import AsyncClient

from duelvault.main import app
from duelvault.services.card_set_cache import CardSetDirectoryCache, get_card_set_cache


async def _no_sets() -> list:
    return []


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": None, "card_sets": None}

    async def test_ready(self, client: AsyncClient) -> None:
        app.dependency_overrides[get_card_set_cache] = lambda: CardSetDirectoryCache(_no_sets)

        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["database"] == "connected"
        assert data["card_sets"] == "cold"
