"""
Catalog API client.

Fetches cards and the set directory from the YGOPRODeck v7 API.

The catalog answers "no card matching your query" with HTTP 400; the
client turns that into ``None`` / an empty list. Every other failure is
raised as ``CatalogError`` so callers decide how to degrade.
"""

import logging
from typing import Any

import httpx

from duelvault.config import settings
from duelvault.models.card import Card, parse_banlist_info, parse_printings
from duelvault.models.card_set import CardSet

logger = logging.getLogger(__name__)

USER_AGENT = "DuelVault/1.0"

# Statuses the catalog uses for "nothing matched"
_NO_MATCH_STATUSES = frozenset({400, 404})


class CatalogError(Exception):
    """Raised when the catalog cannot be reached or answers with an error."""

    pass


def parse_catalog_card(data: dict[str, Any]) -> Card:
    """Build a Card from a catalog ``cardinfo.php`` record."""
    return Card(
        catalog_id=str(data["id"]),
        name=str(data.get("name", "")),
        type=str(data.get("type", "")),
        frame_type=str(data.get("frameType", "")),
        restrictions=parse_banlist_info(data.get("banlist_info")),
        printings=parse_printings(data.get("card_sets")),
        description=str(data.get("desc", "")),
        archetype=data.get("archetype"),
    )


def parse_card_set(data: dict[str, Any]) -> CardSet:
    """Build a CardSet from a catalog ``cardsets.php`` record."""
    num_of_cards = data.get("num_of_cards")
    return CardSet(
        set_code=str(data["set_code"]),
        set_name=str(data["set_name"]),
        num_of_cards=int(num_of_cards) if num_of_cards is not None else None,
        tcg_date=data.get("tcg_date"),
    )


class CatalogClient:
    """
    Thin async wrapper over the catalog endpoints the engine depends on.

    Args:
        base_url: API root. Defaults to settings.catalog_api_url
        timeout: Request timeout in seconds. Defaults to settings
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self._base_url = (base_url or settings.catalog_api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.catalog_timeout_seconds

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any | None:
        """
        GET an endpoint and decode JSON.

        Returns:
            Decoded body, or None when the catalog reports no match

        Raises:
            CatalogError: On transport errors or unexpected statuses
        """
        url = f"{self._base_url}/{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            ) as client:
                response = await client.get(url, params=params)
        except httpx.RequestError as e:
            raise CatalogError(f"Catalog request to {path} failed: {e}") from e

        if response.status_code in _NO_MATCH_STATUSES:
            logger.debug("Catalog returned %d for %s %s", response.status_code, path, params)
            return None

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CatalogError(
                f"Catalog request to {path} failed: HTTP {e.response.status_code}"
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise CatalogError(f"Catalog returned malformed JSON for {path}") from e

    async def _get_cards(self, params: dict[str, str]) -> list[Card]:
        body = await self._get_json("cardinfo.php", {**params, "misc": "yes"})
        if not body:
            return []
        records = body.get("data", []) if isinstance(body, dict) else None
        if not isinstance(records, list):
            raise CatalogError("Catalog returned an unexpected cardinfo.php payload")
        try:
            return [parse_catalog_card(item) for item in records]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CatalogError(f"Catalog returned a malformed card record: {e!r}") from e

    async def fetch_card_sets(self) -> list[CardSet]:
        """Fetch the full set directory."""
        body = await self._get_json("cardsets.php")
        if not body:
            return []
        if not isinstance(body, list):
            raise CatalogError("Catalog returned an unexpected cardsets.php payload")
        # Records without a code or name cannot be looked up
        records = [
            item
            for item in body
            if isinstance(item, dict) and item.get("set_code") and item.get("set_name")
        ]
        try:
            return [parse_card_set(item) for item in records]
        except (TypeError, ValueError) as e:
            raise CatalogError(f"Catalog returned a malformed set record: {e!r}") from e

    async def fetch_card_by_id(self, catalog_id: str) -> Card | None:
        """Fetch a card by catalog id."""
        cards = await self._get_cards({"id": catalog_id})
        return cards[0] if cards else None

    async def fetch_card_by_name(self, name: str) -> Card | None:
        """Fetch a card by exact name."""
        cards = await self._get_cards({"name": name})
        return cards[0] if cards else None

    async def fetch_cards_in_set(self, set_name: str) -> list[Card]:
        """Fetch every card printed in a set (by full set name)."""
        return await self._get_cards({"cardset": set_name})

    async def search_cards(self, query: str, limit: int = 20) -> list[Card]:
        """Fuzzy name search."""
        cards = await self._get_cards({"fname": query})
        return cards[:limit]
