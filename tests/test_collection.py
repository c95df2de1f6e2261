"""Tests for adding owned printings by set code."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db.operations import get_card_by_catalog_id, get_collection
from duelvault.models.card import Card, CardPrinting
from duelvault.models.card_set import CardSet
from duelvault.models.failure import Err, ErrorKind, Ok
from duelvault.services.card_set_cache import CardSetDirectoryCache
from duelvault.services.collection import add_card_by_code
from duelvault.services.set_code_resolver import SetCodeResolver

DARK_MAGICIAN = Card(
    catalog_id="46986414",
    name="Dark Magician",
    type="Normal Monster",
    frame_type="normal",
    printings=(
        CardPrinting("LDK2-ENY10", "Legendary Decks II", "Common", "(C)"),
        CardPrinting("LDK2-ENY10", "Legendary Decks II", "Ultra Rare", "(UR)"),
    ),
)


class FakeCatalog:
    async def fetch_card_by_id(self, catalog_id: str) -> Card | None:
        return DARK_MAGICIAN if catalog_id == DARK_MAGICIAN.catalog_id else None

    async def fetch_cards_in_set(self, set_name: str) -> list[Card]:
        return [DARK_MAGICIAN] if set_name == "Legendary Decks II" else []


@pytest.fixture
def resolver() -> SetCodeResolver:
    async def fetch_sets() -> list[CardSet]:
        return [CardSet("LDK2", "Legendary Decks II")]

    return SetCodeResolver(FakeCatalog(), CardSetDirectoryCache(fetch_sets))  # type: ignore[arg-type]


class TestAddCardByCode:
    async def test_adds_localized_printing(
        self, session: AsyncSession, resolver: SetCodeResolver
    ) -> None:
        """The code is kept as printed and the language read from it."""
        result = await add_card_by_code(session, resolver, "duelist-1", "ldk2-fry10", "common", 2)

        assert isinstance(result, Ok)
        entry = result.value
        assert entry.set_code == "LDK2-FRY10"
        assert entry.language == "FR"
        assert entry.rarity == "Common"
        assert entry.quantity == 2
        assert entry.card.name == "Dark Magician"

    async def test_caches_card_in_repository(
        self, session: AsyncSession, resolver: SetCodeResolver
    ) -> None:
        await add_card_by_code(session, resolver, "duelist-1", "LDK2-ENY10", "Common", 1)

        assert await get_card_by_catalog_id(session, "46986414") is not None

    async def test_repeat_adds_merge(
        self, session: AsyncSession, resolver: SetCodeResolver
    ) -> None:
        await add_card_by_code(session, resolver, "duelist-1", "LDK2-ENY10", "Common", 1)
        result = await add_card_by_code(session, resolver, "duelist-1", "LDK2-ENY10", "Common", 4)

        assert isinstance(result, Ok)
        assert result.value.quantity == 5
        assert len(await get_collection(session, "duelist-1")) == 1

    async def test_explicit_language_wins(
        self, session: AsyncSession, resolver: SetCodeResolver
    ) -> None:
        result = await add_card_by_code(
            session, resolver, "duelist-1", "LDK2-ENY10", "Common", 1, language="de"
        )

        assert isinstance(result, Ok)
        assert result.value.language == "DE"

    async def test_catalog_id_tried_first(
        self, session: AsyncSession, resolver: SetCodeResolver
    ) -> None:
        result = await add_card_by_code(
            session,
            resolver,
            "duelist-1",
            "LDK2-ITY10",
            "Ultra Rare",
            1,
            catalog_id="46986414",
        )

        assert isinstance(result, Ok)
        assert result.value.language == "IT"

    async def test_unavailable_rarity(
        self, session: AsyncSession, resolver: SetCodeResolver
    ) -> None:
        result = await add_card_by_code(
            session, resolver, "duelist-1", "LDK2-ENY10", "Secret Rare", 1
        )

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.VALIDATION
        assert "Common, Ultra Rare" in result.error.message

    async def test_unknown_code(self, session: AsyncSession, resolver: SetCodeResolver) -> None:
        result = await add_card_by_code(session, resolver, "duelist-1", "LDK2-ENY99", "Common", 1)

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.RESOLUTION

    @pytest.mark.parametrize(("set_code", "rarity"), [("", "Common"), ("LDK2-ENY10", "  ")])
    async def test_required_fields(
        self, session: AsyncSession, resolver: SetCodeResolver, set_code: str, rarity: str
    ) -> None:
        result = await add_card_by_code(session, resolver, "duelist-1", set_code, rarity, 1)

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.VALIDATION

    @pytest.mark.parametrize("quantity", [0, 101])
    async def test_quantity_range(
        self, session: AsyncSession, resolver: SetCodeResolver, quantity: int
    ) -> None:
        result = await add_card_by_code(
            session, resolver, "duelist-1", "LDK2-ENY10", "Common", quantity
        )

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.VALIDATION
