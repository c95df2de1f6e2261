"""Tests for database CRUD operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db.operations import (
    add_to_collection,
    card_to_model,
    collection_entry_to_model,
    create_deck,
    deck_to_model,
    delete_deck_entry,
    find_card_by_set_code,
    get_card_by_catalog_id,
    get_collection,
    get_deck,
    get_deck_counts,
    get_deck_entry,
    get_deck_with_cards,
    update_deck,
    upsert_card,
    upsert_deck_entry,
)
from duelvault.models.card import BanlistFormat, BanStatus, CardPrinting, Partition

LDK2_PRINTING = CardPrinting("LDK2-ENK40", "Legendary Decks II", "Common", "(C)")


class TestCardRepository:
    async def test_upsert_creates_card(self, session: AsyncSession, make_card) -> None:
        db_card = await upsert_card(session, make_card(tcg=BanStatus.LIMITED))

        assert db_card.id is not None
        assert db_card.banlist_info == {"ban_tcg": "Limited"}

    async def test_upsert_refreshes_existing(self, session: AsyncSession, make_card) -> None:
        """Cards are keyed by catalog id; the latest catalog data wins."""
        first = await upsert_card(session, make_card(tcg=BanStatus.LIMITED))
        second = await upsert_card(session, make_card(tcg=BanStatus.FORBIDDEN))

        assert first.id == second.id
        model = card_to_model(second)
        assert model.status_for(BanlistFormat.TCG) is BanStatus.FORBIDDEN

    async def test_round_trips_printings(self, session: AsyncSession, make_card) -> None:
        await upsert_card(session, make_card(printings=(LDK2_PRINTING,)))
        await session.commit()

        db_card = await get_card_by_catalog_id(session, "89631139")

        assert db_card is not None
        assert card_to_model(db_card).printings == (LDK2_PRINTING,)

    async def test_find_by_localized_set_code(self, session: AsyncSession, make_card) -> None:
        await upsert_card(session, make_card(name="Stratos", printings=(LDK2_PRINTING,)))
        await upsert_card(session, make_card(name="Other", catalog_id="2"))
        await session.commit()

        db_card = await find_card_by_set_code(session, "ldk2-frk40")

        assert db_card is not None
        assert db_card.name == "Stratos"

    async def test_find_by_set_code_miss(self, session: AsyncSession, make_card) -> None:
        await upsert_card(session, make_card(printings=(LDK2_PRINTING,)))
        await session.commit()

        assert await find_card_by_set_code(session, "LDK2-ENK4") is None


class TestDeckOperations:
    async def test_create_and_update_deck(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "duelist-1", "Heroes")
        await update_deck(session, deck, name="HEROes", is_public=False)
        await session.commit()

        loaded = await get_deck(session, deck.id)

        assert loaded is not None
        assert loaded.name == "HEROes"
        assert loaded.respect_banlist is True
        assert loaded.is_public is False

    async def test_entries_merge_per_partition(self, session: AsyncSession, make_card) -> None:
        deck = await create_deck(session, "duelist-1", "Heroes")
        card = await upsert_card(session, make_card())

        first = await upsert_deck_entry(session, deck.id, card.id, Partition.MAIN, 1)
        second = await upsert_deck_entry(session, deck.id, card.id, Partition.MAIN, 2)

        assert first.id == second.id
        assert second.quantity == 3

    async def test_counts_in_one_query(self, session: AsyncSession, make_card) -> None:
        deck = await create_deck(session, "duelist-1", "Heroes")
        dragon = await upsert_card(session, make_card())
        fusion = await upsert_card(
            session, make_card(name="Wingman", catalog_id="2", frame_type="fusion")
        )
        await upsert_deck_entry(session, deck.id, dragon.id, Partition.MAIN, 3)
        await upsert_deck_entry(session, deck.id, fusion.id, Partition.EXTRA, 2)
        await session.commit()

        counts = await get_deck_counts(session, deck.id, dragon.id)

        assert (counts.main, counts.extra, counts.card_copies) == (3, 2, 3)

    async def test_counts_for_empty_deck(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "duelist-1", "Empty")

        counts = await get_deck_counts(session, deck.id, 1)

        assert (counts.main, counts.extra, counts.card_copies) == (0, 0, 0)

    async def test_entry_scoped_to_deck(self, session: AsyncSession, make_card) -> None:
        deck = await create_deck(session, "duelist-1", "Mine")
        other = await create_deck(session, "duelist-2", "Theirs")
        card = await upsert_card(session, make_card())
        entry = await upsert_deck_entry(session, deck.id, card.id, Partition.MAIN, 1)

        assert await get_deck_entry(session, other.id, entry.id) is None
        assert await delete_deck_entry(session, other.id, entry.id) is False
        assert await delete_deck_entry(session, deck.id, entry.id) is True

    async def test_deck_to_model(self, session: AsyncSession, make_card) -> None:
        deck = await create_deck(session, "duelist-1", "Heroes")
        dragon = await upsert_card(session, make_card())
        fusion = await upsert_card(
            session, make_card(name="Wingman", catalog_id="2", frame_type="fusion")
        )
        await upsert_deck_entry(session, deck.id, dragon.id, Partition.MAIN, 3)
        await upsert_deck_entry(session, deck.id, fusion.id, Partition.EXTRA, 1)
        await session.commit()

        db_deck = await get_deck_with_cards(session, deck.id)
        model = deck_to_model(db_deck)

        assert model.main_count() == 3
        assert model.extra_count() == 1
        assert model.copies_of(dragon.id) == 3
        assert model.extra_deck[0].card.name == "Wingman"


class TestCollectionOperations:
    async def test_repeat_adds_merge(self, session: AsyncSession, make_card) -> None:
        card = await upsert_card(session, make_card())

        await add_to_collection(session, "duelist-1", card.id, "LDK2-FRK40", "Common", 2, "FR")
        await add_to_collection(session, "duelist-1", card.id, "LDK2-FRK40", "Common", 1, "FR")
        await session.commit()

        rows = await get_collection(session, "duelist-1")

        assert len(rows) == 1
        entry = collection_entry_to_model(rows[0])
        assert entry.quantity == 3
        assert entry.language == "FR"
        assert entry.card.name == "Blue-Eyes White Dragon"

    async def test_rarities_kept_apart(self, session: AsyncSession, make_card) -> None:
        card = await upsert_card(session, make_card())

        await add_to_collection(session, "duelist-1", card.id, "LOB-001", "Ultra Rare", 1, "EN")
        await add_to_collection(session, "duelist-1", card.id, "LOB-001", "Common", 1, "EN")
        await session.commit()

        assert len(await get_collection(session, "duelist-1")) == 2

    async def test_collections_are_per_owner(self, session: AsyncSession, make_card) -> None:
        card = await upsert_card(session, make_card())
        await add_to_collection(session, "duelist-1", card.id, "LOB-001", "Common", 1, "EN")
        await session.commit()

        assert await get_collection(session, "duelist-2") == []
