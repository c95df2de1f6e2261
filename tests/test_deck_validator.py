"""Tests for the read-side legality audits."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db.operations import (
    create_deck,
    get_deck,
    update_deck,
    upsert_card,
    upsert_deck_entry,
)
from duelvault.models.card import BanlistFormat, BanStatus, Partition
from duelvault.models.failure import Err, ErrorKind, Ok
from duelvault.services.deck_validator import audit_banlist, check_partition_sizes, validate_deck


class TestCheckPartitionSizes:
    def test_legal_bounds(self) -> None:
        """40 Main and 15 Extra is legal."""
        validation = check_partition_sizes(40, 15)

        assert validation.valid
        assert validation.violations == ()

    def test_main_deck_too_small(self) -> None:
        """39 Main is one short."""
        validation = check_partition_sizes(39, 0)

        assert not validation.valid
        assert validation.violations == ("Main Deck must have at least 40 cards",)

    def test_short_main_and_oversized_extra(self) -> None:
        validation = check_partition_sizes(35, 20)

        assert not validation.valid
        assert validation.violations == (
            "Main Deck must have at least 40 cards",
            "Extra Deck cannot exceed 15 cards",
        )

    def test_every_violation_reported(self) -> None:
        validation = check_partition_sizes(61, 16)

        assert validation.violations == (
            "Main Deck cannot exceed 60 cards",
            "Extra Deck cannot exceed 15 cards",
        )

    def test_upper_bounds_are_inclusive(self) -> None:
        assert check_partition_sizes(60, 15).valid
        assert check_partition_sizes(60, 0).valid

    def test_counts_reported(self) -> None:
        validation = check_partition_sizes(45, 7)

        assert (validation.main_count, validation.extra_count) == (45, 7)


async def _deck_with(
    session: AsyncSession, make_card, main: int, extra: int, respect_banlist: bool = True
) -> int:
    """Write ledger rows directly, bypassing insert-time checks."""
    deck = await create_deck(session, "duelist-1", "Audit", respect_banlist=respect_banlist)
    if main:
        card = await upsert_card(session, make_card(name="Filler", catalog_id="main-1"))
        await upsert_deck_entry(session, deck.id, card.id, Partition.MAIN, main)
    if extra:
        card = await upsert_card(
            session, make_card(name="Fusion Filler", catalog_id="extra-1", frame_type="fusion")
        )
        await upsert_deck_entry(session, deck.id, card.id, Partition.EXTRA, extra)
    await session.commit()
    return deck.id


class TestValidateDeck:
    async def test_legal_deck(self, session: AsyncSession, make_card) -> None:
        deck_id = await _deck_with(session, make_card, main=40, extra=15)

        result = await validate_deck(session, deck_id)

        assert isinstance(result, Ok)
        assert result.value.valid
        assert (result.value.main_count, result.value.extra_count) == (40, 15)

    async def test_short_deck(self, session: AsyncSession, make_card) -> None:
        deck_id = await _deck_with(session, make_card, main=39, extra=0)

        result = await validate_deck(session, deck_id)

        assert isinstance(result, Ok)
        assert not result.value.valid
        assert "Main Deck must have at least 40 cards" in result.value.violations

    async def test_empty_deck(self, session: AsyncSession, make_card) -> None:
        deck_id = await _deck_with(session, make_card, main=0, extra=0)

        result = await validate_deck(session, deck_id)

        assert isinstance(result, Ok)
        assert result.value.main_count == 0
        assert not result.value.valid

    async def test_idempotent(self, session: AsyncSession, make_card) -> None:
        deck_id = await _deck_with(session, make_card, main=41, extra=3)

        first = await validate_deck(session, deck_id)
        second = await validate_deck(session, deck_id)

        assert first == second

    async def test_missing_deck(self, session: AsyncSession) -> None:
        result = await validate_deck(session, 9999)

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.NOT_FOUND

    async def test_banlist_does_not_affect_validity(self, session: AsyncSession, make_card) -> None:
        """A size-legal deck stays valid even with a Forbidden card in it."""
        deck = await create_deck(session, "duelist-1", "Retro")
        filler = await upsert_card(session, make_card(name="Filler", catalog_id="f"))
        banned = await upsert_card(
            session, make_card(name="Pot of Greed", catalog_id="p", tcg=BanStatus.FORBIDDEN)
        )
        await upsert_deck_entry(session, deck.id, filler.id, Partition.MAIN, 39)
        await upsert_deck_entry(session, deck.id, banned.id, Partition.MAIN, 1)
        await session.commit()

        result = await validate_deck(session, deck.id)

        assert isinstance(result, Ok)
        assert result.value.valid


class TestAuditBanlist:
    @pytest.fixture
    async def retro_deck(self, session: AsyncSession, make_card) -> int:
        """Three copies of a card that became Limited after it was added."""
        deck = await create_deck(session, "duelist-1", "Retro", respect_banlist=False)
        reborn = await upsert_card(
            session, make_card(name="Monster Reborn", catalog_id="r", tcg=BanStatus.LIMITED)
        )
        dragon = await upsert_card(session, make_card(name="Blue-Eyes", catalog_id="b"))
        await upsert_deck_entry(session, deck.id, reborn.id, Partition.MAIN, 3)
        await upsert_deck_entry(session, deck.id, dragon.id, Partition.MAIN, 3)
        await session.commit()
        return deck.id

    async def test_no_violations_when_ignoring_banlist(
        self, session: AsyncSession, retro_deck: int
    ) -> None:
        result = await audit_banlist(session, retro_deck)

        assert result == Ok([])

    async def test_reports_cards_over_tightened_ceiling(
        self, session: AsyncSession, retro_deck: int
    ) -> None:
        deck = await get_deck(session, retro_deck)
        await update_deck(session, deck, respect_banlist=True)
        await session.commit()

        result = await audit_banlist(session, retro_deck, BanlistFormat.TCG)

        assert isinstance(result, Ok)
        assert len(result.value) == 1
        violation = result.value[0]
        assert (violation.card_name, violation.quantity, violation.ceiling) == (
            "Monster Reborn",
            3,
            1,
        )

    async def test_other_format(self, session: AsyncSession, retro_deck: int) -> None:
        deck = await get_deck(session, retro_deck)
        await update_deck(session, deck, respect_banlist=True)
        await session.commit()

        result = await audit_banlist(session, retro_deck, BanlistFormat.OCG)

        assert result == Ok([])

    async def test_missing_deck(self, session: AsyncSession) -> None:
        result = await audit_banlist(session, 9999)

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.NOT_FOUND
