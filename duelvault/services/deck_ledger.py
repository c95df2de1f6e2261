"""
Deck Ledger: rule-enforced deck mutations.

Owns the per-deck, per-partition quantity ledger. Every add, update and
removal is checked against the construction rules before it is written.

INVARIANTS (hold after every committed mutation):
- Main Deck total never exceeds 60, Extra Deck total never exceeds 15
- Copies of a card across both partitions never exceed its ceiling
  (banlist limit when the deck respects the banlist, else 3)
- A card is only ever stored in the partition its frame category dictates

Expected rule violations are returned as ``Err`` results, never raised.

CONCURRENCY:
Each mutation runs read-check-write-commit under a per-deck asyncio lock
and a row lock on the deck (SELECT ... FOR UPDATE), so two concurrent adds
can never both pass a ceiling check against the same counts.
"""

import asyncio
import logging
import weakref
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.config import (
    MAX_DECK_QUANTITY,
    MAX_EXTRA_DECK_SIZE,
    MAX_MAIN_DECK_SIZE,
    MIN_DECK_QUANTITY,
    settings,
)
from duelvault.db.operations import (
    card_to_model,
    delete_deck_entry,
    get_card,
    get_deck,
    get_deck_counts,
    get_deck_entry,
    touch_deck,
    upsert_deck_entry,
)
from duelvault.models.card import BanlistFormat, Card, Partition
from duelvault.models.db import DeckDB
from duelvault.models.deck import DeckCounts
from duelvault.models.failure import Err, ErrorKind, Ok, Result, err
from duelvault.services.banlist_policy import DEFAULT_COPY_LIMIT, ceiling_for, copies_phrase
from duelvault.services.card_classifier import classify

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DeckLockRegistry:
    """
    One asyncio lock per deck id.

    Locks are held weakly: once no coroutine holds or awaits a deck's lock
    it is dropped from the registry.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def __len__(self) -> int:
        return len(self._locks)

    def lock_for(self, deck_id: int) -> asyncio.Lock:
        lock = self._locks.get(deck_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[deck_id] = lock
        return lock


@lru_cache(maxsize=1)
def get_deck_locks() -> DeckLockRegistry:
    """Application-wide lock registry, overridable in tests."""
    return DeckLockRegistry()


def check_partition_room(partition: Partition, counts: DeckCounts, adding: int) -> Err | None:
    """SIZE error if adding ``adding`` copies would overflow the partition."""
    if partition is Partition.MAIN and counts.main + adding > MAX_MAIN_DECK_SIZE:
        return err(ErrorKind.SIZE, f"Main Deck cannot exceed {MAX_MAIN_DECK_SIZE} cards")
    if partition is Partition.EXTRA and counts.extra + adding > MAX_EXTRA_DECK_SIZE:
        return err(ErrorKind.SIZE, f"Extra Deck cannot exceed {MAX_EXTRA_DECK_SIZE} cards")
    return None


def check_copy_ceiling(
    card: Card,
    respect_banlist: bool,
    existing: int,
    adding: int,
    banlist: BanlistFormat = BanlistFormat.TCG,
) -> Err | None:
    """FORBIDDEN or LIMIT error if the card's aggregate would exceed its ceiling."""
    ceiling = ceiling_for(card, respect_banlist, banlist)

    if ceiling == 0:
        return err(
            ErrorKind.FORBIDDEN,
            f"{card.name} is Forbidden and cannot be added when respecting banlist",
        )

    if existing + adding > ceiling:
        if ceiling == DEFAULT_COPY_LIMIT:
            message = f"Maximum {copies_phrase(ceiling)} of {card.name} allowed per deck"
        else:
            message = f"Banlist allows only {copies_phrase(ceiling)} of {card.name}"
        return err(ErrorKind.LIMIT, message)

    return None


def check_placement(card: Card, requested: Partition) -> Err | None:
    """PLACEMENT error if the card does not belong in the requested partition."""
    actual = classify(card.frame_type)
    if actual is requested:
        return None
    if actual is Partition.EXTRA:
        return err(ErrorKind.PLACEMENT, "Extra Deck monsters must be added to Extra Deck")
    return err(ErrorKind.PLACEMENT, "Cannot add non-Extra Deck monsters to Extra Deck")


class DeckLedger:
    """
    Executes deck mutations with full rule enforcement.

    Args:
        session: Request-scoped database session. The ledger commits it.
        locks: Per-deck lock registry. Defaults to the application registry
        banlist: Banlist followed by decks that respect it. Defaults to settings
    """

    def __init__(
        self,
        session: AsyncSession,
        locks: DeckLockRegistry | None = None,
        banlist: BanlistFormat | None = None,
    ) -> None:
        self._session = session
        self._locks = locks or get_deck_locks()
        self._banlist = banlist or BanlistFormat(settings.banlist_format)

    async def add_card(
        self,
        deck_id: int,
        card_id: int,
        quantity: int,
        partition: Partition,
        caller_id: str,
    ) -> Result[int]:
        """
        Add copies of a card to a deck partition.

        Returns:
            Ok(entry id) on success, Err otherwise
        """
        if not MIN_DECK_QUANTITY <= quantity <= MAX_DECK_QUANTITY:
            return err(
                ErrorKind.VALIDATION,
                f"quantity must be between {MIN_DECK_QUANTITY} and {MAX_DECK_QUANTITY}",
            )

        return await self._transact(
            deck_id,
            lambda: self._add_card(deck_id, card_id, quantity, partition, caller_id),
        )

    async def update_quantity(
        self,
        deck_id: int,
        entry_id: int,
        new_quantity: int,
        caller_id: str,
    ) -> Result[int]:
        """
        Overwrite the quantity of a ledger row.

        A quantity of 0 or less removes the row, the same as remove_card,
        and succeeds even when no row matches.

        Returns:
            Ok(new quantity) on success (0 when removed), Err otherwise
        """
        if new_quantity > MAX_DECK_QUANTITY:
            return err(
                ErrorKind.VALIDATION,
                f"quantity must be between 0 and {MAX_DECK_QUANTITY}",
            )

        return await self._transact(
            deck_id,
            lambda: self._update_quantity(deck_id, entry_id, new_quantity, caller_id),
        )

    async def remove_card(self, deck_id: int, entry_id: int, caller_id: str) -> Result[bool]:
        """
        Delete a ledger row.

        Returns:
            Ok(True) if a row was removed, Ok(False) if none matched
        """
        return await self._transact(
            deck_id,
            lambda: self._remove_card(deck_id, entry_id, caller_id),
        )

    async def _transact(
        self,
        deck_id: int,
        operation: Callable[[], Awaitable[Result[T]]],
    ) -> Result[T]:
        async with self._locks.lock_for(deck_id):
            try:
                result = await operation()
                # Commit on rejection too: nothing was written, and it releases the row lock
                await self._session.commit()
            except SQLAlchemyError:
                await self._session.rollback()
                raise

        if isinstance(result, Err):
            logger.info(
                "DECK_CARD_REJECTED",
                extra={
                    "deck_id": deck_id,
                    "kind": result.error.kind.value,
                    "reason": result.error.message,
                },
            )
        return result

    async def _owned_deck(self, deck_id: int, caller_id: str) -> Result[DeckDB]:
        deck = await get_deck(self._session, deck_id, for_update=True)
        if deck is None:
            return err(ErrorKind.NOT_FOUND, "Deck not found")
        if deck.owner_id != caller_id:
            return err(ErrorKind.AUTHORIZATION, "You do not have permission to modify this deck")
        return Ok(deck)

    async def _add_card(
        self,
        deck_id: int,
        card_id: int,
        quantity: int,
        partition: Partition,
        caller_id: str,
    ) -> Result[int]:
        owned = await self._owned_deck(deck_id, caller_id)
        if isinstance(owned, Err):
            return owned
        deck = owned.value

        db_card = await get_card(self._session, card_id)
        if db_card is None:
            return err(ErrorKind.NOT_FOUND, "Card not found")
        card = card_to_model(db_card)

        placement_error = check_placement(card, partition)
        if placement_error:
            return placement_error

        counts = await get_deck_counts(self._session, deck_id, card_id)

        rejection = check_partition_room(partition, counts, quantity) or check_copy_ceiling(
            card, deck.respect_banlist, counts.card_copies, quantity, self._banlist
        )
        if rejection:
            return rejection

        entry = await upsert_deck_entry(self._session, deck_id, card_id, partition, quantity)
        touch_deck(deck)
        await self._session.flush()

        logger.info(
            "DECK_CARD_ADDED",
            extra={
                "deck_id": deck_id,
                "card_id": card_id,
                "partition": partition.value,
                "quantity": quantity,
            },
        )
        return Ok(entry.id)

    async def _update_quantity(
        self,
        deck_id: int,
        entry_id: int,
        new_quantity: int,
        caller_id: str,
    ) -> Result[int]:
        owned = await self._owned_deck(deck_id, caller_id)
        if isinstance(owned, Err):
            return owned
        deck = owned.value

        if new_quantity <= 0:
            await self._delete_entry(deck, entry_id)
            return Ok(0)

        entry = await get_deck_entry(self._session, deck_id, entry_id)
        if entry is None:
            return err(ErrorKind.NOT_FOUND, "Card not found in deck")

        delta = new_quantity - entry.quantity

        # A decrease only moves the deck toward compliance
        if delta > 0:
            db_card = await get_card(self._session, entry.card_id)
            if db_card is None:
                return err(ErrorKind.NOT_FOUND, "Card not found")
            card = card_to_model(db_card)
            partition = Partition(entry.partition)
            counts = await get_deck_counts(self._session, deck_id, entry.card_id)

            rejection = check_partition_room(partition, counts, delta) or check_copy_ceiling(
                card, deck.respect_banlist, counts.card_copies, delta, self._banlist
            )
            if rejection:
                return rejection

        entry.quantity = new_quantity
        touch_deck(deck)
        await self._session.flush()

        logger.info(
            "DECK_CARD_QUANTITY_UPDATED",
            extra={"deck_id": deck_id, "entry_id": entry_id, "quantity": new_quantity},
        )
        return Ok(new_quantity)

    async def _remove_card(self, deck_id: int, entry_id: int, caller_id: str) -> Result[bool]:
        owned = await self._owned_deck(deck_id, caller_id)
        if isinstance(owned, Err):
            return owned

        return Ok(await self._delete_entry(owned.value, entry_id))

    async def _delete_entry(self, deck: DeckDB, entry_id: int) -> bool:
        removed = await delete_deck_entry(self._session, deck.id, entry_id)
        if removed:
            touch_deck(deck)
            await self._session.flush()
            logger.info("DECK_CARD_REMOVED", extra={"deck_id": deck.id, "entry_id": entry_id})
        return removed
