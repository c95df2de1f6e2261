"""
Database CRUD operations.

Provides async functions for the card repository, decks, the deck ledger
rows and user collections, plus conversions to domain models.
"""

from datetime import UTC, datetime

from sqlalchemy import String, case, cast, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from duelvault.models.card import (
    Card,
    Partition,
    parse_banlist_info,
    parse_printings,
    printings_to_json,
)
from duelvault.models.collection import CollectionEntry
from duelvault.models.db import CardDB, CollectionCardDB, DeckCardDB, DeckDB
from duelvault.models.deck import Deck, DeckCardEntry, DeckCounts
from duelvault.services.set_code_resolver import find_printing, normalize_set_code

# --- Card Repository ---


async def get_card(session: AsyncSession, card_id: int) -> CardDB | None:
    """Get a cached card by repository id."""
    return await session.get(CardDB, card_id)


async def get_card_by_catalog_id(session: AsyncSession, catalog_id: str) -> CardDB | None:
    """Get a cached card by catalog id."""
    result = await session.execute(select(CardDB).where(CardDB.catalog_id == catalog_id))
    return result.scalar_one_or_none()


async def find_card_by_set_code(session: AsyncSession, set_code: str) -> CardDB | None:
    """
    Find a cached card printed under ``set_code``.

    Matches the code as typed or in its normalized English form.
    """
    normalized = normalize_set_code(set_code.strip())
    needles = {set_code.strip().upper(), normalized.upper()}

    # Narrow in SQL on the serialized printings, confirm on the parsed model
    conditions = [cast(CardDB.card_sets, String).ilike(f"%{needle}%") for needle in sorted(needles)]
    result = await session.execute(select(CardDB).where(or_(*conditions)))
    for db_card in result.scalars().all():
        if find_printing(card_to_model(db_card), set_code) is not None:
            return db_card
    return None


async def upsert_card(session: AsyncSession, card: Card) -> CardDB:
    """
    Insert or refresh a catalog card.

    Cards are keyed by catalog id; printings and restrictions are
    overwritten with the latest catalog data.
    """
    existing = await get_card_by_catalog_id(session, card.catalog_id)

    if existing:
        existing.name = card.name
        existing.type = card.type
        existing.frame_type = card.frame_type
        existing.description = card.description
        existing.archetype = card.archetype
        existing.card_sets = printings_to_json(card.printings)
        existing.banlist_info = card.banlist_info()
        await session.flush()
        return existing

    db_card = CardDB(
        catalog_id=card.catalog_id,
        name=card.name,
        type=card.type,
        frame_type=card.frame_type,
        description=card.description,
        archetype=card.archetype,
        card_sets=printings_to_json(card.printings),
        banlist_info=card.banlist_info(),
    )
    session.add(db_card)
    await session.flush()
    return db_card


def card_to_model(db_card: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(
        id=db_card.id,
        catalog_id=db_card.catalog_id,
        name=db_card.name,
        type=db_card.type,
        frame_type=db_card.frame_type or "",
        restrictions=parse_banlist_info(db_card.banlist_info),
        printings=parse_printings(db_card.card_sets),
        description=db_card.description or "",
        archetype=db_card.archetype,
    )


# --- Deck Operations ---


async def create_deck(
    session: AsyncSession,
    owner_id: str,
    name: str,
    respect_banlist: bool = True,
    is_public: bool = True,
) -> DeckDB:
    """Create an empty deck."""
    deck = DeckDB(
        owner_id=owner_id,
        name=name,
        respect_banlist=respect_banlist,
        is_public=is_public,
    )
    session.add(deck)
    await session.flush()
    return deck


async def get_deck(
    session: AsyncSession, deck_id: int, for_update: bool = False
) -> DeckDB | None:
    """
    Get a deck row without its entries.

    With ``for_update`` the row is locked until the transaction ends
    (ignored by SQLite).
    """
    stmt = select(DeckDB).where(DeckDB.id == deck_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_deck_with_cards(session: AsyncSession, deck_id: int) -> DeckDB | None:
    """Get a deck with its ledger rows and their cards, freshly loaded."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.id == deck_id)
        .options(selectinload(DeckDB.entries).selectinload(DeckCardDB.card))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def update_deck(
    session: AsyncSession,
    deck: DeckDB,
    name: str | None = None,
    respect_banlist: bool | None = None,
    is_public: bool | None = None,
) -> DeckDB:
    """Update deck settings. Fields left as None are unchanged."""
    if name is not None:
        deck.name = name
    if respect_banlist is not None:
        deck.respect_banlist = respect_banlist
    if is_public is not None:
        deck.is_public = is_public
    touch_deck(deck)
    await session.flush()
    return deck


def touch_deck(deck: DeckDB) -> None:
    """Bump the deck's modification timestamp."""
    deck.updated_at = datetime.now(UTC)


async def get_deck_counts(session: AsyncSession, deck_id: int, card_id: int) -> DeckCounts:
    """
    Aggregate counts for a ledger mutation.

    Returns Main total, Extra total and copies of ``card_id`` across
    both partitions, in one query.
    """
    in_main = DeckCardDB.partition == Partition.MAIN.value
    in_extra = DeckCardDB.partition == Partition.EXTRA.value
    main = func.coalesce(func.sum(case((in_main, DeckCardDB.quantity), else_=0)), 0)
    extra = func.coalesce(func.sum(case((in_extra, DeckCardDB.quantity), else_=0)), 0)
    copies = func.coalesce(
        func.sum(case((DeckCardDB.card_id == card_id, DeckCardDB.quantity), else_=0)),
        0,
    )
    result = await session.execute(
        select(main, extra, copies).where(DeckCardDB.deck_id == deck_id)
    )
    row = result.one()
    return DeckCounts(main=int(row[0]), extra=int(row[1]), card_copies=int(row[2]))


async def get_partition_counts(session: AsyncSession, deck_id: int) -> tuple[int, int]:
    """(Main total, Extra total) for a deck."""
    counts = await get_deck_counts(session, deck_id, card_id=-1)
    return counts.main, counts.extra


async def get_deck_entry(session: AsyncSession, deck_id: int, entry_id: int) -> DeckCardDB | None:
    """Get a ledger row, scoped to its deck."""
    result = await session.execute(
        select(DeckCardDB).where(DeckCardDB.id == entry_id, DeckCardDB.deck_id == deck_id)
    )
    return result.scalar_one_or_none()


async def upsert_deck_entry(
    session: AsyncSession,
    deck_id: int,
    card_id: int,
    partition: Partition,
    quantity: int,
) -> DeckCardDB:
    """
    Add copies to a ledger row, creating it on first add.

    Quantities merge additively.
    """
    result = await session.execute(
        select(DeckCardDB).where(
            DeckCardDB.deck_id == deck_id,
            DeckCardDB.card_id == card_id,
            DeckCardDB.partition == partition.value,
        )
    )
    entry = result.scalar_one_or_none()

    if entry:
        entry.quantity += quantity
        await session.flush()
        return entry

    entry = DeckCardDB(
        deck_id=deck_id,
        card_id=card_id,
        partition=partition.value,
        quantity=quantity,
    )
    session.add(entry)
    await session.flush()
    return entry


async def delete_deck_entry(session: AsyncSession, deck_id: int, entry_id: int) -> bool:
    """
    Delete a ledger row.

    Returns True if a row was deleted.
    """
    result = await session.execute(
        delete(DeckCardDB).where(DeckCardDB.id == entry_id, DeckCardDB.deck_id == deck_id)
    )
    # rowcount is available on DELETE results; type stubs incomplete for async
    return int(result.rowcount) > 0  # type: ignore[attr-defined]


def deck_to_model(db_deck: DeckDB) -> Deck:
    """Convert a database deck (entries loaded) to a domain model."""
    entries = tuple(
        DeckCardEntry(
            id=row.id,
            deck_id=row.deck_id,
            card=card_to_model(row.card),
            partition=Partition(row.partition),
            quantity=row.quantity,
        )
        for row in sorted(db_deck.entries, key=lambda r: r.card.name)
    )
    return Deck(
        id=db_deck.id,
        owner_id=db_deck.owner_id,
        name=db_deck.name,
        respect_banlist=db_deck.respect_banlist,
        is_public=db_deck.is_public,
        entries=entries,
    )


# --- Collection Operations ---


async def add_to_collection(
    session: AsyncSession,
    owner_id: str,
    card_id: int,
    set_code: str,
    rarity: str,
    quantity: int,
    language: str,
) -> CollectionCardDB:
    """
    Add owned copies of a printing.

    Repeat adds of the same (card, set code, rarity) merge quantities;
    the language is refreshed to the latest value.
    """
    result = await session.execute(
        select(CollectionCardDB).where(
            CollectionCardDB.owner_id == owner_id,
            CollectionCardDB.card_id == card_id,
            CollectionCardDB.set_code == set_code,
            CollectionCardDB.rarity == rarity,
        )
    )
    entry = result.scalar_one_or_none()

    if entry:
        entry.quantity += quantity
        entry.language = language
        await session.flush()
        return entry

    entry = CollectionCardDB(
        owner_id=owner_id,
        card_id=card_id,
        set_code=set_code,
        rarity=rarity,
        language=language,
        quantity=quantity,
    )
    session.add(entry)
    await session.flush()
    return entry


async def get_collection(session: AsyncSession, owner_id: str) -> list[CollectionCardDB]:
    """All printings a user owns, with their cards."""
    result = await session.execute(
        select(CollectionCardDB)
        .where(CollectionCardDB.owner_id == owner_id)
        .options(selectinload(CollectionCardDB.card))
        .order_by(CollectionCardDB.id)
    )
    return list(result.scalars().all())


def collection_entry_to_model(db_entry: CollectionCardDB) -> CollectionEntry:
    """Convert a database collection row (card loaded) to a domain model."""
    return CollectionEntry(
        id=db_entry.id,
        owner_id=db_entry.owner_id,
        card=card_to_model(db_entry.card),
        set_code=db_entry.set_code,
        rarity=db_entry.rarity,
        language=db_entry.language,
        quantity=db_entry.quantity,
    )
