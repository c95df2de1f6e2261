"""
Deck Validator: read-side legality audit.

Reports whether a deck's partition sizes are tournament legal. Nothing is
written; the audit is idempotent.

Banlist compliance is deliberately not part of ``valid``: a restriction
that tightens after cards were added is reported by ``audit_banlist``
instead.
"""

from collections import defaultdict

from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.config import MAX_EXTRA_DECK_SIZE, MAX_MAIN_DECK_SIZE, MIN_MAIN_DECK_SIZE
from duelvault.db.operations import (
    deck_to_model,
    get_deck,
    get_deck_with_cards,
    get_partition_counts,
)
from duelvault.models.card import BanlistFormat, Card
from duelvault.models.deck import BanlistViolation, DeckValidation
from duelvault.models.failure import ErrorKind, Ok, Result, err
from duelvault.services.banlist_policy import ceiling_for


def check_partition_sizes(main_count: int, extra_count: int) -> DeckValidation:
    """Apply the 40-60 Main Deck and 0-15 Extra Deck bounds."""
    violations: list[str] = []

    if main_count < MIN_MAIN_DECK_SIZE:
        violations.append(f"Main Deck must have at least {MIN_MAIN_DECK_SIZE} cards")
    if main_count > MAX_MAIN_DECK_SIZE:
        violations.append(f"Main Deck cannot exceed {MAX_MAIN_DECK_SIZE} cards")
    if extra_count > MAX_EXTRA_DECK_SIZE:
        violations.append(f"Extra Deck cannot exceed {MAX_EXTRA_DECK_SIZE} cards")

    return DeckValidation(
        valid=not violations,
        violations=tuple(violations),
        main_count=main_count,
        extra_count=extra_count,
    )


async def validate_deck(session: AsyncSession, deck_id: int) -> Result[DeckValidation]:
    """Audit a stored deck's partition sizes."""
    deck = await get_deck(session, deck_id)
    if deck is None:
        return err(ErrorKind.NOT_FOUND, "Deck not found")

    main_count, extra_count = await get_partition_counts(session, deck_id)
    return Ok(check_partition_sizes(main_count, extra_count))


async def audit_banlist(
    session: AsyncSession,
    deck_id: int,
    banlist: BanlistFormat = BanlistFormat.TCG,
) -> Result[list[BanlistViolation]]:
    """
    Cards whose aggregate quantity exceeds their current ceiling.

    Uses the deck's own ``respect_banlist`` flag, so a deck that ignores the
    banlist only reports cards above the plain 3-copy rule.
    """
    db_deck = await get_deck_with_cards(session, deck_id)
    if db_deck is None:
        return err(ErrorKind.NOT_FOUND, "Deck not found")

    deck = deck_to_model(db_deck)

    # Copies aggregate across partitions, keyed by catalog id
    cards: dict[str, Card] = {}
    copies: dict[str, int] = defaultdict(int)
    for entry in deck.entries:
        cards[entry.card.catalog_id] = entry.card
        copies[entry.card.catalog_id] += entry.quantity

    violations = []
    for key, card in cards.items():
        ceiling = ceiling_for(card, deck.respect_banlist, banlist)
        if copies[key] > ceiling:
            violations.append(
                BanlistViolation(card_name=card.name, quantity=copies[key], ceiling=ceiling)
            )

    return Ok(sorted(violations, key=lambda v: v.card_name))
