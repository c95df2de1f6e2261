"""
Collection Intake.

Adds owned printings to a user's collection from the code printed on the
card. The code is resolved against the catalog, the rarity is checked
against the matched printing, and the card is cached in the repository
before the collection row is merged.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.config import MAX_COLLECTION_QUANTITY
from duelvault.db.operations import add_to_collection, card_to_model, upsert_card
from duelvault.models.collection import CollectionEntry
from duelvault.models.failure import Err, ErrorKind, Ok, Result, err
from duelvault.services.set_code_resolver import (
    Resolution,
    SetCodeResolver,
    detect_language,
    rarities_for_set_code,
)

logger = logging.getLogger(__name__)


async def _resolve(
    resolver: SetCodeResolver, set_code: str, catalog_id: str | None
) -> Result[Resolution]:
    # An explicit catalog id wins; the printed code is the fallback
    if catalog_id and catalog_id.strip():
        by_id = await resolver.resolve(catalog_id)
        if by_id.is_ok:
            return by_id
    return await resolver.resolve(set_code)


async def add_card_by_code(
    session: AsyncSession,
    resolver: SetCodeResolver,
    owner_id: str,
    set_code: str,
    rarity: str,
    quantity: int,
    language: str | None = None,
    catalog_id: str | None = None,
) -> Result[CollectionEntry]:
    """
    Add copies of a printing to a user's collection.

    Args:
        session: Database session (flushed, not committed)
        resolver: Resolver for the printed code
        owner_id: Collecting user
        set_code: Code as printed on the card, e.g. "LDK2-FRK40"
        rarity: Rarity of the owned copies, e.g. "Common"
        quantity: Copies to add (1-100)
        language: Print language. Detected from the code when omitted
        catalog_id: Catalog id, tried before the printed code

    Returns:
        Ok(merged collection entry) or Err (VALIDATION / RESOLUTION)
    """
    code = set_code.strip().upper()
    wanted_rarity = rarity.strip()
    if not code or not wanted_rarity:
        return err(ErrorKind.VALIDATION, "set_code and rarity are required")

    if not 1 <= quantity <= MAX_COLLECTION_QUANTITY:
        return err(
            ErrorKind.VALIDATION,
            f"quantity must be between 1 and {MAX_COLLECTION_QUANTITY}",
        )

    resolved = await _resolve(resolver, code, catalog_id)
    if isinstance(resolved, Err):
        return resolved
    card = resolved.value.card

    # Cards without printings in the catalog accept any rarity
    valid_rarities = rarities_for_set_code(card, code)
    if valid_rarities:
        matched = next((r for r in valid_rarities if r.lower() == wanted_rarity.lower()), None)
        if matched is None:
            return err(
                ErrorKind.VALIDATION,
                f'Rarity "{wanted_rarity}" is not available for {code}. '
                f"Valid rarities: {', '.join(dict.fromkeys(valid_rarities))}",
            )
        wanted_rarity = matched

    print_language = (language or detect_language(code).value).strip().upper()

    db_card = await upsert_card(session, card)
    db_entry = await add_to_collection(
        session,
        owner_id=owner_id,
        card_id=db_card.id,
        set_code=code,
        rarity=wanted_rarity,
        quantity=quantity,
        language=print_language,
    )

    logger.info(
        "COLLECTION_CARD_ADDED",
        extra={
            "owner_id": owner_id,
            "card_id": db_card.id,
            "set_code": code,
            "language": print_language,
            "quantity": quantity,
        },
    )

    return Ok(
        CollectionEntry(
            id=db_entry.id,
            owner_id=owner_id,
            card=card_to_model(db_card),
            set_code=db_entry.set_code,
            rarity=db_entry.rarity,
            language=db_entry.language,
            quantity=db_entry.quantity,
        )
    )
