"""
Card lookup endpoints.

Resolves what a user types (catalog id or printed set code) to a catalog
card and caches the card in the repository so decks can reference it.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from duelvault.api.deps import Session, failure_response, get_set_code_resolver
from duelvault.db import upsert_card
from duelvault.models.card import BanlistFormat, Card, CardPrinting
from duelvault.models.failure import ApiResponse, Err
from duelvault.services.card_classifier import classify
from duelvault.services.set_code_resolver import SetCodeResolver, normalize_set_code

router = APIRouter(prefix="/cards", tags=["cards"])


class PrintingResponse(BaseModel):
    """One printing of a card."""

    set_code: str
    set_name: str
    set_rarity: str = ""
    set_rarity_code: str = ""


class CardResponse(BaseModel):
    """Response model for a card."""

    id: int | None = None
    catalog_id: str
    name: str
    type: str
    frame_type: str
    partition: str
    ban_status: dict[str, str] = Field(
        default_factory=dict,
        description="Restriction status per banlist format (tcg, ocg, goat)",
    )
    archetype: str | None = None


class CardLookupResponse(BaseModel):
    """Response model for a resolved card code."""

    card: CardResponse
    matched_printing: PrintingResponse | None = None
    detected_language: str
    original_code: str
    normalized_code: str


class CardSetResponse(BaseModel):
    """Response model for a catalog set."""

    set_code: str
    set_name: str
    num_of_cards: int | None = None


def card_to_response(card: Card) -> CardResponse:
    return CardResponse(
        id=card.id,
        catalog_id=card.catalog_id,
        name=card.name,
        type=card.type,
        frame_type=card.frame_type,
        partition=classify(card.frame_type).value,
        ban_status={fmt.value: card.status_for(fmt).value for fmt in BanlistFormat},
        archetype=card.archetype,
    )


def printing_to_response(printing: CardPrinting) -> PrintingResponse:
    return PrintingResponse(
        set_code=printing.set_code,
        set_name=printing.set_name,
        set_rarity=printing.set_rarity,
        set_rarity_code=printing.set_rarity_code,
    )


@router.get("/search", response_model=ApiResponse[CardLookupResponse])
async def search_card(
    code: Annotated[str, Query(description="Catalog id or printed set code, e.g. LDK2-FRK40")],
    session: Session,
    resolver: Annotated[SetCodeResolver, Depends(get_set_code_resolver)],
) -> ApiResponse[CardLookupResponse] | JSONResponse:
    """
    Resolve a catalog id or set code to a card.

    Localized codes are matched through their English form; the detected
    language always comes from the code as typed.
    """
    result = await resolver.resolve(code)
    if isinstance(result, Err):
        return failure_response(result.error)

    resolution = result.value
    db_card = await upsert_card(session, resolution.card)

    card = card_to_response(resolution.card)
    card.id = db_card.id

    return ApiResponse[CardLookupResponse].success(
        CardLookupResponse(
            card=card,
            matched_printing=(
                printing_to_response(resolution.matched_printing)
                if resolution.matched_printing
                else None
            ),
            detected_language=resolution.detected_language.value,
            original_code=resolution.original_code,
            normalized_code=normalize_set_code(resolution.original_code),
        )
    )


@router.get("/sets", response_model=ApiResponse[list[CardSetResponse]])
async def list_card_sets(
    resolver: Annotated[SetCodeResolver, Depends(get_set_code_resolver)],
) -> ApiResponse[list[CardSetResponse]]:
    """
    The catalog's set directory (cached).

    Empty when the catalog has never been reachable.
    """
    directory = await resolver.get_card_sets()
    return ApiResponse[list[CardSetResponse]].success(
        [
            CardSetResponse(
                set_code=card_set.set_code,
                set_name=card_set.set_name,
                num_of_cards=card_set.num_of_cards,
            )
            for card_set in directory.sets
        ]
    )
