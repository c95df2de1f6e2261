"""
Collection API endpoints.

Adds owned printings by the code printed on the card and lists a user's
collection.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from duelvault.api.cards import CardResponse, card_to_response
from duelvault.api.deps import CallerId, Session, failure_response, get_set_code_resolver
from duelvault.config import MAX_COLLECTION_QUANTITY
from duelvault.db import collection_entry_to_model, get_collection
from duelvault.models.collection import CollectionEntry
from duelvault.models.failure import ApiResponse, Err
from duelvault.services.collection import add_card_by_code
from duelvault.services.set_code_resolver import SetCodeResolver

router = APIRouter(prefix="/collection", tags=["collection"])


class CollectionEntryResponse(BaseModel):
    """Response model for an owned printing."""

    id: int
    card: CardResponse
    set_code: str
    rarity: str
    language: str
    quantity: int


class CollectionResponse(BaseModel):
    """Response model for collection data."""

    user_id: str
    cards: list[CollectionEntryResponse] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0


class AddByCodeRequest(BaseModel):
    """Request model for adding a printing by its set code."""

    set_code: str = Field(
        ...,
        description="Code printed on the card",
        examples=["LDK2-FRK40"],
    )
    rarity: str = Field(..., examples=["Common"])
    quantity: int = Field(default=1, description=f"Copies to add (1-{MAX_COLLECTION_QUANTITY})")
    language: str | None = Field(
        default=None,
        description="Print language; detected from the set code when omitted",
    )
    catalog_id: str | None = Field(
        default=None,
        description="Catalog id, tried before the set code",
    )


def _entry_to_response(entry: CollectionEntry) -> CollectionEntryResponse:
    return CollectionEntryResponse(
        id=entry.id,
        card=card_to_response(entry.card),
        set_code=entry.set_code,
        rarity=entry.rarity,
        language=entry.language,
        quantity=entry.quantity,
    )


@router.post(
    "/cards",
    response_model=ApiResponse[CollectionEntryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_collection_card(
    request: AddByCodeRequest,
    session: Session,
    caller_id: CallerId,
    resolver: Annotated[SetCodeResolver, Depends(get_set_code_resolver)],
) -> ApiResponse[CollectionEntryResponse] | JSONResponse:
    """
    Add copies of a printing to the caller's collection.

    Repeat adds of the same code and rarity merge quantities.
    """
    result = await add_card_by_code(
        session,
        resolver,
        owner_id=caller_id,
        set_code=request.set_code,
        rarity=request.rarity,
        quantity=request.quantity,
        language=request.language,
        catalog_id=request.catalog_id,
    )
    if isinstance(result, Err):
        return failure_response(result.error)
    return ApiResponse[CollectionEntryResponse].success(_entry_to_response(result.value))


@router.get("/cards", response_model=ApiResponse[CollectionResponse])
async def list_collection_cards(
    session: Session,
    caller_id: CallerId,
) -> ApiResponse[CollectionResponse]:
    """The caller's owned printings."""
    rows = await get_collection(session, caller_id)
    entries = [_entry_to_response(collection_entry_to_model(row)) for row in rows]

    return ApiResponse[CollectionResponse].success(
        CollectionResponse(
            user_id=caller_id,
            cards=entries,
            total_cards=sum(e.quantity for e in entries),
            unique_cards=len({e.card.catalog_id for e in entries}),
        )
    )
