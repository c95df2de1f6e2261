"""
Deck API endpoints.

Deck creation and settings, ledger mutations (add, update, remove) and the
legality audits. Every mutation goes through the DeckLedger.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.api.cards import CardResponse, card_to_response
from duelvault.api.deps import CallerId, Session, failure_response, get_deck_ledger
from duelvault.db import create_deck, deck_to_model, get_deck, get_deck_with_cards, update_deck
from duelvault.models.card import BanlistFormat, Partition
from duelvault.models.deck import Deck, DeckCardEntry
from duelvault.models.failure import ApiResponse, DeckError, Err, ErrorKind
from duelvault.services.deck_ledger import DeckLedger
from duelvault.services.deck_validator import audit_banlist, validate_deck

router = APIRouter(prefix="/decks", tags=["decks"])

DECK_NOT_FOUND = DeckError(kind=ErrorKind.NOT_FOUND, message="Deck not found")


class DeckEntryResponse(BaseModel):
    """Response model for one ledger row."""

    id: int
    card: CardResponse
    partition: Partition
    quantity: int


class DeckResponse(BaseModel):
    """Response model for a deck with its partitions."""

    id: int
    owner_id: str
    name: str
    respect_banlist: bool
    is_public: bool
    main_deck: list[DeckEntryResponse] = Field(default_factory=list)
    extra_deck: list[DeckEntryResponse] = Field(default_factory=list)
    main_count: int = 0
    extra_count: int = 0


class DeckCreateRequest(BaseModel):
    """Request model for creating a deck."""

    name: str = Field(..., min_length=1, max_length=255)
    respect_banlist: bool = True
    is_public: bool = True


class DeckUpdateRequest(BaseModel):
    """Request model for deck settings. Omitted fields are unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    respect_banlist: bool | None = None
    is_public: bool | None = None


class AddCardRequest(BaseModel):
    """Request model for adding copies of a card."""

    card_id: int
    quantity: int = Field(default=1, description="Copies to add (1-3)")
    partition: Partition = Field(
        default=Partition.MAIN,
        description="Target partition; must match the card's frame type",
    )


class UpdateQuantityRequest(BaseModel):
    """Request model for overwriting a row's quantity."""

    quantity: int = Field(..., description="New quantity (0 removes the row, max 3)")


class RemoveResponse(BaseModel):
    """Response model for removals."""

    removed: bool


class ValidationResponse(BaseModel):
    """Response model for the size audit."""

    valid: bool
    violations: list[str] = Field(default_factory=list)
    main_count: int
    extra_count: int


class BanlistViolationResponse(BaseModel):
    """A card above its current ceiling."""

    card_name: str
    quantity: int
    ceiling: int


class BanlistAuditResponse(BaseModel):
    """Response model for the banlist audit."""

    format: BanlistFormat
    compliant: bool
    violations: list[BanlistViolationResponse] = Field(default_factory=list)


def _entry_to_response(entry: DeckCardEntry) -> DeckEntryResponse:
    return DeckEntryResponse(
        id=entry.id,
        card=card_to_response(entry.card),
        partition=entry.partition,
        quantity=entry.quantity,
    )


def _deck_to_response(deck: Deck) -> DeckResponse:
    return DeckResponse(
        id=deck.id,
        owner_id=deck.owner_id,
        name=deck.name,
        respect_banlist=deck.respect_banlist,
        is_public=deck.is_public,
        main_deck=[_entry_to_response(e) for e in deck.main_deck],
        extra_deck=[_entry_to_response(e) for e in deck.extra_deck],
        main_count=deck.main_count(),
        extra_count=deck.extra_count(),
    )


async def _load_deck(session: AsyncSession, deck_id: int, caller_id: str) -> Deck | DeckError:
    db_deck = await get_deck_with_cards(session, deck_id)
    if db_deck is None:
        return DECK_NOT_FOUND
    deck = deck_to_model(db_deck)
    if not deck.is_public and deck.owner_id != caller_id:
        return DeckError(
            kind=ErrorKind.AUTHORIZATION,
            message="You do not have permission to view this deck",
        )
    return deck


async def _deck_response(
    session: AsyncSession, deck_id: int, caller_id: str
) -> ApiResponse[DeckResponse] | JSONResponse:
    loaded = await _load_deck(session, deck_id, caller_id)
    if isinstance(loaded, DeckError):
        return failure_response(loaded)
    return ApiResponse[DeckResponse].success(_deck_to_response(loaded))


@router.post(
    "",
    response_model=ApiResponse[DeckResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_new_deck(
    request: DeckCreateRequest,
    session: Session,
    caller_id: CallerId,
) -> ApiResponse[DeckResponse] | JSONResponse:
    """Create an empty deck owned by the caller."""
    db_deck = await create_deck(
        session,
        owner_id=caller_id,
        name=request.name,
        respect_banlist=request.respect_banlist,
        is_public=request.is_public,
    )
    return await _deck_response(session, db_deck.id, caller_id)


@router.get("/{deck_id}", response_model=ApiResponse[DeckResponse])
async def get_deck_by_id(
    deck_id: int,
    session: Session,
    caller_id: CallerId,
) -> ApiResponse[DeckResponse] | JSONResponse:
    """
    Get a deck with both partitions.

    Private decks are only visible to their owner.
    """
    return await _deck_response(session, deck_id, caller_id)


@router.patch("/{deck_id}", response_model=ApiResponse[DeckResponse])
async def update_deck_settings(
    deck_id: int,
    request: DeckUpdateRequest,
    session: Session,
    caller_id: CallerId,
) -> ApiResponse[DeckResponse] | JSONResponse:
    """
    Rename a deck or change its banlist and visibility flags.

    Turning ``respect_banlist`` on does not remove cards already in the
    deck; see the banlist audit.
    """
    db_deck = await get_deck(session, deck_id)
    if db_deck is None:
        return failure_response(DECK_NOT_FOUND)
    if db_deck.owner_id != caller_id:
        return failure_response(
            DeckError(
                kind=ErrorKind.AUTHORIZATION,
                message="You do not have permission to modify this deck",
            )
        )

    await update_deck(
        session,
        db_deck,
        name=request.name,
        respect_banlist=request.respect_banlist,
        is_public=request.is_public,
    )
    return await _deck_response(session, deck_id, caller_id)


@router.post(
    "/{deck_id}/cards",
    response_model=ApiResponse[DeckResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_card_to_deck(
    deck_id: int,
    request: AddCardRequest,
    session: Session,
    caller_id: CallerId,
    ledger: Annotated[DeckLedger, Depends(get_deck_ledger)],
) -> ApiResponse[DeckResponse] | JSONResponse:
    """
    Add copies of a card to a deck.

    Rejections carry the rule that was violated (placement, size,
    forbidden, copy limit).
    """
    result = await ledger.add_card(
        deck_id,
        request.card_id,
        request.quantity,
        request.partition,
        caller_id,
    )
    if isinstance(result, Err):
        return failure_response(result.error)
    return await _deck_response(session, deck_id, caller_id)


@router.patch("/{deck_id}/cards/{entry_id}", response_model=ApiResponse[DeckResponse])
async def update_card_quantity(
    deck_id: int,
    entry_id: int,
    request: UpdateQuantityRequest,
    session: Session,
    caller_id: CallerId,
    ledger: Annotated[DeckLedger, Depends(get_deck_ledger)],
) -> ApiResponse[DeckResponse] | JSONResponse:
    """Overwrite the quantity of a deck row. Zero removes the row."""
    result = await ledger.update_quantity(deck_id, entry_id, request.quantity, caller_id)
    if isinstance(result, Err):
        return failure_response(result.error)
    return await _deck_response(session, deck_id, caller_id)


@router.delete("/{deck_id}/cards/{entry_id}", response_model=ApiResponse[RemoveResponse])
async def remove_card_from_deck(
    deck_id: int,
    entry_id: int,
    caller_id: CallerId,
    ledger: Annotated[DeckLedger, Depends(get_deck_ledger)],
) -> ApiResponse[RemoveResponse] | JSONResponse:
    """Remove a row from a deck. ``removed`` is False if no row matched."""
    result = await ledger.remove_card(deck_id, entry_id, caller_id)
    if isinstance(result, Err):
        return failure_response(result.error)
    return ApiResponse[RemoveResponse].success(RemoveResponse(removed=result.value))


@router.get("/{deck_id}/validation", response_model=ApiResponse[ValidationResponse])
async def get_deck_validation(
    deck_id: int,
    session: Session,
    caller_id: CallerId,
) -> ApiResponse[ValidationResponse] | JSONResponse:
    """
    Audit the deck's partition sizes.

    Main Deck 40-60, Extra Deck 0-15. Banlist compliance is reported by
    the banlist audit, not here.
    """
    loaded = await _load_deck(session, deck_id, caller_id)
    if isinstance(loaded, DeckError):
        return failure_response(loaded)

    result = await validate_deck(session, deck_id)
    if isinstance(result, Err):
        return failure_response(result.error)

    validation = result.value
    return ApiResponse[ValidationResponse].success(
        ValidationResponse(
            valid=validation.valid,
            violations=list(validation.violations),
            main_count=validation.main_count,
            extra_count=validation.extra_count,
        )
    )


@router.get("/{deck_id}/banlist-audit", response_model=ApiResponse[BanlistAuditResponse])
async def get_banlist_audit(
    deck_id: int,
    session: Session,
    caller_id: CallerId,
    banlist: Annotated[BanlistFormat, Query(alias="format")] = BanlistFormat.TCG,
) -> ApiResponse[BanlistAuditResponse] | JSONResponse:
    """Cards whose copies exceed their current ceiling."""
    loaded = await _load_deck(session, deck_id, caller_id)
    if isinstance(loaded, DeckError):
        return failure_response(loaded)

    result = await audit_banlist(session, deck_id, banlist)
    if isinstance(result, Err):
        return failure_response(result.error)

    return ApiResponse[BanlistAuditResponse].success(
        BanlistAuditResponse(
            format=banlist,
            compliant=not result.value,
            violations=[
                BanlistViolationResponse(
                    card_name=v.card_name,
                    quantity=v.quantity,
                    ceiling=v.ceiling,
                )
                for v in result.value
            ],
        )
    )
