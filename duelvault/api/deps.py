"""
Shared FastAPI dependencies.

Providers for the caller identity, the resolver and the ledger, plus the
conversion of domain errors into the response envelope.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db.database import get_session
from duelvault.models.failure import DeckError
from duelvault.services.card_set_cache import CardSetDirectoryCache, get_card_set_cache
from duelvault.services.catalog_client import CatalogClient
from duelvault.services.deck_ledger import DeckLedger, DeckLockRegistry, get_deck_locks
from duelvault.services.set_code_resolver import SetCodeResolver


async def get_caller_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """
    Identity of the calling user.

    Authentication happens upstream; this service trusts the forwarded header.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    return x_user_id.strip()


def get_catalog_client() -> CatalogClient:
    return CatalogClient()


def get_set_code_resolver(
    catalog: Annotated[CatalogClient, Depends(get_catalog_client)],
    card_sets: Annotated[CardSetDirectoryCache, Depends(get_card_set_cache)],
) -> SetCodeResolver:
    return SetCodeResolver(catalog, card_sets)


def get_deck_ledger(
    session: Annotated[AsyncSession, Depends(get_session)],
    locks: Annotated[DeckLockRegistry, Depends(get_deck_locks)],
) -> DeckLedger:
    return DeckLedger(session, locks)


def failure_response(error: DeckError) -> JSONResponse:
    """Envelope a domain error with its HTTP status."""
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_response().model_dump(mode="json"),
    )


CallerId = Annotated[str, Depends(get_caller_id)]
Session = Annotated[AsyncSession, Depends(get_session)]
