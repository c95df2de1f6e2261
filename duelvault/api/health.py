"""
Health check endpoints.

Provides liveness and readiness probes with database connectivity checks
and the state of the set directory cache.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from duelvault.api.deps import Session
from duelvault.services.card_set_cache import CardSetDirectoryCache, get_card_set_cache

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    card_sets: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Session,
    card_sets: Annotated[CardSetDirectoryCache, Depends(get_card_set_cache)],
) -> HealthResponse:
    """
    Readiness probe.

    Checks database connectivity. Returns 503 if the database is
    unavailable. A cold set directory does not fail readiness; codes are
    resolved once the catalog answers.
    """
    cache_state = card_sets.state.value
    try:
        await session.execute(text("SELECT 1"))
        return HealthResponse(status="ready", database="connected", card_sets=cache_state)
    except (SQLAlchemyError, OSError):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected", card_sets=cache_state)
