"""
Card Set Directory Cache.

Read-mostly cache of the catalog's set directory (set prefix -> set name).

States:
- cold: never fetched successfully
- warm: snapshot younger than the TTL
- expired: snapshot older than the TTL, or invalidated

INVARIANTS:
- Refreshes are lazy: they happen on the first access after expiry
- Concurrent refreshes collapse into one in-flight fetch
- A failed refresh never raises; it serves the previous snapshot (or empty)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from functools import lru_cache

from duelvault.config import settings
from duelvault.models.card_set import EMPTY_DIRECTORY, CardSet, CardSetDirectory
from duelvault.services.catalog_client import CatalogClient, CatalogError

logger = logging.getLogger(__name__)

SetFetcher = Callable[[], Awaitable[list[CardSet]]]


class CacheState(str, Enum):
    """Lifecycle state of the cached snapshot."""

    COLD = "cold"
    WARM = "warm"
    EXPIRED = "expired"


class CardSetDirectoryCache:
    """
    TTL cache with single-flight refresh and stale fallback.

    Args:
        fetcher: Coroutine function returning the full set list
        ttl_seconds: Snapshot lifetime. Defaults to settings (24 hours)
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        fetcher: SetFetcher,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.card_sets_cache_ttl_seconds
        self._clock = clock
        self._snapshot: CardSetDirectory | None = None
        self._fetched_at: float | None = None
        self._lock = asyncio.Lock()
        self.fetch_count = 0

    @property
    def state(self) -> CacheState:
        if self._snapshot is None:
            return CacheState.COLD
        if self._fetched_at is None or self._clock() - self._fetched_at >= self._ttl:
            return CacheState.EXPIRED
        return CacheState.WARM

    @property
    def snapshot(self) -> CardSetDirectory:
        """Last known directory without triggering a refresh."""
        return self._snapshot or EMPTY_DIRECTORY

    async def get(self) -> CardSetDirectory:
        """
        Return the directory, refreshing it first if cold or expired.

        Never raises for catalog failures.
        """
        if self.state is CacheState.WARM:
            return self.snapshot

        async with self._lock:
            # A concurrent caller may have refreshed while we waited
            if self.state is CacheState.WARM:
                return self.snapshot
            return await self._refresh()

    def invalidate(self) -> None:
        """Force the next access to refetch. The snapshot stays as fallback."""
        self._fetched_at = None

    def clear(self) -> None:
        """Drop the snapshot entirely (back to cold)."""
        self._snapshot = None
        self._fetched_at = None

    async def _refresh(self) -> CardSetDirectory:
        previous_state = self.state
        self.fetch_count += 1
        try:
            sets = await self._fetcher()
        except CatalogError as e:
            logger.warning(
                "CARD_SETS_REFRESH_FAILED",
                extra={"error": str(e), "previous_state": previous_state.value},
            )
            return self.snapshot

        if not sets:
            # An empty directory would make every code unresolvable until expiry
            logger.warning(
                "CARD_SETS_REFRESH_EMPTY",
                extra={"previous_state": previous_state.value},
            )
            return self.snapshot

        self._snapshot = CardSetDirectory(sets=tuple(sets))
        self._fetched_at = self._clock()
        logger.info(
            "CARD_SETS_REFRESHED",
            extra={"set_count": len(sets), "previous_state": previous_state.value},
        )
        return self._snapshot


@lru_cache(maxsize=1)
def get_card_set_cache() -> CardSetDirectoryCache:
    """
    Application-wide cache instance.

    Exposed as a provider so FastAPI dependencies and tests can override it.
    """
    return CardSetDirectoryCache(CatalogClient().fetch_card_sets)
