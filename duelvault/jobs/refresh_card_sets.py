"""
Refresh the catalog set directory.

Run this job to check that the catalog is reachable and that set codes
can be resolved.
"""

import asyncio
import logging
import sys

from duelvault.services.card_set_cache import CardSetDirectoryCache, get_card_set_cache

logger = logging.getLogger(__name__)


async def run_refresh(cache: CardSetDirectoryCache | None = None) -> int:
    """
    Force a refetch of the set directory.

    Returns:
        Number of sets now cached (0 if the catalog was unreachable)
    """
    cache = cache or get_card_set_cache()
    cache.invalidate()

    logger.info("Refreshing card set directory...")
    directory = await cache.get()

    if not directory:
        logger.error("Card set directory is empty; catalog unreachable?")
    else:
        logger.info("Cached %d card sets", len(directory))
    return len(directory)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if asyncio.run(run_refresh()) == 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
