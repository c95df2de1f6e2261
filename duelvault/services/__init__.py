"""
DuelVault services.

Rule logic for deck construction and card-code resolution. Only the
database-free services are re-exported here; the ledger, validator and
collection intake are imported from their modules.
"""

from duelvault.services.banlist_policy import (
    DEFAULT_COPY_LIMIT,
    ceiling_for,
    copies_phrase,
    limit_for,
)
from duelvault.services.card_classifier import (
    EXTRA_DECK_FRAMES,
    classify,
    is_extra_deck_card,
)
from duelvault.services.card_set_cache import (
    CacheState,
    CardSetDirectoryCache,
    get_card_set_cache,
)
from duelvault.services.catalog_client import CatalogClient, CatalogError
from duelvault.services.set_code_resolver import (
    Language,
    Resolution,
    SetCodeResolver,
    detect_language,
    normalize_set_code,
    split_set_code,
)

__all__ = [
    "DEFAULT_COPY_LIMIT",
    "EXTRA_DECK_FRAMES",
    "CacheState",
    "CardSetDirectoryCache",
    "CatalogClient",
    "CatalogError",
    "Language",
    "Resolution",
    "SetCodeResolver",
    "ceiling_for",
    "classify",
    "copies_phrase",
    "detect_language",
    "get_card_set_cache",
    "is_extra_deck_card",
    "limit_for",
    "normalize_set_code",
    "split_set_code",
]
