from duelvault.db.database import get_session, init_db
from duelvault.db.operations import (
    add_to_collection,
    card_to_model,
    collection_entry_to_model,
    create_deck,
    deck_to_model,
    delete_deck_entry,
    find_card_by_set_code,
    get_card,
    get_card_by_catalog_id,
    get_collection,
    get_deck,
    get_deck_counts,
    get_deck_entry,
    get_deck_with_cards,
    get_partition_counts,
    update_deck,
    upsert_card,
    upsert_deck_entry,
)

__all__ = [
    "add_to_collection",
    "card_to_model",
    "collection_entry_to_model",
    "create_deck",
    "deck_to_model",
    "delete_deck_entry",
    "find_card_by_set_code",
    "get_card",
    "get_card_by_catalog_id",
    "get_collection",
    "get_deck",
    "get_deck_counts",
    "get_deck_entry",
    "get_deck_with_cards",
    "get_partition_counts",
    "get_session",
    "init_db",
    "update_deck",
    "upsert_card",
    "upsert_deck_entry",
]
