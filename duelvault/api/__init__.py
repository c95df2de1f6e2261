from duelvault.api.cards import router as cards_router
from duelvault.api.collection import router as collection_router
from duelvault.api.decks import router as decks_router
from duelvault.api.health import router as health_router

__all__ = [
    "cards_router",
    "collection_router",
    "decks_router",
    "health_router",
]
