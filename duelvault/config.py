from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "DuelVault"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/duelvault"

    catalog_api_url: str = "https://db.ygoprodeck.com/api/v7"
    catalog_timeout_seconds: float = 30.0

    # Set directory rarely changes; refetch at most once a day
    card_sets_cache_ttl_seconds: float = 24 * 60 * 60

    # Which restriction list decks with respect_banlist=True follow (tcg, ocg, goat)
    banlist_format: str = "tcg"


settings = Settings()


# =============================================================================
# DECK CONSTRUCTION RULES
# =============================================================================

# Main Deck size bounds (the floor is a legality check, not an insert-time rule)
MIN_MAIN_DECK_SIZE = 40
MAX_MAIN_DECK_SIZE = 60

# Extra Deck upper bound
MAX_EXTRA_DECK_SIZE = 15

# Copies per ledger mutation
MIN_DECK_QUANTITY = 1
MAX_DECK_QUANTITY = 3

# Copies per collection intake
MAX_COLLECTION_QUANTITY = 100
