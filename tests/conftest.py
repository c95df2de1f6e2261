from collections.abc import Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from duelvault.db.database import get_session
from duelvault.main import app
from duelvault.models.card import BanlistFormat, BanStatus, Card, CardPrinting
from duelvault.models.db import Base
from duelvault.services.card_set_cache import get_card_set_cache
from duelvault.services.deck_ledger import get_deck_locks


@pytest.fixture(autouse=True)
def reset_providers():
    """Drop the application-wide cache and lock registry between tests."""
    get_card_set_cache.cache_clear()
    get_deck_locks.cache_clear()
    yield
    get_card_set_cache.cache_clear()
    get_deck_locks.cache_clear()


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session_factory(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    """Create a database session for testing."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_card() -> Callable[..., Card]:
    """Build catalog cards with sensible defaults."""

    def _make(
        name: str = "Blue-Eyes White Dragon",
        catalog_id: str = "89631139",
        frame_type: str = "normal",
        card_type: str = "Normal Monster",
        tcg: BanStatus | None = None,
        printings: tuple[CardPrinting, ...] = (),
    ) -> Card:
        restrictions = {BanlistFormat.TCG: tcg} if tcg else {}
        return Card(
            catalog_id=catalog_id,
            name=name,
            type=card_type,
            frame_type=frame_type,
            restrictions=restrictions,
            printings=printings,
        )

    return _make


@pytest.fixture
def catalog_card_payload() -> dict:
    """A cardinfo.php record as the catalog returns it."""
    return {
        "id": 40044918,
        "name": "Elemental HERO Stratos",
        "type": "Effect Monster",
        "frameType": "effect",
        "desc": "When this card is Normal or Special Summoned: You can activate 1 of these effects.",
        "archetype": "Elemental HERO",
        "card_sets": [
            {
                "set_name": "Legendary Decks II",
                "set_code": "LDK2-ENK40",
                "set_rarity": "Common",
                "set_rarity_code": "(C)",
            },
            {
                "set_name": "Hidden Arsenal 2",
                "set_code": "HA02-EN026",
                "set_rarity": "Secret Rare",
                "set_rarity_code": "(ScR)",
            },
        ],
        "banlist_info": {"ban_tcg": "Limited", "ban_ocg": "Limited"},
    }


@pytest.fixture
def card_sets_payload() -> list[dict]:
    """A cardsets.php response."""
    return [
        {"set_name": "Legendary Decks II", "set_code": "LDK2", "num_of_cards": 138},
        {"set_name": "Legend of Blue Eyes White Dragon", "set_code": "LOB", "num_of_cards": 126},
        {"set_name": "Hidden Arsenal 2", "set_code": "HA02", "num_of_cards": 30},
        {"set_name": "Legendary Duelists", "set_code": "LEDU", "num_of_cards": 50},
    ]


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""
    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
