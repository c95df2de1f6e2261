"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    Local copy of a catalog card.

    Cards are cached here when first resolved so deck rules never
    depend on the catalog being reachable.
    """

    __tablename__ = "cards"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    catalog_id: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    type: Mapped[str] = mapped_column(String(100))
    frame_type: Mapped[str] = mapped_column(String(50), index=True, default="")
    description: Mapped[str] = mapped_column(Text, default="")
    archetype: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Catalog-shaped JSON: [{"set_code", "set_name", "set_rarity", ...}]
    card_sets: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    # {"ban_tcg": "Limited", ...}
    banlist_info: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<CardDB(catalog_id={self.catalog_id}, name={self.name})>"


class DeckDB(Base):
    """A user's deck."""

    __tablename__ = "decks"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    respect_banlist: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    entries: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, owner_id={self.owner_id}, name={self.name})>"


class DeckCardDB(Base):
    """
    Ledger row for a card in one partition of a deck.

    At most one row per (deck, card, partition).
    """

    __tablename__ = "deck_cards"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_id", "partition", name="uq_deck_card_partition"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    partition: Mapped[str] = mapped_column(String(10))
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="entries")
    card: Mapped["CardDB"] = relationship()

    def __repr__(self) -> str:
        return f"<DeckCardDB(deck={self.deck_id}, card={self.card_id}, qty={self.quantity})>"


class CollectionCardDB(Base):
    """
    A printing owned by a user.

    The set code is stored as printed (e.g. "LDK2-FRK40"), with the
    language detected from it.
    """

    __tablename__ = "collection_cards"
    __table_args__ = (
        UniqueConstraint(
            "owner_id", "card_id", "set_code", "rarity", name="uq_owner_card_printing"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    set_code: Mapped[str] = mapped_column(String(50))
    rarity: Mapped[str] = mapped_column(String(50))
    language: Mapped[str] = mapped_column(String(5), default="EN")
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    card: Mapped["CardDB"] = relationship()

    def __repr__(self) -> str:
        return f"<CollectionCardDB(owner={self.owner_id}, code={self.set_code})>"
