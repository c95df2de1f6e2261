from dataclasses import dataclass, field

from duelvault.models.card import Card, Partition


@dataclass(frozen=True, slots=True)
class DeckCardEntry:
    """
    One ledger row: copies of a card in one partition of a deck.

    Attributes:
        id: Entry id
        deck_id: Owning deck
        card: The card
        partition: Main or Extra
        quantity: Copies in this partition (1-3)
    """

    id: int
    deck_id: int
    card: Card
    partition: Partition
    quantity: int


@dataclass(frozen=True, slots=True)
class Deck:
    """
    A user's deck.

    Attributes:
        id: Deck id
        owner_id: Owning user
        name: Deck name
        respect_banlist: When True, copy ceilings follow the banlist
        is_public: Visible to other users
        entries: Ledger rows across both partitions
    """

    id: int
    owner_id: str
    name: str
    respect_banlist: bool = True
    is_public: bool = True
    entries: tuple[DeckCardEntry, ...] = field(default_factory=tuple)

    @property
    def main_deck(self) -> tuple[DeckCardEntry, ...]:
        return tuple(e for e in self.entries if e.partition is Partition.MAIN)

    @property
    def extra_deck(self) -> tuple[DeckCardEntry, ...]:
        return tuple(e for e in self.entries if e.partition is Partition.EXTRA)

    def main_count(self) -> int:
        """Total cards in the Main Deck."""
        return sum(e.quantity for e in self.main_deck)

    def extra_count(self) -> int:
        """Total cards in the Extra Deck."""
        return sum(e.quantity for e in self.extra_deck)

    def copies_of(self, card_id: int) -> int:
        """Copies of a card across both partitions."""
        return sum(e.quantity for e in self.entries if e.card.id == card_id)


@dataclass(frozen=True, slots=True)
class DeckCounts:
    """Aggregate counts read before a ledger mutation."""

    main: int
    extra: int
    card_copies: int

    def for_partition(self, partition: Partition) -> int:
        return self.main if partition is Partition.MAIN else self.extra


@dataclass(frozen=True, slots=True)
class DeckValidation:
    """Result of auditing a deck's partition sizes."""

    valid: bool
    violations: tuple[str, ...]
    main_count: int
    extra_count: int


@dataclass(frozen=True, slots=True)
class BanlistViolation:
    """A card whose aggregate quantity exceeds its current ceiling."""

    card_name: str
    quantity: int
    ceiling: int
