from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CardSet:
    """
    A set from the catalog's set directory.

    Attributes:
        set_code: Set prefix as printed (e.g., "LDK2")
        set_name: Full set name (e.g., "Legendary Decks II")
        num_of_cards: Cards in the set, if known
        tcg_date: TCG release date as published, if known
    """

    set_code: str
    set_name: str
    num_of_cards: int | None = None
    tcg_date: str | None = None


@dataclass(frozen=True, slots=True)
class CardSetDirectory:
    """Immutable snapshot of the catalog's set directory."""

    sets: tuple[CardSet, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.sets)

    def __bool__(self) -> bool:
        return bool(self.sets)

    def name_for(self, prefix: str) -> str | None:
        """Full set name for a set prefix (case-insensitive), or None."""
        wanted = prefix.strip().lower()
        for card_set in self.sets:
            if card_set.set_code.lower() == wanted:
                return card_set.set_name
        return None

    def similar_codes(self, prefix: str, limit: int = 5) -> tuple[str, ...]:
        """Set codes sharing the first two characters of ``prefix``."""
        stem = prefix.strip()[:2].upper()
        if not stem:
            return ()
        similar: list[str] = []
        for card_set in self.sets:
            if card_set.set_code.upper().startswith(stem) and card_set.set_code not in similar:
                similar.append(card_set.set_code)
                if len(similar) == limit:
                    break
        return tuple(similar)


EMPTY_DIRECTORY = CardSetDirectory()
