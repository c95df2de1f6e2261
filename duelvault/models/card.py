"""
Card Models.

Catalog cards as the engine sees them: identity, frame category (which
drives deck partition), per-format restriction status and known printings.
All models are frozen.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Partition(str, Enum):
    """The two disjoint zones of a deck."""

    MAIN = "main"
    EXTRA = "extra"


class BanlistFormat(str, Enum):
    """Restriction lists published by the catalog."""

    TCG = "tcg"
    OCG = "ocg"
    GOAT = "goat"


class BanStatus(str, Enum):
    """Restriction status of a card on one banlist."""

    UNRESTRICTED = "Unrestricted"
    SEMI_LIMITED = "Semi-Limited"
    LIMITED = "Limited"
    FORBIDDEN = "Forbidden"

    @classmethod
    def from_catalog(cls, value: str | None) -> "BanStatus":
        """
        Parse a catalog status string.

        The catalog spells Forbidden as "Banned". Unknown or missing
        values read as Unrestricted.
        """
        if not value:
            return cls.UNRESTRICTED
        normalized = value.strip().lower()
        if normalized in ("banned", "forbidden"):
            return cls.FORBIDDEN
        if normalized == "limited":
            return cls.LIMITED
        if normalized in ("semi-limited", "semi limited", "semilimited"):
            return cls.SEMI_LIMITED
        return cls.UNRESTRICTED


@dataclass(frozen=True, slots=True)
class CardPrinting:
    """
    One printing of a card.

    Attributes:
        set_code: Printed code in English form (e.g., "LDK2-ENK40")
        set_name: Full name of the issuing set
        set_rarity: Rarity name (e.g., "Ultra Rare")
        set_rarity_code: Short rarity code (e.g., "(UR)")
    """

    set_code: str
    set_name: str
    set_rarity: str = ""
    set_rarity_code: str = ""


@dataclass(frozen=True, slots=True)
class Card:
    """
    A catalog card.

    Attributes:
        catalog_id: Catalog identifier (stable across printings)
        name: Display name
        type: Category (e.g., "Normal Monster", "Spell Card")
        frame_type: Frame category (normal, effect, fusion, synchro, xyz, link, spell, ...)
        restrictions: Banlist format -> restriction status (absent = Unrestricted)
        printings: Known printings
        id: Repository id once the card is cached locally
    """

    catalog_id: str
    name: str
    type: str
    frame_type: str
    restrictions: dict[BanlistFormat, BanStatus] = field(default_factory=dict)
    printings: tuple[CardPrinting, ...] = field(default_factory=tuple)
    description: str = ""
    archetype: str | None = None
    id: int | None = None

    def status_for(self, banlist: BanlistFormat = BanlistFormat.TCG) -> BanStatus:
        """Restriction status on the given banlist."""
        return self.restrictions.get(banlist, BanStatus.UNRESTRICTED)

    def banlist_info(self) -> dict[str, str]:
        """Restrictions in catalog shape ({"ban_tcg": "Limited", ...})."""
        return {
            f"ban_{fmt.value}": status.value
            for fmt, status in self.restrictions.items()
            if status is not BanStatus.UNRESTRICTED
        }


def parse_banlist_info(info: dict[str, Any] | None) -> dict[BanlistFormat, BanStatus]:
    """Parse catalog ``banlist_info`` ({"ban_tcg": "Banned", ...})."""
    restrictions: dict[BanlistFormat, BanStatus] = {}
    if not info:
        return restrictions
    for fmt in BanlistFormat:
        status = BanStatus.from_catalog(info.get(f"ban_{fmt.value}"))
        if status is not BanStatus.UNRESTRICTED:
            restrictions[fmt] = status
    return restrictions


def parse_printings(card_sets: list[dict[str, Any]] | None) -> tuple[CardPrinting, ...]:
    """Parse catalog ``card_sets`` entries."""
    return tuple(
        CardPrinting(
            set_code=str(entry.get("set_code", "")),
            set_name=str(entry.get("set_name", "")),
            set_rarity=str(entry.get("set_rarity", "")),
            set_rarity_code=str(entry.get("set_rarity_code", "")),
        )
        for entry in card_sets or []
        if entry.get("set_code")
    )


def printings_to_json(printings: tuple[CardPrinting, ...]) -> list[dict[str, str]]:
    """Serialize printings back to catalog shape for storage."""
    return [
        {
            "set_code": p.set_code,
            "set_name": p.set_name,
            "set_rarity": p.set_rarity,
            "set_rarity_code": p.set_rarity_code,
        }
        for p in printings
    ]
