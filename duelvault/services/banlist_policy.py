"""
Banlist Policy.

Translates a card's restriction status into the maximum number of copies
a deck may hold (its ceiling).
"""

from duelvault.models.card import BanlistFormat, BanStatus, Card

DEFAULT_COPY_LIMIT = 3

_CEILINGS: dict[BanStatus, int] = {
    BanStatus.FORBIDDEN: 0,
    BanStatus.LIMITED: 1,
    BanStatus.SEMI_LIMITED: 2,
    BanStatus.UNRESTRICTED: DEFAULT_COPY_LIMIT,
}


def limit_for(card: Card, banlist: BanlistFormat = BanlistFormat.TCG) -> int:
    """
    Banlist ceiling for a card.

    Returns:
        0 (Forbidden), 1 (Limited), 2 (Semi-Limited) or 3 (Unrestricted)
    """
    return _CEILINGS[card.status_for(banlist)]


def ceiling_for(
    card: Card,
    respect_banlist: bool,
    banlist: BanlistFormat = BanlistFormat.TCG,
) -> int:
    """Ceiling applied to a deck: the banlist limit, or the plain 3-copy rule."""
    if not respect_banlist:
        return DEFAULT_COPY_LIMIT
    return limit_for(card, banlist)


def copies_phrase(count: int) -> str:
    """'1 copy', '2 copies'."""
    return f"{count} cop{'ies' if count != 1 else 'y'}"
