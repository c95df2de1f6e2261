from dataclasses import dataclass

from duelvault.models.card import Card


@dataclass(frozen=True, slots=True)
class CollectionEntry:
    """
    Copies of one printing owned by a user.

    The set code is kept as printed (not normalized), so a French print
    stays distinguishable from its English counterpart.
    """

    id: int
    owner_id: str
    card: Card
    set_code: str
    rarity: str
    language: str
    quantity: int
