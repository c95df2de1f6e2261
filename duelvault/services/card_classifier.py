"""
Card Classifier.

Maps a card's frame category to the deck partition it belongs in.
Fusion, Synchro, Xyz and Link monsters live in the Extra Deck;
everything else, including unknown frames, goes to the Main Deck.
"""

from duelvault.models.card import Partition

EXTRA_DECK_FRAMES = frozenset({"fusion", "synchro", "xyz", "link"})


def is_extra_deck_card(frame_type: str | None) -> bool:
    """True if the frame category belongs in the Extra Deck."""
    if not frame_type:
        return False
    return frame_type.strip().lower() in EXTRA_DECK_FRAMES


def classify(frame_type: str | None) -> Partition:
    """Partition a card with this frame category must be placed in."""
    return Partition.EXTRA if is_extra_deck_card(frame_type) else Partition.MAIN
