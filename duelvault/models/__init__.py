from duelvault.models.card import (
    BanlistFormat,
    BanStatus,
    Card,
    CardPrinting,
    Partition,
)
from duelvault.models.card_set import CardSet, CardSetDirectory
from duelvault.models.collection import CollectionEntry
from duelvault.models.deck import (
    BanlistViolation,
    Deck,
    DeckCardEntry,
    DeckCounts,
    DeckValidation,
)
from duelvault.models.failure import (
    ApiResponse,
    DeckError,
    Err,
    ErrorKind,
    FailureDetail,
    Ok,
    OutcomeType,
    Result,
    err,
)

__all__ = [
    "ApiResponse",
    "BanStatus",
    "BanlistFormat",
    "BanlistViolation",
    "Card",
    "CardPrinting",
    "CardSet",
    "CardSetDirectory",
    "CollectionEntry",
    "Deck",
    "DeckCardEntry",
    "DeckCounts",
    "DeckError",
    "DeckValidation",
    "Err",
    "ErrorKind",
    "FailureDetail",
    "Ok",
    "OutcomeType",
    "Result",
    "err",
]
