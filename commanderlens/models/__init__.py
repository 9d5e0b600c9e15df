from commanderlens.models.card import (
    FACE_SEPARATOR,
    Board,
    CardAggregate,
    card_from_scryfall,
    cards_from_records,
    merge_face_text,
)
from commanderlens.models.evaluation import (
    CardEvaluation,
    CategoryEvaluation,
    DeckEvaluation,
    DeckStatistics,
    Importance,
    Rating,
)
from commanderlens.models.failure import (
    ABORTED_MESSAGE,
    CANCELLED_MESSAGE,
    DEGRADED_MODE_MESSAGE,
    DegradedModeError,
    FailureKind,
    FetchCancelledError,
    OperationAbortedError,
    TaggerError,
    TransientFetchError,
)

__all__ = [
    "ABORTED_MESSAGE",
    "Board",
    "CANCELLED_MESSAGE",
    "CardAggregate",
    "CardEvaluation",
    "CategoryEvaluation",
    "DEGRADED_MODE_MESSAGE",
    "DeckEvaluation",
    "DeckStatistics",
    "DegradedModeError",
    "FACE_SEPARATOR",
    "FailureKind",
    "FetchCancelledError",
    "Importance",
    "OperationAbortedError",
    "Rating",
    "TaggerError",
    "TransientFetchError",
    "card_from_scryfall",
    "cards_from_records",
    "merge_face_text",
]
