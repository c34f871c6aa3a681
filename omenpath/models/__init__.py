from omenpath.models.card import (
    CardFace,
    Confidence,
    IdentificationMethod,
    ScryfallCard,
    ScryfallSet,
)
from omenpath.models.failure import (
    ApiResponse,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    UnknownFormatError,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.row import ParsedRow

__all__ = [
    "ApiResponse",
    "CardFace",
    "Confidence",
    "ConversionOutcome",
    "FailureDetail",
    "FailureKind",
    "IdentificationMethod",
    "KnownError",
    "OutcomeType",
    "ParsedRow",
    "ScryfallCard",
    "ScryfallSet",
    "UnknownFormatError",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
