"""
Omenpath services.

Format detection, row normalization, Scryfall lookup and export.
"""

from omenpath.services.converter import (
    ConversionResult,
    ConversionStats,
    convert_text,
    resolve_format,
)
from omenpath.services.export import format_as_csv
from omenpath.services.format_detector import FormatDetection, detect, detect_content
from omenpath.services.match_validator import ValidationResult, validate_match
from omenpath.services.normalizer import assign_initial_confidence, normalize
from omenpath.services.orchestrator import LookupOrchestrator
from omenpath.services.reconciler import reconcile
from omenpath.services.scryfall_client import (
    CollectionResponse,
    ScryfallClient,
    ScryfallServiceError,
)
from omenpath.services.set_validator import SetValidationReport, SetValidator

__all__ = [
    # Conversion
    "ConversionResult",
    "ConversionStats",
    "convert_text",
    "resolve_format",
    # Detection and parsing
    "FormatDetection",
    "assign_initial_confidence",
    "detect",
    "detect_content",
    "normalize",
    # Lookup
    "CollectionResponse",
    "LookupOrchestrator",
    "ScryfallClient",
    "ScryfallServiceError",
    "SetValidationReport",
    "SetValidator",
    "ValidationResult",
    "validate_match",
    # Output
    "format_as_csv",
    "reconcile",
]
