"""
Format descriptors.

Every supported export format is one immutable FormatDescriptor. A
descriptor says which source column feeds which ParsedRow field, how the
raw value is normalized, and which headers identify the format during
auto-detection.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

# Takes a raw cell value, returns the normalized value or None when empty
Normalizer = Callable[[str], str | None]

# ParsedRow attributes a FieldSpec may target
ROW_FIELDS = frozenset(
    {
        "name",
        "set_code",
        "set_name",
        "collector_number",
        "language",
        "foil",
        "condition",
        "scryfall_id",
        "multiverse_id",
        "mtgo_id",
        "count",
        "tags",
        "purchase_price",
        "last_modified",
        "alter",
        "proxy",
        "signed",
    }
)


class FormatKind(str, Enum):
    """How a format's rows are encoded."""

    CSV = "csv"
    XML = "xml"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """
    One (field, source column, normalization) mapping.

    Several specs may target the same field; the first one that yields a
    value wins, so alternates are listed in preference order.
    """

    field: str
    column: str
    normalize: Normalizer | None = None

    def __post_init__(self) -> None:
        if self.field not in ROW_FIELDS:
            raise ValueError(f"Unknown row field: {self.field}")


@dataclass(frozen=True, slots=True)
class FormatDescriptor:
    """
    A supported export format.

    Attributes:
        id: Stable identifier (e.g., "manabox")
        name: Display name
        description: One-line description for format pickers
        fields: Ordered column mappings
        required_headers: Headers that must all be present to score at all
        strong_indicators: Headers that are distinctive for this format
        common_indicators: Headers this format shares with others
        kind: CSV or XML
        content_signature: Pattern that identifies XML content
    """

    id: str
    name: str
    description: str
    fields: tuple[FieldSpec, ...]
    required_headers: tuple[str, ...] = ()
    strong_indicators: tuple[str, ...] = ()
    common_indicators: tuple[str, ...] = ()
    kind: FormatKind = FormatKind.CSV
    content_signature: re.Pattern[str] | None = None

    @property
    def columns(self) -> tuple[str, ...]:
        """Distinct source columns, in declaration order."""
        return tuple(dict.fromkeys(spec.column for spec in self.fields))

    def specs_for(self, field: str) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.field == field)
