"""
Row normalization.

Maps one raw row onto a ParsedRow through a format's FieldSpecs and
assigns the initial confidence tier implied by the identity evidence.

Initial confidence, richest evidence first:
- Scryfall id: very_high
- multiverse id or MTGO id: high
- set code + collector number: high (medium if the set code was corrected)
- set name + collector number: medium
- name + set code: medium
- name only: low
"""

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from omenpath.config import SCRYFALL_ID_LENGTH
from omenpath.formats.base import FormatDescriptor
from omenpath.formats.languages import is_recognized
from omenpath.models.card import Confidence
from omenpath.models.row import ParsedRow

logger = logging.getLogger(__name__)

_INT_FIELDS = frozenset({"multiverse_id", "mtgo_id"})
_FLAG_FIELDS = frozenset({"alter", "proxy", "signed"})

NAME_ONLY_WARNING = "Only card name available - correct version unlikely to be found"
NO_IDENTIFIER_WARNING = (
    "Will fail conversion - no usable identifiers available "
    "(need name, or set+collector#, or Scryfall/Multiverse/MTGO ID)"
)


def _parse_int(value: str) -> int | None:
    try:
        return int(float(value)) if "." in value else int(value)
    except (ValueError, OverflowError):
        return None


def _extract(values: Mapping[str, str], fmt: FormatDescriptor) -> dict[str, str]:
    """Apply the format's FieldSpecs; the first spec that yields a value wins."""
    by_header = {key.strip().lower(): value for key, value in values.items()}
    extracted: dict[str, str] = {}
    for spec in fmt.fields:
        if spec.field in extracted:
            continue
        raw = by_header.get(spec.column.lower())
        if raw is None:
            continue
        value = spec.normalize(raw) if spec.normalize else (raw.strip() or None)
        if value is not None:
            extracted[spec.field] = value
    return extracted


def normalize(
    values: Mapping[str, str],
    fmt: FormatDescriptor,
    source_row_number: int,
) -> ParsedRow:
    """
    Build a ParsedRow from one raw row.

    Args:
        values: Column name -> raw cell text
        fmt: Format whose column mappings apply
        source_row_number: Line number in the source file

    Returns:
        The parsed row with initial confidence assigned
    """
    extracted = _extract(values, fmt)
    warnings: list[str] = []
    fields: dict[str, Any] = {}

    for name, value in extracted.items():
        if name == "count":
            count = _parse_int(value)
            if count is None or count < 1:
                warnings.append(f'Invalid quantity "{value}", using 1')
                count = 1
            fields["count"] = count
        elif name in _INT_FIELDS:
            parsed = _parse_int(value)
            if parsed is None:
                warnings.append(f'Ignoring invalid {name.replace("_", " ")} "{value}"')
            elif parsed <= 0:
                # exporters write 0 when the printing has no such id
                warnings.append(f'Ignoring placeholder {name.replace("_", " ")} "{value}"')
            else:
                fields[name] = parsed
        elif name in _FLAG_FIELDS:
            fields[name] = value == "true"
        elif name == "tags":
            fields["tags"] = tuple(tag.strip() for tag in value.split(",") if tag.strip())
        elif name == "scryfall_id" and len(value) > SCRYFALL_ID_LENGTH:
            warnings.append(
                f"Scryfall ID trimmed from {len(value)} to {SCRYFALL_ID_LENGTH} characters"
            )
            fields["scryfall_id"] = value[:SCRYFALL_ID_LENGTH]
        else:
            fields[name] = value

    language = fields.get("language")
    if language and not is_recognized(language):
        warnings.append(f'Unrecognized language "{language}"')

    row = ParsedRow(
        **fields,
        original_data=dict(values),
        source_row_number=source_row_number,
        warnings=tuple(warnings),
    )
    row = replace(row, needs_lookup=has_any_identifier(row))
    return assign_initial_confidence(row)


def has_any_identifier(row: ParsedRow) -> bool:
    """True if the row carries anything a lookup key can be built from."""
    return bool(
        row.has_direct_id
        or row.name
        or (row.set_code and row.collector_number)
        or (row.set_name and row.collector_number)
    )


def initial_confidence_for(row: ParsedRow) -> Confidence:
    """The confidence tier implied by a row's identity evidence."""
    if row.scryfall_id:
        return Confidence.VERY_HIGH
    if row.multiverse_id is not None or row.mtgo_id is not None:
        return Confidence.HIGH
    if row.set_code and row.collector_number:
        return Confidence.MEDIUM if row.set_code_corrected else Confidence.HIGH
    if row.set_name and row.collector_number:
        return Confidence.MEDIUM
    if row.name and row.set_code:
        return Confidence.MEDIUM
    return Confidence.LOW


def assign_initial_confidence(row: ParsedRow) -> ParsedRow:
    """Return a copy of ``row`` with ``initial_confidence`` set and any evidence warnings."""
    confidence = initial_confidence_for(row)
    warnings: list[str] = []

    if confidence is not Confidence.LOW:
        if not row.name and not row.has_direct_id:
            warnings.append("Missing card name - using set + collector number for lookup")
    elif row.name:
        # name + collector number gets a dedicated search, so no warning
        if not row.set_code and not row.set_name and not row.collector_number:
            warnings.append(NAME_ONLY_WARNING)
    else:
        warnings.append(NO_IDENTIFIER_WARNING)

    new_warnings = tuple(w for w in warnings if w not in row.warnings)
    return replace(
        row,
        initial_confidence=confidence,
        warnings=(*row.warnings, *new_warnings),
    )
