"""
Match validation.

A bulk lookup answers the key, not the row. Before a returned record is
accepted for a row, every identity field the row actually specified is
compared against it. Fields the row left blank are never checked.
"""

from dataclasses import dataclass, field

from omenpath.models.card import ScryfallCard, card_has_name, fold
from omenpath.models.row import ParsedRow


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """
    Outcome of comparing a row with a candidate record.

    Attributes:
        is_valid: False if any specified field contradicts the record
        errors: One entry per contradicting field
        warnings: Non-fatal observations (e.g., finish not offered)
    """

    is_valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)


def validate_match(row: ParsedRow, card: ScryfallCard) -> ValidationResult:
    """
    Check a candidate record against the row's specified name, set and number.

    Comparison is case- and whitespace-insensitive. A double-faced card
    matches either face name.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if row.name and row.name.strip() and not card_has_name(card, row.name):
        errors.append(f'Name mismatch: expected "{row.name}", found "{card.name}"')

    if row.set_code and row.set_code.strip() and fold(row.set_code) != fold(card.set_code):
        errors.append(f'Set mismatch: expected "{row.set_code}", found "{card.set_code}"')

    if (
        row.collector_number
        and row.collector_number.strip()
        and fold(row.collector_number) != fold(card.collector_number)
    ):
        errors.append(
            f'Collector number mismatch: expected "{row.collector_number}", '
            f'found "{card.collector_number}"'
        )

    if row.foil and not card.offers_finish(row.foil):
        available = ", ".join(card.finishes) or "unknown"
        warnings.append(f"Requested {row.foil} finish is not available (available: {available})")

    return ValidationResult(
        is_valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )
