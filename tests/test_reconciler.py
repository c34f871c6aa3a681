"""Tests for result ordering and output row numbering."""

from omenpath.models.card import Confidence, IdentificationMethod
from omenpath.models.failure import FailureKind
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.row import ParsedRow
from omenpath.services.reconciler import bucket, reconcile


def matched(name: str, source: int, *warnings: str) -> ConversionOutcome:
    return ConversionOutcome(
        row=ParsedRow(name=name, source_row_number=source),
        success=True,
        confidence=Confidence.LOW,
        method=IdentificationMethod.NAME_ONLY,
        warnings=warnings,
    )


def failed(name: str, source: int) -> ConversionOutcome:
    return ConversionOutcome.failed(
        ParsedRow(name=name, source_row_number=source),
        FailureKind.NOT_FOUND,
        "Card not found in Scryfall database",
    )


class TestReconcile:
    def test_errors_then_warnings_then_clean(self) -> None:
        outcomes = [
            matched("Opt", 2),
            matched("Sol Ring", 3, "Language mismatch: requested German, found English"),
            failed("No Such Card", 4),
        ]

        result = reconcile(outcomes)

        assert [o.source_row_number for o in result] == [4, 3, 2]
        assert [bucket(o) for o in result] == [0, 1, 2]

    def test_numbering_starts_after_header_without_gaps(self) -> None:
        result = reconcile([matched("Opt", 10), matched("Bolt", 7), failed("x", 40)])

        assert [o.output_row_number for o in result] == [2, 3, 4]

    def test_names_sort_case_insensitively_then_by_source_row(self) -> None:
        outcomes = [
            matched("opt", 5),
            matched("Counterspell", 6),
            matched("Opt", 3),
        ]

        result = reconcile(outcomes)

        assert [(o.display_name, o.source_row_number) for o in result] == [
            ("Counterspell", 6),
            ("Opt", 3),
            ("opt", 5),
        ]

    def test_is_idempotent(self) -> None:
        """Reconciling an already reconciled list changes nothing."""
        once = reconcile([failed("b", 2), matched("a", 3), matched("c", 4, "warn")])

        assert reconcile(once) == once

    def test_input_is_not_modified(self) -> None:
        outcome = matched("Opt", 2)

        reconcile([outcome])

        assert outcome.output_row_number is None

    def test_empty(self) -> None:
        assert reconcile([]) == []
