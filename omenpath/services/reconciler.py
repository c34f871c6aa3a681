"""
Result reconciliation.

Orders outcomes so the rows that need attention come first:

    bucket 0: failed
    bucket 1: matched, with warnings
    bucket 2: matched cleanly

Within a bucket rows sort by display name (case-insensitive), then by
source row number so equal names keep file order. Output row numbers are
then assigned from FIRST_DATA_ROW with no gaps.
"""

from collections.abc import Iterable
from dataclasses import replace

from omenpath.config import FIRST_DATA_ROW
from omenpath.models.outcome import ConversionOutcome


def bucket(outcome: ConversionOutcome) -> int:
    if not outcome.success or outcome.error:
        return 0
    if outcome.warnings:
        return 1
    return 2


def sort_key(outcome: ConversionOutcome) -> tuple[int, str, int]:
    return (bucket(outcome), outcome.display_name.casefold(), outcome.source_row_number)


def reconcile(outcomes: Iterable[ConversionOutcome]) -> list[ConversionOutcome]:
    """
    Sort outcomes and number them.

    Any existing output row numbers are overwritten. Applying this to an
    already reconciled list returns an equal list.
    """
    ordered = sorted(outcomes, key=sort_key)
    return [
        replace(outcome, output_row_number=position)
        for position, outcome in enumerate(ordered, start=FIRST_DATA_ROW)
    ]
