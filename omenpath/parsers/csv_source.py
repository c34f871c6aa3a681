"""
CSV row source.

Turns uploaded CSV text into header + row dictionaries. Handles the
quirks vendor exports actually have: a UTF-8 BOM, Excel's ``sep=,``
first line, padded header names, and short rows.
"""

import csv
import logging
from dataclasses import dataclass, field
from io import StringIO

from omenpath.config import FIRST_DATA_ROW
from omenpath.models.failure import FailureKind, KnownError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawRow:
    """One undecoded input row and its line number in the source file."""

    number: int
    values: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RowSource:
    """Headers and rows read from an upload, in file order."""

    headers: tuple[str, ...]
    rows: tuple[RawRow, ...]


def strip_preamble(text: str) -> str:
    """Remove a BOM and a leading Excel ``sep=`` line."""
    text = text.lstrip("\ufeff")
    first_line, _, rest = text.partition("\n")
    if first_line.strip().lower().startswith("sep="):
        return rest
    return text


def read_csv_headers(text: str) -> tuple[str, ...]:
    """Read only the header row."""
    reader = csv.reader(StringIO(strip_preamble(text)))
    try:
        header_row = next(reader, [])
    except csv.Error as e:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The file could not be read as CSV.",
            detail=str(e),
        ) from e
    return tuple(h.strip() for h in header_row)


def read_csv_rows(text: str) -> RowSource:
    """
    Parse CSV text into a RowSource.

    Row numbers count the header as row 1, so the first data row is 2.

    Raises:
        KnownError: If the text has no header row or is not valid CSV
    """
    body = strip_preamble(text)
    reader = csv.DictReader(StringIO(body))

    try:
        fieldnames = reader.fieldnames
        if not fieldnames or not any(name and name.strip() for name in fieldnames):
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message="The file has no header row.",
                suggestion="Export the collection again with column headers included.",
            )

        headers = tuple(name.strip() for name in fieldnames)
        rows: list[RawRow] = []
        for number, record in enumerate(reader, start=FIRST_DATA_ROW):
            values = {
                key.strip(): (value or "").strip()
                for key, value in record.items()
                if key is not None
            }
            if not any(values.values()):
                continue
            rows.append(RawRow(number=number, values=values))
    except csv.Error as e:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The file could not be read as CSV.",
            detail=str(e),
        ) from e

    logger.debug("Read %d CSV rows with %d columns", len(rows), len(headers))
    return RowSource(headers=headers, rows=tuple(rows))
