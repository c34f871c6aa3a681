"""
MTGO .dek row source.

A .dek file is XML with one element per card entry:

    <Cards CatID="79038" Quantity="1" Sideboard="false" Name="Reaper King" />

Only main-deck entries are returned; sideboard entries are skipped.
"""

import logging
import xml.etree.ElementTree as ET

from omenpath.config import FIRST_DATA_ROW
from omenpath.models.failure import FailureKind, KnownError
from omenpath.parsers.csv_source import RawRow, RowSource

logger = logging.getLogger(__name__)

DEK_COLUMNS = ("CatID", "Quantity", "Name")


def read_dek_rows(text: str) -> RowSource:
    """
    Parse .dek XML into a RowSource with CatID / Quantity / Name columns.

    Raises:
        KnownError: If the content is not well-formed XML or has no <Deck> root
    """
    try:
        root = ET.fromstring(text.lstrip("\ufeff").strip())
    except ET.ParseError as e:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The .dek file is not valid XML.",
            detail=str(e),
        ) from e

    if root.tag != "Deck":
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The .dek file has no <Deck> element.",
            detail=f"Root element: {root.tag}",
        )

    rows: list[RawRow] = []
    skipped = 0
    for element in root.iter("Cards"):
        if element.get("Sideboard", "false").strip().lower() == "true":
            skipped += 1
            continue
        values = {column: (element.get(column) or "").strip() for column in DEK_COLUMNS}
        rows.append(RawRow(number=FIRST_DATA_ROW + len(rows), values=values))

    if skipped:
        logger.info("Skipped %d sideboard entries in .dek file", skipped)

    return RowSource(headers=DEK_COLUMNS, rows=tuple(rows))
