"""
Canonical CSV export.

Writes conversion outcomes in the import layout of the target collection
tool. Matched rows take their identity (name, set, collector number) from
the Scryfall record; failed rows echo what the source file had so the user
can fix them by hand.

ExportOptions adds optional columns read from the matched record (current
price, MTGO/multiverse/marketplace ids) and sets the condition written for
rows that have none. Optional columns stay empty for failed rows.

A Notes column is appended when any outcome failed or carries warnings.
Every field is quoted.
"""

import csv
import io
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from omenpath.config import DEFAULT_CONDITION
from omenpath.formats.languages import display_name
from omenpath.models.card import ScryfallCard
from omenpath.models.outcome import ConversionOutcome

EXPORT_HEADERS: tuple[str, ...] = (
    "Count",
    "Name",
    "Edition",
    "Condition",
    "Language",
    "Foil",
    "Last Modified",
    "Collector Number",
    "Alter",
    "Proxy",
    "Signed",
    "Purchase Price",
)
NOTES_HEADER = "Notes"
DEFAULT_LANGUAGE = "English"

CURRENT_PRICE_HEADER = "Current Price"
MTGO_ID_HEADERS = ("MTGO ID", "MTGO Foil ID")
MULTIVERSE_ID_HEADER = "Multiverse ID"
TCGPLAYER_ID_HEADER = "TCGPlayer ID"
CARDMARKET_ID_HEADER = "CardMarket ID"


class PriceType(str, Enum):
    """Scryfall price currency for the Current Price column."""

    USD = "usd"
    EUR = "eur"
    TIX = "tix"


@dataclass(frozen=True, slots=True)
class ExportOptions:
    """
    Optional export columns and defaults.

    Attributes:
        include_current_price: Add Current Price, picked by finish from price_type
        price_type: Base currency; foil and etched rows use the matching finish price
        include_mtgo_ids: Add MTGO ID and MTGO Foil ID
        include_multiverse_id: Add Multiverse ID (first id of the printing)
        include_tcgplayer_id: Add TCGPlayer ID
        include_cardmarket_id: Add CardMarket ID
        default_condition: Condition written for rows without one
    """

    include_current_price: bool = False
    price_type: PriceType = PriceType.USD
    include_mtgo_ids: bool = False
    include_multiverse_id: bool = False
    include_tcgplayer_id: bool = False
    include_cardmarket_id: bool = False
    default_condition: str = DEFAULT_CONDITION

    @property
    def extra_headers(self) -> tuple[str, ...]:
        headers: list[str] = []
        if self.include_current_price:
            headers.append(CURRENT_PRICE_HEADER)
        if self.include_mtgo_ids:
            headers.extend(MTGO_ID_HEADERS)
        if self.include_multiverse_id:
            headers.append(MULTIVERSE_ID_HEADER)
        if self.include_tcgplayer_id:
            headers.append(TCGPLAYER_ID_HEADER)
        if self.include_cardmarket_id:
            headers.append(CARDMARKET_ID_HEADER)
        return tuple(headers)


def _flag(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def _id(value: int | None) -> str:
    return str(value) if value is not None else ""


def price_key(price_type: PriceType, foil: str | None) -> str:
    """Scryfall ``prices`` key for a currency and finish (tix has no finish prices)."""
    if foil == "foil" and price_type is not PriceType.TIX:
        return f"{price_type.value}_foil"
    if foil == "etched" and price_type is PriceType.USD:
        return "usd_etched"
    return price_type.value


def current_price(card: ScryfallCard, price_type: PriceType, foil: str | None) -> str:
    return card.prices.get(price_key(price_type, foil)) or ""


def output_language(outcome: ConversionOutcome) -> str:
    """Language to write: the reported language, else the record's, else the row's."""
    if outcome.output_language:
        return outcome.output_language
    if outcome.card is not None:
        return display_name(outcome.card.lang)
    if outcome.row.language:
        return display_name(outcome.row.language)
    return DEFAULT_LANGUAGE


def _extra_columns(outcome: ConversionOutcome, options: ExportOptions) -> dict[str, str]:
    card = outcome.card
    columns = dict.fromkeys(options.extra_headers, "")
    if card is None:
        return columns

    if options.include_current_price:
        columns[CURRENT_PRICE_HEADER] = current_price(card, options.price_type, outcome.row.foil)
    if options.include_mtgo_ids:
        columns["MTGO ID"] = _id(card.mtgo_id)
        columns["MTGO Foil ID"] = _id(card.mtgo_foil_id)
    if options.include_multiverse_id:
        columns[MULTIVERSE_ID_HEADER] = _id(card.multiverse_ids[0] if card.multiverse_ids else None)
    if options.include_tcgplayer_id:
        columns[TCGPLAYER_ID_HEADER] = _id(card.tcgplayer_id)
    if options.include_cardmarket_id:
        columns[CARDMARKET_ID_HEADER] = _id(card.cardmarket_id)
    return columns


def export_row(
    outcome: ConversionOutcome, options: ExportOptions | None = None
) -> dict[str, str]:
    """Map one outcome onto the export columns."""
    options = options or ExportOptions()
    row, card = outcome.row, outcome.card
    if card is not None:
        name = card.name
        edition = card.set_code.lower()
        collector_number = card.collector_number
    else:
        name = row.name or ""
        edition = (row.set_code or "").lower()
        collector_number = row.collector_number or ""

    return {
        "Count": str(row.count),
        "Name": name,
        "Edition": edition,
        "Condition": row.condition or options.default_condition,
        "Language": output_language(outcome),
        "Foil": row.foil or "",
        "Last Modified": row.last_modified or "",
        "Collector Number": collector_number,
        "Alter": _flag(row.alter),
        "Proxy": _flag(row.proxy),
        "Signed": _flag(row.signed),
        "Purchase Price": row.purchase_price or "",
        **_extra_columns(outcome, options),
    }


def needs_notes(outcomes: Sequence[ConversionOutcome]) -> bool:
    return any(not o.success or o.error or o.warnings for o in outcomes)


def format_notes(outcome: ConversionOutcome) -> str:
    notes: list[str] = []
    if not outcome.success or outcome.error:
        notes.append(f"ERROR: {outcome.error or 'Conversion failed'}")
    notes.extend(f"WARNING: {warning}" for warning in outcome.warnings)
    return "; ".join(notes)


def format_as_csv(
    outcomes: Sequence[ConversionOutcome], options: ExportOptions | None = None
) -> str:
    """
    Render outcomes as CSV text, in the order given.

    Args:
        outcomes: Usually the reconciler's output
        options: Optional columns and default condition; defaults add nothing

    Returns:
        CSV text with a header line; lines end with ``\\n``
    """
    options = options or ExportOptions()
    with_notes = needs_notes(outcomes)
    headers = [*EXPORT_HEADERS, *options.extra_headers]
    if with_notes:
        headers.append(NOTES_HEADER)

    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer, fieldnames=headers, quoting=csv.QUOTE_ALL, lineterminator="\n"
    )
    writer.writeheader()
    for outcome in outcomes:
        record = export_row(outcome, options)
        if with_notes:
            record[NOTES_HEADER] = format_notes(outcome)
        writer.writerow(record)
    return buffer.getvalue()
