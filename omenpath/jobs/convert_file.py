"""
Convert an exported collection file from the command line.

    omenpath-convert export.csv -o converted.csv
    omenpath-convert deck.dek --format mtgo-dek
    omenpath-convert export.csv --price eur --mtgo-ids --condition "Lightly Played"
"""

import argparse
import asyncio
import logging
from pathlib import Path

from omenpath.config import DEFAULT_CONDITION
from omenpath.formats import FORMATS
from omenpath.models.failure import KnownError
from omenpath.services.converter import ConversionResult, convert_text
from omenpath.services.export import ExportOptions, PriceType
from omenpath.services.scryfall_client import ScryfallClient

logger = logging.getLogger(__name__)


def default_output_path(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}_converted.csv")


async def run_conversion(
    input_path: Path,
    output_path: Path,
    format_id: str | None = None,
    client: ScryfallClient | None = None,
    export_options: ExportOptions | None = None,
) -> ConversionResult:
    """
    Convert one file and write the CSV.

    Args:
        input_path: Exported file to read (UTF-8)
        output_path: Where to write the converted CSV
        format_id: Registered format id, or None to auto-detect
        client: Scryfall client to use; a new one is opened if omitted
        export_options: Optional CSV columns and default condition

    Returns:
        The conversion result
    """
    text = input_path.read_text(encoding="utf-8-sig")

    last_logged = -1

    def on_progress(percent: int) -> None:
        nonlocal last_logged
        if percent // 25 > last_logged // 25:
            logger.info("Progress: %d%%", percent)
        last_logged = percent

    async def convert(scryfall: ScryfallClient) -> ConversionResult:
        return await convert_text(
            text,
            scryfall,
            format_id=format_id,
            progress=on_progress,
            export_options=export_options,
        )

    if client is None:
        async with ScryfallClient() as owned:
            result = await convert(owned)
    else:
        result = await convert(client)

    output_path.write_text(result.csv, encoding="utf-8")
    logger.info(
        "Wrote %d rows (%d matched, %d failed) to %s",
        result.stats.total,
        result.stats.succeeded,
        result.stats.failed,
        output_path,
    )
    return result


def export_options_from_args(args: argparse.Namespace) -> ExportOptions:
    return ExportOptions(
        include_current_price=args.price_type is not None,
        price_type=PriceType(args.price_type or PriceType.USD.value),
        include_mtgo_ids=args.mtgo_ids,
        include_multiverse_id=args.multiverse_id,
        include_tcgplayer_id=args.tcgplayer_id,
        include_cardmarket_id=args.cardmarket_id,
        default_condition=args.condition,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert a collection export for import")
    parser.add_argument("input", type=Path, help="Exported collection file (.csv or .dek)")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output CSV path (default: <input>_converted.csv)",
    )
    parser.add_argument(
        "--format",
        dest="format_id",
        choices=[fmt.id for fmt in FORMATS],
        default=None,
        help="Source format (default: auto-detect)",
    )
    parser.add_argument(
        "--price",
        dest="price_type",
        choices=[price.value for price in PriceType],
        default=None,
        help="Add a Current Price column in this currency",
    )
    parser.add_argument("--mtgo-ids", action="store_true", help="Add MTGO ID columns")
    parser.add_argument(
        "--multiverse-id", action="store_true", help="Add a Multiverse ID column"
    )
    parser.add_argument("--tcgplayer-id", action="store_true", help="Add a TCGPlayer ID column")
    parser.add_argument(
        "--cardmarket-id", action="store_true", help="Add a CardMarket ID column"
    )
    parser.add_argument(
        "--condition",
        default=DEFAULT_CONDITION,
        help=f"Condition for rows without one (default: {DEFAULT_CONDITION})",
    )
    return parser


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    output = args.output or default_output_path(args.input)
    try:
        result = asyncio.run(
            run_conversion(
                args.input,
                output,
                args.format_id,
                export_options=export_options_from_args(args),
            )
        )
    except KnownError as e:
        logger.error("%s %s", e.message, e.detail or "")
        raise SystemExit(1) from e

    print(f"Converted {result.stats.total} rows as {result.format.name}:")
    print(f"  matched: {result.stats.succeeded}")
    print(f"  failed:  {result.stats.failed}")
    print(f"  output:  {output}")


if __name__ == "__main__":
    main()
