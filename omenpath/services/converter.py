"""
End-to-end conversion of one uploaded export.

    detect format -> read rows -> normalize -> validate set codes
    -> lookup (three stages) -> reconcile -> CSV

Request-level problems (unreadable file, undetectable format) raise
KnownError. Everything row-scoped ends up on that row's outcome.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field

from omenpath.formats import FormatDescriptor, FormatKind, get_format
from omenpath.models.failure import FailureKind, KnownError, UnknownFormatError
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.row import ParsedRow
from omenpath.parsers import RowSource, read_csv_rows, read_dek_rows
from omenpath.services.export import ExportOptions, format_as_csv
from omenpath.services.format_detector import detect, detect_content
from omenpath.services.normalizer import normalize
from omenpath.services.orchestrator import LookupOrchestrator, ProgressCallback
from omenpath.services.reconciler import reconcile
from omenpath.services.scryfall_client import ScryfallClient
from omenpath.services.set_validator import SetValidationReport, SetValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConversionStats:
    total: int
    succeeded: int
    failed: int
    with_warnings: int
    by_confidence: dict[str, int] = field(default_factory=dict)
    by_method: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_outcomes(cls, outcomes: list[ConversionOutcome]) -> "ConversionStats":
        matched = [o for o in outcomes if o.success]
        return cls(
            total=len(outcomes),
            succeeded=len(matched),
            failed=len(outcomes) - len(matched),
            with_warnings=sum(1 for o in outcomes if o.warnings),
            by_confidence=dict(Counter(o.confidence.value for o in matched)),
            by_method=dict(Counter(o.method.value for o in outcomes)),
        )


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """
    Everything one conversion produced.

    Attributes:
        format: The format the rows were read as
        detection_score: Detector score, or None when the format was chosen by the caller
        outcomes: Reconciled outcomes, one per input row
        csv: Export text
        stats: Counts over the outcomes
        set_report: What set validation changed
    """

    format: FormatDescriptor
    detection_score: float | None
    outcomes: list[ConversionOutcome]
    csv: str
    stats: ConversionStats
    set_report: SetValidationReport


def resolve_format(
    text: str, format_id: str | None = None
) -> tuple[FormatDescriptor, float | None, RowSource]:
    """
    Decide the format and read the rows.

    Raises:
        KnownError: Unknown ``format_id`` or unreadable content
        UnknownFormatError: Nothing scored above the detection floor
    """
    if format_id is not None:
        fmt = get_format(format_id)
        if fmt is None:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message=f"Unknown format: {format_id}",
                suggestion="Use one of the ids listed by /formats.",
            )
        source = read_dek_rows(text) if fmt.kind is FormatKind.XML else read_csv_rows(text)
        return fmt, None, source

    content_match = detect_content(text)
    if content_match is not None:
        return content_match.format, content_match.score, read_dek_rows(text)

    source = read_csv_rows(text)
    detection = detect(source.headers)
    if detection is None:
        raise UnknownFormatError(list(source.headers))
    return detection.format, detection.score, source


def parse_rows(fmt: FormatDescriptor, source: RowSource) -> list[ParsedRow]:
    return [normalize(raw.values, fmt, raw.number) for raw in source.rows]


async def convert_text(
    text: str,
    client: ScryfallClient,
    *,
    format_id: str | None = None,
    progress: ProgressCallback | None = None,
    export_options: ExportOptions | None = None,
) -> ConversionResult:
    """
    Convert one uploaded export into the canonical CSV.

    Args:
        text: Full file content
        client: Scryfall client; the caller owns its lifetime
        format_id: Registered format id, or None to auto-detect
        progress: Optional callback receiving percentages
        export_options: Optional CSV columns and default condition

    Raises:
        KnownError: For request-level input problems
    """
    fmt, score, source = resolve_format(text, format_id)
    logger.info("Converting %d rows as %s", len(source.rows), fmt.id)

    rows = parse_rows(fmt, source)
    rows, set_report = await SetValidator(client).validate(rows)

    outcomes = await LookupOrchestrator(client, progress=progress).convert(rows)
    ordered = reconcile(outcomes)

    return ConversionResult(
        format=fmt,
        detection_score=score,
        outcomes=ordered,
        csv=format_as_csv(ordered, export_options),
        stats=ConversionStats.from_outcomes(ordered),
        set_report=set_report,
    )
