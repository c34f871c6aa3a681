"""
Conversion API endpoints.

Lists supported formats, detects the format of an upload, and converts
an upload into the canonical CSV.

Every response from /detect and /convert is an ApiResponse envelope.
Request-level failures come back as known_failure with the error's HTTP
status; unexpected exceptions come back as unknown_failure.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from omenpath.config import DEFAULT_CONDITION
from omenpath.formats import FORMATS, FormatKind
from omenpath.models.failure import (
    ApiResponse,
    FailureKind,
    KnownError,
    UnknownFormatError,
    create_success,
    create_unknown_failure,
)
from omenpath.models.outcome import ConversionOutcome
from omenpath.parsers import read_csv_headers
from omenpath.services.converter import ConversionResult, convert_text
from omenpath.services.export import ExportOptions, PriceType
from omenpath.services.format_detector import detect, detect_content
from omenpath.services.scryfall_client import ScryfallClient, get_scryfall_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["convert"])


class FormatInfo(BaseModel):
    """A supported export format."""

    id: str
    name: str
    description: str
    kind: FormatKind


class DetectRequest(BaseModel):
    """Request model for format detection."""

    text: str = Field(
        ...,
        description="File content, or at least its header line",
        examples=["Count,Tradelist Count,Name,Edition,Condition,Language,Foil"],
    )


class DetectionData(BaseModel):
    format_id: str
    format_name: str
    score: float
    matching_headers: list[str] = Field(default_factory=list)


class ExportSettings(BaseModel):
    """Optional CSV columns and defaults for /convert."""

    include_current_price: bool = Field(
        default=False,
        description="Add a Current Price column; foil and etched rows use their finish price",
    )
    price_type: PriceType = Field(default=PriceType.USD, description="usd, eur or tix")
    include_mtgo_ids: bool = False
    include_multiverse_id: bool = False
    include_tcgplayer_id: bool = False
    include_cardmarket_id: bool = False
    default_condition: str = Field(
        default=DEFAULT_CONDITION,
        min_length=1,
        description="Condition written for rows that have none",
        examples=["Lightly Played"],
    )

    def to_options(self) -> ExportOptions:
        return ExportOptions(
            include_current_price=self.include_current_price,
            price_type=self.price_type,
            include_mtgo_ids=self.include_mtgo_ids,
            include_multiverse_id=self.include_multiverse_id,
            include_tcgplayer_id=self.include_tcgplayer_id,
            include_cardmarket_id=self.include_cardmarket_id,
            default_condition=self.default_condition,
        )


class ConvertRequest(BaseModel):
    """Request model for converting an export."""

    text: str = Field(
        ...,
        description="Full content of the exported file",
    )
    format: str | None = Field(
        default=None,
        description="Format id from /formats; omit to auto-detect",
        examples=["manabox"],
    )
    export: ExportSettings = Field(
        default_factory=ExportSettings,
        description="Optional CSV columns and the default condition",
    )


class OutcomeData(BaseModel):
    """One converted row, as reported to the client."""

    output_row_number: int | None
    source_row_number: int
    name: str
    set_code: str | None = None
    collector_number: str | None = None
    scryfall_id: str | None = None
    success: bool
    confidence: str
    initial_confidence: str | None = None
    method: str
    set_code_corrected: bool = False
    language_mismatch: bool = False
    warnings: list[str] = Field(default_factory=list)
    error: str | None = None
    error_kind: FailureKind | None = None

    @classmethod
    def from_outcome(cls, outcome: ConversionOutcome) -> "OutcomeData":
        card = outcome.card
        return cls(
            output_row_number=outcome.output_row_number,
            source_row_number=outcome.source_row_number,
            name=outcome.display_name,
            set_code=card.set_code if card else outcome.row.set_code,
            collector_number=card.collector_number if card else outcome.row.collector_number,
            scryfall_id=card.id if card else None,
            success=outcome.success,
            confidence=outcome.confidence.value,
            initial_confidence=(
                outcome.initial_confidence.value if outcome.initial_confidence else None
            ),
            method=outcome.method.value,
            set_code_corrected=outcome.set_code_corrected,
            language_mismatch=outcome.language_mismatch,
            warnings=list(outcome.warnings),
            error=outcome.error,
            error_kind=outcome.error_kind,
        )


class StatsData(BaseModel):
    total: int
    succeeded: int
    failed: int
    with_warnings: int
    by_confidence: dict[str, int] = Field(default_factory=dict)
    by_method: dict[str, int] = Field(default_factory=dict)


class ConvertData(BaseModel):
    """Result of a conversion."""

    format_id: str
    format_name: str
    detection_score: float | None = Field(
        default=None,
        description="Detector score; null when the format was given explicitly",
    )
    csv: str
    stats: StatsData
    set_warnings: list[str] = Field(default_factory=list)
    outcomes: list[OutcomeData] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ConversionResult) -> "ConvertData":
        return cls(
            format_id=result.format.id,
            format_name=result.format.name,
            detection_score=result.detection_score,
            csv=result.csv,
            stats=StatsData(
                total=result.stats.total,
                succeeded=result.stats.succeeded,
                failed=result.stats.failed,
                with_warnings=result.stats.with_warnings,
                by_confidence=result.stats.by_confidence,
                by_method=result.stats.by_method,
            ),
            set_warnings=list(result.set_report.warnings),
            outcomes=[OutcomeData.from_outcome(o) for o in result.outcomes],
        )


def _known_failure(error: KnownError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_response().model_dump(mode="json"),
    )


def _unknown_failure(error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_unknown_failure(error).model_dump(mode="json"),
    )


def _require_text(text: str) -> None:
    if not text or not text.strip():
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The uploaded file is empty.",
        )


@router.get("/formats", response_model=list[FormatInfo])
async def list_formats() -> list[FormatInfo]:
    """List the supported export formats in detection order."""
    return [
        FormatInfo(id=fmt.id, name=fmt.name, description=fmt.description, kind=fmt.kind)
        for fmt in FORMATS
    ]


@router.post("/detect", response_model=ApiResponse[DetectionData])
async def detect_format(request: DetectRequest) -> ApiResponse[DetectionData] | JSONResponse:
    """
    Detect the export format of an upload.

    Returns 422 (unknown_format) when no format scores above the floor.
    """
    try:
        _require_text(request.text)
        detection = detect_content(request.text)
        if detection is None:
            headers = read_csv_headers(request.text)
            detection = detect(headers)
            if detection is None:
                raise UnknownFormatError(list(headers))
    except KnownError as e:
        return _known_failure(e)
    except Exception as e:
        logger.exception("Format detection failed")
        return _unknown_failure(e)

    return create_success(
        DetectionData(
            format_id=detection.format.id,
            format_name=detection.format.name,
            score=detection.score,
            matching_headers=list(detection.matching_headers),
        )
    )


@router.post("/convert", response_model=ApiResponse[ConvertData])
async def convert(
    request: ConvertRequest,
    client: Annotated[ScryfallClient, Depends(get_scryfall_client)],
) -> ApiResponse[ConvertData] | JSONResponse:
    """
    Convert an export into the canonical CSV.

    Row-level failures do not fail the request; they are reported per
    outcome and in the CSV's Notes column.
    """
    try:
        _require_text(request.text)
        result = await convert_text(
            request.text,
            client,
            format_id=request.format,
            export_options=request.export.to_options(),
        )
    except KnownError as e:
        return _known_failure(e)
    except Exception as e:
        logger.exception("Conversion failed")
        return _unknown_failure(e)

    return create_success(ConvertData.from_result(result))
