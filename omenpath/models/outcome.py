from dataclasses import dataclass

from omenpath.models.card import Confidence, IdentificationMethod, ScryfallCard
from omenpath.models.failure import FailureKind
from omenpath.models.row import ParsedRow


@dataclass(frozen=True, slots=True)
class ConversionOutcome:
    """
    The result of identifying one parsed row.

    Exactly one outcome exists per input row. The only field assigned after
    creation is ``output_row_number``, which the reconciler sets on a copy.
    """

    row: ParsedRow
    success: bool
    confidence: Confidence
    method: IdentificationMethod
    card: ScryfallCard | None = None
    warnings: tuple[str, ...] = ()
    error: str | None = None
    error_kind: FailureKind | None = None
    language_mismatch: bool = False
    output_language: str | None = None
    output_row_number: int | None = None

    @property
    def source_row_number(self) -> int:
        return self.row.source_row_number

    @property
    def initial_confidence(self) -> Confidence | None:
        return self.row.initial_confidence

    @property
    def set_code_corrected(self) -> bool:
        return self.row.set_code_corrected

    @property
    def display_name(self) -> str:
        """Matched record name when available, otherwise the exported name."""
        if self.card is not None:
            return self.card.name
        return self.row.name or ""

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @classmethod
    def failed(
        cls,
        row: ParsedRow,
        kind: FailureKind,
        error: str,
        warnings: tuple[str, ...] = (),
    ) -> "ConversionOutcome":
        """Build a failed outcome carrying the row's accumulated warnings."""
        return cls(
            row=row,
            success=False,
            confidence=Confidence.LOW,
            method=IdentificationMethod.FAILED,
            warnings=(*row.warnings, *warnings),
            error=error,
            error_kind=kind,
        )
