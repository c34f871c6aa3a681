"""
Set code validation and fuzzy correction.

Runs before the lookup pipeline. Rows that carry a direct identifier are
left alone. For the rest:

- a set code Scryfall does not know is replaced by the code of the set
  whose name best matches the row's set name
- a row with only a set name gets the code of the best-matching set

Fuzzy corrections flag the row with ``set_code_corrected`` so the lookup
stages can lower its confidence. An exact set-name match is not a
correction.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from rapidfuzz import fuzz, process, utils

from omenpath.models.card import ScryfallSet, fold
from omenpath.models.row import ParsedRow
from omenpath.services.normalizer import assign_initial_confidence
from omenpath.services.scryfall_client import ScryfallClient, ScryfallServiceError

logger = logging.getLogger(__name__)

# rapidfuzz scores run 0-100
SET_MATCH_THRESHOLD = 70.0


@dataclass(frozen=True, slots=True)
class SetMatch:
    code: str
    name: str
    score: float

    @property
    def exact(self) -> bool:
        return self.score >= 100.0


@dataclass(frozen=True, slots=True)
class SetCorrection:
    original: str | None
    corrected: str
    set_name: str
    score: float


@dataclass(frozen=True, slots=True)
class SetValidationReport:
    """What the validator changed and what it could not fix."""

    invalid_set_codes: tuple[str, ...] = ()
    corrections: tuple[SetCorrection, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def has_invalid_set_codes(self) -> bool:
        return bool(self.invalid_set_codes)


class SetValidator:
    """Checks row set codes against Scryfall's set list."""

    def __init__(self, client: ScryfallClient, threshold: float = SET_MATCH_THRESHOLD) -> None:
        self.client = client
        self.threshold = threshold
        self._sets: list[ScryfallSet] | None = None

    async def _load_sets(self) -> list[ScryfallSet]:
        if self._sets is None:
            self._sets = await self.client.fetch_sets()
            logger.info("Loaded %d Scryfall sets", len(self._sets))
        return self._sets

    def match_set_name(self, set_name: str, sets: Sequence[ScryfallSet]) -> SetMatch | None:
        """Best set for a free-text set name, or None below the threshold."""
        for candidate in sets:
            if fold(candidate.name) == fold(set_name):
                return SetMatch(code=candidate.code.lower(), name=candidate.name, score=100.0)

        names = [candidate.name for candidate in sets]
        best = process.extractOne(
            set_name,
            names,
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            score_cutoff=self.threshold,
        )
        if best is None:
            return None
        _, score, index = best
        # Keep fuzzy matches strictly below an exact hit
        return SetMatch(code=sets[index].code.lower(), name=sets[index].name, score=min(score, 99.9))

    async def validate(
        self, rows: Sequence[ParsedRow]
    ) -> tuple[list[ParsedRow], SetValidationReport]:
        """
        Validate and correct set codes.

        If Scryfall's set list cannot be fetched the rows are returned
        unchanged with a report warning.
        """
        candidates = [row for row in rows if not row.has_direct_id]
        if not any(row.set_code or row.set_name for row in candidates):
            return list(rows), SetValidationReport()

        try:
            sets = await self._load_sets()
        except ScryfallServiceError as e:
            logger.warning("Set validation skipped: %s", e)
            return list(rows), SetValidationReport(
                warnings=(f"Set codes were not validated: {e}",),
            )

        known_codes = {s.code.lower() for s in sets}
        warnings: list[str] = []
        invalid: list[str] = []
        code_fixes: dict[str, SetMatch] = {}
        name_fixes: dict[str, SetMatch] = {}

        for code in dict.fromkeys(r.set_code.lower() for r in candidates if r.set_code):
            if code in known_codes:
                continue
            invalid.append(code)
            set_names = dict.fromkeys(
                r.set_name for r in candidates if r.set_code and r.set_code.lower() == code
            )
            matches = [
                m for name in set_names if name for m in [self.match_set_name(name, sets)] if m
            ]
            if matches:
                code_fixes[code] = max(matches, key=lambda m: m.score)
            else:
                warnings.append(f'Invalid set code "{code}" cannot be automatically corrected')

        for set_name in dict.fromkeys(r.set_name for r in candidates if r.set_name and not r.set_code):
            assert set_name is not None
            match = self.match_set_name(set_name, sets)
            if match is None:
                warnings.append(f'Set name "{set_name}" cannot be matched to a valid set code')
            else:
                name_fixes[set_name] = match

        corrected_rows = [self._apply(row, code_fixes, name_fixes) for row in rows]
        corrections = tuple(
            SetCorrection(original=code, corrected=m.code, set_name=m.name, score=m.score)
            for code, m in code_fixes.items()
        ) + tuple(
            SetCorrection(original=None, corrected=m.code, set_name=m.name, score=m.score)
            for m in name_fixes.values()
        )

        if invalid or corrections:
            logger.info(
                "Set validation: %d invalid codes, %d corrections",
                len(invalid),
                len(corrections),
            )
        return corrected_rows, SetValidationReport(
            invalid_set_codes=tuple(invalid),
            corrections=corrections,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _apply(
        row: ParsedRow,
        code_fixes: dict[str, SetMatch],
        name_fixes: dict[str, SetMatch],
    ) -> ParsedRow:
        if row.has_direct_id:
            return row

        if row.set_code and row.set_code.lower() in code_fixes:
            match = code_fixes[row.set_code.lower()]
            row = replace(row, set_code=match.code, set_code_corrected=True).with_warning(
                f'Set code "{row.set_code}" corrected to "{match.code}" '
                f'based on set name "{match.name}"'
            )
        elif row.set_name and not row.set_code and row.set_name in name_fixes:
            match = name_fixes[row.set_name]
            row = replace(row, set_code=match.code, set_code_corrected=not match.exact)
            if not match.exact:
                row = row.with_warning(
                    f'Set code added as "{match.code}" based on set name "{row.set_name}" '
                    f'(closest match "{match.name}")'
                )
        else:
            return row

        return assign_initial_confidence(row)
