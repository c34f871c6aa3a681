"""
Lookup Orchestrator.

Resolves parsed rows against Scryfall in three sequential stages:

Stage A (name + collector number search):
    Rows whose only identity is name + collector number are searched with
    one exact-name query. Exactly one hit is accepted; anything else falls
    through to Stage B as a name-only row.

Stage B (bulk lookup):
    Every other row is reduced to one lookup key. Keys are deduplicated
    across the whole input, sent in batches of SCRYFALL_BATCH_SIZE, and
    each returned record is claimed by the first matching key. Every row
    sharing a key is validated on its own. Rows the normalizer marked as
    having nothing to look up fail as NO_IDENTIFIER without a request.

Stage C (language check and set correction tagging):
    Stage B successes whose language differs from the row's are searched
    again in the requested language. Rows whose set code was fuzzy-corrected
    get a ``_corrected`` method and one confidence tier less.

INVARIANT: convert() returns exactly one outcome per input row, in input
order. Failures are row-scoped and carried on the outcome; nothing a
single row does aborts the conversion.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace

from omenpath.config import SCRYFALL_BATCH_SIZE
from omenpath.formats.languages import display_name, languages_match, to_scryfall_code
from omenpath.models.card import Confidence, IdentificationMethod, ScryfallCard
from omenpath.models.failure import FailureKind
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.row import ParsedRow
from omenpath.services.lookup_keys import (
    LookupKey,
    MtgoIdKey,
    MultiverseIdKey,
    NameKey,
    NameSetKey,
    ScryfallIdKey,
    SetCollectorKey,
    claim_key,
    derive_key,
)
from omenpath.services.match_validator import validate_match
from omenpath.services.normalizer import assign_initial_confidence
from omenpath.services.scryfall_client import ScryfallClient, ScryfallServiceError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

NO_IDENTIFIER_ERROR = "No usable identifiers available for lookup"
NOT_FOUND_ERROR = "Card not found in Scryfall database"
SERVICE_ERROR = "API error during lookup"
VALIDATION_ERROR = "Data validation failed"

# Confidence a Stage B match earns from the key that produced it
KEY_CONFIDENCE: dict[type, Confidence] = {
    ScryfallIdKey: Confidence.VERY_HIGH,
    MultiverseIdKey: Confidence.HIGH,
    MtgoIdKey: Confidence.HIGH,
    SetCollectorKey: Confidence.HIGH,
    NameSetKey: Confidence.MEDIUM,
    NameKey: Confidence.LOW,
}

# Progress checkpoints (percent)
PROGRESS_START = 5
PROGRESS_STAGE_A_DONE = 30
PROGRESS_STAGE_B_DONE = 80
PROGRESS_DONE = 100


def needs_name_collector_search(row: ParsedRow) -> bool:
    """Name + collector number is the row's only usable identity."""
    return bool(
        row.name
        and row.collector_number
        and not row.set_code
        and not row.set_name
        and not row.has_direct_id
    )


def _as_name_only(row: ParsedRow, reason: str) -> ParsedRow:
    """Drop the collector number so the row is looked up by name alone."""
    return replace(
        row,
        collector_number=None,
        initial_confidence=Confidence.LOW,
        warnings=(*row.warnings, reason),
    )


class LookupOrchestrator:
    """
    Drives the three lookup stages for one conversion.

    Not safe to share between concurrent conversions; create one per call.
    """

    def __init__(
        self,
        client: ScryfallClient,
        progress: ProgressCallback | None = None,
        batch_size: int = SCRYFALL_BATCH_SIZE,
    ) -> None:
        if not 0 < batch_size <= SCRYFALL_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {SCRYFALL_BATCH_SIZE}")
        self.client = client
        self.batch_size = batch_size
        self._progress = progress
        self._last_progress = 0

    def _report(self, percent: int) -> None:
        """Emit progress if it moved forward. Callback errors are logged and ignored."""
        percent = min(percent, PROGRESS_DONE)
        if self._progress is None or percent <= self._last_progress:
            return
        self._last_progress = percent
        try:
            self._progress(percent)
        except Exception:
            logger.warning("Progress callback failed at %d%%", percent, exc_info=True)

    async def convert(self, rows: Sequence[ParsedRow]) -> list[ConversionOutcome]:
        """
        Resolve every row.

        Returns:
            One outcome per row, in the order the rows were given
        """
        self._last_progress = 0
        self._report(PROGRESS_START)

        prepared = [
            row if row.initial_confidence is not None else assign_initial_confidence(row)
            for row in rows
        ]

        stage_a, remaining = await self._stage_name_collector(prepared)
        self._report(PROGRESS_STAGE_A_DONE)

        stage_b = await self._stage_bulk_lookup(remaining)
        self._report(PROGRESS_STAGE_B_DONE)

        stage_c = await self._stage_secondary(stage_b)

        outcomes = {**stage_a, **stage_c}
        if len(outcomes) != len(rows):
            raise RuntimeError(f"Produced {len(outcomes)} outcomes for {len(rows)} rows")

        self._report(PROGRESS_DONE)
        ordered = [outcomes[index] for index in range(len(rows))]
        logger.info(
            "Lookup finished: %d rows, %d matched, %d failed",
            len(ordered),
            sum(1 for o in ordered if o.success),
            sum(1 for o in ordered if not o.success),
        )
        return ordered

    # -------------------------------------------------------------------------
    # Stage A
    # -------------------------------------------------------------------------

    async def _stage_name_collector(
        self, rows: Sequence[ParsedRow]
    ) -> tuple[dict[int, ConversionOutcome], list[tuple[int, ParsedRow]]]:
        resolved: dict[int, ConversionOutcome] = {}
        remaining: list[tuple[int, ParsedRow]] = []

        candidates = sum(1 for row in rows if needs_name_collector_search(row))
        searched = 0
        for index, row in enumerate(rows):
            if not needs_name_collector_search(row):
                remaining.append((index, row))
                continue

            outcome, fallback = await self._search_name_collector(row)
            if outcome is not None:
                resolved[index] = outcome
            else:
                remaining.append((index, fallback))

            searched += 1
            self._report(
                PROGRESS_START + (PROGRESS_STAGE_A_DONE - PROGRESS_START) * searched // candidates
            )

        if candidates:
            logger.info(
                "Name + collector number search: %d of %d rows resolved",
                len(resolved),
                candidates,
            )
        return resolved, remaining

    async def _search_name_collector(
        self, row: ParsedRow
    ) -> tuple[ConversionOutcome | None, ParsedRow]:
        assert row.name is not None and row.collector_number is not None

        try:
            hits = await self.client.search_by_name_and_collector(row.name, row.collector_number)
        except ScryfallServiceError as e:
            logger.warning("Name + collector search failed for row %d: %s", row.source_row_number, e)
            return None, _as_name_only(
                row, "Name + collector number search failed; looking up by name only"
            )

        if not hits:
            return None, _as_name_only(
                row,
                f'No card named "{row.name}" with collector number {row.collector_number}; '
                "looking up by name only",
            )
        if len(hits) > 1:
            return None, _as_name_only(
                row,
                f"{len(hits)} printings match name + collector number; "
                "looking up by name only",
            )

        card = hits[0]
        row = replace(row, matched_card=card, found_via_name_collector_search=True)
        validation = validate_match(row, card)
        outcome = ConversionOutcome(
            row=row,
            success=True,
            card=card,
            confidence=Confidence.MEDIUM,
            method=IdentificationMethod.NAME_COLLECTOR,
            warnings=(
                *row.warnings,
                f'Found set "{card.set_code.upper()}" via name + collector number search',
                *validation.warnings,
            ),
        )
        return outcome, row

    # -------------------------------------------------------------------------
    # Stage B
    # -------------------------------------------------------------------------

    async def _stage_bulk_lookup(
        self, rows: Sequence[tuple[int, ParsedRow]]
    ) -> dict[int, ConversionOutcome]:
        outcomes: dict[int, ConversionOutcome] = {}
        rows_by_key: dict[LookupKey, list[tuple[int, ParsedRow]]] = {}

        for index, row in rows:
            key = derive_key(row) if row.needs_lookup else None
            if key is None:
                outcomes[index] = ConversionOutcome.failed(
                    row, FailureKind.NO_IDENTIFIER, NO_IDENTIFIER_ERROR
                )
            else:
                rows_by_key.setdefault(key, []).append((index, row))

        keys = list(rows_by_key)
        batches = [keys[i : i + self.batch_size] for i in range(0, len(keys), self.batch_size)]
        logger.info(
            "Bulk lookup: %d rows, %d distinct keys, %d batches",
            len(rows),
            len(keys),
            len(batches),
        )

        for number, batch in enumerate(batches, start=1):
            try:
                response = await self.client.fetch_collection([k.to_identifier() for k in batch])
            except ScryfallServiceError as e:
                logger.warning("Batch %d of %d failed: %s", number, len(batches), e)
                for key in batch:
                    for index, row in rows_by_key[key]:
                        outcomes[index] = ConversionOutcome.failed(
                            row, FailureKind.SERVICE_ERROR, f"{SERVICE_ERROR}: {e}"
                        )
            else:
                matches = self._claim_records(response.data, batch)
                for key in batch:
                    card = matches.get(key)
                    for index, row in rows_by_key[key]:
                        if card is None:
                            outcomes[index] = ConversionOutcome.failed(
                                row, FailureKind.NOT_FOUND, NOT_FOUND_ERROR
                            )
                        else:
                            outcomes[index] = self._accept(row, key, card)

            self._report(
                PROGRESS_STAGE_A_DONE
                + (PROGRESS_STAGE_B_DONE - PROGRESS_STAGE_A_DONE) * number // len(batches)
            )

        return outcomes

    @staticmethod
    def _claim_records(
        records: Sequence[ScryfallCard], batch: Sequence[LookupKey]
    ) -> dict[LookupKey, ScryfallCard]:
        """Pair each returned record with the one requested key it answers."""
        pending = set(batch)
        matches: dict[LookupKey, ScryfallCard] = {}
        for card in records:
            key = claim_key(card, pending)
            if key is None:
                logger.debug("Returned card %s (%s) matched no requested key", card.name, card.id)
                continue
            matches[key] = card
        return matches

    @staticmethod
    def _accept(row: ParsedRow, key: LookupKey, card: ScryfallCard) -> ConversionOutcome:
        """Validate a claimed record against one row sharing the key."""
        row = replace(row, matched_card=card)
        validation = validate_match(row, card)
        if not validation.is_valid:
            return ConversionOutcome.failed(
                row,
                FailureKind.VALIDATION_MISMATCH,
                f"{VALIDATION_ERROR}: {'; '.join(validation.errors)}",
            )
        return ConversionOutcome(
            row=row,
            success=True,
            card=card,
            confidence=KEY_CONFIDENCE[type(key)],
            method=key.method,
            warnings=(*row.warnings, *validation.warnings),
        )

    # -------------------------------------------------------------------------
    # Stage C
    # -------------------------------------------------------------------------

    async def _stage_secondary(
        self, outcomes: dict[int, ConversionOutcome]
    ) -> dict[int, ConversionOutcome]:
        checked: dict[int, ConversionOutcome] = {}
        total = len(outcomes)
        for done, (index, outcome) in enumerate(sorted(outcomes.items()), start=1):
            if outcome.success and outcome.card is not None:
                outcome = await self._check_language(outcome)
                outcome = self._tag_set_correction(outcome)
            checked[index] = outcome
            self._report(
                PROGRESS_STAGE_B_DONE + (PROGRESS_DONE - PROGRESS_STAGE_B_DONE) * done // total
            )
        return checked

    async def _check_language(self, outcome: ConversionOutcome) -> ConversionOutcome:
        row, card = outcome.row, outcome.card
        assert card is not None

        if not row.language:
            return outcome

        requested = display_name(row.language)

        # Name-only lookups cannot be pinned to a printing; report the asked-for language
        if outcome.method is IdentificationMethod.NAME_ONLY:
            return replace(outcome, output_language=requested)

        if languages_match(row.language, card.lang):
            return outcome

        found = display_name(card.lang)
        code = to_scryfall_code(row.language)
        if code is None or not card.collector_number:
            return replace(
                outcome,
                language_mismatch=True,
                warnings=(
                    *outcome.warnings,
                    f"Language mismatch: requested {requested}, found {found}",
                ),
            )

        try:
            hits = await self.client.search_by_language(card.set_code, card.collector_number, code)
        except ScryfallServiceError as e:
            logger.warning(
                "Language search failed for row %d: %s", row.source_row_number, e
            )
            hits = []

        corrected = next((hit for hit in hits if hit.lang == code), None)
        if corrected is None:
            return replace(
                outcome,
                language_mismatch=True,
                warnings=(
                    *outcome.warnings,
                    f"Language mismatch: requested {requested}, found {found}; "
                    f"no {requested} printing found",
                ),
            )

        return replace(
            outcome,
            row=replace(row, matched_card=corrected),
            card=corrected,
            language_mismatch=True,
            warnings=(
                *outcome.warnings,
                f"Language corrected: using the {requested} printing instead of {found}",
            ),
        )

    @staticmethod
    def _tag_set_correction(outcome: ConversionOutcome) -> ConversionOutcome:
        if not outcome.row.set_code_corrected:
            return outcome
        corrected = outcome.method.corrected()
        if corrected is outcome.method:
            return outcome
        return replace(outcome, method=corrected, confidence=outcome.confidence.downgrade())
