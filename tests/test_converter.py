"""End-to-end conversion tests against the fake Scryfall."""

import csv
import io

import pytest
from fake_scryfall import FakeScryfall

from omenpath.models.card import Confidence, IdentificationMethod
from omenpath.models.failure import FailureKind, KnownError, UnknownFormatError
from omenpath.services.converter import ConversionStats, convert_text, resolve_format
from omenpath.services.export import NOTES_HEADER
from omenpath.services.scryfall_client import ScryfallClient


def read_back(text: str) -> list[dict[str, str]]:
    return list(csv.DictReader(io.StringIO(text)))


class TestResolveFormat:
    def test_detects_csv_format(self, moxfield_csv: str) -> None:
        fmt, score, source = resolve_format(moxfield_csv)

        assert fmt.id == "moxfield"
        assert score == 1.0
        assert len(source.rows) == 2

    def test_detects_dek_content(self, mtgo_dek: str) -> None:
        fmt, score, source = resolve_format(mtgo_dek)

        assert fmt.id == "mtgo-dek"
        assert score == 1.0
        assert len(source.rows) == 2

    def test_explicit_format_skips_detection(self) -> None:
        fmt, score, source = resolve_format("Name\nOpt\n", "generic")

        assert fmt.id == "generic"
        assert score is None
        assert source.rows[0].values == {"Name": "Opt"}

    def test_unknown_format_id(self) -> None:
        with pytest.raises(KnownError) as exc_info:
            resolve_format("Name\nOpt\n", "not-a-format")

        assert exc_info.value.kind is FailureKind.INVALID_INPUT
        assert "not-a-format" in exc_info.value.message

    def test_undetectable_headers(self) -> None:
        with pytest.raises(UnknownFormatError) as exc_info:
            resolve_format("Player,Score\nAlice,20\n")

        assert exc_info.value.headers == ["Player", "Score"]
        assert exc_info.value.status_code == 422


class TestConvertText:
    async def test_moxfield_export(
        self, moxfield_csv: str, scryfall_client: ScryfallClient
    ) -> None:
        result = await convert_text(moxfield_csv, scryfall_client)

        assert result.format.id == "moxfield"
        assert result.stats.total == 2
        assert result.stats.succeeded == 2
        assert result.stats.failed == 0

        by_name = {o.display_name: o for o in result.outcomes}
        bolt = by_name["Lightning Bolt"]
        sheoldred = by_name["Sheoldred, the Apocalypse"]
        assert bolt.method is IdentificationMethod.SET_COLLECTOR
        assert bolt.confidence is Confidence.HIGH
        assert sheoldred.language_mismatch
        assert sheoldred.card is not None and sheoldred.card.lang == "ja"

        # Rows with warnings come first
        assert result.outcomes[0] is sheoldred
        assert [o.output_row_number for o in result.outcomes] == [2, 3]

        records = read_back(result.csv)
        assert [r["Name"] for r in records] == ["Sheoldred, the Apocalypse", "Lightning Bolt"]
        assert records[0]["Language"] == "Japanese"
        assert records[0]["Foil"] == "foil"
        assert records[1]["Count"] == "4"
        assert records[1]["Purchase Price"] == "1.85"
        assert "Language corrected" in records[0][NOTES_HEADER]

    async def test_dek_export(
        self, mtgo_dek: str, scryfall: FakeScryfall, scryfall_client: ScryfallClient
    ) -> None:
        result = await convert_text(mtgo_dek, scryfall_client)

        assert result.format.id == "mtgo-dek"
        assert all(o.method is IdentificationMethod.MTGO_ID for o in result.outcomes)
        assert scryfall.collection_requests == [[{"mtgo_id": 81239}, {"mtgo_id": 42326}]]

        records = read_back(result.csv)
        assert [(r["Count"], r["Name"], r["Edition"]) for r in records] == [
            ("2", "Delver of Secrets // Insectile Aberration", "isd"),
            ("4", "Lightning Bolt", "2xm"),
        ]

    async def test_set_correction_flows_through(self, scryfall_client: ScryfallClient) -> None:
        text = (
            "Quantity,Name,Set code,Set name,Collector number\n"
            "1,Opt,xyz,Dominaria,60\n"
        )

        result = await convert_text(text, scryfall_client, format_id="manabox")

        [outcome] = result.outcomes
        assert outcome.success
        assert outcome.set_code_corrected
        assert outcome.method is IdentificationMethod.SET_COLLECTOR_CORRECTED
        assert outcome.confidence is Confidence.MEDIUM
        assert result.set_report.invalid_set_codes == ("xyz",)

    async def test_zero_ids_fall_back_to_set_and_collector_number(
        self, scryfall: FakeScryfall, scryfall_client: ScryfallClient
    ) -> None:
        text = (
            "Quantity,Name,Edition Code,Collector Number,Multiverse Id\n"
            "1,Lightning Bolt,2xm,129,0\n"
        )

        result = await convert_text(text, scryfall_client, format_id="archidekt")

        [outcome] = result.outcomes
        assert outcome.success
        assert outcome.method is IdentificationMethod.SET_COLLECTOR
        assert scryfall.collection_requests == [[{"set": "2xm", "collector_number": "129"}]]

    async def test_row_failures_do_not_fail_the_conversion(
        self, scryfall_client: ScryfallClient
    ) -> None:
        text = "Quantity,Name\n1,Opt\n1,Not A Real Card\n"

        result = await convert_text(text, scryfall_client, format_id="generic")

        assert result.stats.total == 2
        assert result.stats.failed == 1
        assert result.outcomes[0].error_kind is FailureKind.NOT_FOUND
        assert read_back(result.csv)[0][NOTES_HEADER].startswith("ERROR: Card not found")

    async def test_progress_reaches_completion(
        self, moxfield_csv: str, scryfall_client: ScryfallClient
    ) -> None:
        seen: list[int] = []

        await convert_text(moxfield_csv, scryfall_client, progress=seen.append)

        assert seen[-1] == 100


class TestConversionStats:
    async def test_counts(self, moxfield_csv: str, scryfall_client: ScryfallClient) -> None:
        result = await convert_text(moxfield_csv, scryfall_client)

        assert result.stats == ConversionStats(
            total=2,
            succeeded=2,
            failed=0,
            with_warnings=1,
            by_confidence={"high": 2},
            by_method={"set_collector": 2},
        )
