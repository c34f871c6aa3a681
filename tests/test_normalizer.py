"""Tests for row normalization and initial confidence."""

import pytest

from omenpath.formats import FORMATS_BY_ID
from omenpath.formats import normalizers as n
from omenpath.models.card import Confidence
from omenpath.models.row import ParsedRow
from omenpath.services.lookup_keys import SetCollectorKey, derive_key
from omenpath.services.normalizer import (
    NAME_ONLY_WARNING,
    NO_IDENTIFIER_WARNING,
    assign_initial_confidence,
    has_any_identifier,
    initial_confidence_for,
    normalize,
)

MOXFIELD = FORMATS_BY_ID["moxfield"]
MANABOX = FORMATS_BY_ID["manabox"]
GENERIC = FORMATS_BY_ID["generic"]


class TestCellNormalizers:
    def test_text_blank_is_none(self) -> None:
        assert n.text("   ") is None
        assert n.text("  Opt ") == "Opt"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("NM", "Near Mint"),
            ("near_mint", "near_mint"),
            ("lp", "Lightly Played"),
            ("Heavily Played", "Heavily Played"),
            ("", None),
        ],
    )
    def test_condition(self, raw: str, expected: str | None) -> None:
        assert n.condition(raw) == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("foil", "foil"),
            ("TRUE", "foil"),
            ("etched", "etched"),
            ("Etched Foil", "etched"),
            ("", None),
            ("false", None),
            ("normal", None),
        ],
    )
    def test_foil(self, raw: str, expected: str | None) -> None:
        assert n.foil(raw) == expected

    def test_language_display_name(self) -> None:
        assert n.language("jp") == "Japanese"
        assert n.language("Klingon") == "Klingon"
        assert n.language(" ") is None

    def test_flag(self) -> None:
        assert n.flag("Yes") == "true"
        assert n.flag("False") == "false"
        assert n.flag("") == "false"

    def test_dash_flag(self) -> None:
        assert n.dash_flag("-") == "false"
        assert n.dash_flag("Signed") == "true"

    def test_has_tag(self) -> None:
        is_proxy = n.has_tag("proxy")

        assert is_proxy("Commander, Proxy") == "true"
        assert is_proxy("Commander/Binder") == "false"

    def test_tcgplayer_name(self) -> None:
        assert n.tcgplayer_name("Sol Ring (Showcase)") == "Sol Ring"
        assert n.tcgplayer_name("Goblin Token") == "Goblin"

    def test_seller_condition_and_foil(self) -> None:
        assert n.seller_condition("Near Mint Foil") == "Near Mint"
        assert n.seller_foil("Near Mint Foil") == "foil"
        assert n.seller_foil("Near Mint") is None

    def test_fraction_number(self) -> None:
        assert n.fraction_number("12/250") == "12"

    def test_cardcastle_id(self) -> None:
        uuid = "b0000000-0000-4000-8000-000000000007"

        assert n.cardcastle_id(uuid + "0") == uuid
        assert n.cardcastle_id(uuid) == uuid


class TestNormalize:
    def test_moxfield_row(self) -> None:
        values = {
            "Count": "4",
            "Tradelist Count": "0",
            "Name": "Lightning Bolt",
            "Edition": "2XM",
            "Condition": "NM",
            "Language": "English",
            "Foil": "foil",
            "Tags": "burn, staples",
            "Collector Number": "129",
            "Alter": "False",
            "Proxy": "True",
            "Purchase Price": "1.85",
        }

        row = normalize(values, MOXFIELD, source_row_number=2)

        assert row.count == 4
        assert row.name == "Lightning Bolt"
        assert row.set_code == "2xm"
        assert row.collector_number == "129"
        assert row.condition == "Near Mint"
        assert row.language == "English"
        assert row.foil == "foil"
        assert row.tags == ("burn", "staples")
        assert row.alter is False
        assert row.proxy is True
        assert row.purchase_price == "1.85"
        assert row.source_row_number == 2
        assert row.original_data == values
        assert row.initial_confidence == Confidence.HIGH
        assert row.warnings == ()

    def test_unmapped_fields_stay_unset(self) -> None:
        row = normalize({"Count": "1", "Tradelist Count": "0", "Name": "Opt"}, MOXFIELD, 2)

        assert row.set_code is None
        assert row.collector_number is None
        assert row.language is None
        assert row.foil is None

    def test_headers_match_case_insensitively(self) -> None:
        row = normalize({" name ": "Opt", "QUANTITY": "2"}, MANABOX, 5)

        assert row.name == "Opt"
        assert row.count == 2

    def test_alternate_columns(self) -> None:
        """The first column spec that yields a value wins."""
        row = normalize({"Quantity": "3", "Name": "Opt", "Set": "DOM"}, GENERIC, 2)

        assert row.count == 3
        assert row.set_code == "dom"

    @pytest.mark.parametrize("raw", ["0", "-2", "many"])
    def test_invalid_count_defaults_to_one(self, raw: str) -> None:
        row = normalize({"Count": raw, "Tradelist Count": "0", "Name": "Opt"}, MOXFIELD, 2)

        assert row.count == 1
        assert any("Invalid quantity" in w for w in row.warnings)

    def test_numeric_ids_are_parsed(self) -> None:
        values = {"Card Name": "Reaper King", "Quantity": "1", "ID #": "79038"}

        row = normalize(values, FORMATS_BY_ID["mtgo"], 2)

        assert row.mtgo_id == 79038
        assert row.initial_confidence == Confidence.HIGH

    def test_invalid_numeric_id_is_dropped_with_warning(self) -> None:
        values = {"Card Name": "Reaper King", "Quantity": "1", "ID #": "abc"}

        row = normalize(values, FORMATS_BY_ID["mtgo"], 2)

        assert row.mtgo_id is None
        assert any("mtgo id" in w for w in row.warnings)

    def test_zero_id_counts_as_missing(self) -> None:
        """A 0 id is a placeholder; set + collector number decide the row."""
        values = {
            "Quantity": "1",
            "Name": "Lightning Bolt",
            "Edition Code": "2XM",
            "Collector Number": "129",
            "Multiverse Id": "0",
            "MTGO ID": "0",
        }

        row = normalize(values, FORMATS_BY_ID["archidekt"], 2)

        assert row.multiverse_id is None
        assert row.mtgo_id is None
        assert not row.has_direct_id
        assert row.initial_confidence == Confidence.HIGH
        assert derive_key(row) == SetCollectorKey("2xm", "129")
        assert 'Ignoring placeholder multiverse id "0"' in row.warnings

    def test_long_scryfall_id_is_trimmed(self) -> None:
        values = {
            "Quantity": "1",
            "Name": "Delver of Secrets",
            "Scryfall ID": "b0000000-0000-4000-8000-000000000007extra",
        }

        row = normalize(values, MANABOX, 2)

        assert row.scryfall_id == "b0000000-0000-4000-8000-000000000007"
        assert any("trimmed" in w for w in row.warnings)

    def test_unrecognized_language_warns(self) -> None:
        values = {"Count": "1", "Tradelist Count": "0", "Name": "Opt", "Language": "Klingon"}

        row = normalize(values, MOXFIELD, 2)

        assert row.language == "Klingon"
        assert 'Unrecognized language "Klingon"' in row.warnings

    def test_row_without_identifiers(self) -> None:
        row = normalize({"Count": "1", "Tradelist Count": "0", "Name": ""}, MOXFIELD, 7)

        assert row.needs_lookup is False
        assert row.initial_confidence == Confidence.LOW
        assert NO_IDENTIFIER_WARNING in row.warnings


class TestInitialConfidence:
    @pytest.mark.parametrize(
        ("row", "expected"),
        [
            (ParsedRow(name="Opt", scryfall_id="b0000000-0000-4000-8000-000000000009"),
             Confidence.VERY_HIGH),
            (ParsedRow(name="Opt", multiverse_id=442960), Confidence.HIGH),
            (ParsedRow(mtgo_id=79038), Confidence.HIGH),
            (ParsedRow(set_code="dom", collector_number="60"), Confidence.HIGH),
            (ParsedRow(set_code="dom", collector_number="60", set_code_corrected=True),
             Confidence.MEDIUM),
            (ParsedRow(set_name="Dominaria", collector_number="60"), Confidence.MEDIUM),
            (ParsedRow(name="Opt", set_code="dom"), Confidence.MEDIUM),
            (ParsedRow(name="Opt"), Confidence.LOW),
            (ParsedRow(), Confidence.LOW),
        ],
    )
    def test_richest_evidence_wins(self, row: ParsedRow, expected: Confidence) -> None:
        assert initial_confidence_for(row) == expected

    def test_name_only_warns(self) -> None:
        row = assign_initial_confidence(ParsedRow(name="Opt"))

        assert row.initial_confidence == Confidence.LOW
        assert row.warnings == (NAME_ONLY_WARNING,)

    def test_name_and_collector_number_do_not_warn(self) -> None:
        """That combination gets its own search before falling back to name only."""
        row = assign_initial_confidence(ParsedRow(name="Opt", collector_number="60"))

        assert row.warnings == ()

    def test_missing_name_warns(self) -> None:
        row = assign_initial_confidence(ParsedRow(set_code="dom", collector_number="60"))

        assert any("Missing card name" in w for w in row.warnings)

    def test_reassigning_does_not_duplicate_warnings(self) -> None:
        row = assign_initial_confidence(assign_initial_confidence(ParsedRow(name="Opt")))

        assert row.warnings.count(NAME_ONLY_WARNING) == 1

    def test_has_any_identifier(self) -> None:
        assert has_any_identifier(ParsedRow(name="Opt"))
        assert has_any_identifier(ParsedRow(mtgo_id=1))
        assert has_any_identifier(ParsedRow(set_code="dom", collector_number="60"))
        assert not has_any_identifier(ParsedRow(set_code="dom"))
        assert not has_any_identifier(ParsedRow(collector_number="60"))
