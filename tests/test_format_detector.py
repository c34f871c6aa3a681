"""Tests for export format detection."""

from dataclasses import replace

from omenpath.config import MIN_DETECTION_SCORE
from omenpath.formats import FORMATS, FORMATS_BY_ID, FormatKind, get_format
from omenpath.services.format_detector import (
    MAX_SCORE,
    detect,
    detect_content,
    score_format,
)

CANONICAL_HEADERS = [
    "Count",
    "Name",
    "Edition",
    "Condition",
    "Language",
    "Foil",
    "Tags",
    "Last Modified",
    "Collector Number",
    "Alter",
    "Proxy",
    "Purchase Price",
]

MANABOX_HEADERS = [
    "Name",
    "Set code",
    "Set name",
    "Collector number",
    "Foil",
    "Rarity",
    "Quantity",
    "ManaBox ID",
    "Scryfall ID",
    "Purchase price",
    "Misprint",
    "Altered",
    "Condition",
    "Language",
    "Purchase price currency",
]


class TestRegistry:
    def test_ids_are_unique(self) -> None:
        """Every registered format has its own id."""
        assert len(FORMATS_BY_ID) == len(FORMATS)

    def test_generic_is_registered_last(self) -> None:
        """The catch-all format only wins when nothing specific does."""
        assert FORMATS[-1].id == "generic"

    def test_get_format(self) -> None:
        assert get_format("moxfield") is FORMATS_BY_ID["moxfield"]
        assert get_format("no-such-format") is None

    def test_xml_formats_have_content_signature(self) -> None:
        for fmt in FORMATS:
            if fmt.kind is FormatKind.XML:
                assert fmt.content_signature is not None


class TestScoreFormat:
    def test_missing_required_header_scores_zero(self) -> None:
        """Required headers are a hard gate regardless of other matches."""
        moxfield = FORMATS_BY_ID["moxfield"]

        assert score_format(moxfield, CANONICAL_HEADERS) == 0.0

    def test_strong_indicator_adds_bonus(self) -> None:
        moxfield = FORMATS_BY_ID["moxfield"]

        score = score_format(moxfield, ["Count", "Tradelist Count", "Name"])

        # one strong indicator + bonus + two common indicators
        assert score == 0.65

    def test_score_is_capped(self) -> None:
        moxfield = FORMATS_BY_ID["moxfield"]

        assert score_format(moxfield, ["Tradelist Count", *CANONICAL_HEADERS]) == MAX_SCORE

    def test_headers_match_case_and_whitespace_insensitively(self) -> None:
        moxfield = FORMATS_BY_ID["moxfield"]
        messy = [" count ", "TRADELIST COUNT", "name"]

        assert score_format(moxfield, messy) == score_format(
            moxfield, ["Count", "Tradelist Count", "Name"]
        )

    def test_xml_format_scores_zero_on_headers(self) -> None:
        dek = FORMATS_BY_ID["mtgo-dek"]

        assert score_format(dek, ["CatID", "Quantity", "Name"]) == 0.0


class TestDetect:
    def test_canonical_headers_detect_generic(self) -> None:
        """Moxfield-style headers without Tradelist Count fall to the generic format."""
        detection = detect(CANONICAL_HEADERS)

        assert detection is not None
        assert detection.format.id == "generic"
        assert detection.score >= MIN_DETECTION_SCORE

    def test_tradelist_count_detects_moxfield(self) -> None:
        """Adding the Tradelist Count strong indicator flips detection to Moxfield."""
        headers = CANONICAL_HEADERS[:1] + ["Tradelist Count"] + CANONICAL_HEADERS[1:]

        detection = detect(headers)

        assert detection is not None
        assert detection.format.id == "moxfield"
        assert detection.score == MAX_SCORE

    def test_manabox(self) -> None:
        detection = detect(MANABOX_HEADERS)

        assert detection is not None
        assert detection.format.id == "manabox"

    def test_deckbox(self) -> None:
        headers = [
            "Count",
            "Tradelist Count",
            "Name",
            "Edition",
            "Edition Code",
            "Card Number",
            "Condition",
            "Language",
            "Foil",
            "Signed",
            "Artist Proof",
            "Altered Art",
            "Misprint",
            "Promo",
            "Textless",
            "My Price",
        ]

        detection = detect(headers)

        assert detection is not None
        assert detection.format.id == "deckbox"

    def test_mtgo_csv(self) -> None:
        headers = ["Card Name", "Quantity", "ID #", "Rarity", "Set", "Collector #", "Premium"]

        detection = detect(headers)

        assert detection is not None
        assert detection.format.id == "mtgo"

    def test_matching_headers_keep_input_spelling(self) -> None:
        detection = detect(MANABOX_HEADERS)

        assert detection is not None
        assert "Set code" in detection.matching_headers
        assert "Misprint" not in detection.matching_headers

    def test_empty_headers(self) -> None:
        assert detect([]) is None
        assert detect(["", "  "]) is None

    def test_unrelated_headers(self) -> None:
        assert detect(["foo", "bar", "baz"]) is None

    def test_below_floor_returns_none(self) -> None:
        """A bare name column is not enough evidence for any format."""
        assert detect(["Name"]) is None

    def test_tie_goes_to_earlier_format(self) -> None:
        """Equal scores resolve to the format registered first."""
        moxfield = FORMATS_BY_ID["moxfield"]
        twin = replace(moxfield, id="moxfield-twin")
        headers = ["Count", "Tradelist Count", "Name"]

        first = detect(headers, formats=(twin, moxfield))
        second = detect(headers, formats=(moxfield, twin))

        assert first is not None and first.format is twin
        assert second is not None and second.format is moxfield


class TestDetectContent:
    def test_dek_file(self, mtgo_dek: str) -> None:
        detection = detect_content(mtgo_dek)

        assert detection is not None
        assert detection.format.id == "mtgo-dek"
        assert detection.score == MAX_SCORE

    def test_dek_without_declaration(self) -> None:
        detection = detect_content('<Deck>\n  <Cards CatID="1" Quantity="1" Name="Opt" />\n</Deck>')

        assert detection is not None
        assert detection.format.id == "mtgo-dek"

    def test_dek_with_bom(self, mtgo_dek: str) -> None:
        assert detect_content("\ufeff" + mtgo_dek) is not None

    def test_csv_is_not_content_detected(self, moxfield_csv: str) -> None:
        assert detect_content(moxfield_csv) is None

    def test_other_xml_root(self) -> None:
        assert detect_content('<?xml version="1.0"?><Collection></Collection>') is None
