"""Tests for lookup key derivation and record claiming."""

from collections.abc import Callable

from omenpath.models.card import IdentificationMethod, ScryfallCard
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

BOLT_ID = "b0000000-0000-4000-8000-000000000001"


class TestDeriveKey:
    def test_id_and_name_yield_id_only(self) -> None:
        """A row with both an external id and a name is looked up by id alone."""
        row = ParsedRow(name="Lightning Bolt", scryfall_id=BOLT_ID, set_code="2xm")

        key = derive_key(row)

        assert key == ScryfallIdKey(BOLT_ID)
        assert key.to_identifier() == {"id": BOLT_ID}

    def test_priority_order(self) -> None:
        assert derive_key(ParsedRow(name="Opt", multiverse_id=442960, mtgo_id=1)) == (
            MultiverseIdKey(442960)
        )
        assert derive_key(ParsedRow(name="Reaper King", mtgo_id=79038)) == MtgoIdKey(79038)
        assert derive_key(ParsedRow(name="Opt", set_code="DOM", collector_number="60")) == (
            SetCollectorKey("dom", "60")
        )
        assert derive_key(ParsedRow(name="Opt", set_code="dom")) == NameSetKey("opt", "dom")
        assert derive_key(ParsedRow(name="Opt")) == NameKey("opt")

    def test_no_identifier(self) -> None:
        assert derive_key(ParsedRow()) is None
        assert derive_key(ParsedRow(set_code="dom")) is None

    def test_overlong_scryfall_id_is_cut(self) -> None:
        key = derive_key(ParsedRow(scryfall_id=BOLT_ID.upper() + "0"))

        assert key == ScryfallIdKey(BOLT_ID)

    def test_equivalent_rows_produce_equal_keys(self) -> None:
        """Keys are canonical, so spelling differences collapse to one lookup."""
        first = derive_key(ParsedRow(name="Counterspell", set_code="7ED"))
        second = derive_key(ParsedRow(name="  counterspell ", set_code="7ed"))

        assert first == second
        assert len({first, second}) == 1

    def test_methods(self) -> None:
        assert ScryfallIdKey(BOLT_ID).method is IdentificationMethod.SCRYFALL_ID
        assert SetCollectorKey("dom", "60").method is IdentificationMethod.SET_COLLECTOR
        assert NameKey("opt").method is IdentificationMethod.NAME_ONLY


class TestMatches:
    def test_mtgo_id_matches_foil_id(self, make_card: Callable[..., ScryfallCard]) -> None:
        card = make_card("Reaper King")

        assert MtgoIdKey(79038).matches(card)
        assert MtgoIdKey(79039).matches(card)
        assert not MtgoIdKey(1).matches(card)

    def test_set_collector_is_case_insensitive(
        self, make_card: Callable[..., ScryfallCard]
    ) -> None:
        card = make_card("Opt", set="DOM")

        assert SetCollectorKey("dom", "60").matches(card)

    def test_name_matches_either_face(self, make_card: Callable[..., ScryfallCard]) -> None:
        card = make_card("Delver of Secrets // Insectile Aberration")

        assert NameKey("insectile aberration").matches(card)
        assert NameSetKey("delver of secrets", "isd").matches(card)
        assert not NameSetKey("delver of secrets", "dom").matches(card)


class TestClaimKey:
    def test_id_key_claims_before_name_key(
        self, make_card: Callable[..., ScryfallCard]
    ) -> None:
        """A record satisfies only one key group, the highest-priority one."""
        card = make_card("Lightning Bolt")
        pending: set[LookupKey] = {NameKey("lightning bolt"), ScryfallIdKey(BOLT_ID)}

        claimed = claim_key(card, pending)

        assert claimed == ScryfallIdKey(BOLT_ID)
        assert pending == {NameKey("lightning bolt")}

    def test_claimed_key_is_not_claimed_twice(
        self, make_card: Callable[..., ScryfallCard]
    ) -> None:
        card = make_card("Lightning Bolt")
        pending: set[LookupKey] = {NameKey("lightning bolt")}

        assert claim_key(card, pending) == NameKey("lightning bolt")
        assert claim_key(card, pending) is None

    def test_unmatched_record(self, make_card: Callable[..., ScryfallCard]) -> None:
        pending: set[LookupKey] = {NameKey("opt")}

        assert claim_key(make_card("Sol Ring"), pending) is None
        assert pending == {NameKey("opt")}
