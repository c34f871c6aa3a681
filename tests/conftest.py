from collections.abc import AsyncIterator, Callable, Iterator
from typing import Any

import pytest
import respx
from fake_scryfall import SCRYFALL_URL, FakeScryfall, load_fixture

from omenpath.models.card import ScryfallCard
from omenpath.services.scryfall_client import ScryfallClient


@pytest.fixture
def card_data() -> list[dict[str, Any]]:
    """Raw Scryfall card objects used across tests."""
    return load_fixture("scryfall_cards.json")


@pytest.fixture
def make_card(card_data: list[dict[str, Any]]) -> Callable[..., ScryfallCard]:
    """Build a ScryfallCard from a fixture card by name, with field overrides."""

    def _make(name: str = "Lightning Bolt", **overrides: Any) -> ScryfallCard:
        raw = next(c for c in card_data if c["name"] == name)
        return ScryfallCard.model_validate({**raw, **overrides})

    return _make


@pytest.fixture
def scryfall(card_data: list[dict[str, Any]]) -> Iterator[FakeScryfall]:
    """Route Scryfall traffic to an in-memory fake."""
    fake = FakeScryfall(card_data, load_fixture("scryfall_sets.json"))
    with respx.mock(base_url=SCRYFALL_URL, assert_all_called=False) as router:
        router.post("/cards/collection").mock(side_effect=fake.collection)
        router.get("/cards/search").mock(side_effect=fake.search)
        router.get("/sets").mock(side_effect=fake.list_sets)
        router.get("/sets/lea").mock(side_effect=fake.health)
        yield fake


@pytest.fixture
async def scryfall_client(scryfall: FakeScryfall) -> AsyncIterator[ScryfallClient]:
    """A real client pointed at the fake, without rate-limit delays."""
    async with ScryfallClient(SCRYFALL_URL, rate_limit_delay=0) as client:
        yield client


@pytest.fixture
def moxfield_csv() -> str:
    """Sample Moxfield collection export."""
    return (
        '"Count","Tradelist Count","Name","Edition","Condition","Language","Foil",'
        '"Tags","Last Modified","Collector Number","Alter","Proxy","Purchase Price"\n'
        '"4","0","Lightning Bolt","2xm","Near Mint","English","","","2024-01-05 10:00:00",'
        '"129","False","False","1.85"\n'
        '"1","0","Sheoldred, the Apocalypse","dmu","Lightly Played","Japanese","foil","",'
        '"2024-01-05 10:00:00","107","False","False",""\n'
    )


@pytest.fixture
def mtgo_dek() -> str:
    """Sample MTGO .dek export."""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<Deck xmlns:xsd="http://www.w3.org/2001/XMLSchema" '
        'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">\n'
        "  <NetDeckID>0</NetDeckID>\n"
        "  <PreconstructedDeckID>0</PreconstructedDeckID>\n"
        '  <Cards CatID="81239" Quantity="4" Sideboard="false" Name="Lightning Bolt" />\n'
        '  <Cards CatID="42326" Quantity="2" Sideboard="false" Name="Delver of Secrets" />\n'
        '  <Cards CatID="38145" Quantity="1" Sideboard="true" Name="Lightning Bolt" />\n'
        "</Deck>\n"
    )
