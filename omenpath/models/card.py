"""
Card records and identification labels.

ScryfallCard is the authoritative record returned by Scryfall. It is
read-only once fetched; the lookup pipeline only ever replaces a row's
matched record, never edits one.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Confidence(str, Enum):
    """Ordinal certainty that a matched record is the card the row meant."""

    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """0 for the strongest tier, 3 for the weakest."""
        return _CONFIDENCE_ORDER.index(self)

    def downgrade(self) -> "Confidence":
        """One tier lower, bottoming out at LOW."""
        return _CONFIDENCE_ORDER[min(self.rank + 1, len(_CONFIDENCE_ORDER) - 1)]

    def upgrade(self) -> "Confidence":
        """One tier higher, topping out at VERY_HIGH."""
        return _CONFIDENCE_ORDER[max(self.rank - 1, 0)]


_CONFIDENCE_ORDER: tuple[Confidence, ...] = (
    Confidence.VERY_HIGH,
    Confidence.HIGH,
    Confidence.MEDIUM,
    Confidence.LOW,
)


class IdentificationMethod(str, Enum):
    """How a row was matched to its Scryfall record."""

    SCRYFALL_ID = "scryfall_id"
    MULTIVERSE_ID = "multiverse_id"
    MTGO_ID = "mtgo_id"
    SET_COLLECTOR = "set_collector"
    SET_COLLECTOR_CORRECTED = "set_collector_corrected"
    NAME_SET = "name_set"
    NAME_SET_CORRECTED = "name_set_corrected"
    NAME_COLLECTOR = "name_collector"
    NAME_ONLY = "name_only"
    FAILED = "failed"

    def corrected(self) -> "IdentificationMethod":
        """The ``_corrected`` variant, for set-based methods only."""
        return _CORRECTED_METHODS.get(self, self)


_CORRECTED_METHODS = {
    IdentificationMethod.SET_COLLECTOR: IdentificationMethod.SET_COLLECTOR_CORRECTED,
    IdentificationMethod.NAME_SET: IdentificationMethod.NAME_SET_CORRECTED,
}


class CardFace(BaseModel):
    """One face of a multi-faced card."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str


class ScryfallCard(BaseModel):
    """
    A card printing as returned by the Scryfall API.

    Only the fields the converter reads are declared; the rest of the
    payload is kept as extra attributes.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: str
    name: str
    set_code: str = Field(alias="set")
    set_name: str = ""
    collector_number: str = ""
    lang: str = "en"
    multiverse_ids: list[int] = Field(default_factory=list)
    mtgo_id: int | None = None
    mtgo_foil_id: int | None = None
    tcgplayer_id: int | None = None
    cardmarket_id: int | None = None
    finishes: list[str] = Field(default_factory=list)
    card_faces: list[CardFace] | None = None
    prices: dict[str, str | None] = Field(default_factory=dict)

    @property
    def face_names(self) -> tuple[str, ...]:
        """Names of the individual faces, falling back to splitting ``A // B``."""
        if self.card_faces:
            return tuple(face.name for face in self.card_faces)
        if " // " in self.name:
            return tuple(part.strip() for part in self.name.split(" // "))
        return ()

    def offers_finish(self, finish: str) -> bool:
        """True if the printing exists in ``finish`` (unknown finishes count as offered)."""
        if not self.finishes:
            return True
        return finish in self.finishes


class ScryfallSet(BaseModel):
    """A set as returned by Scryfall's /sets endpoint."""

    model_config = ConfigDict(frozen=True, extra="allow")

    code: str
    name: str
    set_type: str = ""
    digital: bool = False


def parse_cards(payload: list[dict[str, Any]]) -> list[ScryfallCard]:
    """Validate a list of raw Scryfall card objects."""
    return [ScryfallCard.model_validate(item) for item in payload]


def fold(value: str) -> str:
    """Case- and whitespace-insensitive comparison form of a string."""
    return " ".join(value.split()).casefold()


def card_has_name(card: ScryfallCard, name: str) -> bool:
    """True if ``name`` is the card's full name or the name of one of its faces."""
    target = fold(name)
    if fold(card.name) == target:
        return True
    return any(fold(face) == target for face in card.face_names)
