"""
Lookup keys for Scryfall's /cards/collection endpoint.

Each row is reduced to exactly one key by strict priority:

    Scryfall id > multiverse id > MTGO id > set + collector number
    > name + set > name

Keys are frozen dataclasses holding canonical values, so two rows that ask
for the same card produce equal, hashable keys and share one lookup.
"""

from dataclasses import dataclass
from typing import ClassVar

from omenpath.config import SCRYFALL_ID_LENGTH
from omenpath.models.card import IdentificationMethod, ScryfallCard, card_has_name, fold
from omenpath.models.row import ParsedRow


@dataclass(frozen=True, slots=True)
class ScryfallIdKey:
    id: str

    method: ClassVar[IdentificationMethod] = IdentificationMethod.SCRYFALL_ID

    def to_identifier(self) -> dict[str, str | int]:
        return {"id": self.id}

    def matches(self, card: ScryfallCard) -> bool:
        return card.id[:SCRYFALL_ID_LENGTH].lower() == self.id


@dataclass(frozen=True, slots=True)
class MultiverseIdKey:
    multiverse_id: int

    method: ClassVar[IdentificationMethod] = IdentificationMethod.MULTIVERSE_ID

    def to_identifier(self) -> dict[str, str | int]:
        return {"multiverse_id": self.multiverse_id}

    def matches(self, card: ScryfallCard) -> bool:
        return self.multiverse_id in card.multiverse_ids


@dataclass(frozen=True, slots=True)
class MtgoIdKey:
    mtgo_id: int

    method: ClassVar[IdentificationMethod] = IdentificationMethod.MTGO_ID

    def to_identifier(self) -> dict[str, str | int]:
        return {"mtgo_id": self.mtgo_id}

    def matches(self, card: ScryfallCard) -> bool:
        # Foil MTGO printings have their own catalog id
        return self.mtgo_id in (card.mtgo_id, card.mtgo_foil_id)


@dataclass(frozen=True, slots=True)
class SetCollectorKey:
    set_code: str
    collector_number: str

    method: ClassVar[IdentificationMethod] = IdentificationMethod.SET_COLLECTOR

    def to_identifier(self) -> dict[str, str | int]:
        return {"set": self.set_code, "collector_number": self.collector_number}

    def matches(self, card: ScryfallCard) -> bool:
        return (
            card.set_code.lower() == self.set_code
            and fold(card.collector_number) == fold(self.collector_number)
        )


@dataclass(frozen=True, slots=True)
class NameSetKey:
    name: str
    set_code: str

    method: ClassVar[IdentificationMethod] = IdentificationMethod.NAME_SET

    def to_identifier(self) -> dict[str, str | int]:
        return {"name": self.name, "set": self.set_code}

    def matches(self, card: ScryfallCard) -> bool:
        return card.set_code.lower() == self.set_code and card_has_name(card, self.name)


@dataclass(frozen=True, slots=True)
class NameKey:
    name: str

    method: ClassVar[IdentificationMethod] = IdentificationMethod.NAME_ONLY

    def to_identifier(self) -> dict[str, str | int]:
        return {"name": self.name}

    def matches(self, card: ScryfallCard) -> bool:
        return card_has_name(card, self.name)


LookupKey = ScryfallIdKey | MultiverseIdKey | MtgoIdKey | SetCollectorKey | NameSetKey | NameKey

# Order in which a returned record tries to claim a requested key
KEY_PRIORITY: tuple[type[LookupKey], ...] = (
    ScryfallIdKey,
    MultiverseIdKey,
    MtgoIdKey,
    SetCollectorKey,
    NameSetKey,
    NameKey,
)


def derive_key(row: ParsedRow) -> LookupKey | None:
    """
    Reduce a row to its single highest-priority lookup key.

    Returns:
        The key, or None if the row has no usable identifier
    """
    if row.scryfall_id:
        return ScryfallIdKey(row.scryfall_id.strip()[:SCRYFALL_ID_LENGTH].lower())
    if row.multiverse_id is not None:
        return MultiverseIdKey(row.multiverse_id)
    if row.mtgo_id is not None:
        return MtgoIdKey(row.mtgo_id)

    set_code = row.set_code.strip().lower() if row.set_code else ""
    collector_number = row.collector_number.strip().lower() if row.collector_number else ""
    name = fold(row.name) if row.name else ""

    if set_code and collector_number:
        return SetCollectorKey(set_code, collector_number)
    if name and set_code:
        return NameSetKey(name, set_code)
    if name:
        return NameKey(name)
    return None


def claim_key(card: ScryfallCard, pending: set[LookupKey]) -> LookupKey | None:
    """
    Find the first unclaimed key a returned record satisfies.

    Keys are tried by variant priority, so a record matching both an id key
    and a name key is claimed by the id key. The claimed key is removed
    from ``pending``.
    """
    for variant in KEY_PRIORITY:
        for key in sorted(
            (k for k in pending if isinstance(k, variant)),
            key=repr,
        ):
            if key.matches(card):
                pending.discard(key)
                return key
    return None
