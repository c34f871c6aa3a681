from dataclasses import dataclass, field, replace

from omenpath.models.card import Confidence, ScryfallCard


@dataclass(frozen=True, slots=True)
class ParsedRow:
    """
    One inventory line after column mapping and normalization.

    Rows are never edited in place. Each pipeline stage that learns
    something about a row returns a new instance via ``dataclasses.replace``.

    Attributes:
        name: Card name as exported
        set_code: Set code, lower-cased (e.g., "dmu")
        set_name: Full set name, used for fuzzy set correction
        collector_number: Collector number within the set
        language: Language as exported (display name when recognized)
        foil: "foil", "etched", or None for non-foil
        scryfall_id: Scryfall card UUID
        multiverse_id: Gatherer multiverse id
        mtgo_id: Magic Online catalog id
        count: Number of copies, at least 1
        source_row_number: Line in the source file (header is line 1)
        initial_confidence: Tier implied by the identity evidence, if assigned
        set_code_corrected: True when set_code came from fuzzy correction
        matched_card: Record cached by the name + collector number search
        found_via_name_collector_search: True when matched_card came from that search
    """

    name: str | None = None
    set_code: str | None = None
    set_name: str | None = None
    collector_number: str | None = None
    language: str | None = None
    foil: str | None = None
    scryfall_id: str | None = None
    multiverse_id: int | None = None
    mtgo_id: int | None = None
    count: int = 1
    condition: str | None = None
    tags: tuple[str, ...] = ()
    purchase_price: str | None = None
    last_modified: str | None = None
    alter: bool = False
    proxy: bool = False
    signed: bool = False
    original_data: dict[str, str] = field(default_factory=dict, compare=False)
    source_row_number: int = 0
    needs_lookup: bool = True
    initial_confidence: Confidence | None = None
    warnings: tuple[str, ...] = ()
    set_code_corrected: bool = False
    matched_card: ScryfallCard | None = None
    found_via_name_collector_search: bool = False

    @property
    def has_direct_id(self) -> bool:
        """True if any exact identifier (Scryfall, multiverse, MTGO) is present."""
        return bool(self.scryfall_id) or self.multiverse_id is not None or self.mtgo_id is not None

    def with_warning(self, message: str) -> "ParsedRow":
        """Return a copy with ``message`` appended to the warnings."""
        return replace(self, warnings=(*self.warnings, message))
