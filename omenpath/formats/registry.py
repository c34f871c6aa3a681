"""
Registry of supported export formats.

Formats are listed most specific first. Detection ties go to the earlier
entry, so the catch-all ``generic`` format is always last.

When adding a format, pick strong indicators that no other format's
export contains, and required headers that keep unrelated files at 0.
"""

import re
from types import MappingProxyType

from omenpath.formats import normalizers as n
from omenpath.formats.base import FieldSpec, FormatDescriptor, FormatKind

F = FieldSpec

# Moxfield's collection columns; also the layout this tool writes
MOXFIELD_COLUMNS = (
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
)

MANABOX = FormatDescriptor(
    id="manabox",
    name="ManaBox",
    description="ManaBox mobile app collection export",
    fields=(
        F("count", "Quantity"),
        F("name", "Name", n.text),
        F("set_code", "Set code", n.lower),
        F("set_name", "Set name", n.text),
        F("collector_number", "Collector number", n.text),
        F("foil", "Foil", n.foil),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("purchase_price", "Purchase price", n.text),
        F("scryfall_id", "Scryfall ID", n.text),
        F("alter", "Altered", n.flag),
    ),
    required_headers=("Quantity", "Name"),
    strong_indicators=("ManaBox ID", "Binder Name", "Binder Type", "Purchase price currency"),
    common_indicators=(
        "Quantity",
        "Name",
        "Set code",
        "Set name",
        "Collector number",
        "Scryfall ID",
        "Rarity",
    ),
)

ARCHIDEKT = FormatDescriptor(
    id="archidekt",
    name="Archidekt",
    description="Archidekt collection export",
    fields=(
        F("count", "Quantity"),
        F("name", "Name", n.text),
        F("set_code", "Edition Code", n.lower),
        F("set_name", "Edition Name", n.text),
        F("collector_number", "Collector Number", n.text),
        F("foil", "Finish", n.foil),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("purchase_price", "Purchase Price", n.text),
        F("scryfall_id", "Scryfall ID", n.text),
        F("multiverse_id", "Multiverse Id"),
        F("mtgo_id", "MTGO ID"),
        F("tags", "Tags", n.text),
        F("proxy", "Tags", n.has_tag("proxy")),
        F("signed", "Tags", n.has_tag("signed")),
        F("alter", "Tags", n.has_tag("alter")),
    ),
    required_headers=("Quantity", "Name"),
    strong_indicators=(
        "Date Added",
        "Scryfall Oracle ID",
        "Identities",
        "Edition Code",
        "Price (Card Kingdom)",
        "Price (TCG Player)",
    ),
    common_indicators=(
        "Quantity",
        "Name",
        "Finish",
        "Condition",
        "Language",
        "Purchase Price",
        "Tags",
        "Edition Name",
        "Multiverse Id",
        "Scryfall ID",
        "MTGO ID",
        "Collector Number",
        "Mana Value",
        "Colors",
        "Types",
        "Rarity",
    ),
)

CARDCASTLE_FULL = FormatDescriptor(
    id="cardcastle-full",
    name="CardCastle (Full)",
    description="CardCastle full CSV export with JSON ID",
    fields=(
        F("count", "Count"),
        F("name", "Card Name", n.text),
        F("set_name", "Set Name", n.text),
        F("condition", "Condition", n.condition),
        F("foil", "Foil", n.foil),
        F("language", "Language", n.language),
        F("multiverse_id", "Multiverse ID"),
        F("scryfall_id", "JSON ID", n.cardcastle_id),
        F("purchase_price", "Price USD", n.text),
    ),
    required_headers=("Card Name",),
    strong_indicators=("JSON ID",),
    common_indicators=("Set Name", "Multiverse ID", "Condition", "Foil", "Language", "Price USD"),
)

CARDSPHERE = FormatDescriptor(
    id="cardsphere",
    name="Cardsphere",
    description="Cardsphere collection export",
    fields=(
        F("count", "Count"),
        F("name", "Name", n.text),
        F("set_name", "Edition", n.text),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("foil", "Foil", n.foil),
        F("tags", "Tags", n.text),
        F("scryfall_id", "Scryfall ID", n.text),
        F("last_modified", "Last Modified", n.text),
    ),
    required_headers=("Count", "Tradelist Count", "Name", "Scryfall ID"),
    strong_indicators=("Scryfall ID",),
    common_indicators=(
        "Count",
        "Tradelist Count",
        "Name",
        "Edition",
        "Condition",
        "Language",
        "Foil",
        "Tags",
        "Last Modified",
    ),
)

CUBECOBRA = FormatDescriptor(
    id="cubecobra",
    name="CubeCobra",
    description="CubeCobra cube export",
    fields=(
        F("name", "name", n.text),
        F("set_code", "Set", n.lower),
        F("collector_number", "Collector Number", n.text),
        F("foil", "Finish", n.foil),
        F("tags", "tags", n.text),
        F("mtgo_id", "MTGO ID"),
    ),
    required_headers=("name",),
    strong_indicators=("status", "maybeboard", "Color Category"),
    common_indicators=("Set", "Collector Number", "Rarity", "Finish", "tags", "MTGO ID"),
)

DECKBOX = FormatDescriptor(
    id="deckbox",
    name="Deckbox",
    description="Deckbox inventory export",
    fields=(
        F("count", "Count"),
        F("name", "Name", n.text),
        F("set_code", "Edition Code", n.lower),
        F("set_name", "Edition", n.text),
        F("collector_number", "Card Number", n.text),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("foil", "Foil", n.foil),
        F("signed", "Signed", n.flag),
        F("alter", "Altered Art", n.flag),
        F("tags", "Tags", n.text),
        F("purchase_price", "My Price", n.text),
        F("scryfall_id", "Scryfall ID", n.text),
    ),
    required_headers=("Count", "Name", "Edition"),
    strong_indicators=(
        "Card Number",
        "Edition Code",
        "Artist Proof",
        "Altered Art",
        "Textless",
        "My Price",
    ),
    common_indicators=(
        "Count",
        "Tradelist Count",
        "Name",
        "Edition",
        "Condition",
        "Language",
        "Foil",
        "Signed",
        "Tags",
    ),
)

DELVERLENS = FormatDescriptor(
    id="delverlens",
    name="DelverLens",
    description="DelverLens collection export",
    fields=(
        F("count", "Quantity"),
        F("name", "Name", n.text),
        F("set_code", "Set", n.lower),
        F("collector_number", "Card Number", n.text),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("foil", "Finish", n.foil),
    ),
    required_headers=("Quantity", "Name"),
    strong_indicators=("Finish",),
    common_indicators=("Quantity", "Name", "Set", "Card Number", "Condition", "Language"),
)

DRAGONSHIELD = FormatDescriptor(
    id="dragonshield",
    name="Dragon Shield",
    description="Dragon Shield MTG Card Manager export",
    fields=(
        F("count", "Quantity"),
        F("name", "Card Name", n.text),
        F("set_code", "Set Code", n.lower),
        F("set_name", "Set Name", n.text),
        F("collector_number", "Card Number", n.text),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("foil", "Printing", n.foil),
        F("foil", "Foiling", n.foil),
        F("purchase_price", "Price Bought", n.text),
    ),
    required_headers=("Quantity", "Card Name"),
    strong_indicators=("Folder Name", "Trade Quantity", "Foiling", "Price Bought"),
    common_indicators=(
        "Set Code",
        "Set Name",
        "Card Number",
        "Condition",
        "Printing",
        "Language",
    ),
)

HELVAULT = FormatDescriptor(
    id="helvault",
    name="Helvault",
    description="Helvault collection export",
    fields=(
        F("count", "quantity"),
        F("name", "name", n.text),
        F("set_code", "set_code", n.lower),
        F("set_name", "set_name", n.text),
        F("collector_number", "collector_number", n.text),
        F("language", "language", n.language),
        F("scryfall_id", "scryfall_id", n.text),
        F("foil", "extras", n.extras_foil),
        F("proxy", "extras", n.has_tag("proxy")),
        F("signed", "extras", n.has_tag("signed")),
        F("alter", "extras", n.has_tag("alter")),
        F("purchase_price", "estimated_price", n.text),
    ),
    required_headers=("name", "quantity"),
    strong_indicators=(
        "collector_number",
        "color_identity",
        "estimated_price",
        "oracle_id",
        "scryfall_id",
        "type_line",
        "extras",
    ),
    common_indicators=("set_code", "set_name", "language", "rarity", "mana_cost", "cmc"),
)

MOXFIELD = FormatDescriptor(
    id="moxfield",
    name="Moxfield",
    description="Moxfield collection export",
    fields=(
        F("count", "Count"),
        F("name", "Name", n.text),
        F("set_code", "Edition", n.lower),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("foil", "Foil", n.foil),
        F("tags", "Tags", n.text),
        F("last_modified", "Last Modified", n.text),
        F("collector_number", "Collector Number", n.text),
        F("alter", "Alter", n.flag),
        F("proxy", "Proxy", n.flag),
        F("purchase_price", "Purchase Price", n.text),
    ),
    required_headers=("Count", "Tradelist Count", "Name"),
    strong_indicators=("Tradelist Count",),
    common_indicators=MOXFIELD_COLUMNS,
)

MTGO = FormatDescriptor(
    id="mtgo",
    name="MTGO",
    description="Magic: The Gathering Online collection CSV",
    fields=(
        F("count", "Quantity"),
        F("name", "Card Name", n.text),
        F("mtgo_id", "ID #"),
        F("set_code", "Set", n.lower),
        F("collector_number", "Collector #", n.fraction_number),
        F("foil", "Premium", n.foil),
    ),
    required_headers=("Card Name", "Quantity"),
    strong_indicators=("ID #", "Collector #", "Premium"),
    common_indicators=("Rarity", "Set", "Annotation"),
)

MTGO_DEK = FormatDescriptor(
    id="mtgo-dek",
    name="MTGO (.dek)",
    description="Magic: The Gathering Online .dek deck file",
    fields=(
        F("count", "Quantity"),
        F("name", "Name", n.text),
        F("mtgo_id", "CatID"),
    ),
    kind=FormatKind.XML,
    content_signature=re.compile(r"^\s*(?:<\?xml[^>]*>\s*)?<Deck[\s>]"),
)

TAPPEDOUT = FormatDescriptor(
    id="tappedout",
    name="TappedOut",
    description="TappedOut inventory export",
    fields=(
        F("count", "Qty"),
        F("name", "Name", n.text),
        F("set_code", "Set", n.lower),
        F("collector_number", "Set Number", n.text),
        F("foil", "Foil", n.foil),
        F("condition", "Condition", n.condition),
        # TappedOut misspells this column
        F("language", "Languange", n.language),
        F("alter", "Alter", n.dash_flag),
        F("signed", "Signed", n.dash_flag),
        F("proxy", "Proxy", n.dash_flag),
    ),
    required_headers=("Qty", "Name"),
    strong_indicators=("Languange", "Set Number"),
    common_indicators=("Set", "Foil", "Condition", "Alter", "Signed", "Proxy"),
)

TCGPLAYER_USER = FormatDescriptor(
    id="tcgplayer-user",
    name="TCGplayer (User)",
    description="TCGplayer collection export",
    fields=(
        F("count", "Quantity"),
        F("name", "Simple Name", n.tcgplayer_name),
        F("name", "Name", n.tcgplayer_name),
        F("set_code", "Set Code", n.lower),
        F("set_name", "Set", n.text),
        F("collector_number", "Card Number", n.text),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("foil", "Printing", n.foil),
    ),
    required_headers=("Quantity",),
    strong_indicators=("Product ID", "SKU", "Simple Name"),
    common_indicators=(
        "Quantity",
        "Name",
        "Set",
        "Set Code",
        "Card Number",
        "Printing",
        "Condition",
        "Language",
        "Rarity",
    ),
)

TCGPLAYER_SELLER = FormatDescriptor(
    id="tcgplayer-seller",
    name="TCGplayer (Seller)",
    description="TCGplayer seller inventory export",
    fields=(
        F("count", "Total Quantity"),
        F("name", "Product Name", n.tcgplayer_name),
        F("set_name", "Set Name", n.text),
        F("collector_number", "Number", n.text),
        F("condition", "Condition", n.seller_condition),
        F("foil", "Condition", n.seller_foil),
        F("purchase_price", "TCG Market Price", n.text),
    ),
    required_headers=("Product Name",),
    strong_indicators=(
        "TCGplayer Id",
        "Product Line",
        "TCG Market Price",
        "TCG Direct Low",
        "TCG Low Price With Shipping",
        "Add to Quantity",
    ),
    common_indicators=("Total Quantity", "Set Name", "Condition", "Rarity", "Number", "Title"),
)

DECKSTATS = FormatDescriptor(
    id="deckstats",
    name="Deckstats",
    description="Deckstats deck export",
    fields=(
        F("count", "amount"),
        F("name", "card_name", n.text),
        F("set_name", "set_name", n.text),
        F("foil", "is_foil", n.foil),
    ),
    required_headers=("amount", "card_name"),
    strong_indicators=("card_name", "set_name", "is_foil"),
    common_indicators=("amount",),
)

DECKED_BUILDER = FormatDescriptor(
    id="decked-builder",
    name="Decked Builder",
    description="Decked Builder collection export",
    fields=(
        F("count", "Total Qty"),
        F("name", "Card", n.text),
        F("set_name", "Set", n.text),
        F("multiverse_id", "Mvid"),
    ),
    required_headers=("Total Qty", "Card"),
    strong_indicators=("Total Qty", "Reg Qty", "Foil Qty"),
    common_indicators=("Card", "Set", "Mana Cost", "Card Type", "Color", "Rarity", "Mvid"),
)

URZAS_GATHERER = FormatDescriptor(
    id="urzas-gatherer",
    name="Urza's Gatherer",
    description="Urza's Gatherer collection export",
    fields=(
        F("count", "Count"),
        F("name", "Name", n.text),
        F("set_name", "Set", n.text),
        F("collector_number", "Number", n.text),
        F("condition", "Condition", n.condition),
        F("language", "Languages", n.language),
        F("multiverse_id", "Multiverse ID"),
        F("scryfall_id", "Scryfall ID", n.text),
    ),
    required_headers=("Count", "Name"),
    strong_indicators=("Foil count", "Special foil count", "TCG ID", "Cardmarket ID"),
    common_indicators=(
        "Type",
        "Color",
        "Rarity",
        "Author",
        "Power",
        "Toughness",
        "Mana cost",
        "Converted mana cost",
        "Number",
        "Languages",
        "Multiverse ID",
    ),
)

CARDCASTLE_SIMPLE = FormatDescriptor(
    id="cardcastle-simple",
    name="CardCastle (Simple)",
    description="CardCastle simple CSV export without JSON ID",
    fields=(
        F("count", "Count"),
        F("name", "Card Name", n.text),
        F("set_name", "Set Name", n.text),
        F("collector_number", "Collector Number", n.text),
        F("foil", "Foil", n.foil),
    ),
    required_headers=("Count", "Card Name"),
    strong_indicators=("Set Name",),
    common_indicators=("Collector Number", "Foil"),
)

GENERIC = FormatDescriptor(
    id="generic",
    name="Generic CSV",
    description="Moxfield-style CSV with common column names",
    fields=(
        F("count", "Count"),
        F("count", "Quantity"),
        F("name", "Name", n.text),
        F("set_code", "Edition", n.lower),
        F("set_code", "Set", n.lower),
        F("collector_number", "Collector Number", n.text),
        F("condition", "Condition", n.condition),
        F("language", "Language", n.language),
        F("foil", "Foil", n.foil),
        F("tags", "Tags", n.text),
        F("last_modified", "Last Modified", n.text),
        F("alter", "Alter", n.flag),
        F("proxy", "Proxy", n.flag),
        F("signed", "Signed", n.flag),
        F("purchase_price", "Purchase Price", n.text),
        F("scryfall_id", "Scryfall ID", n.text),
    ),
    required_headers=("Name",),
    common_indicators=(*MOXFIELD_COLUMNS, "Signed", "Quantity", "Set"),
)

FORMATS: tuple[FormatDescriptor, ...] = (
    MANABOX,
    ARCHIDEKT,
    CARDCASTLE_FULL,
    CARDSPHERE,
    CUBECOBRA,
    DECKBOX,
    DELVERLENS,
    DRAGONSHIELD,
    HELVAULT,
    MOXFIELD,
    MTGO,
    MTGO_DEK,
    TAPPEDOUT,
    TCGPLAYER_USER,
    TCGPLAYER_SELLER,
    DECKSTATS,
    DECKED_BUILDER,
    URZAS_GATHERER,
    CARDCASTLE_SIMPLE,
    GENERIC,
)

FORMATS_BY_ID: MappingProxyType[str, FormatDescriptor] = MappingProxyType(
    {fmt.id: fmt for fmt in FORMATS}
)


def get_format(format_id: str) -> FormatDescriptor | None:
    """Look up a registered format by id."""
    return FORMATS_BY_ID.get(format_id)
