"""
Cell normalizers shared by the format registry.

Each function takes one raw cell value and returns the normalized string,
or None when the cell carries no information. They are pure and never
raise on odd input.
"""

import re

from omenpath.formats.base import Normalizer
from omenpath.formats.languages import display_name

_TRUE_VALUES = frozenset({"true", "yes", "y", "1", "x"})

_CONDITIONS: dict[str, str] = {
    "mint": "Mint",
    "m": "Mint",
    "near mint": "Near Mint",
    "near-mint": "Near Mint",
    "nm": "Near Mint",
    "excellent": "Near Mint",
    "lightly played": "Lightly Played",
    "light played": "Lightly Played",
    "light_played": "Lightly Played",
    "slightly played": "Lightly Played",
    "lp": "Lightly Played",
    "sp": "Lightly Played",
    "good": "Lightly Played",
    "moderately played": "Moderately Played",
    "mp": "Moderately Played",
    "played": "Moderately Played",
    "heavily played": "Heavily Played",
    "hp": "Heavily Played",
    "damaged": "Damaged",
    "dmg": "Damaged",
    "d": "Damaged",
    "poor": "Damaged",
}

_PARENTHESIZED = re.compile(r"\s+\([^)]*\)")
_SELLER_FOIL = re.compile(r"^(.+?)\s+foil$", re.IGNORECASE)


def text(value: str) -> str | None:
    """Trimmed value, or None if blank."""
    stripped = value.strip()
    return stripped or None


def lower(value: str) -> str | None:
    stripped = value.strip()
    return stripped.lower() or None


def condition(value: str) -> str | None:
    """Map vendor condition spellings onto Moxfield's condition names."""
    stripped = value.strip()
    if not stripped:
        return None
    return _CONDITIONS.get(stripped.lower(), stripped)


def language(value: str) -> str | None:
    """Display name for known languages; unknown values are kept for warnings."""
    stripped = value.strip()
    if not stripped:
        return None
    return display_name(stripped)


def foil(value: str) -> str | None:
    """Return "foil", "etched", or None for non-foil."""
    normalized = value.strip().lower()
    if normalized in ("etched", "etched foil", "etchedfoil"):
        return "etched"
    if normalized in ("foil", "premium", "f") or normalized in _TRUE_VALUES:
        return "foil"
    return None


def flag(value: str) -> str | None:
    """Boolean column: "true" or "false"."""
    return "true" if value.strip().lower() in _TRUE_VALUES else "false"


def dash_flag(value: str) -> str | None:
    """Boolean column where "-" or blank means false and anything else true."""
    stripped = value.strip()
    return "false" if stripped in ("", "-") else "true"


def has_tag(*needles: str) -> Normalizer:
    """Build a normalizer that flags a tag list containing any of ``needles``."""

    def _normalize(value: str) -> str | None:
        tags = [tag.strip().lower() for tag in re.split(r"[,/]", value)]
        return "true" if any(needle in tag for tag in tags for needle in needles) else "false"

    return _normalize


def extras_foil(value: str) -> str | None:
    """Helvault's slash-separated ``extras`` column."""
    tags = [tag.strip().lower() for tag in value.split("/")]
    if "foil" in tags:
        return "foil"
    if "etchedfoil" in tags:
        return "etched"
    return None


def tcgplayer_name(value: str) -> str | None:
    """Drop TCGplayer's " Art Card" / " Token" suffixes and parenthesized variants."""
    cleaned = re.sub(r"\s+Art Card$", "", value.strip())
    cleaned = re.sub(r"\s+Token$", "", cleaned)
    cleaned = _PARENTHESIZED.sub("", cleaned).strip()
    return cleaned or None


def seller_condition(value: str) -> str | None:
    """TCGplayer seller conditions look like "Near Mint Foil"."""
    match = _SELLER_FOIL.match(value.strip())
    base = match.group(1) if match else value
    return condition(base)


def seller_foil(value: str) -> str | None:
    return "foil" if _SELLER_FOIL.match(value.strip()) else None


def fraction_number(value: str) -> str | None:
    """MTGO writes collector numbers as "12/250"; keep the part before the slash."""
    number = value.split("/", 1)[0].strip()
    return number or None


def cardcastle_id(value: str) -> str | None:
    """CardCastle appends a trailing 0 to Scryfall ids of double-faced cards."""
    stripped = value.strip()
    if len(stripped) > 36 and stripped.endswith("0"):
        stripped = stripped[:-1]
    return stripped or None
