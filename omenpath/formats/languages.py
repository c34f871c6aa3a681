"""
Card language aliases.

Exporters spell languages many ways ("Japanese", "ja", "jp"). Scryfall
uses short codes. Every alias below resolves to exactly one Scryfall
code, so two spellings are the same language iff they share a code.
"""

from types import MappingProxyType

# Scryfall code -> (display name, aliases)
_LANGUAGES: dict[str, tuple[str, tuple[str, ...]]] = {
    "en": ("English", ("english", "eng")),
    "es": ("Spanish", ("sp", "spanish", "español", "espanol")),
    "fr": ("French", ("french", "français", "francais")),
    "de": ("German", ("german", "deutsch")),
    "it": ("Italian", ("italian", "italiano")),
    "pt": ("Portuguese", ("portuguese", "português", "portugues")),
    "ja": ("Japanese", ("jp", "japanese", "日本語", "nihongo")),
    "ko": ("Korean", ("kr", "korean", "한국어", "hangukeo")),
    "ru": ("Russian", ("russian", "русский", "russkiy")),
    "zhs": (
        "Chinese Simplified",
        (
            "cs",
            "zh-cn",
            "chinese simplified",
            "simplified chinese",
            "chinese (s)",
            "chinese (simplified)",
            "简体中文",
            "jianti",
        ),
    ),
    "zht": (
        "Chinese Traditional",
        (
            "ct",
            "zh-tw",
            "chinese traditional",
            "traditional chinese",
            "chinese (t)",
            "chinese (traditional)",
            "繁體中文",
            "fanti",
        ),
    ),
    "he": ("Hebrew", ("hebrew", "עברית", "ivrit")),
    "la": ("Latin", ("latin",)),
    "grc": ("Ancient Greek", ("ancient greek", "greek", "ελληνικά")),
    "ar": ("Arabic", ("arabic", "العربية")),
    "sa": ("Sanskrit", ("sanskrit", "संस्कृत")),
    "ph": ("Phyrexian", ("phyrexian",)),
    "qya": ("Quenya", ("quenya",)),
}

DISPLAY_NAMES: MappingProxyType[str, str] = MappingProxyType(
    {code: display for code, (display, _) in _LANGUAGES.items()}
)

ALIASES: MappingProxyType[str, str] = MappingProxyType(
    {
        alias: code
        for code, (display, aliases) in _LANGUAGES.items()
        for alias in (code, display.lower(), *aliases)
    }
)


def to_scryfall_code(language: str | None) -> str | None:
    """Resolve any known spelling to its Scryfall code, or None if unknown."""
    if not language or not language.strip():
        return None
    return ALIASES.get(language.strip().lower())


def is_recognized(language: str | None) -> bool:
    """True for known spellings. Empty values count as recognized."""
    if not language or not language.strip():
        return True
    return to_scryfall_code(language) is not None


def display_name(language: str) -> str:
    """Human-readable name for a code or alias; unknown values pass through."""
    code = to_scryfall_code(language)
    if code is None:
        return language.strip()
    return DISPLAY_NAMES[code]


def languages_match(requested: str | None, actual: str | None) -> bool:
    """
    Check whether two language values name the same language.

    A missing value on either side is never a mismatch. Unknown
    spellings only match themselves (case-insensitively).
    """
    if not requested or not actual:
        return True

    left = requested.strip().lower()
    right = actual.strip().lower()
    if left == right:
        return True

    left_code = ALIASES.get(left)
    return left_code is not None and left_code == ALIASES.get(right)
