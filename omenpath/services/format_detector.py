"""
Format auto-detection.

Scores every registered format against the headers of an upload and
returns the best match above MIN_DETECTION_SCORE.

Scoring per CSV format:
- any required header missing: 0
- each strong indicator present: +STRONG_WEIGHT
- each common indicator present: +COMMON_WEIGHT
- at least one strong indicator present: +STRONG_MATCH_BONUS
- capped at 1.0

XML formats are matched on the raw content instead of headers.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from omenpath.config import MIN_DETECTION_SCORE
from omenpath.formats.base import FormatDescriptor, FormatKind
from omenpath.formats.registry import FORMATS

logger = logging.getLogger(__name__)

STRONG_WEIGHT = 0.35
COMMON_WEIGHT = 0.05
STRONG_MATCH_BONUS = 0.2
MAX_SCORE = 1.0


@dataclass(frozen=True, slots=True)
class FormatDetection:
    """
    A detected format.

    Attributes:
        format: The winning descriptor
        score: Detection score in [0, 1]
        matching_headers: Input headers the format maps, in input spelling
    """

    format: FormatDescriptor
    score: float
    matching_headers: tuple[str, ...] = ()


def _normalize_headers(headers: Iterable[str]) -> frozenset[str]:
    return frozenset(h.strip().lower() for h in headers if h and h.strip())


def score_format(fmt: FormatDescriptor, headers: Iterable[str]) -> float:
    """Score one format against a header list. XML formats always score 0 here."""
    if fmt.kind is not FormatKind.CSV:
        return 0.0

    present = _normalize_headers(headers)

    if any(required.lower() not in present for required in fmt.required_headers):
        return 0.0

    strong_matches = sum(1 for h in fmt.strong_indicators if h.lower() in present)
    common_matches = sum(1 for h in fmt.common_indicators if h.lower() in present)

    score = strong_matches * STRONG_WEIGHT + common_matches * COMMON_WEIGHT
    if strong_matches:
        score += STRONG_MATCH_BONUS

    # Round away float noise so equal evidence ties exactly
    return round(min(score, MAX_SCORE), 4)


def _matching_headers(fmt: FormatDescriptor, headers: Sequence[str]) -> tuple[str, ...]:
    mapped = {column.lower() for column in fmt.columns}
    seen: set[str] = set()
    matches: list[str] = []
    for header in headers:
        key = header.strip().lower()
        if key in mapped and key not in seen:
            seen.add(key)
            matches.append(header.strip())
    return tuple(matches)


def detect(
    headers: Sequence[str],
    formats: Sequence[FormatDescriptor] = FORMATS,
) -> FormatDetection | None:
    """
    Pick the registered format that best explains ``headers``.

    Ties go to the format registered first.

    Returns:
        The detection, or None if nothing reaches MIN_DETECTION_SCORE
    """
    if not _normalize_headers(headers):
        return None

    best: FormatDescriptor | None = None
    best_score = 0.0
    for fmt in formats:
        score = score_format(fmt, headers)
        if score > best_score:
            best, best_score = fmt, score

    if best is None or best_score < MIN_DETECTION_SCORE:
        logger.info("No format detected for headers %s", list(headers))
        return None

    logger.debug("Detected format %s (score %.2f)", best.id, best_score)
    return FormatDetection(
        format=best,
        score=best_score,
        matching_headers=_matching_headers(best, headers),
    )


def detect_content(
    content: str,
    formats: Sequence[FormatDescriptor] = FORMATS,
) -> FormatDetection | None:
    """
    Detect an XML-bodied format from raw file content.

    Returns:
        A detection with score 1.0, or None if no content signature matches
    """
    content = content.lstrip("\ufeff")
    for fmt in formats:
        if fmt.kind is FormatKind.XML and fmt.content_signature is not None:
            if fmt.content_signature.search(content):
                logger.debug("Detected format %s from content", fmt.id)
                return FormatDetection(format=fmt, score=MAX_SCORE)
    return None
