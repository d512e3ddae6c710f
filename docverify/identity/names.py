"""Name and ID number matching across documents.

Names are transliterated to lowercase ASCII with ICU before comparison so that
diacritics and non-Latin scripts compare equal to their Latin spelling.
"""

import re
from dataclasses import dataclass
from enum import StrEnum

import icu  # type: ignore[import-untyped]
from rapidfuzz.distance import JaroWinkler

_ICU_TRANSFORM = "Any-Latin; Latin-ASCII; Lower"
_transliterator: icu.Transliterator = icu.Transliterator.createInstance(_ICU_TRANSFORM)

_NON_WORD_RE = re.compile(r"[^\w\s]")
_ID_STRIP_RE = re.compile(r"[^A-Z0-9]")

# Similarity penalty when first and last names appear in swapped order.
_SWAPPED_PENALTY = 0.9


class NameMatchType(StrEnum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    PARTIAL = "partial"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class NameMatch:
    is_match: bool
    similarity: float
    match_type: NameMatchType
    details: str


@dataclass(frozen=True)
class NameParts:
    first: str
    middle: str | None
    last: str


@dataclass(frozen=True)
class IdFormatCheck:
    is_valid: bool
    format: str
    country: str | None
    details: str


def normalize_name(name: str) -> str:
    """Lowercase ASCII form of *name* without punctuation or repeated spaces."""
    text = _transliterator.transliterate(name)
    text = _NON_WORD_RE.sub("", text)
    return " ".join(text.split())


def split_name(full_name: str) -> NameParts:
    """Split a printed name into first, middle and last parts.

    A single token is both first and last name.
    """
    parts = full_name.split()
    if not parts:
        return NameParts(first="", middle=None, last="")
    if len(parts) == 1:
        return NameParts(first=parts[0], middle=None, last=parts[0])
    middle = " ".join(parts[1:-1]) or None
    return NameParts(first=parts[0], middle=middle, last=parts[-1])


def similarity(a: str, b: str) -> float:
    """Jaro-Winkler similarity with a prefix scale of 0.1 over up to 4 characters."""
    if not a or not b:
        return 0.0
    return JaroWinkler.similarity(a, b, prefix_weight=0.1)


def match_names(name1: str, name2: str, threshold: float = 0.85) -> NameMatch:
    norm1 = normalize_name(name1)
    norm2 = normalize_name(name2)

    if norm1 and norm1 == norm2:
        return NameMatch(True, 1.0, NameMatchType.EXACT, "Names match exactly")

    overall = similarity(norm1, norm2)
    if overall >= threshold:
        return NameMatch(
            True,
            overall,
            NameMatchType.FUZZY,
            f"Names are similar ({overall * 100:.1f}% match)",
        )

    parts1 = split_name(norm1)
    parts2 = split_name(norm2)

    first_sim = similarity(parts1.first, parts2.first)
    last_sim = similarity(parts1.last, parts2.last)
    if first_sim >= threshold and last_sim >= threshold:
        avg = (first_sim + last_sim) / 2
        return NameMatch(
            True,
            avg,
            NameMatchType.PARTIAL,
            f"First and last names match ({avg * 100:.1f}% average)",
        )

    swapped_first = similarity(parts1.first, parts2.last)
    swapped_last = similarity(parts1.last, parts2.first)
    if swapped_first >= threshold and swapped_last >= threshold:
        avg = (swapped_first + swapped_last) / 2
        return NameMatch(
            True,
            avg * _SWAPPED_PENALTY,
            NameMatchType.PARTIAL,
            f"Names appear to be swapped ({avg * 100:.1f}% match)",
        )

    return NameMatch(
        False,
        overall,
        NameMatchType.NO_MATCH,
        f"Names do not match ({overall * 100:.1f}% similarity)",
    )


def normalize_id_number(id_number: str) -> str:
    """Uppercase alphanumerics only: '1985-0123 4567' -> '198501234567'."""
    return _ID_STRIP_RE.sub("", id_number.upper())


def match_id_numbers(id1: str, id2: str) -> bool:
    return normalize_id_number(id1) == normalize_id_number(id2)


def validate_id_format(id_number: str, expected_type: str) -> IdFormatCheck:
    """Check *id_number* against the formats known for *expected_type*."""
    normalized = normalize_id_number(id_number)

    if expected_type == "national_id":
        if re.fullmatch(r"\d{20}", normalized):
            return IdFormatCheck(True, "NIDA", "TZ", "Valid Tanzania NIDA format")
        if re.fullmatch(r"\d{8,12}", normalized):
            return IdFormatCheck(True, "TZ_OLD_ID", "TZ", "Possibly older Tanzania ID format")
        if re.fullmatch(r"\d{7}", normalized):
            return IdFormatCheck(True, "KE_ID", "KE", "Valid Kenya national ID format")

    if expected_type == "passport" and re.fullmatch(r"[A-Z]{1,2}\d{6,9}", normalized):
        return IdFormatCheck(True, "PASSPORT", None, "Valid passport format")

    if expected_type == "drivers_license" and 6 <= len(normalized) <= 20:
        return IdFormatCheck(True, "DRIVERS_LICENSE", None, "Acceptable driver's license format")

    return IdFormatCheck(
        False,
        "UNKNOWN",
        None,
        f"ID format not recognized for type: {expected_type}",
    )
