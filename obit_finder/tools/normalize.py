"""
Query normalization for ObitFinder.

Canonicalizes names, cities and states, expands first-name variants and
computes the stable `search_key` used to scope exclusions.
"""

import hashlib
import math
import re
from typing import Any, Dict, List, Optional

from obit_finder.graph.state import NormalizedQuery, Query
from obit_finder.tools.nicknames import variants

# ---------------------------------------------------------------------------
# US state tables
# ---------------------------------------------------------------------------
STATE_NAMES: Dict[str, str] = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR",
    "california": "CA", "colorado": "CO", "connecticut": "CT", "delaware": "DE",
    "florida": "FL", "georgia": "GA", "hawaii": "HI", "idaho": "ID",
    "illinois": "IL", "indiana": "IN", "iowa": "IA", "kansas": "KS",
    "kentucky": "KY", "louisiana": "LA", "maine": "ME", "maryland": "MD",
    "massachusetts": "MA", "michigan": "MI", "minnesota": "MN", "mississippi": "MS",
    "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK",
    "oregon": "OR", "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC",
    "south dakota": "SD", "tennessee": "TN", "texas": "TX", "utah": "UT",
    "vermont": "VT", "virginia": "VA", "washington": "WA", "west virginia": "WV",
    "wisconsin": "WI", "wyoming": "WY", "district of columbia": "DC",
}

VALID_STATE_CODES = frozenset(STATE_NAMES.values())

_PUNCTUATION_RE = re.compile(r"[^\w\s'\-]|_")
_WHITESPACE_RE = re.compile(r"\s+")
_CITY_PREFIXES = {"st": "saint", "ft": "fort", "mt": "mount", "pt": "port"}


class InvalidQueryError(ValueError):
    """Raised when a query lacks the name fields needed to search."""


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _clean(text: Any) -> str:
    value = str(text or "").replace("’", "'").replace("‘", "'")
    value = _PUNCTUATION_RE.sub("", value)
    return _WHITESPACE_RE.sub(" ", value).strip()


def _title_case(text: str) -> str:
    def cap(token: str) -> str:
        token = token.lower()
        # O'Brien, D'Angelo
        if len(token) > 2 and token[1] == "'":
            return token[0].upper() + "'" + token[2:].capitalize()
        return token.capitalize()

    words = []
    for word in text.split(" "):
        words.append("-".join(cap(part) for part in word.split("-")))
    return " ".join(words)


def normalize_name(name: Any) -> str:
    """Trim, strip punctuation (keeping apostrophes/hyphens) and title-case."""
    return _title_case(_clean(name))


def normalize_city(city: Any) -> str:
    """Canonical display form of a city name."""
    return _title_case(_clean(city))


def city_key(city: Any) -> str:
    """Comparison key for a city: lower-case, St/Ft/Mt/Pt expanded."""
    value = _clean(city).replace("'", "").lower()
    if not value:
        return ""
    parts = value.split(" ")
    if len(parts) > 1 and parts[0] in _CITY_PREFIXES:
        parts[0] = _CITY_PREFIXES[parts[0]]
    return " ".join(parts)


def normalize_state(state: Any) -> str:
    """Map a state code or full name to its 2-letter code.

    Unrecognized values are returned trimmed but otherwise unchanged.
    """
    trimmed = _WHITESPACE_RE.sub(" ", str(state or "")).strip()
    upper = trimmed.upper().rstrip(".")
    if upper in VALID_STATE_CODES:
        return upper
    return STATE_NAMES.get(trimmed.lower(), trimmed)


def _normalize_age(age: Any) -> Optional[int]:
    if age is None or isinstance(age, bool):
        return None
    try:
        value = float(str(age).strip())
    except ValueError:
        return None
    # 80 and 80.0 must produce the same search key
    if not math.isfinite(value) or not value.is_integer() or value <= 0:
        return None
    return int(value)


def _normalize_keywords(keywords: Any) -> List[str]:
    if not keywords:
        return []
    if isinstance(keywords, str):
        keywords = keywords.split(",")
    return [str(k).strip().lower() for k in keywords if str(k).strip()]


# ---------------------------------------------------------------------------
# Search key
# ---------------------------------------------------------------------------

def generate_search_key(
    last_name: str,
    first_name: str,
    city: Optional[str] = None,
    state: Optional[str] = None,
    age: Optional[int] = None,
) -> str:
    """Return the first 16 hex chars of SHA-256 over the pipe-joined fields."""
    parts = [
        last_name or "",
        first_name or "",
        city or "",
        state or "",
        str(age) if age is not None else "",
    ]
    raw = "|".join(parts).lower()
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


# ---------------------------------------------------------------------------
# Query normalization
# ---------------------------------------------------------------------------

def validate_query(query: Query) -> None:
    """Raise `InvalidQueryError` if the query cannot be searched.

    A last name is required, plus a first name or a nickname.
    """
    if not _clean(query.get("last_name")):
        raise InvalidQueryError("last_name is required")
    if not _clean(query.get("first_name")) and not _clean(query.get("nickname")):
        raise InvalidQueryError("first_name or nickname is required")


def normalize_query(query: Query) -> NormalizedQuery:
    """Canonicalize a query and attach its `search_key`.

    Never raises: malformed fields degrade to best-effort values.

    Args:
        query: Raw query dict.

    Returns:
        NormalizedQuery dict (the input fields plus normalized ones).
    """
    nickname = normalize_name(query.get("nickname")) or None
    first_name = normalize_name(query.get("first_name")) or nickname or ""
    last_name = normalize_name(query.get("last_name"))
    middle_name = normalize_name(query.get("middle_name")) or None
    city = normalize_city(query.get("city")) or None
    state = normalize_state(query.get("state")) or None
    age = _normalize_age(query.get("age"))

    first_name_variants = variants(first_name)
    if nickname:
        first_name_variants |= variants(nickname)

    normalized: NormalizedQuery = {
        **query,
        "age": age,
        "normalized_first_name": first_name,
        "normalized_last_name": last_name,
        "normalized_middle_name": middle_name,
        "normalized_nickname": nickname,
        "normalized_city": city,
        "normalized_state": state,
        "normalized_keywords": _normalize_keywords(query.get("keywords")),
        "first_name_variants": first_name_variants,
        "search_key": generate_search_key(last_name, first_name, city, state, age),
    }
    return normalized
