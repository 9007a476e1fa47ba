"""
Field extraction from obituary text (titles, snippets, page bodies).

Pulls the age, date of death, visitation/funeral dates and a
"City, ST" location out of free text. Dates come back as ISO
``YYYY-MM-DD`` strings; anything not found is ``None``.
"""

import datetime
import re
from typing import Dict, List, Optional, Set

from obit_finder.tools.normalize import VALID_STATE_CODES

MONTHS: Dict[str, int] = {
    "january": 1, "jan": 1, "february": 2, "feb": 2, "march": 3, "mar": 3,
    "april": 4, "apr": 4, "may": 5, "june": 6, "jun": 6, "july": 7, "jul": 7,
    "august": 8, "aug": 8, "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10, "november": 11, "nov": 11, "december": 12, "dec": 12,
}

# Longest names first so "sept" wins over "sep"
MONTH_PATTERN = "|".join(sorted(MONTHS, key=len, reverse=True))

# ---------------------------------------------------------------------------
# Age
# ---------------------------------------------------------------------------
_AGE_PATTERNS = [
    re.compile(r"\baged?[:\s]+(\d{1,3})\b", re.IGNORECASE),
    re.compile(r"\b(\d{1,3})\s+years?\s+old\b", re.IGNORECASE),
    re.compile(r",\s*(\d{2,3})\s*,"),
    re.compile(r"\b(\d{2,3})\s*,?\s*(?:of|from)\s+\w+", re.IGNORECASE),
]


def extract_age(text: Optional[str]) -> Optional[int]:
    """Return the first plausible age (1-149) mentioned in *text*."""
    if not text:
        return None

    for pattern in _AGE_PATTERNS:
        match = pattern.search(text)
        if match:
            age = int(match.group(1))
            if 0 < age < 150:
                return age
    return None


# ---------------------------------------------------------------------------
# Date of death
# ---------------------------------------------------------------------------
_DEATH_PHRASES = "|".join([
    r"passed\s+away",
    r"passed\s+peacefully",
    r"passed\s+unexpectedly",
    r"passed\s+suddenly",
    r"passed\s+on",
    r"passed",
    r"died",
    r"departed\s+this\s+life",
    r"departed",
    r"went\s+to\s+be\s+with\s+(?:the\s+)?(?:lord|god|jesus|his\s+maker|her\s+maker)",
    r"went\s+home\s+to\s+(?:be\s+with\s+)?(?:the\s+)?(?:lord|god|jesus)",
    r"called\s+home",
    r"entered\s+into\s+(?:eternal\s+)?rest",
    r"entered\s+eternal\s+life",
    r"entered\s+heaven",
    r"left\s+this\s+(?:world|earth|life)",
    r"went\s+to\s+(?:his|her)\s+eternal\s+(?:rest|reward|home)",
    r"gained\s+(?:his|her)\s+wings",
    r"was\s+called\s+(?:home|to\s+heaven)",
    r"succumbed",
])

_PHRASE_MONTH_RE = re.compile(
    rf"(?:{_DEATH_PHRASES})\s+(?:on\s+)?(?:\w+,\s+)?({MONTH_PATTERN})\.?\s+(\d{{1,2}}),?\s+(\d{{4}})",
    re.IGNORECASE,
)
_PHRASE_NUMERIC_RE = re.compile(
    rf"(?:{_DEATH_PHRASES})\s+(?:on\s+)?(\d{{1,2}})[/\-](\d{{1,2}})[/\-](\d{{2,4}})",
    re.IGNORECASE,
)
_PHRASE_DAY_FIRST_RE = re.compile(
    rf"(?:{_DEATH_PHRASES})\s+(?:on\s+)?(?:the\s+)?(\d{{1,2}})\s+(?:of\s+)?({MONTH_PATTERN}),?\s+(\d{{4}})",
    re.IGNORECASE,
)
_RANGE_MONTH_RE = re.compile(
    rf"({MONTH_PATTERN})\.?\s+(\d{{1,2}}),?\s+(\d{{4}})\s*[-–—]\s*({MONTH_PATTERN})\.?\s+(\d{{1,2}}),?\s+(\d{{4}})",
    re.IGNORECASE,
)
_RANGE_NUMERIC_RE = re.compile(
    r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})\s*[-–—]\s*(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})"
)
_RANGE_YEAR_RE = re.compile(r"\(?\s*(19\d{2}|20\d{2})\s*[-–—]\s*(19\d{2}|20\d{2})\s*\)?")
_OBITUARY_CONTEXT_RE = re.compile(
    r"obituary|death|died|passed|memorial|funeral|visitation|viewing|service|"
    r"survived\s+by|preceded\s+in\s+death|loving\s+memory",
    re.IGNORECASE,
)
_STANDALONE_MONTH_RE = re.compile(rf"({MONTH_PATTERN})\.?\s+(\d{{1,2}}),?\s+(20[0-2]\d)", re.IGNORECASE)
_STANDALONE_NUMERIC_RE = re.compile(r"\b(\d{1,2})[/\-](\d{1,2})[/\-](20[0-2]\d)\b")
_RECENT_MONTH_RE = re.compile(rf"({MONTH_PATTERN})\.?\s+(\d{{1,2}}),?\s+(202\d)", re.IGNORECASE)
_ORDINAL_RE = re.compile(r"(\d)(st|nd|rd|th)\b", re.IGNORECASE)


def _month_number(month: str) -> Optional[int]:
    if month.isdigit():
        value = int(month)
        return value if 1 <= value <= 12 else None
    return MONTHS.get(month.lower().rstrip("."))


def _expand_year(year: str) -> int:
    if len(year) == 2:
        value = int(year)
        return 1900 + value if value > 50 else 2000 + value
    return int(year)


def format_date(
    year: str,
    month: str,
    day: str,
    today: Optional[datetime.date] = None,
) -> Optional[str]:
    """Validate a year/month/day triple and render it as ISO.

    Returns ``None`` for impossible dates and for dates more than one day
    in the future.
    """
    month_number = _month_number(month)
    if month_number is None:
        return None

    try:
        date = datetime.date(_expand_year(year), month_number, int(day))
    except ValueError:
        return None

    today = today or datetime.date.today()
    if date > today + datetime.timedelta(days=1):
        return None
    return date.isoformat()


def extract_dod(text: Optional[str], today: Optional[datetime.date] = None) -> Optional[str]:
    """Extract a date of death from obituary text.

    Explicit death phrases win, then birth-death ranges (the second date),
    then a lone date when the text reads like an obituary. A bare year
    range yields ``YYYY-01-01``.

    Args:
        text: Title, snippet or page text.
        today: Reference date for rejecting future dates (defaults to today).

    Returns:
        ISO date string or ``None``.
    """
    if not text:
        return None

    t = _ORDINAL_RE.sub(r"\1", re.sub(r"\s+", " ", text)).strip()

    # --- explicit death phrases ---
    match = _PHRASE_MONTH_RE.search(t)
    if match:
        result = format_date(match.group(3), match.group(1), match.group(2), today)
        if result:
            return result

    match = _PHRASE_NUMERIC_RE.search(t)
    if match:
        result = format_date(match.group(3), match.group(1), match.group(2), today)
        if result:
            return result

    match = _PHRASE_DAY_FIRST_RE.search(t)
    if match:
        result = format_date(match.group(3), match.group(2), match.group(1), today)
        if result:
            return result

    # --- birth-death ranges ---
    match = _RANGE_MONTH_RE.search(t)
    if match:
        result = format_date(match.group(6), match.group(4), match.group(5), today)
        if result:
            return result

    match = _RANGE_NUMERIC_RE.search(t)
    if match:
        result = format_date(match.group(6), match.group(4), match.group(5), today)
        if result:
            return result

    match = _RANGE_YEAR_RE.search(t)
    if match:
        return f"{match.group(2)}-01-01"

    # --- lone dates in obituary context ---
    if _OBITUARY_CONTEXT_RE.search(t):
        match = _STANDALONE_MONTH_RE.search(t)
        if match:
            result = format_date(match.group(3), match.group(1), match.group(2), today)
            if result:
                return result

        match = _STANDALONE_NUMERIC_RE.search(t)
        if match:
            result = format_date(match.group(3), match.group(1), match.group(2), today)
            if result:
                return result

    # Last resort: the latest-mentioned recent date ("born X, died Y")
    recent = _RECENT_MONTH_RE.findall(t)
    if recent:
        month, day, year = recent[-1]
        return format_date(year, month, day, today)

    return None


# ---------------------------------------------------------------------------
# Service dates
# ---------------------------------------------------------------------------
_VISITATION_KEYWORDS = [
    r"visitation(?:\s+will)?(?:\s+be)?(?:\s+held)?",
    r"viewing(?:\s+will)?(?:\s+be)?(?:\s+held)?",
    r"calling\s+hours",
    r"friends\s+(?:may|will)\s+(?:be\s+received|call)",
]

_FUNERAL_KEYWORDS = [
    r"funeral\s+services?(?:\s+will)?(?:\s+be)?(?:\s+held)?",
    r"memorial\s+(?:services?|gathering)(?:\s+will)?(?:\s+be)?(?:\s+held)?",
    r"celebration\s+of\s+life(?:\s+will)?(?:\s+be)?(?:\s+held)?",
    r"services?\s+will\s+be\s+(?:held|at)",
    r"graveside\s+services?(?:\s+will)?(?:\s+be)?(?:\s+held)?",
    r"burial(?:\s+will)?(?:\s+be)?(?:\s+held)?",
    r"interment(?:\s+will)?(?:\s+be)?(?:\s+held)?",
]


def infer_year_from_dod(month: str, day: str, dod: Optional[str]) -> Optional[str]:
    """Place a month/day with no year on or after the date of death.

    The DOD year is used unless that would put the service before the
    death, in which case the following year is used (DOD Dec 29, funeral
    Jan 3).
    """
    if not dod:
        return None

    month_number = _month_number(month)
    if month_number is None:
        return None

    try:
        death = datetime.date.fromisoformat(dod[:10])
        candidate = datetime.date(death.year, month_number, int(day))
        if candidate < death:
            candidate = datetime.date(death.year + 1, month_number, int(day))
    except ValueError:
        return None
    return candidate.isoformat()


def _date_after_keyword(text: str, keyword: str, dod: Optional[str]) -> Optional[str]:
    full = re.search(
        rf"{keyword}[^.]*?(?:on\s+)?(?:\w+,\s+)?({MONTH_PATTERN})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s+(\d{{4}})",
        text,
        re.IGNORECASE,
    )
    if full:
        month_number = _month_number(full.group(1))
        try:
            return datetime.date(int(full.group(3)), month_number, int(full.group(2))).isoformat()
        except (TypeError, ValueError):
            pass

    if dod:
        partial = re.search(
            rf"{keyword}[^.]*?(?:on\s+)?(?:\w+,\s+)?({MONTH_PATTERN})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?(?:\b|,|\s)",
            text,
            re.IGNORECASE,
        )
        if partial:
            return infer_year_from_dod(partial.group(1), partial.group(2), dod)

    return None


def _first_date(text: str, keywords: List[str], dod: Optional[str]) -> Optional[str]:
    for keyword in keywords:
        date = _date_after_keyword(text, keyword, dod)
        if date:
            return date
    return None


def extract_service_dates(text: Optional[str], dod: Optional[str] = None) -> Dict[str, Optional[str]]:
    """Extract visitation and funeral dates from text.

    Args:
        text: Snippet or page text.
        dod: ISO date of death, used to infer the year of "Month DD" dates.

    Returns:
        Dict with ``visitation`` and ``funeral`` keys (ISO dates or ``None``).
    """
    if not text:
        return {"visitation": None, "funeral": None}

    t = re.sub(r"\s+", " ", text).strip()
    return {
        "visitation": _first_date(t, _VISITATION_KEYWORDS, dod),
        "funeral": _first_date(t, _FUNERAL_KEYWORDS, dod),
    }


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------
_CITY_STATE_RE = re.compile(
    r"(?:of\s+)?((?:(?:St|Ft|Mt|Pt)\.\s+)?[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?),\s*([A-Z]{2})\b"
)

_FULL_STATE_CODES: Dict[str, str] = {
    "ohio": "OH", "california": "CA", "florida": "FL", "texas": "TX", "new york": "NY",
    "pennsylvania": "PA", "michigan": "MI", "illinois": "IL", "indiana": "IN", "kentucky": "KY",
}

_CITY_FULL_STATE_RE = re.compile(
    r"(?:of\s+)?((?:(?:St|Ft|Mt|Pt)\.\s+)?[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?),\s*((?i:"
    + "|".join(_FULL_STATE_CODES)
    + r"))\b"
)


def _drop_name_words(city: str, name_words: Set[str]) -> str:
    """Strip leading words of ``city`` that belong to the decedent's name."""
    words = city.split()
    while len(words) > 1 and words[0].lower() in name_words:
        words.pop(0)
    return " ".join(words)


def extract_location(text: Optional[str], name: Optional[str] = None) -> Dict[str, Optional[str]]:
    """Find a "City, ST" pair, falling back to "City, <full state name>".

    The city is at most two words (plus a St./Ft./Mt./Pt. prefix). When
    ``name`` is given, its words are peeled off the front of the city so
    "John Smith Columbus, OH" yields Columbus.
    """
    if not text:
        return {"city": None, "state": None}

    name_words = {w.lower() for w in (name or "").split()}

    for match in _CITY_STATE_RE.finditer(text):
        if match.group(2) in VALID_STATE_CODES:
            return {"city": _drop_name_words(match.group(1), name_words), "state": match.group(2)}

    match = _CITY_FULL_STATE_RE.search(text)
    if match:
        return {
            "city": _drop_name_words(match.group(1), name_words),
            "state": _FULL_STATE_CODES[match.group(2).lower()],
        }

    return {"city": None, "state": None}
