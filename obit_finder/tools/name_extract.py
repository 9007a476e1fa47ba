"""
Name extraction from search-result titles, snippets and URLs.

Each function maps text to a `NameParts` dict; a missing part means the
heuristics could not find it. Providers chain them as
title → snippet → URL until a valid first/last pair is found.
"""

import re
from typing import Dict, List, Optional
from urllib.parse import urlparse

NameParts = Dict[str, Optional[str]]

MONTH_NAMES = (
    "January|February|March|April|May|June|July|August|"
    "September|October|November|December"
)

# Full state names as they trail titles like "Patricia Pierce Rochester, New York"
_US_STATES_FULL = (
    "Alabama|Alaska|Arizona|Arkansas|California|Colorado|Connecticut|Delaware|"
    "Florida|Georgia|Hawaii|Idaho|Illinois|Indiana|Iowa|Kansas|Kentucky|Louisiana|"
    "Maine|Maryland|Massachusetts|Michigan|Minnesota|Mississippi|Missouri|Montana|"
    "Nebraska|Nevada|New Hampshire|New Jersey|New Mexico|New York|North Carolina|"
    "North Dakota|Ohio|Oklahoma|Oregon|Pennsylvania|Rhode Island|South Carolina|"
    "South Dakota|Tennessee|Texas|Utah|Vermont|Virginia|Washington|West Virginia|"
    "Wisconsin|Wyoming"
)

INVALID_LAST_NAMES = frozenset({
    "videos", "website", "memorial", "obituary", "obituaries",
    "will", "service", "services", "information", "photos",
    "instagram", "facebook", "twitter", "wall", "tribute",
    "page", "home", "funeral", "published", "soon", "images",
    "notice", "notices", "legacy", "search", "results",
})

INVALID_FIRST_NAMES = frozenset({
    "obituary", "obituaries", "memorial", "funeral", "service", "services",
    "search", "find", "recent", "local", "browse", "view", "all", "death",
    "remembering", "celebrating", "the", "in", "for", "of", "and", "information",
})

NAME_SUFFIXES = frozenset({
    "jr", "jr.", "sr", "sr.", "ii", "iii", "iv", "v",
    "esq", "esq.", "md", "m.d.", "phd", "ph.d.",
})

_NON_NAME_SLUGS = frozenset({"obituary", "memorial", "tribute", "funeral", "service"})

GENERIC_TITLE_PATTERNS: List[re.Pattern] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^search\s+for\s+",
        r"^find\s+",
        r"^obituaries?\s*(for|in|from|search)?",
        r"^recent\s+obituaries?",
        r"^most\s+recent",
        r"^local\s+obituaries?",
        r"^current\s+services?",
        r"^funeral\s+services?",
        r"^death\s+notices?",
        r"^browse\s+",
        r"^view\s+all",
        r"^all\s+obituaries?",
        r"^\d+\s+obituaries?",
        r"^contributions?\s+to",
        r"^condolences?\s+for",
        r"^full\s+text\s+of",
        r"^\[?pdf\]?",
        r"^researching",
    )
]

# ---------------------------------------------------------------------------
# Title cleaning rules, applied in order
# ---------------------------------------------------------------------------
_SOCIAL_MEDIA_RULES = [
    re.compile(r"\s*\(@[^)]*\).*$"),
    re.compile(r"\s*[•·]\s*Instagram.*$", re.IGNORECASE),
    re.compile(r"\s*[•·]\s*.*$"),
    re.compile(r"\s+on\s+Instagram$", re.IGNORECASE),
    re.compile(r"\s+photos\s+and\s+videos$", re.IGNORECASE),
    re.compile(r"\s*\|\s*Facebook$", re.IGNORECASE),
]

_MEMORIAL_RULES = [
    re.compile(r"'s\s+Memorial\s+Website$", re.IGNORECASE),
    re.compile(r"\s+Memorial\s+Website$", re.IGNORECASE),
    re.compile(r"'s\s+Tribute\s+Wall$", re.IGNORECASE),
    re.compile(r"\s+Tribute\s+Wall$", re.IGNORECASE),
]

_DATE_RULES = [
    # "Antonio AvilaFebruary 4, 2026"
    re.compile(r"(?:" + MONTH_NAMES + r")\s*\d{1,2},?\s*\d{4}.*$", re.IGNORECASE),
    re.compile(r"\s+(?:" + MONTH_NAMES + r")\s+\d{1,2}(?:,?\s*\d{4})?.*$", re.IGNORECASE),
]

_CONTINUATION_RULES = [
    re.compile(r"\s+passed\s+away.*$", re.IGNORECASE),
    re.compile(r"\s+an?\s+obituary.*$", re.IGNORECASE),
    re.compile(r"\s+service\s+information.*$", re.IGNORECASE),
    re.compile(r"\s+and\s+service\s+information.*$", re.IGNORECASE),
]

# Only a single-word city, so person names are not eaten
_TRAILING_LOCATION_RE = re.compile(r"\s+[A-Z][a-z]+,\s*(?:" + _US_STATES_FULL + r"|[A-Z]{2})\s*$")

_PREFIX_RULES = [
    re.compile(
        r"^(information\s+for|obituary\s+for|obituary\s+of|in\s+memory\s+of|"
        r"in\s+loving\s+memory\s+of|remembering)\s+",
        re.IGNORECASE,
    ),
    re.compile(r"^(mr\.?|mrs\.?|ms\.?|dr\.?|miss)\s+", re.IGNORECASE),
]

_DELIMITER_RULES = [
    re.compile(r"\s*\|\s*.*$"),
    # Spaced dashes only, so "Gonzalez-Irizarry" survives
    re.compile(r"\s+[-–—]\s+.*$"),
]

_OBITUARY_WORD_RE = re.compile(r"\s*\bObituary\b\s*", re.IGNORECASE)
_TRAILING_JUNK_RE = re.compile(r"[\s\-–—|,:;]+$")

_SUFFIX_RULES = [
    re.compile(r"\s*\(\d{1,2}/\d{1,2}/\d{2,4}.*$"),
    re.compile(r"\s*\(\d{4}.*$"),
    re.compile(r"\s*\d{4}\s*-\s*\d{4}.*$"),
    re.compile(r",\s*\d{1,3}\s*,.*$"),
    re.compile(r",\s*(?:age\s+)?\d{1,3}$", re.IGNORECASE),
    re.compile(r",\s*(Who|What|Where|When|How|That|A\s|The\s).*$", re.IGNORECASE),
    re.compile(r"\.{2,}$"),
]

_QUOTED_NICKNAME_RE = re.compile(r"\s*[\"“”][^\"“”]*[\"“”]\s*")
_LAST_FIRST_RE = re.compile(
    r"^([A-Z][A-Za-z'\-]+),\s+([A-Z][A-Za-z'\-]+)(?:\s+([A-Z][A-Za-z'\-]*\.?))?$"
)

_SNIPPET_NAME = r"([A-Z][a-z]+(?:\s+[A-Z]\.?)?(?:\s+[A-Z][a-z]+)+)"
_LEADING_STOPWORDS = frozenset({
    "on", "our", "beloved", "the", "services", "for", "mr", "mrs", "ms", "dr",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    "yesterday", "today",
})


def _apply(rules: List[re.Pattern], text: str) -> str:
    for rule in rules:
        text = rule.sub("", text)
    return text.strip()


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower() if word else word


def clean_title(title: str) -> str:
    """Strip decorations (sites, dates, ages, places) from a result title."""
    text = _apply(_SOCIAL_MEDIA_RULES, title)
    text = _apply(_MEMORIAL_RULES, text)
    text = _apply(_DATE_RULES, text)
    text = _apply(_CONTINUATION_RULES, text)
    text = _TRAILING_LOCATION_RE.sub("", text)
    text = _TRAILING_JUNK_RE.sub("", text).strip()
    text = _apply(_PREFIX_RULES, text)
    text = _apply(_DELIMITER_RULES, text)
    text = re.sub(r"\s+", " ", _OBITUARY_WORD_RE.sub(" ", text)).strip()
    text = _apply(_SUFFIX_RULES, text)
    return _TRAILING_JUNK_RE.sub("", text)


def _is_alpha_name(part: str) -> bool:
    stripped = part.replace("'", "").replace("-", "").rstrip(".")
    return bool(stripped) and stripped.isalpha()


def is_valid_name(first_name: Optional[str], last_name: Optional[str]) -> bool:
    """A parsed name is valid when both parts are alphabetic non-placeholders."""
    if not first_name or not last_name:
        return False
    if not _is_alpha_name(first_name) or not _is_alpha_name(last_name):
        return False
    if last_name.lower() in INVALID_LAST_NAMES:
        return False
    if first_name.lower() in INVALID_FIRST_NAMES:
        return False
    return True


def is_generic_title(title: Optional[str]) -> bool:
    """True when a title names a listing page rather than a person."""
    if not title:
        return True

    stripped = title.strip()
    for pattern in GENERIC_TITLE_PATTERNS:
        if pattern.search(stripped):
            return True

    if len(stripped) < 3:
        return True
    if not re.search(r"[a-z]", stripped):
        return True
    if not re.search(r"\s", stripped):
        return True
    return False


def extract_name_from_title(title: Optional[str]) -> NameParts:
    """Extract a person's name from a search-result title.

    Handles "Last, First [Middle]", "First [Middle] Last" and
    "<Name> Obituary" shapes plus funeral-home, memorial-site and
    social-media decorations.

    Args:
        title: Raw result title.

    Returns:
        Dict with ``full_name`` and, when parseable and valid,
        ``first_name``, ``middle_name`` and ``last_name``.
    """
    if not title:
        return {"full_name": None}

    cleaned = clean_title(title)
    full_name = cleaned
    for_parsing = _QUOTED_NICKNAME_RE.sub(" ", cleaned)
    for_parsing = re.sub(r"\s+", " ", for_parsing).strip()

    comma = _LAST_FIRST_RE.match(for_parsing)
    if comma:
        last, first, middle = comma.group(1), comma.group(2), comma.group(3)
        last, first = _capitalize(last), _capitalize(first)
        if middle and middle.lower() in NAME_SUFFIXES:
            middle = None
        if is_valid_name(first, last):
            display = " ".join(p for p in (first, middle, last) if p)
            return {
                "full_name": display,
                "first_name": first,
                "middle_name": middle.rstrip(".") if middle else None,
                "last_name": last,
            }

    parts = for_parsing.split()
    while len(parts) > 2 and parts[-1].lower().rstrip(",") in NAME_SUFFIXES:
        parts.pop()
    parts = [p.rstrip(",") for p in parts]

    if len(parts) < 2:
        return {"full_name": full_name or None}

    first = parts[0]
    last_index = len(parts) - 1
    # Trailing middle initial: "John Smith A."
    if len(parts[last_index].rstrip(".")) == 1 and len(parts) > 2:
        last_index -= 1
    last = re.sub(r"[.,;:!?]+$", "", parts[last_index])
    middle_parts = parts[1:last_index]
    middle = middle_parts[0].rstrip(".") if middle_parts else None

    if not is_valid_name(first, last):
        return {"full_name": full_name or None}

    return {
        "full_name": full_name,
        "first_name": first.rstrip("."),
        "middle_name": middle or None,
        "last_name": last,
    }


def extract_name_from_snippet(snippet: Optional[str], last_name: Optional[str] = None) -> NameParts:
    """Extract a name from snippet text, using the query last name as a hint.

    Patterns, in order: "SMITH, John", "<Name> passed away/died",
    "<Name>, 83," and "<First> ... <Last>" around the hinted last name.
    """
    if not snippet:
        return {"full_name": None}

    if last_name:
        # Newspaper style "SMITH, John"; mixed case only at the start of the text
        for match in re.finditer(re.escape(last_name) + r",\s*([A-Z][a-z]+)\b", snippet, re.IGNORECASE):
            written = match.group(0)[:len(last_name)]
            if not (written.isupper() or match.start() == 0):
                continue
            first = _capitalize(match.group(1))
            last = _capitalize(last_name)
            if is_valid_name(first, last):
                return {
                    "full_name": f"{first} {last}",
                    "first_name": first,
                    "middle_name": None,
                    "last_name": last,
                }

    passed_away = re.search(
        _SNIPPET_NAME + r"\s+(?i:passed\s+away|died|departed)",
        snippet,
    )
    if passed_away:
        return extract_name_from_title(_trim_leading_words(passed_away.group(1)))

    name_age = re.search(_SNIPPET_NAME + r",\s*(?i:age\s*)?\d{1,3},", snippet)
    if name_age:
        return extract_name_from_title(_trim_leading_words(name_age.group(1)))

    if last_name:
        near_last = re.search(
            r"([A-Z][a-z]+(?:\s+[A-Z]\.?)?(?:\s+[A-Z][a-z]+)*\s+(?i:" + re.escape(last_name) + r"))\b",
            snippet,
        )
        if near_last:
            return extract_name_from_title(_trim_leading_words(near_last.group(1)))

    return {"full_name": None}


def _trim_leading_words(name: str) -> str:
    words = name.split()
    while len(words) > 2 and words[0].lower() in _LEADING_STOPWORDS:
        words.pop(0)
    return " ".join(words)


def extract_name_from_url(url: Optional[str]) -> NameParts:
    """Derive a name from an obituary URL slug, e.g. /obituaries/john-smith."""
    if not url:
        return {"full_name": None}

    try:
        path = urlparse(url).path
    except ValueError:
        return {"full_name": None}

    match = re.search(r"/(?:obituaries|obituary|obits|tribute)/([a-z]+-[a-z]+(?:-[a-z]+)*)", path, re.IGNORECASE)
    if not match:
        return {"full_name": None}

    slug_parts = [p for p in match.group(1).split("-") if p.lower() not in _NON_NAME_SLUGS]
    if len(slug_parts) < 2:
        return {"full_name": None}

    first = _capitalize(slug_parts[0])
    last = _capitalize(slug_parts[-1])
    if not is_valid_name(first, last):
        return {"full_name": None}

    return {
        "full_name": " ".join(_capitalize(p) for p in slug_parts),
        "first_name": first,
        "middle_name": _capitalize(slug_parts[1]) if len(slug_parts) > 2 else None,
        "last_name": last,
    }


def extract_name(title: str, snippet: str, url: str, last_name_hint: Optional[str] = None) -> NameParts:
    """Run the title → snippet → URL fallback chain."""
    name = extract_name_from_title(title)
    if is_generic_title(name.get("full_name")) or not is_valid_name(name.get("first_name"), name.get("last_name")):
        from_snippet = extract_name_from_snippet(snippet, last_name_hint)
        if is_valid_name(from_snippet.get("first_name"), from_snippet.get("last_name")):
            name = from_snippet
    if not is_valid_name(name.get("first_name"), name.get("last_name")):
        from_url = extract_name_from_url(url)
        if is_valid_name(from_url.get("first_name"), from_url.get("last_name")):
            name = from_url
    return name
