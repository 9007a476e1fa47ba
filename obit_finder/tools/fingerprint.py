"""
Candidate fingerprints.

A fingerprint identifies "the same deceased person" across providers:
``last-firstinitial-city-state-dod``, lower-cased, spaces turned into
dashes and ``unknown`` standing in for any missing part.
"""

import re
from typing import Optional

from obit_finder.tools.normalize import city_key, normalize_name, normalize_state

UNKNOWN = "unknown"


def _part(value: Optional[str]) -> str:
    value = re.sub(r"\s+", "-", (value or "").strip().lower())
    return value or UNKNOWN


def generate_fingerprint(
    last_name: Optional[str],
    first_name: Optional[str],
    city: Optional[str] = None,
    state: Optional[str] = None,
    dod: Optional[str] = None,
) -> str:
    """Build the dedupe fingerprint for a candidate.

    Args:
        last_name: Extracted (or queried) last name.
        first_name: Extracted (or queried) first name; only its initial is used.
        city: City, compared St/Saint-insensitively.
        state: State name or code.
        dod: ISO date of death; only the ``YYYY-MM-DD`` prefix is used.

    Returns:
        Fingerprint string, e.g. ``smith-j-columbus-oh-2024-01-15``.
    """
    first = normalize_name(first_name)
    parts = [
        _part(normalize_name(last_name)),
        _part(first[:1]),
        _part(city_key(city)),
        _part(normalize_state(state)),
        _part((dod or "")[:10]),
    ]
    return "-".join(parts)
