"""
Shared test fixtures for obit-finder.

Provides explicit settings (no rate-limit sleeps, no .env lookups),
normalized queries, a temp-file exclusion store, sample hit files and a
scripted provider for pipeline tests.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault("OBIT_FINDER_LOG_DIR", tempfile.mkdtemp(prefix="obit_finder_logs_"))

import pytest  # noqa: E402

from obit_finder.config import SearchSettings  # noqa: E402
from obit_finder.tools.exclusions import ExclusionStore  # noqa: E402
from obit_finder.tools.fingerprint import generate_fingerprint  # noqa: E402
from obit_finder.tools.normalize import normalize_query  # noqa: E402


# ---------------------------------------------------------------------------
# Settings & queries
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path: Path) -> SearchSettings:
    """Settings with no credentials, no throttling and a missing sample file."""
    return SearchSettings(
        request_interval=0.0,
        sample_data_path=str(tmp_path / "no_such_sample.json"),
        exclusion_db_path=str(tmp_path / "exclusions.db"),
    )


@pytest.fixture
def bill_smith_query() -> Dict[str, Any]:
    return {
        "first_name": "Bill",
        "last_name": "Smith",
        "city": "Columbus",
        "state": "OH",
        "age": 80,
    }


@pytest.fixture
def bill_smith_nq(bill_smith_query):
    return normalize_query(bill_smith_query)


# ---------------------------------------------------------------------------
# Exclusion store
# ---------------------------------------------------------------------------

@pytest.fixture
def exclusion_store(tmp_path: Path):
    """Fresh SQLite exclusion store in a temp file."""
    store = ExclusionStore(str(tmp_path / "exclusions.db"))
    yield store
    store.close()


# ---------------------------------------------------------------------------
# Sample hits
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_hits() -> List[Dict[str, str]]:
    return [
        {
            "title": "William Smith Obituary - Columbus, OH | Legacy.com",
            "snippet": (
                'William "Bill" Smith, 81, of Columbus, OH passed away on March 3, 2024. '
                "Visitation will be held March 7 at Schoedinger Funeral Home. "
                "Funeral services will be held on Friday, March 8, 2024."
            ),
            "link": "https://www.legacy.com/us/obituaries/dispatch/name/william-smith-obituary?id=54321",
        },
        {
            "title": "Bill Smith, 80 - Dayton, OH - Obituary",
            "snippet": "Bill Smith, 80, of Dayton, OH died January 12, 2024 surrounded by family.",
            "link": "https://www.daytondailynews.com/obituaries/bill-smith",
        },
    ]


@pytest.fixture
def sample_file(tmp_path: Path, sample_hits) -> str:
    path = tmp_path / "sample_results.json"
    path.write_text(json.dumps({"results": sample_hits}), encoding="utf-8")
    return str(path)


# ---------------------------------------------------------------------------
# Candidates & providers
# ---------------------------------------------------------------------------

def make_candidate(
    cid: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    age_years: Optional[int] = None,
    dod: Optional[str] = None,
    url: Optional[str] = None,
    provider_type: str = "serper",
    **extra: Any,
) -> Dict[str, Any]:
    """Build a Candidate dict the way a provider would."""
    candidate = {
        "id": cid,
        "full_name": " ".join(p for p in (first_name, last_name) if p),
        "first_name": first_name,
        "middle_name": None,
        "last_name": last_name,
        "age_years": age_years,
        "dod": dod,
        "date_visitation": None,
        "date_funeral": None,
        "city": city,
        "state": state,
        "source": provider_type.title(),
        "url": url or f"https://example.com/obituaries/{cid}",
        "snippet": "",
        "score": 0,
        "reasons": [],
        "fingerprint": generate_fingerprint(last_name, first_name, city, state, dod),
        "provider_type": provider_type,
    }
    candidate.update(extra)
    return candidate


class ScriptedProvider:
    """Provider double returning canned candidates (or raising)."""

    provider_type = "scripted"

    def __init__(self, name: str, candidates=None, error: Optional[Exception] = None):
        self.name = name
        self.candidates = candidates or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def search(self, nq):
        self.calls.append(nq)
        if self.error is not None:
            raise self.error
        return [dict(c) for c in self.candidates]


@pytest.fixture
def scenario_candidates():
    """C1 = William Smith, Columbus OH, 81; C2 = Bill Smith, Dayton OH, 80."""
    c1 = make_candidate("c1", "William", "Smith", "Columbus", "OH", 81, url="https://example.com/obituaries/william-smith")
    c2 = make_candidate("c2", "Bill", "Smith", "Dayton", "OH", 80, url="https://example.com/obituaries/bill-smith")
    return c1, c2
