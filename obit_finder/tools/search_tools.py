"""
Search provider adapters for ObitFinder.

Each provider turns a NormalizedQuery into one backend call (SerpAPI,
Serper.dev, Google Custom Search or DuckDuckGo) and parses the raw hits
into Candidates. Providers rate-limit themselves, fall back to bundled
sample data when no credential is configured, and never raise: any
transport or parse failure is logged and becomes an empty list.
"""

import json
import threading
import time
import uuid
from typing import Any, Dict, List, Optional

import requests
from ddgs import DDGS

from obit_finder.config import SearchSettings
from obit_finder.graph.state import Candidate, NormalizedQuery, SearchHit
from obit_finder.tools.fingerprint import generate_fingerprint
from obit_finder.tools.name_extract import extract_name
from obit_finder.tools.nicknames import build_or_clause
from obit_finder.tools.text_extract import (
    extract_age,
    extract_dod,
    extract_location,
    extract_service_dates,
)
from obit_finder.utilis.logger import logger

# Per provider type: time of the last backend call
_last_call_ts: Dict[str, float] = {}
_rate_lock = threading.Lock()


class SearchProviderError(Exception):
    """Raised by a backend call that failed outside of `requests`."""


# ---------------------------------------------------------------------------
# Hit parsing
# ---------------------------------------------------------------------------

def parse_search_hit(
    hit: SearchHit,
    nq: NormalizedQuery,
    source: str,
    provider_type: str,
) -> Candidate:
    """Turn one raw `{title, snippet, link}` hit into a Candidate.

    Args:
        hit: Raw backend hit.
        nq: The normalized query (supplies the last-name hint and the
            fingerprint fallbacks).
        source: Display name of the provider.
        provider_type: Provider identifier.

    Returns:
        Candidate with extracted fields, ``score`` 0 and no reasons.
    """
    title = hit.get("title") or ""
    snippet = hit.get("snippet") or ""
    url = hit.get("link") or ""

    name = extract_name(title, snippet, url, nq.get("normalized_last_name"))
    age = extract_age(snippet) or extract_age(title)
    dod = extract_dod(snippet) or extract_dod(title)

    services = extract_service_dates(snippet, dod)
    # The person died before their funeral or visitation
    if not dod:
        dod = services["funeral"] or services["visitation"]

    name_words = " ".join(
        filter(None, (name.get("full_name"), nq.get("normalized_first_name"), nq.get("normalized_last_name")))
    )
    location = extract_location(f"{title} {snippet}", name_words)

    fingerprint = generate_fingerprint(
        name.get("last_name") or nq.get("normalized_last_name"),
        name.get("first_name") or nq.get("normalized_first_name"),
        location["city"],
        location["state"],
        dod,
    )

    return {
        "id": str(uuid.uuid4()),
        "full_name": name.get("full_name") or title.split(" - ")[0].split("|")[0].strip(),
        "first_name": name.get("first_name"),
        "middle_name": name.get("middle_name"),
        "last_name": name.get("last_name"),
        "age_years": age,
        "dod": dod,
        "date_visitation": services["visitation"],
        "date_funeral": services["funeral"],
        "city": location["city"],
        "state": location["state"],
        "source": source,
        "url": url,
        "snippet": snippet,
        "score": 0,
        "reasons": [],
        "fingerprint": fingerprint,
        "provider_type": provider_type,
    }


def load_sample_hits(path: str) -> List[SearchHit]:
    """Read offline sample hits from a JSON file shaped ``{"results": [...]}``."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("Sample data file not found: %s", path)
        return []
    except (OSError, ValueError) as exc:
        logger.error("Could not read sample data %s: %s", path, exc)
        return []

    return [
        {
            "title": item.get("title", ""),
            "snippet": item.get("snippet", ""),
            "link": item.get("link", ""),
        }
        for item in data.get("results", [])
        if isinstance(item, dict)
    ]


# ---------------------------------------------------------------------------
# Provider base class
# ---------------------------------------------------------------------------

class BaseSearchProvider:
    """One search backend behind the `search(NormalizedQuery)` capability."""

    name = "Base"
    provider_type = "base"

    def __init__(
        self,
        settings: Optional[SearchSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or SearchSettings()
        self.session = session or requests.Session()

    def is_configured(self) -> bool:
        return True

    def name_clause(self, nq: NormalizedQuery) -> str:
        first = nq.get("normalized_first_name") or ""
        nickname = nq.get("normalized_nickname")
        if nickname and first and nickname.lower() != first.lower():
            return build_or_clause([first, nickname])
        return first

    def build_query(self, nq: NormalizedQuery) -> str:
        """Backend query: name clause, last name, "obituary", city, state."""
        parts = [
            self.name_clause(nq),
            nq.get("normalized_last_name"),
            "obituary",
            nq.get("normalized_city"),
            nq.get("normalized_state"),
        ]
        return " ".join(p for p in parts if p)

    def fetch(self, query: str) -> List[SearchHit]:
        """Issue the backend call and return raw hits."""
        raise NotImplementedError

    def _rate_limit(self) -> None:
        """Block until the minimum interval has elapsed since the last call.

        The timestamp is shared by every instance of the same provider type,
        so fresh providers built per search still respect the interval.
        """
        with _rate_lock:
            now = time.time()
            slot = max(now, _last_call_ts.get(self.provider_type, 0.0) + self.settings.request_interval)
            _last_call_ts[self.provider_type] = slot
        if slot > now:
            time.sleep(slot - now)

    def search(self, nq: NormalizedQuery) -> List[Candidate]:
        """Search the backend and parse every hit into a Candidate.

        Never raises; failures are logged and yield an empty list.
        """
        query = self.build_query(nq)

        if not self.is_configured():
            logger.info("%s not configured – using sample data from %s", self.name, self.settings.sample_data_path)
            hits = load_sample_hits(self.settings.sample_data_path)
        else:
            self._rate_limit()
            logger.info("%s search – query: %s", self.name, query)
            try:
                hits = self.fetch(query)
            except requests.RequestException as exc:
                logger.error("%s request failed: %s", self.name, exc)
                return []
            except (KeyError, ValueError, TypeError) as exc:
                logger.error("%s response parsing error: %s", self.name, exc)
                return []
            except SearchProviderError as exc:
                logger.error("%s search failed: %s", self.name, exc)
                return []

        candidates = [
            parse_search_hit(hit, nq, self.name, self.provider_type)
            for hit in hits
            if hit.get("link") or hit.get("title")
        ]
        logger.info("%s returned %d candidates for: %s", self.name, len(candidates), query)
        return candidates


# ---------------------------------------------------------------------------
# SerpAPI (Google engine)
# ---------------------------------------------------------------------------

class SerpApiProvider(BaseSearchProvider):
    name = "SerpAPI"
    provider_type = "serpapi"
    endpoint = "https://serpapi.com/search"

    def is_configured(self) -> bool:
        return bool(self.settings.serpapi_api_key)

    def fetch(self, query: str) -> List[SearchHit]:
        params = {
            "engine": "google",
            "q": query,
            "api_key": self.settings.serpapi_api_key,
            "num": self.settings.num_results,
        }
        response = self.session.get(self.endpoint, params=params, timeout=self.settings.request_timeout)
        response.raise_for_status()
        data = response.json()

        return [
            {
                "title": item.get("title", ""),
                "snippet": item.get("snippet", ""),
                "link": item.get("link", ""),
            }
            for item in data.get("organic_results", [])
        ]


# ---------------------------------------------------------------------------
# Serper.dev
# ---------------------------------------------------------------------------

class SerperProvider(BaseSearchProvider):
    """Serper.dev adapter; ORs every known first-name variant."""

    name = "Serper"
    provider_type = "serper"
    endpoint = "https://google.serper.dev/search"

    def is_configured(self) -> bool:
        return bool(self.settings.serper_api_key)

    def name_clause(self, nq: NormalizedQuery) -> str:
        first = nq.get("normalized_first_name") or ""
        others = sorted(nq.get("first_name_variants") or set())
        return build_or_clause([first] + others)

    def fetch(self, query: str) -> List[SearchHit]:
        headers = {
            "X-API-KEY": self.settings.serper_api_key,
            "Content-Type": "application/json",
        }
        payload = {"q": query, "num": self.settings.num_results}
        response = self.session.post(
            self.endpoint, headers=headers, json=payload, timeout=self.settings.request_timeout
        )
        response.raise_for_status()
        data = response.json()

        return [
            {
                "title": item.get("title", ""),
                "snippet": item.get("snippet", ""),
                "link": item.get("link", ""),
            }
            for item in data.get("organic", [])
        ]


# ---------------------------------------------------------------------------
# Google Custom Search (obituary-site engine)
# ---------------------------------------------------------------------------

class GoogleCseProvider(BaseSearchProvider):
    name = "Google"
    provider_type = "google"
    endpoint = "https://www.googleapis.com/customsearch/v1"

    def is_configured(self) -> bool:
        return bool(self.settings.google_api_key and self.settings.google_cse_id)

    def fetch(self, query: str) -> List[SearchHit]:
        params = {
            "key": self.settings.google_api_key,
            "cx": self.settings.google_cse_id,
            "q": query,
            # The API caps a page at 10 results
            "num": min(self.settings.num_results, 10),
        }
        response = self.session.get(self.endpoint, params=params, timeout=self.settings.request_timeout)
        response.raise_for_status()
        data = response.json()

        return [
            {
                "title": item.get("title", ""),
                "snippet": item.get("snippet", ""),
                "link": item.get("link", ""),
            }
            for item in data.get("items", [])
        ]


# ---------------------------------------------------------------------------
# DuckDuckGo
# ---------------------------------------------------------------------------

class DuckDuckGoProvider(BaseSearchProvider):
    """DuckDuckGo via `ddgs`; needs no credential."""

    name = "DuckDuckGo"
    provider_type = "duckduckgo"

    def fetch(self, query: str) -> List[SearchHit]:
        try:
            with DDGS() as ddgs:
                raw = list(ddgs.text(query, max_results=self.settings.num_results))
        except Exception as exc:  # DDGS may raise various exceptions
            raise SearchProviderError(str(exc)) from exc

        return [
            {
                "title": item.get("title", ""),
                "snippet": item.get("body", ""),
                "link": item.get("href", ""),
            }
            for item in raw
        ]


# ---------------------------------------------------------------------------
# Provider registry
# ---------------------------------------------------------------------------
PROVIDER_CLASSES: Dict[str, Any] = {
    "serpapi": SerpApiProvider,
    "serper": SerperProvider,
    "google": GoogleCseProvider,
    "duckduckgo": DuckDuckGoProvider,
}


def build_providers(
    settings: SearchSettings,
    session: Optional[requests.Session] = None,
) -> List[BaseSearchProvider]:
    """Instantiate the configured providers, in configuration order.

    Unknown provider ids are logged and skipped.
    """
    providers: List[BaseSearchProvider] = []
    for provider_id in settings.providers:
        provider_cls = PROVIDER_CLASSES.get(provider_id)
        if provider_cls is None:
            logger.warning("Unknown search provider '%s' – skipping", provider_id)
            continue
        providers.append(provider_cls(settings=settings, session=session))

    logger.info("Active providers: %s", ", ".join(p.name for p in providers) or "none")
    return providers
