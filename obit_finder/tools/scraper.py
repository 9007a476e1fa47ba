"""
PageFetcher — obituary page enrichment.

Search snippets are often too short to carry the funeral or visitation
date. For the top-ranked results this fetches the obituary page itself
(requests + BeautifulSoup), extracts its visible text and fills in the
missing date fields. Scores and ranks are left untouched.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from obit_finder.config import SearchSettings
from obit_finder.graph.state import RankedResult
from obit_finder.tools.text_extract import extract_dod, extract_service_dates
from obit_finder.utilis.logger import logger

_ACCEPTED_CONTENT_TYPES = ("text/html", "text/plain")


class PageFetcher:
    """Fetches a page and returns its visible text."""

    def __init__(self, timeout: float = 8.0, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": (
                    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                    "AppleWebKit/537.36 (KHTML, like Gecko) "
                    "Chrome/124.0 Safari/537.36"
                ),
                "Accept": "text/html",
            }
        )

    def fetch_page_text(self, url: str) -> Optional[str]:
        """Return the visible text of *url*, or ``None`` on any failure.

        Only HTML and plain-text responses are accepted.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Page fetch failed for %s: %s", url, exc)
            return None

        content_type = response.headers.get("Content-Type", "").lower()
        if not any(t in content_type for t in _ACCEPTED_CONTENT_TYPES):
            logger.info("Skipping non-HTML content at %s: %s", url, content_type)
            return None

        if "text/plain" in content_type:
            return response.text.strip()

        soup = BeautifulSoup(response.text, "html.parser")
        for tag in soup(["script", "style", "noscript"]):
            tag.decompose()
        return soup.get_text("\n", strip=True)


def needs_enrichment(result: RankedResult) -> bool:
    return bool(result.get("url")) and not (result.get("date_funeral") and result.get("date_visitation"))


def enrich_result(result: RankedResult, fetcher: PageFetcher) -> RankedResult:
    """Return a copy of *result* with dates filled from its page text."""
    if not needs_enrichment(result):
        return result

    text = fetcher.fetch_page_text(result["url"])
    if not text:
        return result

    enriched: RankedResult = {**result}
    if not enriched.get("dod"):
        dod = extract_dod(text)
        if dod:
            enriched["dod"] = dod

    services = extract_service_dates(text, enriched.get("dod"))
    if not enriched.get("date_funeral") and services["funeral"]:
        enriched["date_funeral"] = services["funeral"]
    if not enriched.get("date_visitation") and services["visitation"]:
        enriched["date_visitation"] = services["visitation"]

    if enriched != result:
        logger.info("Enriched %s from page %s", result.get("full_name"), result["url"])
    return enriched


def enrich_results(
    results: List[RankedResult],
    settings: Optional[SearchSettings] = None,
    fetcher: Optional[PageFetcher] = None,
) -> List[RankedResult]:
    """Enrich the first `enrich_max_results` results that lack service dates.

    Pages are fetched with at most `enrich_concurrency` requests in
    flight. Order, scores and ranks are preserved.
    """
    settings = settings or SearchSettings()
    fetcher = fetcher or PageFetcher(timeout=settings.enrich_timeout)

    targets = [i for i, r in enumerate(results) if needs_enrichment(r)][: settings.enrich_max_results]
    if not targets:
        return list(results)

    logger.info("Enriching %d results by fetching pages...", len(targets))
    with ThreadPoolExecutor(max_workers=max(settings.enrich_concurrency, 1)) as pool:
        enriched = list(pool.map(lambda i: enrich_result(results[i], fetcher), targets))

    updated = list(results)
    for index, result in zip(targets, enriched):
        updated[index] = result
    return updated
