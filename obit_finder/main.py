"""
ObitFinder — main entry point.

Provides a high-level `search_obits()` function that orchestrates the
full LangGraph pipeline and returns a JSON-serializable response.
"""

from typing import Any, Dict, List, Optional, Sequence

from obit_finder.config import SearchSettings
from obit_finder.graph.builder import build_obit_search_graph
from obit_finder.graph.state import Query, SearchResponse
from obit_finder.tools.exclusions import ExclusionSource, ExclusionStore
from obit_finder.tools.normalize import normalize_query, validate_query
from obit_finder.tools.scraper import enrich_results
from obit_finder.tools.search_tools import BaseSearchProvider, build_providers
from obit_finder.utilis.logger import logger


def search_obits(
    query: Query,
    providers: Optional[Sequence[BaseSearchProvider]] = None,
    exclusion_store: Optional[ExclusionSource] = None,
    settings: Optional[SearchSettings] = None,
) -> SearchResponse:
    """Run the ObitFinder pipeline for one query.

    Args:
        query: Person to look for (last name plus first name or nickname).
        providers: Provider instances to fan out to; built from settings
            when omitted.
        exclusion_store: Source of exclusions; the SQLite store at
            `settings.exclusion_db_path` when omitted.
        settings: Explicit configuration; read from the environment when
            omitted.

    Returns:
        ``{"results": [...], "search_key": ...}``, plus ``error`` when the
        pipeline failed unexpectedly.

    Raises:
        InvalidQueryError: If the query lacks the required name fields.
    """
    validate_query(query)

    settings = settings or SearchSettings.from_env()
    search_key = normalize_query(query)["search_key"]

    logger.info("=" * 60)
    logger.info(
        "ObitFinder started — %s %s (key=%s)",
        query.get("first_name") or query.get("nickname"), query.get("last_name"), search_key,
    )
    logger.info("=" * 60)

    try:
        if providers is None:
            providers = build_providers(settings)
        if exclusion_store is None:
            exclusion_store = ExclusionStore(settings.exclusion_db_path)

        graph = build_obit_search_graph(providers, exclusion_store, settings)

        initial_state: Dict[str, Any] = {
            "query": query,
            "provider_results": [],
            "candidates": [],
            "filtered_candidates": [],
            "results": [],
            "error": None,
        }

        final_state = graph.invoke(initial_state)
        results: List[Dict[str, Any]] = final_state.get("results", [])

        if settings.enrich_pages and results:
            results = enrich_results(results, settings)

        logger.info("ObitFinder completed: %d results for key %s", len(results), search_key)
        return {"results": results, "search_key": final_state.get("search_key", search_key)}

    except Exception as exc:
        logger.exception("ObitFinder pipeline error: %s", exc)
        return {"results": [], "search_key": search_key, "error": f"Pipeline error: {str(exc)}"}


if __name__ == "__main__":
    import json

    from obit_finder.tools.normalize import InvalidQueryError
    from obit_finder.tools.scoring import format_candidate

    first_name = input("First name: ").strip()
    last_name = input("Last name: ").strip()
    nickname = input("Nickname (optional): ").strip()
    city = input("City (optional): ").strip()
    state = input("State (optional): ").strip()
    age = input("Approximate age (optional): ").strip()

    user_query: Query = {"first_name": first_name, "last_name": last_name}
    for key, value in (("nickname", nickname), ("city", city), ("state", state), ("age", age)):
        if value:
            user_query[key] = value

    try:
        output = search_obits(user_query)
    except InvalidQueryError as exc:
        print(f"Invalid query: {exc}")
    else:
        for result in output["results"]:
            print("\n" + format_candidate(result))
        print("\n" + json.dumps(output, indent=2))
