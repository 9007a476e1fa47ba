"""
Researcher Agent for ObitFinder.

Responsibilities:
- Normalize the incoming query and derive its search key.
- Run one provider search per fan-out branch.
"""

from typing import Any, Dict

from obit_finder.tools.normalize import normalize_query
from obit_finder.tools.search_tools import BaseSearchProvider
from obit_finder.utilis.logger import logger


def run_researcher(state: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize node: canonicalize the query and attach its search key.

    Args:
        state: Current ObitSearchState dict.

    Returns:
        State update with 'normalized_query' and 'search_key'.
    """
    nq = normalize_query(state["query"])
    logger.info(
        "Normalized query: %s %s (%s, %s) age=%s variants=%s key=%s",
        nq.get("normalized_first_name"),
        nq.get("normalized_last_name"),
        nq.get("normalized_city") or "-",
        nq.get("normalized_state") or "-",
        nq.get("age"),
        sorted(nq.get("first_name_variants") or []),
        nq["search_key"],
    )
    return {"normalized_query": nq, "search_key": nq["search_key"]}


def run_provider_search(
    provider: BaseSearchProvider,
    normalized_query: Dict[str, Any],
    index: int,
) -> Dict[str, Any]:
    """Search one provider, isolating any failure to this branch.

    Args:
        provider: The provider to query.
        normalized_query: Output of the normalize node.
        index: Position of the provider in the fan-out.

    Returns:
        State update appending one batch to 'provider_results'.
    """
    name = getattr(provider, "name", type(provider).__name__)
    try:
        candidates = provider.search(normalized_query)
    except Exception as exc:  # injected providers may break the never-raise contract
        logger.exception("Provider %s failed unexpectedly: %s", name, exc)
        candidates = []

    return {
        "provider_results": [
            {"index": index, "provider": name, "candidates": candidates}
        ]
    }
