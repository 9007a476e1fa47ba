"""
Reporter Agent for ObitFinder.

Responsibilities:
- Score every surviving candidate against the query.
- Rank them (stable, best first) and truncate to the configured size.
"""

from typing import Any, Dict

from obit_finder.config import SearchSettings
from obit_finder.tools.scoring import rank_candidates, score_candidates
from obit_finder.utilis.logger import logger


def run_reporter(state: Dict[str, Any], settings: SearchSettings) -> Dict[str, Any]:
    """Rank node: score, rank and truncate.

    Args:
        state: Current ObitSearchState dict.
        settings: Supplies the weights, age window and `max_results`.

    Returns:
        State update with 'results'.
    """
    candidates = state.get("filtered_candidates", [])
    if not candidates:
        logger.warning("Reporter: no candidates left to rank")
        return {"results": []}

    scored = score_candidates(candidates, state["normalized_query"], settings)
    ranked = rank_candidates(scored)
    results = ranked[: settings.max_results]

    if results:
        best = results[0]
        logger.info(
            "Reporter ranked %d candidates (kept %d); best: %s (score=%d)",
            len(ranked), len(results), best.get("full_name"), best["final_score"],
        )
    else:
        logger.info("Reporter ranked %d candidates; max_results=0 keeps none", len(ranked))
    return {"results": results}
