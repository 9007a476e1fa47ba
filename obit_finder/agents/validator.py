"""
Validator Agent for ObitFinder.

Responsibilities:
- Flatten the provider batches in fan-out order.
- Merge duplicate hits of the same person (fingerprint dedupe).
- Drop candidates excluded for this search.
"""

from typing import Any, Dict, List

from obit_finder.graph.state import Candidate
from obit_finder.tools.dedupe import dedupe_candidates
from obit_finder.tools.exclusions import ExclusionSource, filter_excluded, snapshot_from
from obit_finder.utilis.logger import logger


def flatten_batches(batches: List[Dict[str, Any]]) -> List[Candidate]:
    """Concatenate provider batches by fan-out index, whatever order they finished in."""
    flattened: List[Candidate] = []
    for batch in sorted(batches, key=lambda b: b["index"]):
        logger.info("Provider %s contributed %d candidates", batch["provider"], len(batch["candidates"]))
        flattened.extend(batch["candidates"])
    return flattened


def run_validator(state: Dict[str, Any]) -> Dict[str, Any]:
    """Dedupe node: flatten provider output and merge duplicates.

    Args:
        state: Current ObitSearchState dict.

    Returns:
        State update with 'candidates'.
    """
    flattened = flatten_batches(state.get("provider_results", []))
    if not flattened:
        logger.warning("Validator: no candidates returned by any provider")
    return {"candidates": dedupe_candidates(flattened)}


def run_exclusion_filter(state: Dict[str, Any], exclusion_source: ExclusionSource) -> Dict[str, Any]:
    """Exclude node: read the snapshot for this search once and filter."""
    search_key = state["search_key"]
    snapshot = snapshot_from(exclusion_source, search_key)
    logger.info(
        "Exclusion snapshot for %s: %d fingerprints, %d urls",
        search_key, len(snapshot.fingerprints), len(snapshot.urls),
    )
    return {"filtered_candidates": filter_excluded(state.get("candidates", []), snapshot)}
