"""ObitFinder search, extraction and ranking tools."""

from obit_finder.tools.dedupe import dedupe_candidates
from obit_finder.tools.exclusions import (
    ExclusionSnapshot,
    ExclusionStore,
    filter_excluded,
    normalize_url,
)
from obit_finder.tools.fingerprint import generate_fingerprint
from obit_finder.tools.normalize import InvalidQueryError, normalize_query, validate_query
from obit_finder.tools.scoring import rank_candidates, score_candidate, score_candidates
from obit_finder.tools.search_tools import BaseSearchProvider, build_providers, parse_search_hit

__all__ = [
    "dedupe_candidates",
    "ExclusionSnapshot",
    "ExclusionStore",
    "filter_excluded",
    "normalize_url",
    "generate_fingerprint",
    "InvalidQueryError",
    "normalize_query",
    "validate_query",
    "rank_candidates",
    "score_candidate",
    "score_candidates",
    "BaseSearchProvider",
    "build_providers",
    "parse_search_hit",
]
