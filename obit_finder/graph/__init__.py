"""ObitFinder graph package.

Import the workflow from `obit_finder.graph.builder`; only the state
types are exposed here because the tools modules depend on them.
"""

from obit_finder.graph.state import (
    Candidate,
    NormalizedQuery,
    ObitSearchState,
    Query,
    RankedResult,
    SearchResponse,
)

__all__ = [
    "Candidate",
    "NormalizedQuery",
    "ObitSearchState",
    "Query",
    "RankedResult",
    "SearchResponse",
]
