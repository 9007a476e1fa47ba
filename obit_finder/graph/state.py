"""
LangGraph state definition for the ObitFinder workflow.

Defines the typed records that flow through each node
(normalize → search_provider × N → dedupe → exclude → rank).
"""

import operator
from typing import Annotated, Any, List, Optional, Set, TypedDict


class Query(TypedDict, total=False):
    """Raw search request supplied by the caller."""
    last_name: str
    first_name: str
    nickname: str
    middle_name: str
    age: int
    city: str
    state: str
    keywords: Any  # list of strings or a comma-separated string
    input_date: str  # YYYY-MM-DD, the date the age was known


class NormalizedQuery(Query, total=False):
    """Query plus canonical fields and its stable search key."""
    normalized_first_name: str
    normalized_last_name: str
    normalized_middle_name: Optional[str]
    normalized_nickname: Optional[str]
    normalized_city: Optional[str]
    normalized_state: Optional[str]
    normalized_keywords: List[str]
    first_name_variants: Set[str]
    search_key: str


class SearchHit(TypedDict, total=False):
    """A single raw hit from any search backend."""
    title: str
    snippet: str
    link: str


class Candidate(TypedDict, total=False):
    """One parsed hit hypothesized to be the person searched for."""
    id: str
    full_name: str
    first_name: Optional[str]
    middle_name: Optional[str]
    last_name: Optional[str]
    age_years: Optional[int]
    dod: Optional[str]
    date_visitation: Optional[str]
    date_funeral: Optional[str]
    city: Optional[str]
    state: Optional[str]
    source: str
    url: str
    snippet: str
    score: int
    reasons: List[str]
    fingerprint: str
    provider_type: str  # "serpapi" | "serper" | "google" | "duckduckgo" | "native"
    also_found_at: List[str]


class RankedResult(Candidate, total=False):
    """A scored candidate with its final position."""
    final_score: int
    rank: int


class ProviderBatch(TypedDict):
    """Candidates returned by one provider, tagged with its fan-out index."""
    index: int
    provider: str
    candidates: List[Candidate]


class ObitSearchState(TypedDict, total=False):
    """Full state flowing through the LangGraph workflow."""

    # --- Inputs ---
    query: Query

    # --- Normalize outputs ---
    normalized_query: NormalizedQuery
    search_key: str

    # --- Fan-out outputs (one batch per provider) ---
    provider_results: Annotated[List[ProviderBatch], operator.add]

    # --- Dedupe / exclusion outputs ---
    candidates: List[Candidate]
    filtered_candidates: List[Candidate]

    # --- Rank outputs ---
    results: List[RankedResult]

    # --- Control flow ---
    error: Optional[str]


class SearchResponse(TypedDict, total=False):
    """Serializable response returned by `search_obits`."""
    results: List[RankedResult]
    search_key: str
    error: str

