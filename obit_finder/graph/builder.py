"""
LangGraph workflow builder for ObitFinder.

Constructs the normalize → search_provider × N → dedupe → exclude → rank
pipeline. The provider fan-out uses `Send`, so every provider runs in
the same step and dedupe waits until all of them have settled.
"""

from typing import Any, Dict, List, Sequence, Union

from langgraph.graph import END, StateGraph
from langgraph.types import Send

from obit_finder.agents.reporter import run_reporter
from obit_finder.agents.researcher import run_provider_search, run_researcher
from obit_finder.agents.validator import run_exclusion_filter, run_validator
from obit_finder.config import SearchSettings
from obit_finder.graph.state import ObitSearchState
from obit_finder.tools.exclusions import ExclusionSource
from obit_finder.tools.search_tools import BaseSearchProvider
from obit_finder.utilis.logger import logger


def build_obit_search_graph(
    providers: Sequence[BaseSearchProvider],
    exclusion_source: ExclusionSource,
    settings: SearchSettings,
):
    """Construct and compile the LangGraph workflow.

    Graph:
        normalize → search_provider (one branch per provider, via Send)
                  → dedupe → exclude → rank → END
        With no providers, normalize goes straight to dedupe.

    Args:
        providers: Provider instances, in fan-out order.
        exclusion_source: Store read once per search for exclusions.
        settings: Scoring weights, age window and result limit.

    Returns:
        Compiled LangGraph StateGraph.
    """
    providers = list(providers)

    # -----------------------------------------------------------------------
    # Wrapper nodes (adapt agent functions to LangGraph node signature)
    # -----------------------------------------------------------------------

    def normalize_node(state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("=== Normalize node started ===")
        return run_researcher(state)

    def search_provider_node(payload: Dict[str, Any]) -> Dict[str, Any]:
        provider = providers[payload["index"]]
        logger.info("=== Search node started (%s) ===", getattr(provider, "name", "provider"))
        return run_provider_search(provider, payload["normalized_query"], payload["index"])

    def dedupe_node(state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("=== Dedupe node started ===")
        return run_validator(state)

    def exclude_node(state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("=== Exclude node started ===")
        return run_exclusion_filter(state, exclusion_source)

    def rank_node(state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("=== Rank node started ===")
        return run_reporter(state, settings)

    # -----------------------------------------------------------------------
    # Conditional edge: fan out to every provider
    # -----------------------------------------------------------------------

    def route_to_providers(state: Dict[str, Any]) -> Union[str, List[Send]]:
        if not providers:
            logger.warning("No search providers configured – skipping search")
            return "dedupe"
        nq = state["normalized_query"]
        return [
            Send("search_provider", {"index": i, "normalized_query": nq})
            for i in range(len(providers))
        ]

    workflow = StateGraph(ObitSearchState)

    workflow.add_node("normalize", normalize_node)
    workflow.add_node("search_provider", search_provider_node)
    workflow.add_node("dedupe", dedupe_node)
    workflow.add_node("exclude", exclude_node)
    workflow.add_node("rank", rank_node)

    workflow.set_entry_point("normalize")
    workflow.add_conditional_edges("normalize", route_to_providers, ["search_provider", "dedupe"])
    workflow.add_edge("search_provider", "dedupe")
    workflow.add_edge("dedupe", "exclude")
    workflow.add_edge("exclude", "rank")
    workflow.add_edge("rank", END)

    compiled = workflow.compile()
    logger.info("ObitSearch graph compiled with %d providers", len(providers))
    return compiled
