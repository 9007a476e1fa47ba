"""ObitFinder pipeline agents package."""

from obit_finder.agents.researcher import run_provider_search, run_researcher
from obit_finder.agents.validator import run_exclusion_filter, run_validator
from obit_finder.agents.reporter import run_reporter

__all__ = [
    "run_researcher",
    "run_provider_search",
    "run_validator",
    "run_exclusion_filter",
    "run_reporter",
]
