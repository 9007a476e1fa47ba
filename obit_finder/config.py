"""
Configuration for ObitFinder.

Settings are an explicit, immutable value built once (usually with
`SearchSettings.from_env()`) and passed to the normalizer, providers,
scorer and orchestrator. Nothing reads process-wide config at call time.
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

DEFAULT_SAMPLE_DATA = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "data", "sample_results.json"
)


@dataclass(frozen=True)
class ScoringWeights:
    """Points awarded (or deducted) per matching criterion."""

    last_name_exact: int = 35
    last_name_mismatch: int = -35
    first_name_exact: int = 10
    first_name_mismatch: int = -10
    nickname_match: int = 6
    middle_initial: int = 3
    city_exact: int = 20
    city_mismatch_same_state: int = -10
    state_exact: int = 15
    age_in_range: int = 15
    age_outside_range: int = -15
    keyword_match: int = 5


@dataclass(frozen=True)
class SearchSettings:
    """Runtime settings for one deployment of the search pipeline."""

    age_window_years: int = 6
    max_results: int = 20
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    # Provider selection: any of "serper", "serpapi", "google", "duckduckgo"
    providers: Tuple[str, ...] = ("serper",)
    serpapi_api_key: str = ""
    serper_api_key: str = ""
    google_api_key: str = ""
    google_cse_id: str = ""
    sample_data_path: str = DEFAULT_SAMPLE_DATA
    num_results: int = 10
    request_timeout: float = 30.0
    request_interval: float = 1.5

    exclusion_db_path: str = os.path.join("data", "exclusions.db")

    # Page enrichment (fetch obituary pages for service dates)
    enrich_pages: bool = False
    enrich_max_results: int = 5
    enrich_concurrency: int = 3
    enrich_timeout: float = 8.0

    def __post_init__(self) -> None:
        if self.max_results < 0:
            raise ValueError(f"max_results must be >= 0, got {self.max_results}")

    @classmethod
    def from_env(cls) -> "SearchSettings":
        """Build settings from environment variables (and a `.env` file)."""
        load_dotenv()

        providers = tuple(
            p.strip().lower()
            for p in os.getenv("SEARCH_PROVIDERS", os.getenv("SEARCH_PROVIDER", "serper")).split(",")
            if p.strip()
        )

        return cls(
            age_window_years=_env_int("AGE_WINDOW_YEARS", 6),
            max_results=max(0, _env_int("MAX_RESULTS", 20)),
            providers=providers or ("serper",),
            serpapi_api_key=os.getenv("SERPAPI_API_KEY", "") or os.getenv("SERPAPI_KEY", ""),
            serper_api_key=os.getenv("SERPER_API_KEY", ""),
            google_api_key=os.getenv("GOOGLE_CSE_API_KEY", ""),
            google_cse_id=os.getenv("GOOGLE_CSE_ID", ""),
            sample_data_path=os.getenv("OBIT_SAMPLE_DATA", DEFAULT_SAMPLE_DATA),
            num_results=_env_int("RESULTS_PER_QUERY", 10),
            request_timeout=_env_float("REQUEST_TIMEOUT", 30.0),
            request_interval=_env_float("REQUEST_INTERVAL", 1.5),
            exclusion_db_path=os.getenv("EXCLUSION_DB_PATH", os.path.join("data", "exclusions.db")),
            enrich_pages=os.getenv("ENRICH_PAGES", "false").strip().lower() in ("1", "true", "yes"),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default
