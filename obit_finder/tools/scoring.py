"""
Multi-criteria scoring and ranking of obituary candidates.

Every criterion is additive and independent, and fires only when both the
query and the candidate carry a value: missing data is neutral, never a
penalty. Each contribution is recorded as a human-readable reason.
"""

import datetime
from typing import Any, Dict, List, Optional

from obit_finder.config import ScoringWeights, SearchSettings
from obit_finder.graph.state import Candidate, NormalizedQuery, RankedResult
from obit_finder.tools.nicknames import is_nickname_match
from obit_finder.tools.normalize import city_key, normalize_name, normalize_state


def _signed(points: int) -> str:
    return f"+{points}" if points >= 0 else str(points)


def adjusted_age(age: Optional[int], input_date: Optional[str], today: Optional[datetime.date] = None) -> Optional[int]:
    """Advance a query age by the whole years elapsed since *input_date*."""
    if age is None:
        return None
    if not input_date:
        return age

    try:
        known_on = datetime.date.fromisoformat(str(input_date)[:10])
    except ValueError:
        return age

    today = today or datetime.date.today()
    elapsed_years = int((today - known_on).days / 365.25)
    return age + max(elapsed_years, 0)


def score_candidate(
    candidate: Candidate,
    nq: NormalizedQuery,
    settings: Optional[SearchSettings] = None,
    today: Optional[datetime.date] = None,
) -> Dict[str, Any]:
    """Score one candidate against the normalized query.

    The first name is compared literally against the query; a known
    nickname variant earns only the smaller nickname bonus.

    Args:
        candidate: Parsed candidate.
        nq: Normalized query.
        settings: Supplies the weights and the age window.
        today: Reference date for advancing the query age.

    Returns:
        Dict with ``final_score`` (int) and ``reasons`` (list of str).
    """
    settings = settings or SearchSettings()
    w: ScoringWeights = settings.weights
    score = 0
    reasons: List[str] = []

    def add(points: int, label: str) -> None:
        nonlocal score
        score += points
        reasons.append(f"{label} ({_signed(points)})")

    # --- last name ---
    cand_last = normalize_name(candidate.get("last_name"))
    query_last = nq.get("normalized_last_name")
    if cand_last and query_last:
        if cand_last.lower() == query_last.lower():
            add(w.last_name_exact, "Last name exact match")
        else:
            add(w.last_name_mismatch, "Last name mismatch")

    # --- first name ---
    cand_first = normalize_name(candidate.get("first_name"))
    query_first = nq.get("normalized_first_name")
    if cand_first and query_first:
        nickname = nq.get("normalized_nickname")
        if cand_first.lower() == query_first.lower():
            add(w.first_name_exact, "First name exact match")
        elif (
            is_nickname_match(query_first, cand_first)
            or is_nickname_match(cand_first, query_first)
            or (nickname and cand_first.lower() == nickname.lower())
        ):
            add(w.nickname_match, "First name nickname match")
        else:
            add(w.first_name_mismatch, "First name mismatch")

    # --- middle initial ---
    cand_middle = normalize_name(candidate.get("middle_name"))
    query_middle = nq.get("normalized_middle_name")
    if cand_middle and query_middle and cand_middle[0].lower() == query_middle[0].lower():
        add(w.middle_initial, "Middle initial match")

    # --- location ---
    cand_state = normalize_state(candidate.get("state")).upper()
    query_state = (nq.get("normalized_state") or "").upper()
    states_known = bool(cand_state and query_state)
    same_state = states_known and cand_state == query_state

    cand_city = city_key(candidate.get("city"))
    query_city = city_key(nq.get("normalized_city"))
    if cand_city and query_city:
        if cand_city == query_city:
            if not states_known or same_state:
                add(w.city_exact, "City exact match")
        elif same_state:
            add(w.city_mismatch_same_state, "City mismatch in same state")

    if same_state:
        add(w.state_exact, "State exact match")

    # --- age ---
    cand_age = candidate.get("age_years")
    query_age = adjusted_age(nq.get("age"), nq.get("input_date"), today)
    if cand_age is not None and query_age is not None:
        if abs(cand_age - query_age) <= settings.age_window_years:
            add(w.age_in_range, "Age within range")
        else:
            add(w.age_outside_range, "Age outside range")

    # --- keywords ---
    keywords = nq.get("normalized_keywords") or []
    if keywords:
        text = f"{candidate.get('snippet') or ''} {candidate.get('full_name') or ''}".lower()
        matched = next((kw for kw in keywords if kw in text), None)
        if matched:
            add(w.keyword_match, f"Keyword match '{matched}'")

    return {"final_score": score, "reasons": reasons}


def score_candidates(
    candidates: List[Candidate],
    nq: NormalizedQuery,
    settings: Optional[SearchSettings] = None,
    today: Optional[datetime.date] = None,
) -> List[Candidate]:
    """Return new candidates carrying ``score``, ``final_score`` and ``reasons``."""
    scored: List[Candidate] = []
    for candidate in candidates:
        result = score_candidate(candidate, nq, settings, today)
        scored.append({
            **candidate,
            "score": result["final_score"],
            "final_score": result["final_score"],
            "reasons": result["reasons"],
        })
    return scored


def rank_candidates(candidates: List[Candidate]) -> List[RankedResult]:
    """Stable sort by ``final_score`` (desc) and assign 1-based ranks.

    Candidates without a ``final_score`` fall back to ``score``.
    """
    ordered = sorted(
        candidates,
        key=lambda c: c.get("final_score", c.get("score", 0)),
        reverse=True,
    )
    ranked: List[RankedResult] = []
    for position, candidate in enumerate(ordered, start=1):
        final_score = candidate.get("final_score", candidate.get("score", 0))
        ranked.append({**candidate, "final_score": final_score, "rank": position})
    return ranked


# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------

def explain_score(result: RankedResult) -> str:
    """One line per reason, followed by the total."""
    lines = [f"  - {reason}" for reason in result.get("reasons") or []]
    if not lines:
        lines.append("  - No matching criteria")
    lines.append(f"  = {result.get('final_score', result.get('score', 0))} points")
    return "\n".join(lines)


def format_candidate(result: RankedResult) -> str:
    """Multi-line summary of a ranked result for terminal output."""
    location = ", ".join(p for p in (result.get("city"), result.get("state")) if p) or "unknown location"
    header = f"#{result.get('rank', '?')} {result.get('full_name') or 'Unknown'} ({location})"

    details = []
    if result.get("age_years") is not None:
        details.append(f"age {result['age_years']}")
    if result.get("dod"):
        details.append(f"died {result['dod']}")
    if result.get("date_visitation"):
        details.append(f"visitation {result['date_visitation']}")
    if result.get("date_funeral"):
        details.append(f"funeral {result['date_funeral']}")

    lines = [header]
    if details:
        lines.append("  " + ", ".join(details))
    lines.append(f"  {result.get('source', '')}: {result.get('url', '')}")
    for url in result.get("also_found_at") or []:
        lines.append(f"  also found at: {url}")
    lines.append(explain_score(result))
    return "\n".join(lines)
