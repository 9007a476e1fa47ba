"""
Fingerprint-based deduplication of candidates across providers.
"""

from collections import OrderedDict
from typing import List

from obit_finder.graph.state import Candidate
from obit_finder.utilis.logger import logger

# Fields a "native" source supplies more completely than a web hit
IDENTITY_FIELDS = (
    "full_name",
    "first_name",
    "middle_name",
    "last_name",
    "dod",
    "date_visitation",
    "date_funeral",
    "city",
    "state",
)


def _merge_group(group: List[Candidate]) -> Candidate:
    ordered = sorted(group, key=lambda c: c.get("score", 0), reverse=True)
    base = ordered[0]
    base_url = base.get("url")

    # Other members' own URLs first, then every pre-existing also_found_at entry
    urls = [m.get("url") for m in ordered if m is not base]
    for member in ordered:
        urls.extend(member.get("also_found_at") or [])

    also_found_at: List[str] = []
    for url in urls:
        if url and url != base_url and url not in also_found_at:
            also_found_at.append(url)

    merged: Candidate = {**base}
    merged.pop("also_found_at", None)

    native = next(
        (m for m in ordered[1:] if m.get("provider_type") == "native"),
        None,
    )
    if native is not None:
        # Display fields come from the native record; score, reasons and url stay the base's
        for field in IDENTITY_FIELDS:
            if field in native:
                merged[field] = native[field]

    if also_found_at:
        merged["also_found_at"] = also_found_at
    return merged


def dedupe_candidates(candidates: List[Candidate]) -> List[Candidate]:
    """Collapse candidates sharing a fingerprint into one record each.

    Groups keep first-seen order. Within a group the highest-scoring
    member (earliest on ties) is the base; the other members' URLs are
    collected into ``also_found_at``: those members' own URLs first (in
    score order), then every ``also_found_at`` entry the members already
    carried, without duplicates or the base URL. Singleton groups pass through
    unchanged and the input list is never mutated.

    Args:
        candidates: Flattened provider output.

    Returns:
        One Candidate per fingerprint.
    """
    groups: "OrderedDict[str, List[Candidate]]" = OrderedDict()
    for candidate in candidates:
        groups.setdefault(candidate.get("fingerprint", ""), []).append(candidate)

    deduped: List[Candidate] = []
    for group in groups.values():
        if len(group) == 1:
            deduped.append(group[0])
        else:
            deduped.append(_merge_group(group))

    logger.info("Dedupe: %d candidates → %d unique", len(candidates), len(deduped))
    return deduped
