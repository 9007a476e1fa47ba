"""
Exclusions: "not this person" instructions that suppress results.

An exclusion targets a fingerprint and/or a URL and is scoped either to
one `search_key` ("per-query") or to every search ("global"). The
pipeline reads a snapshot once per search and filters candidates
against it; exclusions are stored in a small SQLite database.
"""

import datetime
import os
import sqlite3
import uuid
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, FrozenSet, List, Optional, Protocol, Set, Tuple
from urllib.parse import urlsplit, urlunsplit

from obit_finder.graph.state import Candidate
from obit_finder.utilis.logger import logger

SCOPE_PER_QUERY = "per-query"
SCOPE_GLOBAL = "global"


def normalize_url(url: Optional[str]) -> str:
    """Lower-case a URL and strip its query string and fragment."""
    if not url:
        return ""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url.strip().lower()
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", "")).lower()


@dataclass(frozen=True)
class ExclusionSnapshot:
    """Excluded fingerprints and normalized URLs for one search."""

    fingerprints: FrozenSet[str] = frozenset()
    urls: FrozenSet[str] = frozenset()


class ExclusionSource(Protocol):
    """Anything that can report exclusions for a search key."""

    def excluded_fingerprints(self, search_key: str) -> Set[str]:
        ...

    def excluded_urls(self, search_key: str) -> Set[str]:
        ...


def snapshot_from(source: ExclusionSource, search_key: str) -> ExclusionSnapshot:
    """Read both exclusion sets from *source* into an immutable snapshot."""
    return ExclusionSnapshot(
        fingerprints=frozenset(source.excluded_fingerprints(search_key)),
        urls=frozenset(normalize_url(u) for u in source.excluded_urls(search_key)),
    )


def filter_excluded(candidates: List[Candidate], snapshot: ExclusionSnapshot) -> List[Candidate]:
    """Drop candidates whose fingerprint OR normalized URL is excluded."""
    kept: List[Candidate] = []
    for candidate in candidates:
        if candidate.get("fingerprint") in snapshot.fingerprints:
            continue
        if normalize_url(candidate.get("url")) in snapshot.urls:
            continue
        kept.append(candidate)

    dropped = len(candidates) - len(kept)
    if dropped:
        logger.info("Exclusions removed %d of %d candidates", dropped, len(candidates))
    return kept


# ---------------------------------------------------------------------------
# SQLite-backed store
# ---------------------------------------------------------------------------

class ExclusionStore:
    """SQLite-backed exclusion store (safe to share across threads)."""

    def __init__(self, path: str) -> None:
        self.path = path
        if path != ":memory:":
            directory = os.path.dirname(os.path.abspath(path))
            os.makedirs(directory, exist_ok=True)
        self._lock = Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS exclusions (
                id TEXT PRIMARY KEY,
                scope TEXT NOT NULL,
                search_key TEXT,
                excluded_fingerprint TEXT,
                excluded_url TEXT,
                excluded_name TEXT,
                reason TEXT,
                created_at TEXT NOT NULL
            )
            """
        )
        self._conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_exclusions_search_key ON exclusions(search_key)"
        )
        self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # --- writes ---

    def add(
        self,
        search_key: Optional[str] = None,
        excluded_fingerprint: Optional[str] = None,
        excluded_url: Optional[str] = None,
        excluded_name: Optional[str] = None,
        reason: Optional[str] = None,
        scope: str = SCOPE_PER_QUERY,
    ) -> Tuple[Dict[str, Any], bool]:
        """Add an exclusion unless an equivalent one already exists.

        Args:
            search_key: Search the exclusion applies to (ignored for global).
            excluded_fingerprint: Candidate fingerprint to suppress.
            excluded_url: Candidate URL to suppress (normalized on insert).
            excluded_name: Display name, for reference only.
            reason: Free-text reason ("wrong person", ...).
            scope: ``"per-query"`` (default) or ``"global"``.

        Returns:
            ``(exclusion, is_new)``; the existing record when duplicated.
        """
        if scope not in (SCOPE_PER_QUERY, SCOPE_GLOBAL):
            raise ValueError(f"Unknown exclusion scope: {scope}")
        if not excluded_fingerprint and not excluded_url:
            raise ValueError("An exclusion needs a fingerprint or a URL")
        if scope == SCOPE_PER_QUERY and not search_key:
            raise ValueError("A per-query exclusion needs a search_key")

        url = normalize_url(excluded_url) or None
        key = None if scope == SCOPE_GLOBAL else search_key

        existing = self._find_existing(scope, key, excluded_fingerprint, url)
        if existing is not None:
            return existing, False

        record = {
            "id": str(uuid.uuid4()),
            "scope": scope,
            "search_key": key,
            "excluded_fingerprint": excluded_fingerprint or None,
            "excluded_url": url,
            "excluded_name": excluded_name or None,
            "reason": reason or None,
            "created_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO exclusions(id, scope, search_key, excluded_fingerprint,
                                       excluded_url, excluded_name, reason, created_at)
                VALUES(:id, :scope, :search_key, :excluded_fingerprint,
                       :excluded_url, :excluded_name, :reason, :created_at)
                """,
                record,
            )
            self._conn.commit()

        logger.info("Added %s exclusion: %s", scope, record["id"])
        return record, True

    def add_global(self, **kwargs: Any) -> Tuple[Dict[str, Any], bool]:
        """Add an exclusion that applies to every search."""
        kwargs.pop("scope", None)
        return self.add(scope=SCOPE_GLOBAL, **kwargs)

    def remove(self, exclusion_id: str) -> bool:
        with self._lock:
            cursor = self._conn.execute("DELETE FROM exclusions WHERE id = ?", (exclusion_id,))
            self._conn.commit()
        if cursor.rowcount > 0:
            logger.info("Removed exclusion: %s", exclusion_id)
            return True
        return False

    # --- reads ---

    def _query(self, sql: str, params: Tuple[Any, ...] = ()) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    def _find_existing(
        self,
        scope: str,
        search_key: Optional[str],
        fingerprint: Optional[str],
        url: Optional[str],
    ) -> Optional[Dict[str, Any]]:
        if scope == SCOPE_GLOBAL:
            where, params = "scope = 'global'", ()
        else:
            where, params = "scope != 'global' AND search_key = ?", (search_key,)

        if fingerprint:
            rows = self._query(
                f"SELECT * FROM exclusions WHERE {where} AND excluded_fingerprint = ?",
                params + (fingerprint,),
            )
            if rows:
                return rows[0]
        if url:
            rows = self._query(
                f"SELECT * FROM exclusions WHERE {where} AND excluded_url = ?",
                params + (url,),
            )
            if rows:
                return rows[0]
        return None

    def get_by_id(self, exclusion_id: str) -> Optional[Dict[str, Any]]:
        rows = self._query("SELECT * FROM exclusions WHERE id = ?", (exclusion_id,))
        return rows[0] if rows else None

    def get_all(self) -> List[Dict[str, Any]]:
        return self._query("SELECT * FROM exclusions ORDER BY created_at DESC")

    def get_by_search_key(self, search_key: str) -> List[Dict[str, Any]]:
        return self._query(
            "SELECT * FROM exclusions WHERE search_key = ? AND scope != 'global' ORDER BY created_at DESC",
            (search_key,),
        )

    def get_global(self) -> List[Dict[str, Any]]:
        return self._query("SELECT * FROM exclusions WHERE scope = 'global' ORDER BY created_at DESC")

    def get_stats(self) -> Dict[str, Any]:
        """Counts by scope and by reason."""
        totals = self._query(
            """
            SELECT COUNT(*) AS total,
                   SUM(CASE WHEN scope = 'global' THEN 1 ELSE 0 END) AS global_count
            FROM exclusions
            """
        )[0]
        reasons = self._query(
            """
            SELECT COALESCE(reason, 'unspecified') AS reason, COUNT(*) AS count
            FROM exclusions
            GROUP BY COALESCE(reason, 'unspecified')
            ORDER BY count DESC
            """
        )
        total = totals["total"] or 0
        global_count = totals["global_count"] or 0
        return {
            "total": total,
            "global": global_count,
            "per_query": total - global_count,
            "by_reason": {row["reason"]: row["count"] for row in reasons},
        }

    def excluded_fingerprints(self, search_key: str) -> Set[str]:
        """Fingerprints excluded for *search_key* (per-query plus global)."""
        rows = self._query(
            """
            SELECT excluded_fingerprint FROM exclusions
            WHERE (search_key = ? OR scope = 'global') AND excluded_fingerprint IS NOT NULL
            """,
            (search_key,),
        )
        return {row["excluded_fingerprint"] for row in rows}

    def excluded_urls(self, search_key: str) -> Set[str]:
        """Normalized URLs excluded for *search_key* (per-query plus global)."""
        rows = self._query(
            """
            SELECT excluded_url FROM exclusions
            WHERE (search_key = ? OR scope = 'global') AND excluded_url IS NOT NULL
            """,
            (search_key,),
        )
        return {row["excluded_url"] for row in rows}

    def snapshot(self, search_key: str) -> ExclusionSnapshot:
        return snapshot_from(self, search_key)
