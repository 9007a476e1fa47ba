"""Tests for exclusion filtering and the SQLite exclusion store."""

import pytest

from obit_finder.tools.exclusions import (
    ExclusionSnapshot,
    ExclusionStore,
    filter_excluded,
    normalize_url,
)
from tests.conftest import make_candidate


class TestNormalizeUrl:
    def test_strips_query_fragment_and_case(self):
        assert normalize_url("HTTPS://Example.com/Obit/John?utm=1#top") == "https://example.com/obit/john"

    def test_empty(self):
        assert normalize_url(None) == ""


class TestFilterExcluded:
    def test_fingerprint_or_url(self, scenario_candidates):
        c1, c2 = scenario_candidates
        c3 = make_candidate("c3", "Mary", "Jones", url="https://example.com/obituaries/mary-jones")

        snapshot = ExclusionSnapshot(
            fingerprints=frozenset({c1["fingerprint"]}),
            urls=frozenset({"https://example.com/obituaries/mary-jones"}),
        )

        assert filter_excluded([c1, c2, c3], snapshot) == [c2]

    def test_url_matched_after_normalization(self, scenario_candidates):
        c1, _ = scenario_candidates
        c1 = dict(c1, url="https://EXAMPLE.com/obituaries/william-smith?ref=feed")
        snapshot = ExclusionSnapshot(urls=frozenset({"https://example.com/obituaries/william-smith"}))
        assert filter_excluded([c1], snapshot) == []

    def test_empty_snapshot_keeps_all(self, scenario_candidates):
        assert filter_excluded(list(scenario_candidates), ExclusionSnapshot()) == list(scenario_candidates)


class TestExclusionStore:
    def test_add_per_query(self, exclusion_store):
        record, is_new = exclusion_store.add(
            search_key="key1",
            excluded_fingerprint="smith-b-dayton-oh-unknown",
            excluded_name="Bill Smith",
            reason="wrong person",
        )

        assert is_new
        assert record["scope"] == "per-query"
        assert exclusion_store.get_by_id(record["id"])["excluded_name"] == "Bill Smith"
        assert exclusion_store.excluded_fingerprints("key1") == {"smith-b-dayton-oh-unknown"}
        assert exclusion_store.excluded_fingerprints("key2") == set()

    def test_duplicate_returns_existing(self, exclusion_store):
        first, _ = exclusion_store.add(search_key="key1", excluded_url="https://example.com/a?x=1")
        second, is_new = exclusion_store.add(search_key="key1", excluded_url="https://EXAMPLE.com/a")

        assert not is_new
        assert second["id"] == first["id"]
        assert len(exclusion_store.get_all()) == 1

    def test_global_applies_to_every_key(self, exclusion_store):
        exclusion_store.add_global(excluded_fingerprint="fp-global")
        exclusion_store.add(search_key="key1", excluded_url="https://example.com/a")

        assert exclusion_store.excluded_fingerprints("any-key") == {"fp-global"}
        snapshot = exclusion_store.snapshot("key1")
        assert snapshot.fingerprints == frozenset({"fp-global"})
        assert snapshot.urls == frozenset({"https://example.com/a"})
        assert len(exclusion_store.get_global()) == 1
        assert len(exclusion_store.get_by_search_key("key1")) == 1

    def test_remove(self, exclusion_store):
        record, _ = exclusion_store.add(search_key="key1", excluded_fingerprint="fp")
        assert exclusion_store.remove(record["id"])
        assert not exclusion_store.remove(record["id"])
        assert exclusion_store.excluded_fingerprints("key1") == set()

    def test_stats(self, exclusion_store):
        exclusion_store.add(search_key="key1", excluded_fingerprint="fp1", reason="wrong person")
        exclusion_store.add(search_key="key1", excluded_fingerprint="fp2", reason="wrong person")
        exclusion_store.add_global(excluded_fingerprint="fp3")

        stats = exclusion_store.get_stats()

        assert stats["total"] == 3
        assert stats["global"] == 1
        assert stats["per_query"] == 2
        assert stats["by_reason"] == {"wrong person": 2, "unspecified": 1}

    def test_empty_stats(self, exclusion_store):
        assert exclusion_store.get_stats() == {"total": 0, "global": 0, "per_query": 0, "by_reason": {}}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"search_key": "key1"},
            {"excluded_fingerprint": "fp"},
            {"search_key": "key1", "excluded_fingerprint": "fp", "scope": "everywhere"},
        ],
    )
    def test_invalid_exclusions_rejected(self, exclusion_store, kwargs):
        with pytest.raises(ValueError):
            exclusion_store.add(**kwargs)

    def test_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "nested" / "exclusions.db")
        store = ExclusionStore(path)
        store.add_global(excluded_url="https://example.com/a")
        store.close()

        reopened = ExclusionStore(path)
        try:
            assert reopened.excluded_urls("k") == {"https://example.com/a"}
        finally:
            reopened.close()

    def test_in_memory(self):
        store = ExclusionStore(":memory:")
        store.add(search_key="k", excluded_fingerprint="fp")
        assert store.excluded_fingerprints("k") == {"fp"}
        store.close()
