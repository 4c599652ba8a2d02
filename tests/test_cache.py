"""Tests for the comparison cache and its SQLite repository."""

import json
from datetime import timedelta

import pytest

from comparable_runs.cache import ComparisonCache
from comparable_runs.exceptions import DataIntegrityError, ValidationError
from comparable_runs.models import BaselineMetrics, CachedCandidate, ComparisonCacheEntry, Deltas


@pytest.fixture
def cache(cache_repo):
    return ComparisonCache(cache_repo)


@pytest.fixture
def entry():
    return ComparisonCacheEntry(
        activity_id=1,
        athlete_id=42,
        candidates=[
            CachedCandidate(activity_id=2, similarity_score=0.97),
            CachedCandidate(activity_id=3, similarity_score=0.81),
            CachedCandidate(activity_id=4, similarity_score=0.64),
        ],
        baseline=BaselineMetrics(pace=3.1, hr=151.5, sample_size=3),
        deltas=Deltas(pace_vs_baseline=6.5, hr_vs_baseline=-1.0),
    )


class TestComparisonCacheRepository:
    """Tests for ComparisonCacheRepository."""

    def test_creates_cache_table(self, cache_repo):
        with cache_repo._get_connection() as conn:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='similar_runs_cache'"
            ).fetchone()
            assert row is not None

    def test_stores_parallel_arrays(self, cache_repo, entry, now):
        cache_repo.upsert_entry(entry.stamped(now, now + timedelta(days=7)))

        with cache_repo._get_connection() as conn:
            row = conn.execute(
                "SELECT similar_activity_ids, similarity_scores FROM similar_runs_cache WHERE activity_id = 1"
            ).fetchone()

        assert json.loads(row["similar_activity_ids"]) == [2, 3, 4]
        assert json.loads(row["similarity_scores"]) == [0.97, 0.81, 0.64]

    def test_misaligned_row_raises(self, cache_repo, entry, now):
        cache_repo.upsert_entry(entry.stamped(now, now + timedelta(days=7)))
        with cache_repo._get_connection() as conn:
            conn.execute("UPDATE similar_runs_cache SET similarity_scores = '[0.9]' WHERE activity_id = 1")

        with pytest.raises(DataIntegrityError):
            cache_repo.get_live_entry(1, now)

    def test_unstamped_entry_rejected(self, cache_repo, entry):
        with pytest.raises(DataIntegrityError):
            cache_repo.upsert_entry(entry)

    def test_missing_entry(self, cache_repo, now):
        assert cache_repo.get_live_entry(999, now) is None


class TestComparisonCache:
    """Tests for ComparisonCache get/put semantics."""

    def test_put_stamps_ttl(self, cache, entry, now):
        stored = cache.put(entry, now=now)
        assert stored.computed_at == now
        assert stored.expires_at == now + timedelta(days=7)

    def test_round_trip(self, cache, entry, now):
        stored = cache.put(entry, now=now)
        assert cache.get(1, now=now) == stored

    def test_idempotent_upsert(self, cache, cache_repo, entry, now):
        """Writing the same comparison twice leaves one identical live entry."""
        first = cache.put(entry, now=now)
        second = cache.put(entry, now=now)

        assert cache_repo.get_stats(now)["total_entries"] == 1
        assert cache.get(1, now=now) == first == second

    def test_upsert_overwrites_all_fields(self, cache, entry, now):
        cache.put(entry, now=now)
        later = now + timedelta(days=1)
        replacement = ComparisonCacheEntry(
            activity_id=1,
            athlete_id=42,
            candidates=[CachedCandidate(activity_id=9, similarity_score=0.7)],
            baseline=BaselineMetrics(pace=2.8, sample_size=1),
            deltas=Deltas(pace_vs_baseline=-2.0),
        )

        cache.put(replacement, now=later)
        stored = cache.get(1, now=later)

        assert stored.candidates == [CachedCandidate(activity_id=9, similarity_score=0.7)]
        assert stored.baseline == BaselineMetrics(pace=2.8, sample_size=1)
        assert stored.deltas == Deltas(pace_vs_baseline=-2.0)
        assert stored.computed_at == later
        assert stored.expires_at == later + timedelta(days=7)

    def test_expired_entry_is_a_miss(self, cache, cache_repo, entry, now):
        """An expired row is a miss but stays in storage."""
        cache.put(entry, now=now - timedelta(days=8))

        assert cache.get(1, now=now) is None
        stats = cache_repo.get_stats(now)
        assert stats["total_entries"] == 1
        assert stats["expired_entries"] == 1

    def test_entry_live_at_exact_expiry(self, cache, entry, now):
        cache.put(entry, now=now - timedelta(days=7))
        assert cache.get(1, now=now) is not None

    def test_empty_candidates_round_trip(self, cache, now):
        empty = ComparisonCacheEntry(activity_id=5, athlete_id=42)
        cache.put(empty, now=now)

        stored = cache.get(5, now=now)

        assert stored.candidates == []
        assert stored.baseline.pace == 0.0
        assert stored.baseline.has_data is False
        assert stored.deltas.pace_vs_baseline == 0.0

    def test_invalid_ttl(self, cache_repo, cache, entry):
        with pytest.raises(ValidationError):
            ComparisonCache(cache_repo, ttl_days=0)
        with pytest.raises(ValidationError):
            cache.put(entry, ttl_days=-1)


class TestReconstruct:
    """Tests for rebuilding comparable runs from a cached entry."""

    def test_keeps_order_and_scores(self, activity_repo, make_run, entry):
        for activity_id in (4, 3, 2):
            activity_repo.save(make_run(activity_id))

        runs = ComparisonCache.reconstruct(entry, activity_repo)

        assert [(c.activity_id, c.similarity_score) for c in runs] == [(2, 0.97), (3, 0.81), (4, 0.64)]

    def test_dangling_candidate_keeps_alignment(self, activity_repo, make_run, entry):
        """A deleted candidate is dropped without shifting scores onto others."""
        activity_repo.save(make_run(2))
        activity_repo.save(make_run(4))

        runs = ComparisonCache.reconstruct(entry, activity_repo)

        assert [(c.activity_id, c.similarity_score) for c in runs] == [(2, 0.97), (4, 0.64)]
        assert runs[1].run.activity_id == 4

    def test_all_candidates_gone(self, activity_repo, entry):
        assert ComparisonCache.reconstruct(entry, activity_repo) == []
