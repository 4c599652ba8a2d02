"""SQLite-backed repository for cached run comparisons.

Stores one comparison per activity so repeated requests skip candidate
scoring. Supports:
- Read-time expiry (expired rows stay until overwritten)
- Idempotent upserts keyed by activity ID
- Candidate IDs and scores stored as index-aligned arrays
"""

import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, Optional

from ..exceptions import DataIntegrityError
from ..models import BaselineMetrics, CachedCandidate, ComparisonCacheEntry, Deltas
from .base import ComparisonCacheStore, SQLiteStore


class ComparisonCacheRepository(SQLiteStore, ComparisonCacheStore):
    """
    SQLite-backed cache of comparison results.

    Entries are never deleted; a newer computation for the same activity
    replaces them.
    """

    def _row_to_entry(self, row: sqlite3.Row) -> ComparisonCacheEntry:
        """Convert a database row to a ComparisonCacheEntry."""
        activity_ids = json.loads(row["similar_activity_ids"])
        scores = json.loads(row["similarity_scores"])
        if len(activity_ids) != len(scores):
            raise DataIntegrityError(
                f"Cached comparison for activity {row['activity_id']} has "
                f"{len(activity_ids)} candidate ids but {len(scores)} scores",
                details={"activity_id": row["activity_id"]},
            )

        return ComparisonCacheEntry(
            activity_id=row["activity_id"],
            athlete_id=row["athlete_id"],
            candidates=[
                CachedCandidate(activity_id=activity_id, similarity_score=score)
                for activity_id, score in zip(activity_ids, scores)
            ],
            baseline=BaselineMetrics(
                pace=row["baseline_pace"] or 0.0,
                hr=row["baseline_hr"],
                drift=row["baseline_drift"],
                pacing_stability=row["baseline_pacing_stability"],
                sample_size=row["baseline_sample_size"],
            ),
            deltas=Deltas(
                pace_vs_baseline=row["pace_vs_baseline"] or 0.0,
                hr_vs_baseline=row["hr_vs_baseline"],
                drift_vs_baseline=row["drift_vs_baseline"],
                pacing_vs_baseline=row["pacing_vs_baseline"],
            ),
            computed_at=datetime.fromisoformat(row["computed_at"]),
            expires_at=datetime.fromisoformat(row["expires_at"]),
        )

    def get_live_entry(self, activity_id: int, now: datetime) -> Optional[ComparisonCacheEntry]:
        """
        Retrieve the cached comparison for an activity.

        Args:
            activity_id: The compared activity
            now: Reference time for the expiry check

        Returns:
            The entry if present and ``expires_at >= now``, None otherwise
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM similar_runs_cache WHERE activity_id = ? AND expires_at >= ?",
                (activity_id, now.isoformat())
            ).fetchone()
            return self._row_to_entry(row) if row else None

    def upsert_entry(self, entry: ComparisonCacheEntry) -> ComparisonCacheEntry:
        """
        Insert the entry, or overwrite every field of the existing one.

        Args:
            entry: A stamped entry (``computed_at`` and ``expires_at`` set)

        Returns:
            The saved entry
        """
        if entry.computed_at is None or entry.expires_at is None:
            raise DataIntegrityError(
                f"Cache entry for activity {entry.activity_id} is missing timestamps",
                details={"activity_id": entry.activity_id},
            )

        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO similar_runs_cache
                (activity_id, athlete_id, similar_activity_ids, similarity_scores,
                 baseline_pace, baseline_hr, baseline_drift, baseline_pacing_stability,
                 baseline_sample_size, pace_vs_baseline, hr_vs_baseline,
                 drift_vs_baseline, pacing_vs_baseline, computed_at, expires_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(activity_id) DO UPDATE SET
                    athlete_id = excluded.athlete_id,
                    similar_activity_ids = excluded.similar_activity_ids,
                    similarity_scores = excluded.similarity_scores,
                    baseline_pace = excluded.baseline_pace,
                    baseline_hr = excluded.baseline_hr,
                    baseline_drift = excluded.baseline_drift,
                    baseline_pacing_stability = excluded.baseline_pacing_stability,
                    baseline_sample_size = excluded.baseline_sample_size,
                    pace_vs_baseline = excluded.pace_vs_baseline,
                    hr_vs_baseline = excluded.hr_vs_baseline,
                    drift_vs_baseline = excluded.drift_vs_baseline,
                    pacing_vs_baseline = excluded.pacing_vs_baseline,
                    computed_at = excluded.computed_at,
                    expires_at = excluded.expires_at
            """, (
                entry.activity_id,
                entry.athlete_id,
                json.dumps(entry.candidate_ids),
                json.dumps(entry.similarity_scores),
                entry.baseline.pace,
                entry.baseline.hr,
                entry.baseline.drift,
                entry.baseline.pacing_stability,
                entry.baseline.sample_size,
                entry.deltas.pace_vs_baseline,
                entry.deltas.hr_vs_baseline,
                entry.deltas.drift_vs_baseline,
                entry.deltas.pacing_vs_baseline,
                entry.computed_at.isoformat(),
                entry.expires_at.isoformat(),
            ))

        return entry

    def get_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with total, live and expired row counts
        """
        now = now or datetime.now()
        with self._get_connection() as conn:
            total = conn.execute(
                "SELECT COUNT(*) as cnt FROM similar_runs_cache"
            ).fetchone()["cnt"]

            live = conn.execute(
                "SELECT COUNT(*) as cnt FROM similar_runs_cache WHERE expires_at >= ?",
                (now.isoformat(),)
            ).fetchone()["cnt"]

            return {
                "total_entries": total,
                "live_entries": live,
                "expired_entries": total - live,
                "db_path": str(self.db_path),
            }
