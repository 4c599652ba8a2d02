"""Time-expiring comparison cache.

Expiry is evaluated when an entry is read. Nothing sweeps expired rows;
they are superseded by the next write for the same activity.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from .db.base import ActivityStore, ComparisonCacheStore
from .exceptions import ValidationError
from .models import ComparableRun, ComparisonCacheEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 7


class ComparisonCache:
    """Per-activity cache of computed comparisons."""

    def __init__(self, store: ComparisonCacheStore, ttl_days: int = DEFAULT_TTL_DAYS):
        if ttl_days <= 0:
            raise ValidationError("Cache TTL must be positive", field="ttl_days")
        self._store = store
        self.ttl_days = ttl_days

    def get(self, activity_id: int, now: Optional[datetime] = None) -> Optional[ComparisonCacheEntry]:
        """Return the live entry for an activity, or None on a miss."""
        now = now or datetime.now()
        entry = self._store.get_live_entry(activity_id, now)
        if entry is None:
            logger.info(f"Comparison cache miss for activity {activity_id}")
        else:
            logger.info(f"Comparison cache hit for activity {activity_id}")
        return entry

    def put(
        self,
        entry: ComparisonCacheEntry,
        ttl_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ComparisonCacheEntry:
        """
        Stamp and upsert an entry.

        Args:
            entry: Comparison to store, keyed by ``entry.activity_id``
            ttl_days: Days until expiry (defaults to the cache TTL)
            now: Write time

        Returns:
            The stored entry with ``computed_at`` and ``expires_at`` set
        """
        ttl_days = self.ttl_days if ttl_days is None else ttl_days
        if ttl_days <= 0:
            raise ValidationError("Cache TTL must be positive", field="ttl_days")

        now = now or datetime.now()
        stamped = entry.stamped(computed_at=now, expires_at=now + timedelta(days=ttl_days))
        return self._store.upsert_entry(stamped)

    @staticmethod
    def reconstruct(entry: ComparisonCacheEntry, activity_store: ActivityStore) -> List[ComparableRun]:
        """
        Rebuild comparable runs from a cached entry.

        Candidates whose activity no longer exists are dropped. Every
        surviving run keeps the score it was cached with and the cached
        order.
        """
        runs = {run.activity_id: run for run in activity_store.find_runs_by_ids(entry.candidate_ids)}

        comparables = []
        for candidate in entry.candidates:
            run = runs.get(candidate.activity_id)
            if run is None:
                logger.debug(
                    f"Dropping cached candidate {candidate.activity_id} for activity "
                    f"{entry.activity_id}: activity no longer exists"
                )
                continue
            comparables.append(ComparableRun(run=run, similarity_score=candidate.similarity_score))
        return comparables
