"""
Run Comparison Service.

Compares a run against the athlete's own comparable runs and, when the run
is on a known route, against the previous run on that route.
"""

import logging
from datetime import datetime
from typing import Optional

from .baseline import compute_baseline, compute_deltas
from .cache import ComparisonCache
from .config import Settings, get_settings
from .db.activity_repository import ActivityRepository
from .db.base import ActivityStore, ComparisonCacheStore, RouteMembershipStore
from .db.comparison_cache_repository import ComparisonCacheRepository
from .db.route_repository import RouteRepository
from .models import CachedCandidate, ComparisonCacheEntry, ComparisonResult, WhatChanged
from .narrator import describe_changes
from .retrieval import find_comparable_runs
from .route_matcher import match_route

logger = logging.getLogger(__name__)


class ComparisonService:
    """
    Service for comparing a run with its baseline and its route history.

    Stateless between requests: all durable state lives in the stores.
    """

    def __init__(
        self,
        activity_store: ActivityStore,
        route_store: RouteMembershipStore,
        cache_store: ComparisonCacheStore,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._activity_store = activity_store
        self._route_store = route_store
        self._cache = ComparisonCache(cache_store, ttl_days=self._settings.cache_ttl_days)

    def get_or_compute_comparison(
        self,
        athlete_id: int,
        activity_id: int,
        now: Optional[datetime] = None,
    ) -> Optional[ComparisonResult]:
        """
        Compare an activity with the athlete's comparable runs.

        Serves the baseline comparison from the cache when a live entry
        exists; otherwise computes it and writes it back. The route match is
        looked up on every call.

        Args:
            athlete_id: The athlete whose history is searched
            activity_id: The activity to compare
            now: Reference time for lookback and expiry

        Returns:
            The comparison, or None if the activity does not exist
        """
        now = now or datetime.now()

        target = self._activity_store.get_run_by_id(activity_id)
        if target is None:
            logger.info(f"Activity {activity_id} not found, nothing to compare")
            return None

        entry = self._cache.get(activity_id, now=now)
        if entry is not None:
            comparable_runs = self._cache.reconstruct(entry, self._activity_store)
            from_cache = True
        else:
            comparable_runs = find_comparable_runs(
                self._activity_store,
                target,
                athlete_id=athlete_id,
                now=now,
                settings=self._settings,
            )
            baseline = compute_baseline(comparable_runs)
            entry = self._cache.put(
                ComparisonCacheEntry(
                    activity_id=activity_id,
                    athlete_id=athlete_id,
                    candidates=[
                        CachedCandidate(activity_id=c.activity_id, similarity_score=c.similarity_score)
                        for c in comparable_runs
                    ],
                    baseline=baseline,
                    deltas=compute_deltas(target, baseline),
                ),
                now=now,
            )
            from_cache = False
            logger.info(
                f"Computed comparison for activity {activity_id} from {len(comparable_runs)} comparable runs"
            )

        route_match = match_route(
            self._activity_store,
            self._route_store,
            activity_id,
            limit=self._settings.route_history_limit,
        )

        return ComparisonResult(
            activity_id=activity_id,
            comparable_runs=comparable_runs,
            baseline=entry.baseline,
            deltas=entry.deltas,
            route_match=route_match,
            from_cache=from_cache,
            computed_at=entry.computed_at,
            expires_at=entry.expires_at,
        )

    def get_what_changed(self, activity_id: int, comparison: Optional[ComparisonResult]) -> WhatChanged:
        """
        Narrate what changed for an activity.

        Args:
            activity_id: The compared activity
            comparison: Result of ``get_or_compute_comparison`` (may be None)

        Returns:
            Changes vs the last same-route run (None without one) and vs the
            comparable-run median
        """
        current = self._activity_store.get_run_by_id(activity_id) if comparison is not None else None
        return describe_changes(current, comparison)


def create_comparison_service(settings: Optional[Settings] = None) -> ComparisonService:
    """Build a service backed by the SQLite database in the settings."""
    settings = settings or get_settings()
    db_path = settings.db_path
    return ComparisonService(
        activity_store=ActivityRepository(db_path),
        route_store=RouteRepository(db_path),
        cache_store=ComparisonCacheRepository(db_path),
        settings=settings,
    )
