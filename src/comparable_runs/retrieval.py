"""Candidate retrieval for comparable-run matching."""

import logging
from datetime import datetime
from typing import List, Optional

from .config import Settings, get_settings
from .db.base import ActivityStore
from .models import ComparableRun, Run
from .similarity import select_comparables

logger = logging.getLogger(__name__)


def years_before(moment: datetime, years: int) -> datetime:
    """Same calendar date and time ``years`` earlier.

    February 29 rolls forward to March 1 when the earlier year has no leap
    day.
    """
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, month=3, day=1)


def fetch_candidates(
    activity_store: ActivityStore,
    target: Run,
    athlete_id: Optional[int] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> List[Run]:
    """Query the store for the athlete's recent runs of similar distance.

    The query is bounded to a lookback window of whole calendar years, a
    distance band around the target and a fixed cap, so scoring cost does
    not grow with the athlete's full history. A target without a positive distance has no
    meaningful band and yields no candidates.
    """
    settings = settings or get_settings()
    if target.distance <= 0:
        logger.debug(f"Activity {target.activity_id} has no distance, skipping candidate query")
        return []

    now = now or datetime.now()
    return activity_store.find_runs_by_athlete(
        athlete_id=target.athlete_id if athlete_id is None else athlete_id,
        exclude_id=target.activity_id,
        min_distance=target.distance * (1 - settings.distance_tolerance),
        max_distance=target.distance * (1 + settings.distance_tolerance),
        since=years_before(now, settings.lookback_years),
        limit=settings.candidate_limit,
    )


def find_comparable_runs(
    activity_store: ActivityStore,
    target: Run,
    athlete_id: Optional[int] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> List[ComparableRun]:
    """
    Find the athlete's runs most similar to the target.

    Args:
        activity_store: Source of historical runs
        target: The run being compared
        athlete_id: Whose history to search (defaults to the target's owner)
        now: Reference time for the lookback window
        settings: Engine settings (defaults to the cached settings)

    Returns:
        Comparable runs ordered by descending similarity, possibly empty
    """
    settings = settings or get_settings()
    candidates = fetch_candidates(activity_store, target, athlete_id=athlete_id, now=now, settings=settings)
    if not candidates:
        return []

    comparables = select_comparables(
        target,
        candidates,
        min_similarity=settings.min_similarity,
        limit=settings.max_comparables,
    )
    logger.debug(
        f"Activity {target.activity_id}: {len(comparables)} of {len(candidates)} candidates comparable"
    )
    return comparables
