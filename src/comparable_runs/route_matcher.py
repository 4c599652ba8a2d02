"""Same-route matching.

Route membership is assigned by an external detection process and can
change as new activities sync, so matches are looked up on every request
instead of being cached.
"""

from typing import Optional

from .db.base import ActivityStore, RouteMembershipStore
from .models import ComparableRun, RouteMatch

ROUTE_HISTORY_LIMIT = 10


def match_route(
    activity_store: ActivityStore,
    route_store: RouteMembershipStore,
    activity_id: int,
    limit: int = ROUTE_HISTORY_LIMIT,
) -> Optional[RouteMatch]:
    """
    Find prior runs on the activity's recurring route.

    Args:
        activity_store: Source of run details
        route_store: Activity-to-route mapping
        activity_id: The activity being compared
        limit: Maximum number of prior runs to return

    Returns:
        RouteMatch with history ordered most recent first, or None when the
        activity is not on a known route
    """
    route_id = route_store.get_route_for_activity(activity_id)
    if route_id is None:
        return None

    prior_ids = route_store.find_activities_on_route(route_id, exclude_id=activity_id, limit=limit)
    runs = activity_store.find_runs_by_ids(prior_ids)
    runs.sort(key=lambda r: r.start_date, reverse=True)

    history = [ComparableRun(run=run, similarity_score=1.0) for run in runs]
    return RouteMatch(
        route_id=route_id,
        last_run_on_route=history[0] if history else None,
        route_history=history,
    )
