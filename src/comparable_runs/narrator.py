"""Turn comparison deltas into short "what changed" statements."""

from typing import List, Optional

from .baseline import percent_change, round_delta
from .models import ChangeDirection, ChangeItem, ComparisonResult, Deltas, Run, WhatChanged

BASELINE_PACE_WORSE_PCT = -3.0
HR_THRESHOLD_PCT = 3.0
ROUTE_PACE_THRESHOLD_PCT = 2.0
ROUTE_TIME_THRESHOLD_PCT = 2.0
# Repeat efforts within this much time of each other are not reported
ROUTE_TIME_NOISE_PCT = 1.0


def format_change(change: float) -> str:
    """Format a signed percentage, e.g. ``+10.0%`` or ``-4.2%``."""
    change = round_delta(change)
    sign = "+" if change > 0 else ""
    return f"{sign}{change:.1f}%"


def format_time_change(change: float) -> str:
    """Format a time improvement, e.g. ``3.0% faster`` or ``+3.0% slower``."""
    if change > 0:
        return f"{abs(change):.1f}% faster"
    return f"+{abs(change):.1f}% slower"


def _hr_direction(change: float) -> ChangeDirection:
    # Lower heart rate for the effort is an improvement
    if change <= -HR_THRESHOLD_PCT:
        return ChangeDirection.BETTER
    if change >= HR_THRESHOLD_PCT:
        return ChangeDirection.WORSE
    return ChangeDirection.NEUTRAL


def _symmetric_direction(change: float, threshold: float) -> ChangeDirection:
    if change > threshold:
        return ChangeDirection.BETTER
    if change < -threshold:
        return ChangeDirection.WORSE
    return ChangeDirection.NEUTRAL


def describe_vs_baseline(deltas: Deltas) -> List[ChangeItem]:
    """
    Describe a run against the median of its comparable runs.

    A zero pace delta is suppressed, since it is also what an empty
    baseline produces.
    """
    items = []

    pace = deltas.pace_vs_baseline
    if pace != 0:
        if pace > 0:
            direction = ChangeDirection.BETTER
        elif pace < BASELINE_PACE_WORSE_PCT:
            direction = ChangeDirection.WORSE
        else:
            direction = ChangeDirection.NEUTRAL
        items.append(ChangeItem(metric="Pace", change=format_change(pace), direction=direction))

    hr = deltas.hr_vs_baseline
    if hr is not None:
        items.append(ChangeItem(metric="Heart Rate", change=format_change(hr), direction=_hr_direction(hr)))

    return items


def describe_vs_last_run(current: Run, last: Run) -> List[ChangeItem]:
    """
    Describe a run against the previous run on the same route.

    Deltas are computed from the two raw runs, not from the cached
    baseline.
    """
    items = []

    pace = percent_change(current.average_speed, last.average_speed)
    if pace is not None:
        items.append(ChangeItem(
            metric="Pace",
            change=format_change(pace),
            direction=_symmetric_direction(pace, ROUTE_PACE_THRESHOLD_PCT),
        ))

    if current.has_heart_rate and last.has_heart_rate:
        hr = percent_change(current.average_heartrate, last.average_heartrate)
        items.append(ChangeItem(metric="Heart Rate", change=format_change(hr), direction=_hr_direction(hr)))

    if last.moving_time > 0:
        # Positive means the current run took less time
        time_change = (last.moving_time - current.moving_time) / last.moving_time * 100
        if abs(time_change) > ROUTE_TIME_NOISE_PCT:
            items.append(ChangeItem(
                metric="Time",
                change=format_time_change(time_change),
                direction=_symmetric_direction(time_change, ROUTE_TIME_THRESHOLD_PCT),
            ))

    return items


def describe_changes(current: Optional[Run], comparison: Optional[ComparisonResult]) -> WhatChanged:
    """Build both "what changed" lists for a run and its comparison."""
    if comparison is None:
        return WhatChanged(vs_last_same_route=None, vs_comparable_median=[])

    vs_last_same_route = None
    route_match = comparison.route_match
    if current is not None and route_match is not None and route_match.last_run_on_route is not None:
        vs_last_same_route = describe_vs_last_run(current, route_match.last_run_on_route.run)

    return WhatChanged(
        vs_last_same_route=vs_last_same_route,
        vs_comparable_median=describe_vs_baseline(comparison.deltas),
    )
