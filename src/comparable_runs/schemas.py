"""Serializable views of comparison results.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import ChangeDirection, ComparableRun, ComparisonResult, WhatChanged


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ComparableRunResponse(CamelModel):
    """A comparable run with its similarity score."""

    activity_id: int
    name: str
    start_date: datetime
    distance: float = Field(..., description="Distance in meters")
    moving_time: int = Field(..., description="Moving time in seconds")
    average_speed: float = Field(..., description="Average speed in m/s")
    average_heartrate: Optional[float] = None
    total_elevation_gain: float
    similarity_score: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def from_comparable(cls, comparable: ComparableRun) -> "ComparableRunResponse":
        run = comparable.run
        return cls(
            activity_id=run.activity_id,
            name=run.name,
            start_date=run.start_date,
            distance=run.distance,
            moving_time=run.moving_time,
            average_speed=run.average_speed,
            average_heartrate=run.average_heartrate,
            total_elevation_gain=run.total_elevation_gain,
            similarity_score=comparable.similarity_score,
        )


class BaselineResponse(CamelModel):
    """Median-based baseline. ``pace`` is 0 when ``sampleSize`` is 0."""

    pace: float
    hr: Optional[float] = None
    drift: Optional[float] = None
    pacing_stability: Optional[float] = None
    sample_size: int = 0


class DeltasResponse(CamelModel):
    """Signed percentage deltas; ``paceVsBaseline`` is 0 without a baseline."""

    pace_vs_baseline: float
    hr_vs_baseline: Optional[float] = None
    drift_vs_baseline: Optional[float] = None
    pacing_vs_baseline: Optional[float] = None


class RouteMatchResponse(CamelModel):
    route_id: int
    last_run_on_route: Optional[ComparableRunResponse] = None
    route_history: List[ComparableRunResponse] = Field(default_factory=list)


class ComparisonResponse(CamelModel):
    """Complete comparison for one activity."""

    activity_id: int
    comparable_runs: List[ComparableRunResponse]
    baseline: BaselineResponse
    deltas: DeltasResponse
    route_match: Optional[RouteMatchResponse] = None
    from_cache: bool = False
    computed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_result(cls, result: ComparisonResult) -> "ComparisonResponse":
        route_match = None
        if result.route_match is not None:
            last = result.route_match.last_run_on_route
            route_match = RouteMatchResponse(
                route_id=result.route_match.route_id,
                last_run_on_route=ComparableRunResponse.from_comparable(last) if last else None,
                route_history=[
                    ComparableRunResponse.from_comparable(c) for c in result.route_match.route_history
                ],
            )

        baseline = result.baseline
        deltas = result.deltas
        return cls(
            activity_id=result.activity_id,
            comparable_runs=[ComparableRunResponse.from_comparable(c) for c in result.comparable_runs],
            baseline=BaselineResponse(
                pace=baseline.pace,
                hr=baseline.hr,
                drift=baseline.drift,
                pacing_stability=baseline.pacing_stability,
                sample_size=baseline.sample_size,
            ),
            deltas=DeltasResponse(
                pace_vs_baseline=deltas.pace_vs_baseline,
                hr_vs_baseline=deltas.hr_vs_baseline,
                drift_vs_baseline=deltas.drift_vs_baseline,
                pacing_vs_baseline=deltas.pacing_vs_baseline,
            ),
            route_match=route_match,
            from_cache=result.from_cache,
            computed_at=result.computed_at,
            expires_at=result.expires_at,
        )


class ChangeItemResponse(CamelModel):
    metric: str
    change: str
    direction: ChangeDirection


class WhatChangedResponse(CamelModel):
    """What changed vs the last same-route run and vs the comparable median."""

    vs_last_same_route: Optional[List[ChangeItemResponse]] = None
    vs_comparable_median: List[ChangeItemResponse] = Field(default_factory=list)

    @classmethod
    def from_changes(cls, changes: WhatChanged) -> "WhatChangedResponse":
        def convert(items):
            return [
                ChangeItemResponse(metric=i.metric, change=i.change, direction=i.direction)
                for i in items
            ]

        return cls(
            vs_last_same_route=(
                convert(changes.vs_last_same_route) if changes.vs_last_same_route is not None else None
            ),
            vs_comparable_median=convert(changes.vs_comparable_median),
        )
