"""Data models for runs, baselines and comparison results."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class Run:
    """A single run as recorded by the activity store.

    Runs are read-only historical facts. ``aerobic_decoupling`` and
    ``pacing_stability`` are computed upstream and are ``None`` when that
    analysis has not run.
    """
    activity_id: int
    athlete_id: int
    start_date: datetime
    distance: float  # meters
    moving_time: int  # seconds
    average_speed: float  # m/s
    total_elevation_gain: float = 0.0  # meters
    average_heartrate: Optional[float] = None
    route_id: Optional[int] = None
    name: str = ""
    activity_type: str = "Run"
    aerobic_decoupling: Optional[float] = None
    pacing_stability: Optional[float] = None

    @property
    def has_heart_rate(self) -> bool:
        return bool(self.average_heartrate)


@dataclass(frozen=True)
class ComparableRun:
    """A run paired with its similarity to the comparison target."""
    run: Run
    similarity_score: float

    @property
    def activity_id(self) -> int:
        return self.run.activity_id


@dataclass(frozen=True)
class BaselineMetrics:
    """Median-based expected performance derived from comparable runs.

    ``pace`` is 0.0 when no comparable run fed the baseline. Use
    ``has_data`` to tell that apart from a real measurement.
    """
    pace: float = 0.0  # median average speed, m/s
    hr: Optional[float] = None
    drift: Optional[float] = None
    pacing_stability: Optional[float] = None
    sample_size: int = 0

    @property
    def has_data(self) -> bool:
        return self.sample_size > 0


@dataclass(frozen=True)
class Deltas:
    """Signed percentage deviations of a run from its baseline.

    ``pace_vs_baseline`` is 0.0 when the baseline has no pace. That value
    means "no signal", not "no deviation".
    """
    pace_vs_baseline: float = 0.0
    hr_vs_baseline: Optional[float] = None
    drift_vs_baseline: Optional[float] = None
    pacing_vs_baseline: Optional[float] = None


@dataclass(frozen=True)
class CachedCandidate:
    """One cached comparable: an activity id and the score it earned."""
    activity_id: int
    similarity_score: float


@dataclass
class ComparisonCacheEntry:
    """Cached comparison for a single activity.

    Candidates keep the descending-score order they were selected in.
    """
    activity_id: int
    athlete_id: int
    candidates: List[CachedCandidate] = field(default_factory=list)
    baseline: BaselineMetrics = field(default_factory=BaselineMetrics)
    deltas: Deltas = field(default_factory=Deltas)
    computed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @property
    def candidate_ids(self) -> List[int]:
        return [c.activity_id for c in self.candidates]

    @property
    def similarity_scores(self) -> List[float]:
        return [c.similarity_score for c in self.candidates]

    def is_live(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at >= now

    def stamped(self, computed_at: datetime, expires_at: datetime) -> "ComparisonCacheEntry":
        return replace(self, computed_at=computed_at, expires_at=expires_at)


@dataclass(frozen=True)
class RouteMatch:
    """Prior runs on the same recurring route, most recent first."""
    route_id: int
    last_run_on_route: Optional[ComparableRun] = None
    route_history: List[ComparableRun] = field(default_factory=list)


@dataclass
class ComparisonResult:
    """Complete comparison of one activity against its comparable runs."""
    activity_id: int
    comparable_runs: List[ComparableRun]
    baseline: BaselineMetrics
    deltas: Deltas
    route_match: Optional[RouteMatch] = None
    from_cache: bool = False
    computed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class ChangeDirection(str, Enum):
    """Whether a change is an improvement."""
    BETTER = "better"
    WORSE = "worse"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class ChangeItem:
    """A single labelled "what changed" statement."""
    metric: str
    change: str
    direction: ChangeDirection


@dataclass
class WhatChanged:
    """Narrated changes against the last same-route run and the baseline.

    ``vs_last_same_route`` is ``None`` when no prior run on the route exists.
    """
    vs_last_same_route: Optional[List[ChangeItem]]
    vs_comparable_median: List[ChangeItem] = field(default_factory=list)
