"""Similarity scoring between a target run and candidate runs.

Each run is reduced to three features: distance, elevation gain and
average heart rate. Relative differences decay linearly into sub-scores,
with distance penalized fastest and heart rate slowest, and the weighted
sum lands in [0, 1]. An identical run scores exactly 1.0.
"""

from typing import Iterable, List, Optional

from .exceptions import InvalidRunError
from .models import ComparableRun, Run


DISTANCE_WEIGHT = 0.5
ELEVATION_WEIGHT = 0.3
HR_WEIGHT = 0.2

DISTANCE_DECAY = 5.0
ELEVATION_DECAY = 2.0
HR_DECAY = 3.0

# Flat target: candidates above this gain are treated as hilly
FLAT_ELEVATION_THRESHOLD_M = 50.0
FLAT_ELEVATION_PENALTY = 0.5

MIN_SIMILARITY = 0.5
MAX_COMPARABLES = 20


def _relative_diff(target: float, candidate: float) -> float:
    return abs(target - candidate) / target


def elevation_difference(target_gain: float, candidate_gain: float) -> float:
    """Relative elevation difference, with a fixed penalty for flat targets."""
    if target_gain > 0:
        return _relative_diff(target_gain, candidate_gain)
    if candidate_gain > FLAT_ELEVATION_THRESHOLD_M:
        return FLAT_ELEVATION_PENALTY
    return 0.0


def heart_rate_difference(target_hr: Optional[float], candidate_hr: Optional[float]) -> float:
    """Relative heart-rate difference, 0 unless both sides are known."""
    if not target_hr or not candidate_hr:
        return 0.0
    return _relative_diff(target_hr, candidate_hr)


def _decayed(diff: float, rate: float) -> float:
    return max(0.0, 1.0 - diff * rate)


def score_similarity(target: Run, candidate: Run) -> float:
    """Calculate the similarity between a target run and a candidate.

    Args:
        target: The run being compared
        candidate: A historical run

    Returns:
        Weighted score in [0, 1]

    Raises:
        InvalidRunError: If the target has no positive distance
    """
    if target.distance <= 0:
        raise InvalidRunError(target.activity_id, "distance must be positive", field="distance")

    distance_diff = _relative_diff(target.distance, candidate.distance)
    elevation_diff = elevation_difference(target.total_elevation_gain, candidate.total_elevation_gain)
    hr_diff = heart_rate_difference(target.average_heartrate, candidate.average_heartrate)

    return (
        _decayed(distance_diff, DISTANCE_DECAY) * DISTANCE_WEIGHT
        + _decayed(elevation_diff, ELEVATION_DECAY) * ELEVATION_WEIGHT
        + _decayed(hr_diff, HR_DECAY) * HR_WEIGHT
    )


def select_comparables(
    target: Run,
    candidates: Iterable[Run],
    min_similarity: float = MIN_SIMILARITY,
    limit: int = MAX_COMPARABLES,
) -> List[ComparableRun]:
    """Score candidates and keep the best matches.

    Candidates scoring at or below ``min_similarity`` are discarded. The
    survivors are sorted by descending score (ties keep store order) and
    truncated to ``limit``.
    """
    scored = [
        ComparableRun(run=candidate, similarity_score=score_similarity(target, candidate))
        for candidate in candidates
    ]
    kept = [c for c in scored if c.similarity_score > min_similarity]
    kept.sort(key=lambda c: c.similarity_score, reverse=True)
    return kept[:limit]
