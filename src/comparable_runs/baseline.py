"""Baseline aggregation and delta calculation.

Baselines use the median rather than the mean so a single unusually fast
or slow comparable run does not drag the reference point.
"""

from typing import List, Optional, Sequence

from .models import BaselineMetrics, ComparableRun, Deltas, Run


def median(values: Sequence[float]) -> float:
    """Median of a sequence, 0 for an empty one.

    Even-length sequences use the mean of the two middle values.
    """
    if not values:
        return 0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def _median_or_none(values: List[float]) -> Optional[float]:
    return median(values) if values else None


def compute_baseline(comparables: Sequence[ComparableRun]) -> BaselineMetrics:
    """Reduce comparable runs to median pace, heart rate and upstream features.

    Runs without a known heart rate (or feature value) are left out of that
    metric's median instead of counting as zero.
    """
    if not comparables:
        return BaselineMetrics()

    runs = [c.run for c in comparables]
    return BaselineMetrics(
        pace=median([r.average_speed for r in runs]),
        hr=_median_or_none([r.average_heartrate for r in runs if r.has_heart_rate]),
        drift=_median_or_none([r.aerobic_decoupling for r in runs if r.aerobic_decoupling is not None]),
        pacing_stability=_median_or_none([r.pacing_stability for r in runs if r.pacing_stability is not None]),
        sample_size=len(runs),
    )


def percent_change(current: Optional[float], reference: Optional[float]) -> Optional[float]:
    """Signed percentage change from reference, None when either side is missing."""
    if current is None or not reference:
        return None
    return (current - reference) / reference * 100


def signed_feature_change(current: Optional[float], reference: Optional[float]) -> Optional[float]:
    """Percentage change for features that can be negative.

    Scaled by the magnitude of the reference so a rise is always positive,
    e.g. decoupling going from -2.0 to -1.0 is +50%.
    """
    if current is None or not reference:
        return None
    return (current - reference) / abs(reference) * 100


def round_delta(value: float) -> float:
    """Round to one decimal, folding -0.0 into 0.0."""
    return round(value, 1) + 0.0


def _rounded(value: Optional[float]) -> Optional[float]:
    return round_delta(value) if value is not None else None


def compute_deltas(current: Run, baseline: BaselineMetrics) -> Deltas:
    """Express a run as signed percentage deviations from its baseline.

    A positive pace delta means the run was faster than the baseline. When
    the baseline has no pace (no comparable runs) the pace delta is 0.0,
    which signals "nothing to compare against" rather than "on baseline".
    Drift and pacing deltas pass through upstream features and stay None
    unless both the run and the baseline carry them.
    """
    pace_delta = percent_change(current.average_speed, baseline.pace) if baseline.pace > 0 else 0.0
    hr_delta = percent_change(current.average_heartrate, baseline.hr) if current.has_heart_rate else None

    return Deltas(
        pace_vs_baseline=round_delta(pace_delta or 0.0),
        hr_vs_baseline=_rounded(hr_delta),
        drift_vs_baseline=_rounded(signed_feature_change(current.aerobic_decoupling, baseline.drift)),
        pacing_vs_baseline=_rounded(signed_feature_change(current.pacing_stability, baseline.pacing_stability)),
    )
