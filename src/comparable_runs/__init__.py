"""Comparable-run matching and baseline caching for run analysis."""

from comparable_runs.models import (
    Run,
    ComparableRun,
    BaselineMetrics,
    Deltas,
    CachedCandidate,
    ComparisonCacheEntry,
    RouteMatch,
    ComparisonResult,
    ChangeDirection,
    ChangeItem,
    WhatChanged,
)
from comparable_runs.similarity import score_similarity, select_comparables
from comparable_runs.baseline import median, compute_baseline, compute_deltas
from comparable_runs.retrieval import find_comparable_runs
from comparable_runs.cache import ComparisonCache
from comparable_runs.route_matcher import match_route
from comparable_runs.narrator import describe_vs_baseline, describe_vs_last_run, describe_changes
from comparable_runs.service import ComparisonService, create_comparison_service

__version__ = "0.1.0"

__all__ = [
    "Run",
    "ComparableRun",
    "BaselineMetrics",
    "Deltas",
    "CachedCandidate",
    "ComparisonCacheEntry",
    "RouteMatch",
    "ComparisonResult",
    "ChangeDirection",
    "ChangeItem",
    "WhatChanged",
    "score_similarity",
    "select_comparables",
    "median",
    "compute_baseline",
    "compute_deltas",
    "find_comparable_runs",
    "ComparisonCache",
    "match_route",
    "describe_vs_baseline",
    "describe_vs_last_run",
    "describe_changes",
    "ComparisonService",
    "create_comparison_service",
]
