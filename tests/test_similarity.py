"""Tests for similarity scoring and comparable selection."""

import pytest

from comparable_runs.exceptions import InvalidRunError
from comparable_runs.similarity import (
    elevation_difference,
    heart_rate_difference,
    score_similarity,
    select_comparables,
)


class TestScoreSimilarity:
    """Tests for score_similarity."""

    def test_identical_run_scores_one(self, make_run):
        """A run compared with an identical copy scores exactly 1.0."""
        target = make_run(1)
        twin = make_run(2)
        assert score_similarity(target, twin) == 1.0

    def test_close_candidate_is_included(self, make_run):
        """10.0 km / 50 m / 150 bpm vs 10.2 km / 55 m / 148 bpm."""
        target = make_run(1, distance=10000.0, total_elevation_gain=50.0, average_heartrate=150.0)
        candidate = make_run(2, distance=10200.0, total_elevation_gain=55.0, average_heartrate=148.0)

        score = score_similarity(target, candidate)

        # 0.5 * 0.9 + 0.3 * 0.8 + 0.2 * (1 - 3 * 2/150)
        expected = 0.5 * 0.9 + 0.3 * 0.8 + 0.2 * (1 - 3 * 2 / 150)
        assert score == pytest.approx(expected)
        assert score > 0.85

    def test_distant_candidate_is_excluded(self, make_run):
        """A 15 km run zeroes the distance sub-score and falls to the cutoff."""
        target = make_run(1, distance=10000.0)
        candidate = make_run(2, distance=15000.0)

        score = score_similarity(target, candidate)

        assert score == pytest.approx(0.5)
        assert select_comparables(target, [candidate]) == []

    def test_monotonic_in_distance(self, make_run):
        """Score strictly decreases as the distance gap grows."""
        target = make_run(1)
        scores = [
            score_similarity(target, make_run(2, distance=10000.0 + gap))
            for gap in (0, 100, 300, 600, 1000, 1500)
        ]
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_monotonic_in_elevation_and_hr(self, make_run):
        """Score never increases as elevation or heart-rate gaps grow."""
        target = make_run(1)
        by_elevation = [
            score_similarity(target, make_run(2, total_elevation_gain=50.0 + gap))
            for gap in (0, 10, 20, 40, 80)
        ]
        by_hr = [
            score_similarity(target, make_run(2, average_heartrate=150.0 + gap))
            for gap in (0, 5, 10, 30, 60)
        ]
        assert all(a >= b for a, b in zip(by_elevation, by_elevation[1:]))
        assert all(a >= b for a, b in zip(by_hr, by_hr[1:]))

    def test_score_bounded(self, make_run):
        """Wildly different runs still score within [0, 1]."""
        target = make_run(1)
        candidate = make_run(2, distance=50000.0, total_elevation_gain=2000.0, average_heartrate=60.0)
        score = score_similarity(target, candidate)
        assert 0.0 <= score <= 1.0
        assert score == 0.0

    def test_missing_heart_rate_is_not_penalized(self, make_run):
        """Without heart rate on one side the HR sub-score is full."""
        target = make_run(1, average_heartrate=None)
        candidate = make_run(2, average_heartrate=190.0)
        assert score_similarity(target, candidate) == 1.0

    def test_zero_distance_target_raises(self, make_run):
        """A target without distance cannot be scored."""
        with pytest.raises(InvalidRunError) as exc_info:
            score_similarity(make_run(1, distance=0.0), make_run(2))
        assert exc_info.value.details["activity_id"] == 1
        assert exc_info.value.to_dict()["error"]["code"] == "INVALID_RUN"


class TestElevationDifference:
    """Tests for elevation_difference."""

    def test_relative_difference(self):
        assert elevation_difference(100.0, 150.0) == pytest.approx(0.5)

    def test_flat_target_hilly_candidate(self):
        """Flat target vs > 50 m gain is a fixed 0.5 penalty."""
        assert elevation_difference(0.0, 51.0) == 0.5
        assert elevation_difference(0.0, 500.0) == 0.5

    def test_flat_target_flat_candidate(self):
        assert elevation_difference(0.0, 50.0) == 0.0
        assert elevation_difference(0.0, 0.0) == 0.0


class TestHeartRateDifference:
    """Tests for heart_rate_difference."""

    def test_both_known(self):
        assert heart_rate_difference(150.0, 165.0) == pytest.approx(0.1)

    def test_either_missing(self):
        assert heart_rate_difference(None, 150.0) == 0.0
        assert heart_rate_difference(150.0, None) == 0.0
        assert heart_rate_difference(0.0, 150.0) == 0.0


class TestSelectComparables:
    """Tests for select_comparables."""

    def test_sorted_descending(self, make_run):
        target = make_run(1)
        candidates = [
            make_run(2, distance=10800.0),
            make_run(3, distance=10000.0),
            make_run(4, distance=10400.0),
        ]

        result = select_comparables(target, candidates)

        assert [c.activity_id for c in result] == [3, 4, 2]
        assert result[0].similarity_score == 1.0

    def test_truncated_to_limit(self, make_run):
        target = make_run(1)
        candidates = [make_run(i, distance=10000.0 + i) for i in range(2, 40)]

        result = select_comparables(target, candidates)

        assert len(result) == 20
        assert [c.activity_id for c in result] == list(range(2, 22))

    def test_empty_candidates(self, make_run):
        assert select_comparables(make_run(1), []) == []
