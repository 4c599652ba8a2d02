"""Shared fixtures for comparable runs tests."""

import os
import tempfile
from datetime import datetime, timedelta

import pytest

from comparable_runs.config import Settings
from comparable_runs.db import ActivityRepository, ComparisonCacheRepository, RouteRepository
from comparable_runs.models import Run
from comparable_runs.service import ComparisonService


NOW = datetime(2026, 6, 1, 8, 0, 0)


@pytest.fixture
def now():
    """Fixed reference time for lookback and expiry checks."""
    return NOW


@pytest.fixture
def make_run():
    """Factory for runs with sensible 10K defaults."""
    def _make_run(activity_id, days_ago=1, **overrides):
        fields = {
            "activity_id": activity_id,
            "athlete_id": 42,
            "start_date": NOW - timedelta(days=days_ago),
            "distance": 10000.0,
            "moving_time": 3000,
            "average_speed": 3.33,
            "total_elevation_gain": 50.0,
            "average_heartrate": 150.0,
            "name": f"Run {activity_id}",
        }
        fields.update(overrides)
        return Run(**fields)
    return _make_run


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield db_path
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def settings(temp_db_path):
    return Settings(db_path=temp_db_path)


@pytest.fixture
def activity_repo(temp_db_path):
    return ActivityRepository(temp_db_path)


@pytest.fixture
def route_repo(temp_db_path):
    return RouteRepository(temp_db_path)


@pytest.fixture
def cache_repo(temp_db_path):
    return ComparisonCacheRepository(temp_db_path)


@pytest.fixture
def service(activity_repo, route_repo, cache_repo, settings):
    return ComparisonService(
        activity_store=activity_repo,
        route_store=route_repo,
        cache_store=cache_repo,
        settings=settings,
    )
