"""Store interfaces consumed by the engine, and a shared SQLite base.

The engine talks to its collaborators only through the abstract stores
defined here, so the SQLite implementations can be swapped for any other
backend that honours the same contracts.
"""

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from ..models import ComparisonCacheEntry, Run
from .schema import SCHEMA


class ActivityStore(ABC):
    """Read access to an athlete's recorded runs."""

    @abstractmethod
    def find_runs_by_athlete(
        self,
        athlete_id: int,
        exclude_id: int,
        min_distance: float,
        max_distance: float,
        since: datetime,
        limit: int,
    ) -> List[Run]:
        """
        Find an athlete's runs within a distance band.

        Only run-type activities starting on or after ``since`` are
        returned, the excluded activity never is, and results come back
        most recent first.

        Args:
            athlete_id: Owner of the runs
            exclude_id: Activity to leave out (the comparison target)
            min_distance: Inclusive lower distance bound in meters
            max_distance: Inclusive upper distance bound in meters
            since: Earliest start date to include
            limit: Maximum number of runs to return

        Returns:
            Matching runs, most recent first
        """
        pass

    @abstractmethod
    def get_run_by_id(self, activity_id: int) -> Optional[Run]:
        """Retrieve a run by its ID, or None if it does not exist."""
        pass

    @abstractmethod
    def find_runs_by_ids(self, activity_ids: Sequence[int]) -> List[Run]:
        """
        Retrieve the runs that exist among the given IDs.

        Missing IDs are skipped and the result order is unspecified.
        """
        pass


class RouteMembershipStore(ABC):
    """Mapping of activities to recurring routes."""

    @abstractmethod
    def get_route_for_activity(self, activity_id: int) -> Optional[int]:
        """Return the route ID an activity belongs to, if any."""
        pass

    @abstractmethod
    def find_activities_on_route(self, route_id: int, exclude_id: int, limit: int) -> List[int]:
        """Return up to ``limit`` other activity IDs on a route, newest mapping first."""
        pass


class ComparisonCacheStore(ABC):
    """Persistence for comparison cache entries keyed by activity ID."""

    @abstractmethod
    def get_live_entry(self, activity_id: int, now: datetime) -> Optional[ComparisonCacheEntry]:
        """Return the entry for an activity if it has not expired at ``now``."""
        pass

    @abstractmethod
    def upsert_entry(self, entry: ComparisonCacheEntry) -> ComparisonCacheEntry:
        """
        Insert or overwrite the entry for ``entry.activity_id``.

        Writing the same entry twice leaves exactly one row.
        """
        pass


class SQLiteStore:
    """Base for stores backed by a SQLite database file."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self._ensure_schema()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with context manager."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
