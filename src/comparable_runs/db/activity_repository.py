"""SQLite-backed activity store."""

import sqlite3
from datetime import datetime
from typing import List, Optional, Sequence

from ..models import Run
from .base import ActivityStore, SQLiteStore


RUN_TYPE = "Run"

_RUN_COLUMNS = """
    a.activity_id, a.athlete_id, a.name, a.activity_type, a.start_date,
    a.distance, a.moving_time, a.average_speed, a.average_heartrate,
    a.total_elevation_gain, a.aerobic_decoupling, a.pacing_stability,
    m.route_id
"""

_RUN_FROM = """
    FROM activities a
    LEFT JOIN activity_route_map m ON m.activity_id = a.activity_id
"""


class ActivityRepository(SQLiteStore, ActivityStore):
    """Reads runs from the ``activities`` table.

    ``save`` exists for seeding and tests; the engine itself never writes
    runs.
    """

    @staticmethod
    def _row_to_run(row: sqlite3.Row) -> Run:
        return Run(
            activity_id=row["activity_id"],
            athlete_id=row["athlete_id"],
            name=row["name"],
            activity_type=row["activity_type"],
            start_date=datetime.fromisoformat(row["start_date"]),
            distance=row["distance"],
            moving_time=row["moving_time"],
            average_speed=row["average_speed"],
            average_heartrate=row["average_heartrate"],
            total_elevation_gain=row["total_elevation_gain"],
            aerobic_decoupling=row["aerobic_decoupling"],
            pacing_stability=row["pacing_stability"],
            route_id=row["route_id"],
        )

    def save(self, run: Run) -> Run:
        """Insert or replace a run. Route membership is stored separately."""
        with self._get_connection() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO activities
                (activity_id, athlete_id, name, activity_type, start_date,
                 distance, moving_time, average_speed, average_heartrate,
                 total_elevation_gain, aerobic_decoupling, pacing_stability)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                run.activity_id,
                run.athlete_id,
                run.name,
                run.activity_type,
                run.start_date.isoformat(),
                run.distance,
                run.moving_time,
                run.average_speed,
                run.average_heartrate,
                run.total_elevation_gain,
                run.aerobic_decoupling,
                run.pacing_stability,
            ))
        return run

    def get_run_by_id(self, activity_id: int) -> Optional[Run]:
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {_RUN_COLUMNS} {_RUN_FROM} WHERE a.activity_id = ?",
                (activity_id,)
            ).fetchone()
            return self._row_to_run(row) if row else None

    def find_runs_by_ids(self, activity_ids: Sequence[int]) -> List[Run]:
        if not activity_ids:
            return []
        placeholders = ", ".join("?" for _ in activity_ids)
        with self._get_connection() as conn:
            rows = conn.execute(
                f"SELECT {_RUN_COLUMNS} {_RUN_FROM} WHERE a.activity_id IN ({placeholders})",
                list(activity_ids)
            ).fetchall()
            return [self._row_to_run(row) for row in rows]

    def find_runs_by_athlete(
        self,
        athlete_id: int,
        exclude_id: int,
        min_distance: float,
        max_distance: float,
        since: datetime,
        limit: int,
    ) -> List[Run]:
        with self._get_connection() as conn:
            rows = conn.execute(f"""
                SELECT {_RUN_COLUMNS} {_RUN_FROM}
                WHERE a.athlete_id = ?
                  AND a.activity_type = ?
                  AND a.start_date >= ?
                  AND a.distance >= ?
                  AND a.distance <= ?
                  AND a.activity_id != ?
                ORDER BY a.start_date DESC
                LIMIT ?
            """, (
                athlete_id,
                RUN_TYPE,
                since.isoformat(),
                min_distance,
                max_distance,
                exclude_id,
                limit,
            )).fetchall()
            return [self._row_to_run(row) for row in rows]
