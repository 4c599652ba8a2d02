"""SQLite-backed route membership store."""

from datetime import datetime
from typing import List, Optional

from .base import RouteMembershipStore, SQLiteStore


class RouteRepository(SQLiteStore, RouteMembershipStore):
    """Reads the ``activity_route_map`` table.

    Route detection happens elsewhere; ``assign`` records its outcome.
    """

    def assign(self, activity_id: int, route_id: int, created_at: Optional[datetime] = None) -> None:
        """Map an activity to a route, replacing any previous mapping."""
        created_at = created_at or datetime.now()
        with self._get_connection() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO activity_route_map (activity_id, route_id, created_at)
                VALUES (?, ?, ?)
            """, (activity_id, route_id, created_at.isoformat()))

    def get_route_for_activity(self, activity_id: int) -> Optional[int]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT route_id FROM activity_route_map WHERE activity_id = ?",
                (activity_id,)
            ).fetchone()
            return row["route_id"] if row else None

    def find_activities_on_route(self, route_id: int, exclude_id: int, limit: int) -> List[int]:
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT activity_id FROM activity_route_map
                WHERE route_id = ? AND activity_id != ?
                ORDER BY created_at DESC
                LIMIT ?
            """, (route_id, exclude_id, limit)).fetchall()
            return [row["activity_id"] for row in rows]
