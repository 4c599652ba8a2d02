"""Store interfaces and their SQLite implementations."""

from .base import ActivityStore, RouteMembershipStore, ComparisonCacheStore, SQLiteStore
from .activity_repository import ActivityRepository
from .route_repository import RouteRepository
from .comparison_cache_repository import ComparisonCacheRepository

__all__ = [
    # Interfaces
    "ActivityStore",
    "RouteMembershipStore",
    "ComparisonCacheStore",
    "SQLiteStore",
    # SQLite implementations
    "ActivityRepository",
    "RouteRepository",
    "ComparisonCacheRepository",
]
