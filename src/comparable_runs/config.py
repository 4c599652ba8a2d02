"""Configuration settings for the comparable runs engine."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables.

    Relative paths, including the default database and ``.env`` file,
    resolve against the current working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMPARABLE_RUNS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    db_path: Path = Path("comparable_runs.db")

    # Logging
    log_level: str = "INFO"

    # Candidate retrieval
    lookback_years: int = 1
    distance_tolerance: float = 0.10
    candidate_limit: int = 100

    # Comparable selection
    min_similarity: float = 0.5
    max_comparables: int = 20

    # Cache
    cache_ttl_days: int = 7

    # Route matching
    route_history_limit: int = 10


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
