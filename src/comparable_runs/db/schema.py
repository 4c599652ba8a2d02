"""Database schema for runs, route membership and the comparison cache."""

SCHEMA = """
-- Runs as synced from the fitness platform (read-only to the engine)
CREATE TABLE IF NOT EXISTS activities (
    activity_id INTEGER PRIMARY KEY,
    athlete_id INTEGER NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    activity_type TEXT NOT NULL DEFAULT 'Run',
    start_date TEXT NOT NULL,  -- ISO timestamp
    distance REAL NOT NULL,  -- meters
    moving_time INTEGER NOT NULL,  -- seconds
    average_speed REAL NOT NULL,  -- m/s
    average_heartrate REAL,
    total_elevation_gain REAL NOT NULL DEFAULT 0,
    -- Upstream-computed features
    aerobic_decoupling REAL,
    pacing_stability REAL
);

-- Route membership written by the route detection process
CREATE TABLE IF NOT EXISTS activity_route_map (
    activity_id INTEGER PRIMARY KEY,
    route_id INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- One comparison per activity; ids and scores are index-aligned JSON arrays
CREATE TABLE IF NOT EXISTS similar_runs_cache (
    activity_id INTEGER PRIMARY KEY,
    athlete_id INTEGER NOT NULL,
    similar_activity_ids TEXT NOT NULL DEFAULT '[]',
    similarity_scores TEXT NOT NULL DEFAULT '[]',
    baseline_pace REAL,
    baseline_hr REAL,
    baseline_drift REAL,
    baseline_pacing_stability REAL,
    baseline_sample_size INTEGER NOT NULL DEFAULT 0,
    pace_vs_baseline REAL,
    hr_vs_baseline REAL,
    drift_vs_baseline REAL,
    pacing_vs_baseline REAL,
    computed_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_activities_athlete_date
    ON activities(athlete_id, start_date);
CREATE INDEX IF NOT EXISTS idx_activity_route_map_route
    ON activity_route_map(route_id, created_at);
CREATE INDEX IF NOT EXISTS idx_similar_runs_cache_expires
    ON similar_runs_cache(expires_at);
"""
