#!/usr/bin/env python3
"""
Comparable Runs CLI.

Compare a run with the athlete's comparable runs and its route history.

Usage:
    comparable-runs compare 42 1001          # Baseline, deltas and what changed
    comparable-runs compare 42 1001 --json   # Same, as camelCase JSON
    comparable-runs cache-stats              # Comparison cache row counts
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import get_settings
from .db.comparison_cache_repository import ComparisonCacheRepository
from .models import ChangeDirection, ChangeItem
from .schemas import ComparisonResponse, WhatChangedResponse
from .service import create_comparison_service


# ANSI color codes
class Colors:
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


DIRECTION_COLORS = {
    ChangeDirection.BETTER: Colors.GREEN,
    ChangeDirection.WORSE: Colors.RED,
    ChangeDirection.NEUTRAL: Colors.YELLOW,
}


def format_speed(speed: float) -> str:
    """Format an average speed in m/s as min/km pace."""
    if speed <= 0:
        return "--"
    sec_per_km = 1000 / speed
    return f"{int(sec_per_km // 60)}:{int(sec_per_km % 60):02d}/km"


def print_changes(title: str, items: Optional[List[ChangeItem]]) -> None:
    print(f"{Colors.BOLD}{title}{Colors.RESET}")
    if items is None:
        print("  (no previous run on this route)")
        return
    if not items:
        print("  (nothing notable)")
        return
    for item in items:
        color = DIRECTION_COLORS[item.direction]
        print(f"  {item.metric:<12} {color}{item.change:>16}  {item.direction.value}{Colors.RESET}")


def cmd_compare(args) -> int:
    """Compare one activity."""
    settings = get_settings()
    if args.db:
        settings = settings.model_copy(update={"db_path": Path(args.db)})
    service = create_comparison_service(settings)

    result = service.get_or_compute_comparison(args.athlete_id, args.activity_id)
    if result is None:
        print(f"Activity {args.activity_id} not found", file=sys.stderr)
        return 1

    changes = service.get_what_changed(args.activity_id, result)

    if args.json:
        payload = {
            "comparison": ComparisonResponse.from_result(result).model_dump(mode="json", by_alias=True),
            "whatChanged": WhatChangedResponse.from_changes(changes).model_dump(mode="json", by_alias=True),
        }
        print(json.dumps(payload, indent=2))
        return 0

    baseline = result.baseline
    deltas = result.deltas
    source = "cached" if result.from_cache else "computed"

    print(f"{Colors.BOLD}Activity {result.activity_id}{Colors.RESET} ({source})")
    print(f"  Comparable runs: {len(result.comparable_runs)}")
    if baseline.has_data:
        print(f"  Baseline pace:   {format_speed(baseline.pace)}")
        if baseline.hr is not None:
            print(f"  Baseline HR:     {baseline.hr:.0f} bpm")
        print(f"  Pace vs base:    {deltas.pace_vs_baseline:+.1f}%")
        if deltas.hr_vs_baseline is not None:
            print(f"  HR vs base:      {deltas.hr_vs_baseline:+.1f}%")
    else:
        print("  No comparable runs yet, baseline unavailable")

    if result.route_match is not None:
        history = result.route_match.route_history
        print(f"  Route {result.route_match.route_id}: {len(history)} previous runs")
    print()

    print_changes("vs comparable median", changes.vs_comparable_median)
    print_changes("vs last run on route", changes.vs_last_same_route)
    return 0


def cmd_cache_stats(args) -> int:
    """Show comparison cache statistics."""
    settings = get_settings()
    repo = ComparisonCacheRepository(args.db or settings.db_path)
    stats = repo.get_stats()

    print(f"Database:        {stats['db_path']}")
    print(f"Total entries:   {stats['total_entries']}")
    print(f"Live entries:    {stats['live_entries']}")
    print(f"Expired entries: {stats['expired_entries']}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Comparable Runs CLI")
    parser.add_argument("--db", help="Path to the SQLite database")
    subparsers = parser.add_subparsers(dest="command")

    compare_p = subparsers.add_parser("compare", help="Compare an activity with its comparable runs")
    compare_p.add_argument("athlete_id", type=int, help="Athlete ID")
    compare_p.add_argument("activity_id", type=int, help="Activity ID")
    compare_p.add_argument("--json", action="store_true", help="Print JSON instead of text")

    subparsers.add_parser("cache-stats", help="Comparison cache statistics")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "compare":
        return cmd_compare(args)
    if args.command == "cache-stats":
        return cmd_cache_stats(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
