"""
Backfill player game logs for a date range, then recompute season averages.

This script:
1. Runs the player game logs pipeline once per date in [start, end]
2. Runs the season averages pipeline for the affected season(s)
3. Prints a per-date summary

Usage:
    python -m scripts.backfill_game_logs --start 2025-10-21 --end 2025-11-03
"""

import utils.patches  # noqa: F401 - imported for side effect (patches nba_api)

from datetime import date, timedelta

from core.logging import setup_logging_from_settings
from db.base import close_db, init_db
from pipelines import PlayerGameLogsPipeline, PlayerSeasonAveragesPipeline
from pipelines.transformers.dates import season_for_date
from schemas.common import ApiStatus


def date_range(start: date, end: date) -> list[date]:
    if end < start:
        raise ValueError(f"end ({end}) is before start ({start})")
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def backfill(start: date, end: date, skip_averages: bool = False) -> int:
    """Returns the number of dates whose pipeline run failed."""
    init_db()
    failures = 0
    seasons = set()

    try:
        for game_date in date_range(start, end):
            result = PlayerGameLogsPipeline().run_sync(date_override=game_date)
            seasons.add(season_for_date(game_date))
            print(f"{game_date}: {result.status} ({result.records_processed or 0} rows)")
            if result.status == ApiStatus.ERROR.value:
                failures += 1
                print(f"  {result.error.splitlines()[0] if result.error else result.message}")

        if not skip_averages:
            for season in sorted(seasons):
                result = PlayerSeasonAveragesPipeline(season=season).run_sync()
                print(f"season averages {season}: {result.status} - {result.message}")

        print("\n" + "=" * 60)
        print(f"Dates processed: {len(date_range(start, end))}")
        print(f"Failed dates: {failures}")
    finally:
        close_db()

    return failures


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Backfill player_game_logs for a date range")
    parser.add_argument("--start", type=date.fromisoformat, required=True, help="First game date (YYYY-MM-DD)")
    parser.add_argument("--end", type=date.fromisoformat, help="Last game date (default: start)")
    parser.add_argument("--skip-averages", action="store_true", help="Do not recompute season averages")

    args = parser.parse_args()

    setup_logging_from_settings()
    failed = backfill(args.start, args.end or args.start, skip_averages=args.skip_averages)
    sys.exit(1 if failed else 0)
