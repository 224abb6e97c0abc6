"""
Game Date Transformer

Resolves which NBA game date a run should ingest and which season that
date belongs to.
"""

from datetime import date, datetime, timedelta
from typing import Optional

# Before this local hour the previous night's games are still being finalized
GAME_DAY_CUTOFF_HOUR = 6

# Seasons tip off in October; August is the earliest month of a new season
SEASON_ROLLOVER_MONTH = 8


def resolve_game_date(now: datetime, override: Optional[date] = None) -> date:
    """
    The game date to ingest.

    An explicit override wins. Otherwise runs before 6am (local to now) load
    the previous day's games.

    Examples:
        >>> resolve_game_date(datetime(2025, 1, 15, 3, 0))
        datetime.date(2025, 1, 14)
        >>> resolve_game_date(datetime(2025, 1, 15, 9, 0))
        datetime.date(2025, 1, 15)
    """
    if override:
        return override
    if now.hour < GAME_DAY_CUTOFF_HOUR:
        return (now - timedelta(days=1)).date()
    return now.date()


def season_for_date(game_date: date) -> str:
    """
    Season label ("2024-25") containing game_date.

    Examples:
        >>> season_for_date(date(2025, 1, 15))
        '2024-25'
        >>> season_for_date(date(2025, 10, 22))
        '2025-26'
    """
    start_year = game_date.year
    if game_date.month < SEASON_ROLLOVER_MONTH:
        start_year -= 1
    return f"{start_year}-{str(start_year + 1)[-2:]}"
