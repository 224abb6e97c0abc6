"""
Data Transformers

Pure functions for transforming extracted data.
"""

from pipelines.transformers.averages import (
    aggregate_player_games,
    coerce_stat,
)
from pipelines.transformers.minutes import minutes_to_decimal
from pipelines.transformers.schedule import (
    WeekDefinition,
    count_team_games,
    fantasy_team_games,
    find_current_week,
    normalize_weeks,
    parse_eastern_date,
    select_playoff_weeks,
)
from pipelines.transformers.zscores import (
    CATEGORIES,
    calculate_player_averages,
    rank_players,
)

__all__ = [
    "aggregate_player_games",
    "coerce_stat",
    "minutes_to_decimal",
    "WeekDefinition",
    "count_team_games",
    "fantasy_team_games",
    "find_current_week",
    "normalize_weeks",
    "parse_eastern_date",
    "select_playoff_weeks",
    "CATEGORIES",
    "calculate_player_averages",
    "rank_players",
]
