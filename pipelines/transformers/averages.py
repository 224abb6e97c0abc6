"""
Season Averages Transformer

Groups per-game box-score lines by player and derives per-game rates and
shooting percentages. Pure functions over already-fetched rows.

Shooting percentages come from season totals (sum FGM / sum FGA), not from
averaging per-game percentages.
"""

import math
from typing import Any, Iterable, Optional, TypedDict


class GameLogRow(TypedDict, total=False):
    """One player's single-game line, as stored in player_game_logs."""

    player_id: int
    player_name: str
    team_abbreviation: str
    game_date: str  # YYYY-MM-DD
    minutes: float
    points: int
    rebounds: int
    assists: int
    steals: int
    blocks: int
    three_pointers_made: int
    field_goals_made: int
    field_goals_attempted: int
    free_throws_made: int
    free_throws_attempted: int
    turnovers: int


class PlayerAggregate(TypedDict):
    """Per-game season averages for one player."""

    player_id: int
    player_name: str
    team_abbreviation: Optional[str]
    games_played: int
    minutes_per_game: float
    points_per_game: float
    rebounds_per_game: float
    assists_per_game: float
    steals_per_game: float
    blocks_per_game: float
    three_pointers_per_game: float
    field_goals_per_game: float
    field_goals_attempted_per_game: float
    field_goal_percentage: float
    free_throws_per_game: float
    free_throws_attempted_per_game: float
    free_throw_percentage: float
    turnovers_per_game: float


# Season total -> source column on the game row
TOTAL_FIELDS = {
    "minutes": "minutes",
    "points": "points",
    "rebounds": "rebounds",
    "assists": "assists",
    "steals": "steals",
    "blocks": "blocks",
    "three_pointers": "three_pointers_made",
    "field_goals_made": "field_goals_made",
    "field_goals_attempted": "field_goals_attempted",
    "free_throws_made": "free_throws_made",
    "free_throws_attempted": "free_throws_attempted",
    "turnovers": "turnovers",
}

# Per-game output column -> season total it is derived from
PER_GAME_FIELDS = {
    "minutes_per_game": "minutes",
    "points_per_game": "points",
    "rebounds_per_game": "rebounds",
    "assists_per_game": "assists",
    "steals_per_game": "steals",
    "blocks_per_game": "blocks",
    "three_pointers_per_game": "three_pointers",
    "field_goals_per_game": "field_goals_made",
    "field_goals_attempted_per_game": "field_goals_attempted",
    "free_throws_per_game": "free_throws_made",
    "free_throws_attempted_per_game": "free_throws_attempted",
    "turnovers_per_game": "turnovers",
}


def coerce_stat(value: Any) -> float:
    """
    Convert a raw stat value to a number.

    Missing, non-numeric, NaN and infinite values become 0.

    Examples:
        >>> coerce_stat(12)
        12
        >>> coerce_stat(None)
        0
        >>> coerce_stat("n/a")
        0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return number if math.isfinite(number) else 0


def shooting_percentage(made: float, attempted: float) -> float:
    """Makes / attempts, or 0 when there were no attempts."""
    return made / attempted if attempted > 0 else 0


def group_by_player(
    rows: Iterable[GameLogRow],
    player_ids: Optional[Iterable[int]] = None,
) -> dict[int, list[GameLogRow]]:
    """
    Group game rows by player_id, keeping first-seen player order.

    Args:
        rows: Game rows for one season
        player_ids: Optional allow-list; when non-empty, other players are dropped
    """
    allowed = set(player_ids or [])
    grouped: dict[int, list[GameLogRow]] = {}
    for row in rows:
        player_id = row.get("player_id")
        if player_id is None:
            continue
        if allowed and player_id not in allowed:
            continue
        grouped.setdefault(player_id, []).append(row)
    return grouped


def most_recent_game(games: list[GameLogRow]) -> GameLogRow:
    """
    The game with the lexicographically largest game_date.

    Equal dates keep the earliest row in input order.
    """
    latest = games[0]
    for game in games[1:]:
        if str(game.get("game_date") or "") > str(latest.get("game_date") or ""):
            latest = game
    return latest


def aggregate_games(player_id: int, games: list[GameLogRow]) -> PlayerAggregate:
    """Build one player's season averages from their game rows."""
    games_played = len(games)

    totals = {key: 0 for key in TOTAL_FIELDS}
    for game in games:
        for key, column in TOTAL_FIELDS.items():
            totals[key] += coerce_stat(game.get(column))

    latest = most_recent_game(games)

    aggregate = {
        "player_id": player_id,
        "player_name": latest.get("player_name") or "",
        "team_abbreviation": latest.get("team_abbreviation"),
        "games_played": games_played,
    }
    for column, total_key in PER_GAME_FIELDS.items():
        aggregate[column] = totals[total_key] / games_played

    aggregate["field_goal_percentage"] = shooting_percentage(
        totals["field_goals_made"], totals["field_goals_attempted"]
    )
    aggregate["free_throw_percentage"] = shooting_percentage(
        totals["free_throws_made"], totals["free_throws_attempted"]
    )
    return aggregate


def aggregate_player_games(
    rows: Iterable[GameLogRow],
    player_ids: Optional[Iterable[int]] = None,
) -> list[PlayerAggregate]:
    """
    Compute per-game season averages for every player in the rows.

    Args:
        rows: Unordered game rows for one season
        player_ids: Optional allow-list of player IDs

    Returns:
        One PlayerAggregate per player, in first-seen order
    """
    grouped = group_by_player(rows, player_ids)
    return [aggregate_games(player_id, games) for player_id, games in grouped.items()]
