"""Row builders shared by the test modules."""


def game_row(player_id, game_date, **stats):
    """A player_game_logs-shaped row with zeroed stats unless given."""
    row = {
        "player_id": player_id,
        "player_name": stats.pop("player_name", f"Player {player_id}"),
        "team_abbreviation": stats.pop("team_abbreviation", "BOS"),
        "game_date": game_date,
        "minutes": 30.0,
        "points": 0,
        "rebounds": 0,
        "assists": 0,
        "steals": 0,
        "blocks": 0,
        "three_pointers_made": 0,
        "field_goals_made": 0,
        "field_goals_attempted": 0,
        "free_throws_made": 0,
        "free_throws_attempted": 0,
        "turnovers": 0,
    }
    row.update(stats)
    return row


def season_rows(player_id, games, **stats):
    """`games` identical rows for one player on consecutive January dates."""
    return [game_row(player_id, f"2025-01-{day:02d}", **dict(stats)) for day in range(1, games + 1)]
