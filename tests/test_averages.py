"""Unit tests for per-game season averages."""

import math

import pytest

from factories import game_row, season_rows
from pipelines.transformers.averages import (
    aggregate_player_games,
    coerce_stat,
    most_recent_game,
    shooting_percentage,
)
from pipelines.transformers.minutes import minutes_to_decimal


class TestCoerceStat:
    """Missing or malformed stat values default to zero."""

    @pytest.mark.parametrize("value", [None, "", "n/a", float("nan"), float("inf"), True, [1]])
    def test_unusable_values_are_zero(self, value):
        assert coerce_stat(value) == 0

    def test_numbers_pass_through(self):
        assert coerce_stat(12) == 12
        assert coerce_stat(3.5) == 3.5

    def test_numeric_strings_are_parsed(self):
        assert coerce_stat("14") == 14.0
        assert coerce_stat(" 2.5 ") == 2.5


class TestShootingPercentage:
    def test_zero_attempts_is_zero(self):
        assert shooting_percentage(0, 0) == 0

    def test_ratio(self):
        assert shooting_percentage(8, 20) == pytest.approx(0.4)


class TestAggregatePlayerGames:
    """Grouping game rows into per-player season averages."""

    def test_two_game_player(self):
        """Points [10, 20], FGM [2, 6], FGA [5, 15] -> 15 ppg and 8/20 FG%."""
        rows = [
            game_row(1, "2025-01-01", points=10, field_goals_made=2, field_goals_attempted=5),
            game_row(1, "2025-01-03", points=20, field_goals_made=6, field_goals_attempted=15),
        ]
        [player] = aggregate_player_games(rows)

        assert player["games_played"] == 2
        assert player["points_per_game"] == 15
        assert player["field_goal_percentage"] == pytest.approx(0.4)

    def test_percentage_uses_season_totals(self):
        """2/2 then 0/8 is 2/10, not the mean of 100% and 0%."""
        rows = [
            game_row(1, "2025-01-01", free_throws_made=2, free_throws_attempted=2),
            game_row(1, "2025-01-02", free_throws_made=0, free_throws_attempted=8),
        ]
        [player] = aggregate_player_games(rows)
        assert player["free_throw_percentage"] == pytest.approx(0.2)

    def test_zero_attempts_percentage_is_exactly_zero(self):
        [player] = aggregate_player_games(season_rows(1, 3, points=4))

        assert player["field_goal_percentage"] == 0
        assert player["free_throw_percentage"] == 0
        assert math.isfinite(player["field_goal_percentage"])

    def test_missing_and_malformed_stats_count_as_zero(self):
        rows = [
            game_row(1, "2025-01-01", points=None, rebounds="x"),
            game_row(1, "2025-01-02", points=12, rebounds=8),
        ]
        del rows[0]["assists"]
        [player] = aggregate_player_games(rows)

        assert player["points_per_game"] == 6
        assert player["rebounds_per_game"] == 4
        assert player["assists_per_game"] == 0

    def test_all_per_game_rates_are_means(self):
        rows = [
            game_row(
                7, "2025-01-01",
                minutes=30, rebounds=10, assists=4, steals=2, blocks=1,
                three_pointers_made=3, free_throws_made=4, free_throws_attempted=5, turnovers=2,
            ),
            game_row(
                7, "2025-01-02",
                minutes=20, rebounds=6, assists=6, steals=0, blocks=3,
                three_pointers_made=1, free_throws_made=2, free_throws_attempted=3, turnovers=4,
            ),
        ]
        [player] = aggregate_player_games(rows)

        assert player["minutes_per_game"] == 25
        assert player["rebounds_per_game"] == 8
        assert player["assists_per_game"] == 5
        assert player["steals_per_game"] == 1
        assert player["blocks_per_game"] == 2
        assert player["three_pointers_per_game"] == 2
        assert player["free_throws_per_game"] == 3
        assert player["free_throws_attempted_per_game"] == 4
        assert player["turnovers_per_game"] == 3

    def test_name_and_team_from_latest_game(self):
        """A traded player is reported with their newest team."""
        rows = [
            game_row(1, "2025-02-10", player_name="New Name", team_abbreviation="DAL"),
            game_row(1, "2025-01-05", player_name="Old Name", team_abbreviation="LAL"),
        ]
        [player] = aggregate_player_games(rows)

        assert player["player_name"] == "New Name"
        assert player["team_abbreviation"] == "DAL"

    def test_players_in_first_seen_order(self):
        rows = [game_row(3, "2025-01-01"), game_row(1, "2025-01-01"), game_row(3, "2025-01-02")]
        assert [p["player_id"] for p in aggregate_player_games(rows)] == [3, 1]

    def test_allow_list_filters_players(self):
        rows = season_rows(1, 2) + season_rows(2, 2) + season_rows(3, 2)
        players = aggregate_player_games(rows, player_ids=[1, 3])
        assert [p["player_id"] for p in players] == [1, 3]

    def test_empty_allow_list_keeps_everyone(self):
        rows = season_rows(1, 1) + season_rows(2, 1)
        assert len(aggregate_player_games(rows, player_ids=[])) == 2

    def test_empty_input(self):
        assert aggregate_player_games([]) == []


class TestMostRecentGame:
    def test_string_comparison_of_dates(self):
        games = [game_row(1, "2025-01-09"), game_row(1, "2025-01-10")]
        assert most_recent_game(games)["game_date"] == "2025-01-10"

    def test_equal_dates_keep_first_row(self):
        games = [
            game_row(1, "2025-01-10", team_abbreviation="BOS"),
            game_row(1, "2025-01-10", team_abbreviation="MIA"),
        ]
        assert most_recent_game(games)["team_abbreviation"] == "BOS"


class TestMinutesToDecimal:
    def test_clock_string(self):
        assert minutes_to_decimal("34:30") == 34.5

    def test_number(self):
        assert minutes_to_decimal(28.25) == 28.25

    def test_garbage_is_zero(self):
        assert minutes_to_decimal(None) == 0
        assert minutes_to_decimal("1:2:3") == 0
