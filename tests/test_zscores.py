"""Unit tests for league statistics, z-scores and rankings."""

import pytest

from factories import season_rows
from pipelines.transformers.zscores import (
    CATEGORIES,
    calculate_category_stats,
    calculate_player_averages,
    calculate_z_score,
    compute_league_stats,
    rank_players,
    validate_punt,
)


def z_fields():
    return [category.z_field for category in CATEGORIES]


class TestCategoryStats:
    def test_population_standard_deviation(self):
        """[10, 20] -> mean 15, population std 5 (not sample std 7.07)."""
        stats = calculate_category_stats([10, 20])
        assert stats.mean == 15
        assert stats.std_dev == 5

    def test_empty_population(self):
        stats = calculate_category_stats([])
        assert stats.mean == 0
        assert stats.std_dev == 0

    def test_identical_values_have_exactly_zero_spread(self):
        assert calculate_category_stats([0.1, 0.1, 0.1]).std_dev == 0


class TestZScore:
    def test_standardizes(self):
        assert calculate_z_score(20, 15, 5) == 1
        assert calculate_z_score(10, 15, 5) == -1

    def test_zero_std_dev_is_zero(self):
        assert calculate_z_score(42, 15, 0) == 0


class TestLeagueStats:
    def test_unqualified_players_excluded_from_population(self):
        rows = (
            season_rows(1, 5, points=10)
            + season_rows(2, 5, points=20)
            + season_rows(3, 4, points=90)  # one game short
        )
        result = calculate_player_averages(rows, season="2024-25")
        points = result.league_stats["points"]

        assert points.mean == 15
        assert points.std_dev == 5
        assert result.qualified_count == 2

    def test_unqualified_outlier_moves_no_category(self):
        """A 4-game player with extreme numbers everywhere leaves all nine stats untouched."""
        rows = (
            season_rows(
                1, 5, points=10, rebounds=4, assists=2, steals=1, blocks=1,
                three_pointers_made=1, field_goals_made=4, field_goals_attempted=10,
                free_throws_made=3, free_throws_attempted=4, turnovers=2,
            )
            + season_rows(
                2, 5, points=20, rebounds=8, assists=6, steals=3, blocks=2,
                three_pointers_made=3, field_goals_made=6, field_goals_attempted=10,
                free_throws_made=4, free_throws_attempted=4, turnovers=1,
            )
            + season_rows(
                3, 4, points=60, rebounds=20, assists=15, steals=6, blocks=6,
                three_pointers_made=8, field_goals_made=10, field_goals_attempted=10,
                free_throws_made=0, free_throws_attempted=5, turnovers=9,
            )
        )
        result = calculate_player_averages(rows, season="2024-25")
        players = {p["player_id"]: p for p in result.players}

        for category in CATEGORIES:
            expected = calculate_category_stats(
                [players[1][category.field], players[2][category.field]]
            )
            assert result.league_stats[category.key] == expected, category.key
            assert expected.std_dev > 0, category.key

    def test_threshold_is_configurable(self):
        rows = season_rows(1, 2, points=10) + season_rows(2, 2, points=30)
        result = calculate_player_averages(rows, season="2024-25", min_games=2)
        assert result.league_stats["points"].mean == 20

    def test_no_qualified_players(self):
        aggregates = calculate_player_averages(season_rows(1, 1, points=10), "2024-25").players
        stats = compute_league_stats(aggregates)
        assert all(s.mean == 0 and s.std_dev == 0 for s in stats.values())


class TestScoring:
    """Scores for every player against the qualified population."""

    @pytest.fixture
    def result(self):
        rows = (
            season_rows(1, 5, points=10, turnovers=1, field_goals_made=5, field_goals_attempted=10)
            + season_rows(2, 5, points=20, turnovers=3, field_goals_made=4, field_goals_attempted=10)
            + season_rows(3, 6, points=15, turnovers=2, field_goals_made=0, field_goals_attempted=0)
            + season_rows(4, 2, points=40, turnovers=0)
        )
        return calculate_player_averages(rows, season="2024-25")

    def players(self, result):
        return {p["player_id"]: p for p in result.players}

    def test_two_player_points_z(self):
        rows = season_rows(1, 5, points=10) + season_rows(2, 5, points=20)
        players = {p["player_id"]: p for p in calculate_player_averages(rows, "2024-25").players}

        assert players[1]["points_z"] == pytest.approx(-1)
        assert players[2]["points_z"] == pytest.approx(1)

    def test_total_value_is_sum_of_z_scores(self, result):
        for player in result.players:
            total = sum(player[field] for field in z_fields())
            assert player["total_value"] == pytest.approx(total, abs=1e-9)

    def test_turnovers_negated(self, result):
        stats = result.league_stats["turnovers"]
        for player in result.players:
            raw = (player["turnovers_per_game"] - stats.mean) / stats.std_dev
            assert player["turnovers_z"] == pytest.approx(-raw)

    def test_fewer_turnovers_score_higher(self, result):
        players = self.players(result)
        assert players[1]["turnovers_z"] > 0 > players[2]["turnovers_z"]

    def test_identical_category_scores_zero(self, result):
        """Every qualified player has 0 steals, so every steals z-score is 0."""
        assert all(p["steals_z"] == 0 for p in result.players)

    def test_unqualified_player_scored_but_flagged(self, result):
        """The 2-game player is scored against the others without moving the mean."""
        players = self.players(result)
        points = result.league_stats["points"]

        assert points.mean == 15
        assert players[4]["qualified"] is False
        assert players[4]["points_z"] == pytest.approx((40 - 15) / points.std_dev)
        assert all(players[i]["qualified"] for i in (1, 2, 3))

    def test_league_averages_summary(self, result):
        averages = result.league_averages()
        assert set(averages) == {"points", "rebounds", "assists", "steals", "blocks"}
        assert averages["points"] == 15

    def test_empty_input_processes_nothing(self):
        result = calculate_player_averages([], season="2024-25")
        assert result.players_processed == 0
        assert result.league_averages()["points"] == 0


class TestRankPlayers:
    def scored(self, player_id, total_value, **z):
        player = {field: 0.0 for field in z_fields()}
        player.update(z)
        player.update(player_id=player_id, total_value=total_value)
        return player

    def test_orders_by_total_value(self):
        ranked = rank_players([self.scored(1, 0.5), self.scored(2, 3.0), self.scored(3, -1.0)])
        assert [p["player_id"] for p in ranked] == [2, 1, 3]
        assert [p["rank"] for p in ranked] == [1, 2, 3]

    def test_ties_broken_by_player_id(self):
        ranked = rank_players([self.scored(9, 1.0), self.scored(4, 1.0), self.scored(6, 1.0)])
        assert [p["player_id"] for p in ranked] == [4, 6, 9]

    def test_punt_reorders_without_touching_total(self):
        big_men = self.scored(1, 2.0, blocks_z=3.0, ft_percentage_z=-1.0)
        guard = self.scored(2, 1.5, blocks_z=-0.5, ft_percentage_z=2.0)

        ranked = rank_players([big_men, guard], punt=["blocks"])

        assert [p["player_id"] for p in ranked] == [2, 1]
        assert ranked[0]["adjusted_value"] == pytest.approx(2.0)
        assert ranked[0]["total_value"] == 1.5

    def test_does_not_mutate_input(self):
        players = [self.scored(1, 1.0)]
        rank_players(players, punt=["points"])
        assert "rank" not in players[0]
        assert "adjusted_value" not in players[0]

    def test_unknown_punt_category(self):
        with pytest.raises(ValueError, match="Unknown categories"):
            validate_punt(["dunks"])
