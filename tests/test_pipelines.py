"""Pipeline tests against a throwaway SQLite database."""

from datetime import date, datetime

import pandas as pd
import peewee
import pytest

from db.models.pipeline_run import PipelineRun
from db.models.player_game_logs import PlayerGameLog
from db.models.player_season_averages import PlayerSeasonAverage
from factories import season_rows
from pipelines import (
    PIPELINE_REGISTRY,
    PlayerGameLogsPipeline,
    PlayerSeasonAveragesPipeline,
    get_pipeline,
    list_pipelines,
)
from pipelines.context import CENTRAL_TZ
from pipelines.player_season_averages import NO_GAME_LOGS_MESSAGE, persist_season_averages
from pipelines.transformers.dates import resolve_game_date, season_for_date


def store_rows(rows, season="2024-25"):
    for row in rows:
        PlayerGameLog.upsert_game_log(row["player_id"], row["game_date"], season, row)


class TestGameDates:
    def test_before_cutoff_uses_previous_day(self):
        now = CENTRAL_TZ.localize(datetime(2025, 1, 15, 5, 59))
        assert resolve_game_date(now) == date(2025, 1, 14)

    def test_after_cutoff_uses_today(self):
        now = CENTRAL_TZ.localize(datetime(2025, 1, 15, 6, 0))
        assert resolve_game_date(now) == date(2025, 1, 15)

    def test_override_wins(self):
        now = CENTRAL_TZ.localize(datetime(2025, 1, 15, 3, 0))
        assert resolve_game_date(now, date(2024, 12, 25)) == date(2024, 12, 25)

    @pytest.mark.parametrize("game_date,season", [
        (date(2025, 1, 15), "2024-25"),
        (date(2025, 7, 31), "2024-25"),
        (date(2025, 8, 1), "2025-26"),
        (date(2025, 10, 22), "2025-26"),
        (date(2099, 12, 1), "2099-00"),
    ])
    def test_season_for_date(self, game_date, season):
        assert season_for_date(game_date) == season


class TestRegistry:
    def test_registered_pipelines(self):
        assert list(PIPELINE_REGISTRY) == ["player_game_logs", "player_season_averages"]

    def test_list_includes_dependencies(self):
        info = {p["name"]: p for p in list_pipelines()}
        assert info["player_season_averages"]["depends_on"] == ["player_game_logs"]

    def test_get_pipeline_passes_options(self):
        pipeline = get_pipeline("player_season_averages", season="2023-24", min_games=3)
        assert pipeline.season == "2023-24"
        assert pipeline.min_games == 3

    def test_unknown_pipeline(self):
        with pytest.raises(KeyError, match="Unknown pipeline"):
            get_pipeline("nope")


class TestPlayerSeasonAveragesPipeline:
    def test_computes_and_stores(self, database):
        store_rows(
            season_rows(1, 5, points=10, turnovers=2)
            + season_rows(2, 5, points=20, turnovers=4)
            + season_rows(3, 2, points=30)
        )

        result = PlayerSeasonAveragesPipeline(season="2024-25").run_sync()

        assert result.status == "success"
        assert result.records_processed == 3
        assert result.details["players_processed"] == 3
        assert result.details["qualified_players"] == 2
        assert result.details["success_count"] == 3
        assert result.details["error_count"] == 0
        assert result.details["league_averages"]["points"] == 15

        stored = {row.player_id: row for row in PlayerSeasonAverage.select()}
        assert stored[1].points_z == pytest.approx(-1)
        assert stored[2].points_z == pytest.approx(1)
        assert stored[3].qualified is False
        assert stored[1].turnovers_z == pytest.approx(1)

    def test_rerun_replaces_rows(self, database):
        store_rows(season_rows(1, 5, points=10) + season_rows(2, 5, points=20))
        PlayerSeasonAveragesPipeline(season="2024-25").run_sync()

        PlayerGameLog.update(points=40).where(PlayerGameLog.player_id == 1).execute()
        PlayerSeasonAveragesPipeline(season="2024-25").run_sync()

        rows = list(PlayerSeasonAverage.select().where(PlayerSeasonAverage.player_id == 1))
        assert len(rows) == 1
        assert rows[0].points_per_game == 40
        assert rows[0].points_z == pytest.approx(1)

    def test_player_filter(self, database):
        store_rows(season_rows(1, 5, points=10) + season_rows(2, 5, points=20))

        result = PlayerSeasonAveragesPipeline(season="2024-25", player_ids=[2]).run_sync()

        assert result.details["players_processed"] == 1
        assert [row.player_id for row in PlayerSeasonAverage.select()] == [2]

    def test_no_game_logs(self, database):
        result = PlayerSeasonAveragesPipeline(season="2030-31").run_sync()

        assert result.status == "success"
        assert result.message == NO_GAME_LOGS_MESSAGE
        assert result.details["players_processed"] == 0
        assert PlayerSeasonAverage.select().count() == 0

    def test_write_failure_does_not_stop_batch(self, database, monkeypatch):
        store_rows(
            season_rows(1, 5, points=10)
            + season_rows(2, 5, points=20)
            + season_rows(3, 5, points=30)
        )
        original = PlayerSeasonAverage.upsert_average

        def flaky_upsert(record, season, pipeline_run_id=None):
            if record["player_id"] == 2:
                raise peewee.IntegrityError("constraint failed")
            return original(record, season, pipeline_run_id)

        monkeypatch.setattr(PlayerSeasonAverage, "upsert_average", flaky_upsert)

        result = PlayerSeasonAveragesPipeline(season="2024-25").run_sync()

        assert result.status == "partial"
        assert result.details["success_count"] == 2
        assert result.details["error_count"] == 1
        assert result.details["errors"][0]["player_id"] == 2
        assert "constraint failed" in result.details["errors"][0]["error"]
        assert sorted(row.player_id for row in PlayerSeasonAverage.select()) == [1, 3]

    def test_run_is_audited(self, database):
        store_rows(season_rows(1, 5, points=10))
        PlayerSeasonAveragesPipeline(season="2024-25").run_sync()

        run = PipelineRun.get_latest_successful("player_season_averages")
        assert run is not None
        assert run.records_processed == 1

    def test_unexpected_error_becomes_failed_result(self, database, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(PlayerGameLog, "fetch_season_rows", broken)
        result = PlayerSeasonAveragesPipeline(season="2024-25").run_sync()

        assert result.status == "error"
        assert "database went away" in result.error


class TestPersistSeasonAverages:
    def test_counts_successes_and_failures(self, database):
        written = []

        def writer(record, season, run_id):
            if record["player_id"] % 2 == 0:
                raise peewee.OperationalError("locked")
            written.append(record["player_id"])

        players = [{"player_id": i, "player_name": f"P{i}"} for i in range(1, 6)]
        count, failures = persist_season_averages(players, "2024-25", writer=writer)

        assert count == 3
        assert written == [1, 3, 5]
        assert [f.player_id for f in failures] == [2, 4]
        assert failures[0].player_name == "P2"

    def test_closed_connection_does_not_stop_later_writes(self, database):
        """InterfaceError is not a DatabaseError but still counts as one failed write."""
        written = []

        def writer(record, season, run_id):
            if record["player_id"] == 2:
                raise peewee.InterfaceError("connection already closed")
            written.append(record["player_id"])

        players = [{"player_id": i, "player_name": f"P{i}"} for i in range(1, 4)]
        count, failures = persist_season_averages(players, "2024-25", writer=writer)

        assert count == 2
        assert written == [1, 3]
        assert len(failures) == 1
        assert failures[0].player_id == 2
        assert failures[0].error == "InterfaceError: connection already closed"


class FakeExtractor:
    def __init__(self, frame):
        self.frame = frame
        self.calls = []

    def get_game_logs(self, season, date_str=None):
        self.calls.append((season, date_str))
        return self.frame


class TestPlayerGameLogsPipeline:
    def frame(self):
        return pd.DataFrame([
            {
                "PLAYER_ID": 1628369, "PLAYER_NAME": "Jayson Tatum", "TEAM_ABBREVIATION": "BOS",
                "GAME_ID": "0022400550", "GAME_DATE": "2025-01-14T00:00:00", "MIN": 36.5,
                "PTS": 31, "REB": 9, "AST": 6, "STL": 1, "BLK": 0, "FG3M": 4,
                "FGM": 11, "FGA": 22, "FTM": 5, "FTA": 6, "TOV": 3,
            },
            {
                "PLAYER_ID": 1, "PLAYER_NAME": "Bench Guy", "TEAM_ABBREVIATION": "BOS",
                "GAME_ID": "0022400550", "GAME_DATE": "2025-01-14T00:00:00", "MIN": 0,
                "PTS": 0, "REB": 0, "AST": 0, "STL": 0, "BLK": 0, "FG3M": 0,
                "FGM": 0, "FGA": 0, "FTM": 0, "FTA": 0, "TOV": 0,
            },
        ])

    def test_loads_night_of_games(self, database):
        pipeline = PlayerGameLogsPipeline()
        pipeline.nba_extractor = FakeExtractor(self.frame())

        result = pipeline.run_sync(date_override=date(2025, 1, 14))

        assert result.status == "success"
        assert result.records_processed == 1
        assert result.details["skipped"] == 1
        assert pipeline.nba_extractor.calls == [("2024-25", "01/14/2025")]

        log = PlayerGameLog.get(PlayerGameLog.player_id == 1628369)
        assert log.game_date == "2025-01-14"
        assert log.season == "2024-25"
        assert log.points == 31
        assert log.three_pointers_made == 4
        assert log.minutes == 36.5

    def test_reingest_updates_in_place(self, database):
        pipeline = PlayerGameLogsPipeline()
        pipeline.nba_extractor = FakeExtractor(self.frame())
        pipeline.run_sync(date_override=date(2025, 1, 14))

        corrected = self.frame()
        corrected.loc[0, "PTS"] = 33
        pipeline.nba_extractor = FakeExtractor(corrected)
        pipeline.run_sync(date_override=date(2025, 1, 14))

        rows = list(PlayerGameLog.select().where(PlayerGameLog.player_id == 1628369))
        assert len(rows) == 1
        assert rows[0].points == 33

    def test_no_games(self, database):
        pipeline = PlayerGameLogsPipeline(season="2024-25")
        pipeline.nba_extractor = FakeExtractor(pd.DataFrame())

        result = pipeline.run_sync(date_override=date(2025, 7, 4))

        assert result.status == "success"
        assert result.records_processed == 0
        assert PlayerGameLog.select().count() == 0
