"""
Player Game Logs Pipeline

Fetches one night's box scores from the NBA Stats API and upserts them into
player_game_logs, the source table for season averages.
"""

from typing import Optional

import pandas as pd

from db.models.player_game_logs import PlayerGameLog
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.extractors import NBAApiExtractor
from pipelines.transformers import coerce_stat, minutes_to_decimal
from pipelines.transformers.dates import resolve_game_date, season_for_date

# NBA API column -> player_game_logs column
STAT_COLUMN_MAP = {
    "PTS": "points",
    "REB": "rebounds",
    "AST": "assists",
    "STL": "steals",
    "BLK": "blocks",
    "FG3M": "three_pointers_made",
    "FGM": "field_goals_made",
    "FGA": "field_goals_attempted",
    "FTM": "free_throws_made",
    "FTA": "free_throws_attempted",
    "TOV": "turnovers",
}


def game_log_row(record: dict) -> dict:
    """Map one NBA API game log record onto player_game_logs columns."""
    row = {
        "player_name": record.get("PLAYER_NAME") or "",
        "team_abbreviation": record.get("TEAM_ABBREVIATION"),
        "game_id": str(record["GAME_ID"]) if record.get("GAME_ID") else None,
        "minutes": minutes_to_decimal(record.get("MIN")),
    }
    for source, column in STAT_COLUMN_MAP.items():
        row[column] = int(coerce_stat(record.get(source)))
    return row


class PlayerGameLogsPipeline(BasePipeline):
    """
    Load a night of player game logs.

    This pipeline:
    1. Resolves the game date (6am US/Central cutoff unless overridden)
    2. Fetches every player's line for that date from the NBA API
    3. Skips players who did not log minutes
    4. Upserts each line keyed on (player_id, game_date)
    """

    config = PipelineConfig(
        name="player_game_logs",
        display_name="Player Game Logs",
        description="Fetches a night of player box scores from the NBA API",
        target_table="player_game_logs",
    )

    def __init__(self, season: Optional[str] = None):
        super().__init__()
        self.season = season
        self.nba_extractor = NBAApiExtractor()

    def execute(self, ctx: PipelineContext) -> None:
        game_date = resolve_game_date(ctx.started_at, ctx.date_override)
        season = self.season or season_for_date(game_date)
        date_str = game_date.strftime("%m/%d/%Y")

        ctx.log.info("fetching_data", date=date_str, season=season)
        stats = self.nba_extractor.get_game_logs(season, date_str)

        if stats.empty:
            ctx.log.info("no_games_found", date=date_str)
            ctx.details = {"game_date": game_date.isoformat(), "season": season}
            return

        skipped = 0
        for record in stats.to_dict("records"):
            minutes = record.get("MIN")
            if minutes is None or (not isinstance(minutes, str) and pd.isna(minutes)):
                skipped += 1
                continue

            row = game_log_row(record)
            if row["minutes"] == 0:
                skipped += 1
                continue

            # GAME_DATE arrives as "2025-01-15T00:00:00"
            row_date = str(record.get("GAME_DATE") or game_date.isoformat())[:10]

            PlayerGameLog.upsert_game_log(
                player_id=int(record["PLAYER_ID"]),
                game_date=row_date,
                season=season,
                row=row,
                pipeline_run_id=ctx.run_id,
            )
            ctx.increment_records()

        ctx.log.info(
            "game_logs_loaded",
            date=date_str,
            records=ctx.records_processed,
            skipped=skipped,
        )
        ctx.details = {
            "game_date": game_date.isoformat(),
            "season": season,
            "skipped": skipped,
        }
