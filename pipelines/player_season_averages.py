"""
Player Season Averages Pipeline

Aggregates stored game logs into per-game season averages, scores each
player's nine categories against the league, and writes one row per player
to player_season_averages.
"""

from typing import Callable, Iterable, Optional
from uuid import UUID

import peewee

from core.logging import get_logger
from core.settings import settings
from db.base import db
from db.models.player_game_logs import PlayerGameLog
from db.models.player_season_averages import PlayerSeasonAverage
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.transformers import calculate_player_averages
from schemas.pipeline import SeasonAveragesSummary, WriteFailure

log = get_logger("pipeline.season_averages")

NO_GAME_LOGS_MESSAGE = "No game logs found to process"

Writer = Callable[[dict, str, Optional[UUID]], object]


def persist_season_averages(
    players: Iterable[dict],
    season: str,
    writer: Optional[Writer] = None,
    pipeline_run_id: Optional[UUID] = None,
) -> tuple[int, list[WriteFailure]]:
    """
    Write scored players one at a time.

    Each write runs in its own savepoint so a failure rolls back only that
    player's row; the remaining players are still written.

    Returns:
        (number of rows written, failures in input order)
    """
    writer = writer or PlayerSeasonAverage.upsert_average
    written = 0
    failures: list[WriteFailure] = []

    for player in players:
        try:
            with db.atomic():
                writer(player, season, pipeline_run_id)
            written += 1
        except peewee.PeeweeException as e:
            log.warning(
                "season_average_write_failed",
                player_id=player["player_id"],
                season=season,
                error=str(e),
            )
            failures.append(
                WriteFailure(
                    player_id=player["player_id"],
                    player_name=player.get("player_name"),
                    error=f"{type(e).__name__}: {e}",
                )
            )

    return written, failures


class PlayerSeasonAveragesPipeline(BasePipeline):
    """
    Recompute season averages and category z-scores.

    This pipeline:
    1. Reads the season's game logs (optionally for a subset of players)
    2. Computes per-game averages and shooting percentages
    3. Builds league mean/std per category from qualified players
    4. Scores every player and sums the z-scores into total_value
    5. Upserts one row per (player_id, season), continuing past write errors
    """

    config = PipelineConfig(
        name="player_season_averages",
        display_name="Player Season Averages",
        description="Per-game season averages, category z-scores and total value",
        target_table="player_season_averages",
        depends_on=("player_game_logs",),
    )

    def __init__(
        self,
        season: Optional[str] = None,
        player_ids: Optional[Iterable[int]] = None,
        min_games: Optional[int] = None,
    ):
        super().__init__()
        self.season = season or settings.nba_season
        self.player_ids = list(player_ids or [])
        self.min_games = settings.min_games_played if min_games is None else min_games

    def execute(self, ctx: PipelineContext) -> None:
        ctx.log.info(
            "loading_game_logs",
            season=self.season,
            player_filter=len(self.player_ids),
            min_games=self.min_games,
        )
        rows = PlayerGameLog.fetch_season_rows(self.season, self.player_ids)

        result = calculate_player_averages(
            rows,
            season=self.season,
            min_games=self.min_games,
            player_ids=self.player_ids,
        )

        if not result.players:
            ctx.log.info("no_game_logs", season=self.season)
            summary = SeasonAveragesSummary(
                season=self.season,
                league_averages=result.league_averages(),
                message=NO_GAME_LOGS_MESSAGE,
            )
            ctx.details = summary.model_dump()
            return

        ctx.log.info(
            "averages_computed",
            players=result.players_processed,
            qualified=result.qualified_count,
        )

        written, failures = persist_season_averages(
            result.players,
            self.season,
            pipeline_run_id=ctx.run_id,
        )
        ctx.increment_records(written)

        summary = SeasonAveragesSummary(
            season=self.season,
            players_processed=result.players_processed,
            qualified_players=result.qualified_count,
            success_count=written,
            error_count=len(failures),
            errors=failures,
            league_averages=result.league_averages(),
            message=(
                f"Processed {result.players_processed} players: "
                f"{written} written, {len(failures)} failed"
            ),
        )
        ctx.details = summary.model_dump()
        ctx.partial_failure = bool(failures)
