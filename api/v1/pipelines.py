"""
Pipeline API Routes

Endpoints for triggering data pipelines. Uses token-based authentication
so cron jobs and scheduled tasks can trigger pipelines.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Query, Security

from core.logging import get_logger
from core.pipeline_auth import verify_pipeline_token
from pipelines import list_pipelines, run_pipeline
from schemas.pipeline import PipelineResponse, SeasonAveragesRequest

router = APIRouter(prefix="/pipelines", tags=["pipelines"])
log = get_logger("pipeline_api")


@router.get("/")
async def get_available_pipelines(
    _: str = Security(verify_pipeline_token),
) -> dict:
    """
    List all available pipelines.

    Returns pipeline names, descriptions, target tables and dependencies.
    """
    return {"pipelines": list_pipelines()}


@router.post("/player-game-logs", response_model=PipelineResponse)
async def trigger_player_game_logs(
    _: str = Security(verify_pipeline_token),
    date: Optional[date] = Query(None, description="Override game date (YYYY-MM-DD). Omit for automatic date."),
    season: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$", description="Override season (e.g. 2025-26)"),
) -> PipelineResponse:
    """
    Trigger the player game logs pipeline.

    Fetches one night of box scores from the NBA API into player_game_logs.
    Pass ?date=YYYY-MM-DD to backfill a specific date.
    """
    log.info("pipeline_triggered", pipeline="player_game_logs", date=str(date) if date else None)
    result = await run_pipeline("player_game_logs", date_override=date, season=season)
    return PipelineResponse(
        status=result.status,
        message=result.message,
        data=result,
    )


@router.post("/player-season-averages", response_model=PipelineResponse)
async def trigger_player_season_averages(
    _: str = Security(verify_pipeline_token),
    request: Optional[SeasonAveragesRequest] = Body(None),
) -> PipelineResponse:
    """
    Trigger the player season averages pipeline.

    Recomputes per-game averages, category z-scores and total value from
    player_game_logs. The optional JSON body narrows the run:
    {"season": "2025-26", "player_ids": [...], "min_games": 5}.

    A run where some rows failed to write reports status "partial" with the
    failures listed in data.details.errors.
    """
    request = request or SeasonAveragesRequest()
    log.info(
        "pipeline_triggered",
        pipeline="player_season_averages",
        season=request.season,
        player_count=len(request.player_ids),
    )
    result = await run_pipeline(
        "player_season_averages",
        season=request.season,
        player_ids=request.player_ids,
        min_games=request.min_games,
    )
    return PipelineResponse(
        status=result.status,
        message=result.message,
        data=result,
    )
