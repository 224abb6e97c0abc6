"""
Schedule API Routes

Games per NBA team per fantasy week, from the static schedule files.

Routes:
    GET  /v1/schedule/weeks/{week}
    GET  /v1/schedule/current
    GET  /v1/schedule/playoffs?start_week=
    POST /v1/schedule/playoffs/fantasy-teams
"""

import asyncio
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.logging import get_logger
from core.settings import settings
from db.models.player_season_averages import PlayerSeasonAverage
from pipelines.transformers.schedule import WeekDefinition
from schemas.common import ApiStatus
from schemas.schedule import (
    FantasyPlayoffData,
    FantasyPlayoffRequest,
    FantasyPlayoffResponse,
    FantasyTeamGames,
    ScheduleData,
    ScheduleResponse,
    TeamGames,
    Week,
)
from services.schedule_service import ScheduleService

router = APIRouter(prefix="/schedule", tags=["schedule"])
log = get_logger("schedule_api")


@lru_cache
def get_schedule_service() -> ScheduleService:
    """Shared service instance; schedule files are read on first use."""
    return ScheduleService(settings.data_dir)


def _week_model(week: WeekDefinition) -> Week:
    return Week(number=week.number, start=week.start, end=week.end, label=week.label)


def _schedule_data(counts: dict, current_week: Optional[int] = None) -> ScheduleData:
    teams = [
        TeamGames(team=team, weeks=row["weeks"], total=row["total"])
        for team, row in counts["teams"].items()
    ]
    return ScheduleData(
        weeks=[_week_model(week) for week in counts["weeks"]],
        teams=teams,
        total_games=sum(team.total for team in teams),
        current_week=current_week,
    )


@router.get("/weeks/{week}", response_model=ScheduleResponse)
async def get_week_games(
    week: int,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    """Games per team for one regular-season week."""
    counts = service.week_games(week)
    if counts is None:
        raise HTTPException(status_code=404, detail=f"Week {week} not found")

    current = service.current_week()
    return ScheduleResponse(
        status=ApiStatus.SUCCESS,
        message=f"Games for week {week}",
        data=_schedule_data(counts, current.number if current else None),
    )


@router.get("/current", response_model=ScheduleResponse)
async def get_current_week_games(
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    """Games per team for the week containing today."""
    current = service.current_week()
    if current is None:
        raise HTTPException(status_code=404, detail="No fantasy week is in progress")

    return ScheduleResponse(
        status=ApiStatus.SUCCESS,
        message=f"Games for week {current.number} ({current.label})",
        data=_schedule_data(service.week_games(current.number), current.number),
    )


@router.get("/playoffs", response_model=ScheduleResponse)
async def get_playoff_games(
    start_week: int = Query(..., ge=1, description="First fantasy playoff week"),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    """Games per team across the playoff weeks starting at start_week."""
    counts = service.playoff_games(start_week)
    if not counts["weeks"]:
        raise HTTPException(status_code=404, detail=f"No playoff weeks from week {start_week}")

    return ScheduleResponse(
        status=ApiStatus.SUCCESS,
        message=f"Playoff games for weeks {', '.join(str(w.number) for w in counts['weeks'])}",
        data=_schedule_data(counts),
    )


def _player_values(season: str) -> dict[int, float]:
    return {
        row.player_id: row.total_value
        for row in PlayerSeasonAverage.get_season_rankings(season)
    }


@router.post("/playoffs/fantasy-teams", response_model=FantasyPlayoffResponse)
async def get_fantasy_playoff_games(
    request: FantasyPlayoffRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> FantasyPlayoffResponse:
    """
    Games and schedule strength per fantasy team over the playoff weeks.

    Strength weights each player's games by their season total_value.
    """
    season = request.season or settings.nba_season
    player_values = await asyncio.to_thread(_player_values, season)

    result = service.fantasy_playoff_games(
        request.start_week,
        rosters=[roster.model_dump() for roster in request.rosters],
        player_values=player_values,
        disabled=[(d.team_key, d.player_id) for d in request.disabled],
    )
    if not result["weeks"]:
        raise HTTPException(
            status_code=404,
            detail=f"No playoff weeks from week {request.start_week}",
        )

    log.debug("fantasy_playoff_games", teams=len(result["teams"]), season=season)
    return FantasyPlayoffResponse(
        status=ApiStatus.SUCCESS,
        message=f"Playoff schedule for {len(result['teams'])} teams",
        data=FantasyPlayoffData(
            weeks=[_week_model(week) for week in result["weeks"]],
            teams=[FantasyTeamGames(**team) for team in result["teams"]],
        ),
    )
