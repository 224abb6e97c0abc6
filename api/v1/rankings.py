"""
Rankings API Routes

Serves stored season averages ranked by total value, optionally punting
categories out of the ranking key.

Routes:
    GET /v1/rankings?season=&limit=&punt=&qualified_only=
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from core.logging import get_logger
from core.settings import settings
from db.models.player_season_averages import PlayerSeasonAverage
from pipelines.transformers.zscores import CATEGORY_KEYS, rank_players
from schemas.common import ApiStatus
from schemas.rankings import RankedPlayer, RankingsData, RankingsResponse

router = APIRouter(prefix="/rankings", tags=["rankings"])
log = get_logger("rankings_api")


def _load_season_rows(season: str, qualified_only: bool) -> list[dict]:
    rows = [row.to_dict() for row in PlayerSeasonAverage.get_season_rankings(season)]
    if qualified_only:
        rows = [row for row in rows if row["qualified"]]
    return rows


@router.get("", response_model=RankingsResponse)
async def get_rankings(
    season: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$", description="Season (defaults to the current one)"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    punt: list[str] = Query([], description=f"Categories to punt: {', '.join(CATEGORY_KEYS)}"),
    qualified_only: bool = Query(False, description="Only players meeting the minimum games"),
) -> RankingsResponse:
    """
    Rank a season's players.

    Ordering is total_value descending (player_id breaks ties). With punt,
    the ranking key is the sum of the remaining categories, reported as
    adjusted_value; stored totals are unchanged.
    """
    season = season or settings.nba_season

    rows = await asyncio.to_thread(_load_season_rows, season, qualified_only)

    try:
        ranked = rank_players(rows, punt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if limit:
        ranked = ranked[:limit]

    log.debug("rankings_served", season=season, count=len(ranked), punt=punt)
    return RankingsResponse(
        status=ApiStatus.SUCCESS,
        message=f"{len(ranked)} players ranked for {season}",
        data=RankingsData(
            season=season,
            punt=punt,
            players=[RankedPlayer(**player) for player in ranked],
        ),
    )
