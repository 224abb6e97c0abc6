"""
Historical Stats API Routes

Status and maintenance of the historical stats snapshot.

Routes:
    GET    /v1/historical/status     (no auth)
    POST   /v1/historical/snapshot   download a fresh snapshot (token auth)
    DELETE /v1/historical/cache      drop cached query results (token auth)
"""

import asyncio
from functools import lru_cache
from typing import Optional

from circuitbreaker import CircuitBreakerError
from fastapi import APIRouter, Depends, HTTPException, Query, Security

from core.logging import get_logger
from core.pipeline_auth import verify_pipeline_token
from core.resilience import ClientError, RetryableError
from schemas.common import BaseResponse, success_response
from services.historical_stats import HistoricalStatsDatabase

router = APIRouter(prefix="/historical", tags=["historical"])
log = get_logger("historical_api")


@lru_cache
def get_historical_db() -> HistoricalStatsDatabase:
    return HistoricalStatsDatabase()


@router.get("/status", response_model=BaseResponse)
async def get_status(
    stats_db: HistoricalStatsDatabase = Depends(get_historical_db),
) -> dict:
    return success_response(message="Historical stats status", data=stats_db.status())


@router.post("/snapshot", response_model=BaseResponse)
async def download_snapshot(
    _: str = Security(verify_pipeline_token),
    url: Optional[str] = Query(None, description="Snapshot URL (defaults to HISTORICAL_DB_URL)"),
    stats_db: HistoricalStatsDatabase = Depends(get_historical_db),
) -> dict:
    """Download the snapshot file, replacing the local copy once complete."""
    try:
        path = await asyncio.to_thread(stats_db.download_snapshot, url)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (RetryableError, ClientError, CircuitBreakerError) as e:
        log.error("snapshot_download_failed", error=str(e))
        raise HTTPException(status_code=502, detail=f"Snapshot download failed: {e}")

    return success_response(message="Snapshot downloaded", data={"path": str(path)})


@router.delete("/cache", response_model=BaseResponse)
async def clear_cache(
    _: str = Security(verify_pipeline_token),
    stats_db: HistoricalStatsDatabase = Depends(get_historical_db),
) -> dict:
    stats_db.clear_cache()
    return success_response(message="Query cache cleared", data=stats_db.status())
