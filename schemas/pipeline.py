from pydantic import BaseModel, Field
from typing import Any, Optional

from .common import ApiStatus


class PipelineResult(BaseModel):
    """Result of a single pipeline execution"""

    status: ApiStatus
    message: str
    started_at: str
    completed_at: Optional[str] = None
    duration_seconds: Optional[float] = None
    records_processed: Optional[int] = None
    details: Optional[dict[str, Any]] = None
    error: Optional[str] = None

    class Config:
        use_enum_values = True


class PipelineResponse(BaseModel):
    """Response for a single pipeline trigger"""

    status: ApiStatus
    message: str
    data: Optional[PipelineResult] = None

    class Config:
        use_enum_values = True


class SeasonAveragesRequest(BaseModel):
    """Parameters for the season averages pipeline."""

    season: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}$", description="e.g. 2025-26")
    player_ids: list[int] = Field(default_factory=list, description="Restrict to these players")
    min_games: Optional[int] = Field(None, ge=0)


class WriteFailure(BaseModel):
    """One season-average row that could not be written."""

    player_id: int
    player_name: Optional[str] = None
    error: str


class SeasonAveragesSummary(BaseModel):
    """Outcome of a season averages run, reported in PipelineResult.details."""

    season: str
    players_processed: int = 0
    qualified_players: int = 0
    success_count: int = 0
    error_count: int = 0
    errors: list[WriteFailure] = []
    league_averages: dict[str, float] = {}
    message: str = ""
