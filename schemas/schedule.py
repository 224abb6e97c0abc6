from pydantic import BaseModel, Field
from typing import Optional

from .common import ApiStatus


class Week(BaseModel):
    number: int
    start: str
    end: str
    label: str


class TeamGames(BaseModel):
    """Games one NBA team plays in each selected week."""

    team: str
    weeks: dict[int, int]
    total: int


class ScheduleData(BaseModel):
    weeks: list[Week]
    teams: list[TeamGames]
    total_games: int
    current_week: Optional[int] = None


class ScheduleResponse(BaseModel):
    """Response for schedule game-count endpoints"""

    status: ApiStatus
    message: str
    data: ScheduleData

    class Config:
        use_enum_values = True


class RosterPlayer(BaseModel):
    player_id: int
    nba_team: str


class FantasyRoster(BaseModel):
    team_key: str
    team_name: Optional[str] = None
    players: list[RosterPlayer] = []


class DisabledPlayer(BaseModel):
    """A player left out of one fantasy team's counts."""

    team_key: str
    player_id: int


class FantasyPlayoffRequest(BaseModel):
    start_week: int = Field(..., ge=1)
    season: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}$")
    rosters: list[FantasyRoster]
    disabled: list[DisabledPlayer] = []


class FantasyWeek(BaseModel):
    games: int
    strength: float


class FantasyTeamGames(BaseModel):
    team_key: str
    team_name: str
    weeks: dict[int, FantasyWeek]
    total_games: int
    total_strength: float


class FantasyPlayoffData(BaseModel):
    weeks: list[Week]
    teams: list[FantasyTeamGames]


class FantasyPlayoffResponse(BaseModel):
    """Response for fantasy-team playoff schedule strength"""

    status: ApiStatus
    message: str
    data: FantasyPlayoffData

    class Config:
        use_enum_values = True
