from pydantic import BaseModel
from typing import Optional

from .common import ApiStatus


class RankedPlayer(BaseModel):
    """A player's season averages, category z-scores and rank."""

    rank: int
    player_id: int
    player_name: str
    team_abbreviation: Optional[str] = None
    games_played: int
    qualified: bool

    minutes_per_game: float
    points_per_game: float
    rebounds_per_game: float
    assists_per_game: float
    steals_per_game: float
    blocks_per_game: float
    three_pointers_per_game: float
    field_goals_per_game: float
    field_goals_attempted_per_game: float
    field_goal_percentage: float
    free_throws_per_game: float
    free_throws_attempted_per_game: float
    free_throw_percentage: float
    turnovers_per_game: float

    points_z: float
    rebounds_z: float
    assists_z: float
    steals_z: float
    blocks_z: float
    three_pointers_z: float
    fg_percentage_z: float
    ft_percentage_z: float
    turnovers_z: float
    total_value: float
    adjusted_value: Optional[float] = None


class RankingsData(BaseModel):
    season: str
    punt: list[str] = []
    players: list[RankedPlayer]


class RankingsResponse(BaseModel):
    """Response for the season rankings endpoint"""

    status: ApiStatus
    message: str
    data: RankingsData

    class Config:
        use_enum_values = True
