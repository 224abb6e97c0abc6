from db.models.pipeline_run import PipelineRun
from db.models.player_game_logs import PlayerGameLog
from db.models.player_season_averages import PlayerSeasonAverage

__all__ = [
    "PipelineRun",
    "PlayerGameLog",
    "PlayerSeasonAverage",
]
