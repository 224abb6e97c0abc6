"""
NBA API Extractor

Fetches player game logs from the NBA Stats API via the nba_api library.
"""

from typing import Any, Optional

import pandas as pd

from core.settings import settings
from core.resilience import (
    with_retry,
    nba_api_circuit,
    NetworkError,
)
from pipelines.extractors.base import BaseExtractor


def _classify_nba_api_error(e: Exception) -> None:
    """Re-raise transport failures as retryable errors."""
    error_str = str(e).lower()
    if "timeout" in error_str or "timed out" in error_str:
        raise NetworkError(f"NBA API timeout: {e}")
    if "connection" in error_str:
        raise NetworkError(f"NBA API connection error: {e}")


class NBAApiExtractor(BaseExtractor):
    """
    Extractor for NBA Stats API via nba_api library.

    Provides methods to fetch:
    - Player game logs for a single date
    - Player game logs for a whole season (backfills)
    """

    def __init__(self):
        super().__init__("nba_api")

    def extract(self, **kwargs: Any) -> pd.DataFrame:
        """Fetch game logs; see get_game_logs for arguments."""
        return self.get_game_logs(**kwargs)

    @with_retry(
        max_attempts=settings.retry_max_attempts,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
    )
    @nba_api_circuit
    def get_game_logs(self, season: str, date_str: Optional[str] = None) -> pd.DataFrame:
        """
        Fetch player game logs from NBA API.

        Args:
            season: Season string like "2025-26"
            date_str: Date in MM/DD/YYYY format; omit for the whole season

        Returns:
            DataFrame with one row per player per game
        """
        from nba_api.stats.endpoints import playergamelogs

        self.log.debug("game_logs_start", date=date_str, season=season)

        try:
            game_logs = playergamelogs.PlayerGameLogs(
                date_from_nullable=date_str or "",
                date_to_nullable=date_str or "",
                season_nullable=season,
                timeout=settings.http_timeout,
            )
            stats = game_logs.player_game_logs.get_data_frame()

            self.log.info("game_logs_complete", record_count=len(stats))
            return stats

        except Exception as e:
            _classify_nba_api_error(e)
            raise
