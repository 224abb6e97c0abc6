"""
Schedule Service

Serves fantasy-week game counts from the static schedule files:

    schedule.json   {"2025-10-21": ["HOU", "OKC", ...], ...}
    weeks.json      {"weeks": {"1": {"start", "end", "label"}, ...}}
    playoffs.json   {"weeks": {"21": {"start", "end", "label"}, ...}}

Each file is read once per service instance.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional

from core.logging import get_logger
from core.settings import settings
from pipelines.transformers.schedule import (
    WeekDefinition,
    count_team_games,
    fantasy_team_games,
    find_current_week,
    normalize_weeks,
    select_playoff_weeks,
    select_weeks,
)

log = get_logger("schedule_service")


class ScheduleDataError(Exception):
    """A schedule file is missing or malformed."""


class ScheduleService:
    """Week and playoff game counts over one data directory."""

    SCHEDULE_FILE = "schedule.json"
    WEEKS_FILE = "weeks.json"
    PLAYOFFS_FILE = "playoffs.json"

    def __init__(self, data_dir: Optional[Path] = None, playoff_span: Optional[int] = None):
        self.data_dir = Path(data_dir or settings.data_dir)
        self.playoff_span = playoff_span or settings.playoff_week_span
        self._schedule: Optional[dict] = None
        self._weeks: Optional[list[WeekDefinition]] = None
        self._playoff_weeks: Optional[list[WeekDefinition]] = None

    def _load_json(self, filename: str) -> dict:
        path = self.data_dir / filename
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ScheduleDataError(f"Schedule file not found: {path}")
        except json.JSONDecodeError as e:
            raise ScheduleDataError(f"Invalid JSON in {path}: {e}")

        if not isinstance(data, dict):
            raise ScheduleDataError(f"Expected an object at the top of {path}")
        log.debug("schedule_file_loaded", file=filename, entries=len(data))
        return data

    @property
    def schedule(self) -> dict[str, list[str]]:
        """Date string -> team abbreviations playing that date."""
        if self._schedule is None:
            self._schedule = self._load_json(self.SCHEDULE_FILE)
        return self._schedule

    @property
    def weeks(self) -> list[WeekDefinition]:
        """Regular-season fantasy weeks sorted by number."""
        if self._weeks is None:
            self._weeks = normalize_weeks(self._load_json(self.WEEKS_FILE).get("weeks", {}))
        return self._weeks

    @property
    def playoff_weeks(self) -> list[WeekDefinition]:
        """Fantasy playoff weeks sorted by number."""
        if self._playoff_weeks is None:
            self._playoff_weeks = normalize_weeks(
                self._load_json(self.PLAYOFFS_FILE).get("weeks", {})
            )
        return self._playoff_weeks

    def get_week(self, week_number: int) -> Optional[WeekDefinition]:
        selected = select_weeks(self.weeks, [week_number])
        return selected[0] if selected else None

    def week_games(self, week_number: int) -> Optional[dict]:
        """
        Games per team for one regular-season week.

        Returns:
            {"weeks": [week], "teams": {team: row}} or None for an unknown week
        """
        week = self.get_week(week_number)
        if week is None:
            return None
        return {
            "weeks": [week],
            "teams": count_team_games(self.schedule, [week]),
        }

    def playoff_games(self, start_week: int) -> dict:
        """
        Games per team across the playoff weeks starting at start_week.

        Weeks past the end of playoffs.json are dropped, so a late start week
        yields fewer than the full span.
        """
        weeks = select_playoff_weeks(self.playoff_weeks, start_week, self.playoff_span)
        return {
            "weeks": weeks,
            "teams": count_team_games(self.schedule, weeks),
        }

    def current_week(self, today: Optional[datetime] = None) -> Optional[WeekDefinition]:
        return find_current_week(self.weeks, today)

    def current_week_games(self, today: Optional[datetime] = None) -> Optional[dict]:
        week = self.current_week(today)
        if week is None:
            return None
        return self.week_games(week.number)

    def fantasy_playoff_games(
        self,
        start_week: int,
        rosters: Iterable[Mapping],
        player_values: Optional[Mapping[int, float]] = None,
        disabled: Optional[Iterable[tuple[str, int]]] = None,
    ) -> dict:
        """Games and strength per fantasy team across the playoff weeks."""
        weeks = select_playoff_weeks(self.playoff_weeks, start_week, self.playoff_span)
        return {
            "weeks": weeks,
            "teams": fantasy_team_games(rosters, self.schedule, weeks, player_values, disabled),
        }
