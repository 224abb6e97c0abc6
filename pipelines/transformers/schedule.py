"""
Schedule Transformer

Buckets the NBA schedule (date -> teams playing) into fantasy weeks and
counts games per team per week.

Dates are read as midnight at a fixed UTC-05:00 offset, with no daylight
saving adjustment. A week covers [start 00:00:00, end 23:59:59.999] in that
offset, so a date belongs to a week when start <= date <= end.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional

import pytz

from core.settings import settings

# pytz.FixedOffset takes minutes east of UTC
SCHEDULE_TZ = pytz.FixedOffset(settings.schedule_utc_offset_hours * 60)

END_OF_DAY = timedelta(hours=23, minutes=59, seconds=59, milliseconds=999)


@dataclass(frozen=True)
class WeekDefinition:
    """A fantasy week: inclusive start/end dates and a display label."""

    number: int
    start: str
    end: str
    label: str

    def bounds(self) -> tuple[datetime, datetime]:
        return week_bounds(self)

    def contains(self, moment: datetime) -> bool:
        start, end = self.bounds()
        return start <= moment <= end


def parse_eastern_date(date_str: str) -> datetime:
    """
    Parse YYYY-MM-DD as midnight at the fixed schedule offset.

    Example:
        >>> parse_eastern_date("2025-01-06").isoformat()
        '2025-01-06T00:00:00-05:00'
    """
    day = datetime.strptime(date_str[:10], "%Y-%m-%d")
    return day.replace(tzinfo=SCHEDULE_TZ)


def week_bounds(week: WeekDefinition) -> tuple[datetime, datetime]:
    """Inclusive datetime bounds for a week."""
    return parse_eastern_date(week.start), parse_eastern_date(week.end) + END_OF_DAY


def normalize_weeks(raw_weeks: Mapping) -> list[WeekDefinition]:
    """
    Build week definitions from the weeks.json mapping.

    Keys are week numbers (strings in JSON). Entries without start, end and
    label are skipped.

    Returns:
        WeekDefinitions sorted by week number
    """
    weeks = []
    for number, data in raw_weeks.items():
        if not isinstance(data, Mapping):
            continue
        if not (data.get("start") and data.get("end") and data.get("label")):
            continue
        weeks.append(
            WeekDefinition(
                number=int(number),
                start=data["start"],
                end=data["end"],
                label=data["label"],
            )
        )
    return sorted(weeks, key=lambda w: w.number)


def select_weeks(
    weeks: Iterable[WeekDefinition],
    week_numbers: Optional[Iterable[int]] = None,
) -> list[WeekDefinition]:
    """Weeks whose number is in week_numbers (all weeks when None)."""
    if week_numbers is None:
        return list(weeks)
    wanted = set(week_numbers)
    return [week for week in weeks if week.number in wanted]


def select_playoff_weeks(
    weeks: Iterable[WeekDefinition],
    start_week: int,
    span: int = 3,
) -> list[WeekDefinition]:
    """The consecutive playoff weeks starting at start_week that exist."""
    return select_weeks(weeks, range(start_week, start_week + span))


def find_current_week(
    weeks: Iterable[WeekDefinition],
    today: Optional[datetime] = None,
) -> Optional[WeekDefinition]:
    """
    The week containing today, if any.

    Args:
        weeks: Week definitions
        today: Aware datetime or date (defaults to now at the schedule offset)
    """
    if today is None:
        today = datetime.now(SCHEDULE_TZ)
    elif not isinstance(today, datetime):
        today = parse_eastern_date(today.isoformat())
    elif today.tzinfo is None:
        today = today.replace(tzinfo=SCHEDULE_TZ)

    for week in weeks:
        if week.contains(today):
            return week
    return None


def count_team_games(
    schedule: Mapping[str, Iterable[str]],
    weeks: Iterable[WeekDefinition],
    week_numbers: Optional[Iterable[int]] = None,
) -> dict[str, dict]:
    """
    Count games per team per week.

    Overlapping weeks are not validated; a date inside two selected weeks
    counts toward both.

    Args:
        schedule: Date string -> team abbreviations playing that date
        weeks: Week definitions
        week_numbers: Optional subset of weeks to count

    Returns:
        Team -> {"weeks": {week_number: games}, "total": games}, ordered by
        total descending then team abbreviation. Teams with no games in the
        selected weeks are absent.
    """
    selected = [(week, week_bounds(week)) for week in select_weeks(weeks, week_numbers)]

    counts: dict[str, dict] = {}
    for date_str, teams in schedule.items():
        game_time = parse_eastern_date(date_str)
        for week, (start, end) in selected:
            if not (start <= game_time <= end):
                continue
            for team in teams:
                row = counts.setdefault(team, {"weeks": {}, "total": 0})
                row["weeks"][week.number] = row["weeks"].get(week.number, 0) + 1
                row["total"] += 1

    ordered = sorted(counts.items(), key=lambda item: (-item[1]["total"], item[0]))
    return dict(ordered)


def games_in_week(team_row: Mapping, week_number: int) -> int:
    """Games for one week of a count_team_games row, defaulting to 0."""
    return team_row.get("weeks", {}).get(week_number, 0)


def team_games_by_week(
    schedule: Mapping[str, Iterable[str]],
    weeks: Iterable[WeekDefinition],
) -> dict[str, dict[int, int]]:
    """Team -> week number -> games, over every given week."""
    return {team: row["weeks"] for team, row in count_team_games(schedule, weeks).items()}


def fantasy_team_games(
    rosters: Iterable[Mapping],
    schedule: Mapping[str, Iterable[str]],
    weeks: Iterable[WeekDefinition],
    player_values: Optional[Mapping[int, float]] = None,
    disabled: Optional[Iterable[tuple[str, int]]] = None,
) -> list[dict]:
    """
    Games and schedule strength per fantasy team per week.

    A player's strength for a week is games played that week times their
    season total_value. Disabled (team_key, player_id) pairs are skipped.

    Args:
        rosters: [{"team_key", "team_name", "players": [{"player_id", "nba_team"}]}]
        schedule: Date string -> team abbreviations playing that date
        weeks: Week definitions to count
        player_values: player_id -> total_value
        disabled: (team_key, player_id) pairs to leave out

    Returns:
        Per-team dicts sorted by total games descending
    """
    weeks = list(weeks)
    player_values = player_values or {}
    disabled = set(disabled or [])
    per_team_week = team_games_by_week(schedule, weeks)

    results = []
    for roster in rosters:
        team_key = roster["team_key"]
        week_data = {}
        total_games = 0
        total_strength = 0.0

        for week in weeks:
            games = 0
            strength = 0.0
            for player in roster.get("players", []):
                player_id = player.get("player_id")
                if player_id is None or (team_key, player_id) in disabled:
                    continue
                player_games = per_team_week.get(player.get("nba_team"), {}).get(week.number, 0)
                games += player_games
                strength += player_games * player_values.get(player_id, 0.0)

            week_data[week.number] = {"games": games, "strength": round(strength, 2)}
            total_games += games
            total_strength += strength

        results.append(
            {
                "team_key": team_key,
                "team_name": roster.get("team_name") or team_key,
                "weeks": week_data,
                "total_games": total_games,
                "total_strength": round(total_strength, 2),
            }
        )

    return sorted(results, key=lambda r: -r["total_games"])
