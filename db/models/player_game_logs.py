"""
Player Game Logs Fact Table

One row per player per game: the box-score line season averages are
computed from. Rows are immutable once recorded except for corrections
re-ingested for the same (player_id, game_date).
"""

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from peewee import (
    AutoField,
    CharField,
    DateTimeField,
    FloatField,
    IntegerField,
    SmallIntegerField,
    UUIDField,
)

from db.base import BaseModel

# Counting-stat columns, in box-score order
STAT_COLUMNS = (
    "points",
    "rebounds",
    "assists",
    "steals",
    "blocks",
    "three_pointers_made",
    "field_goals_made",
    "field_goals_attempted",
    "free_throws_made",
    "free_throws_attempted",
    "turnovers",
)


class PlayerGameLog(BaseModel):
    """
    Per-game statistics for a player.

    Attributes:
        id: Auto-incrementing primary key
        player_id: NBA player ID
        player_name: Display name at the time of the game
        team_abbreviation: Team the player played for (e.g., "BOS")
        season: Season identifier (e.g., '2025-26')
        game_date: ISO date string (YYYY-MM-DD), sortable as text
        game_id: NBA game ID, when known
        minutes: Minutes played (decimal)
        points .. turnovers: Counting stats
        pipeline_run_id: Reference to the pipeline run that wrote this record
    """

    id = AutoField(primary_key=True)
    player_id = IntegerField(index=True)
    player_name = CharField(max_length=100)
    team_abbreviation = CharField(max_length=5, null=True)
    season = CharField(max_length=7, index=True)
    game_date = CharField(max_length=10, index=True)
    game_id = CharField(max_length=20, null=True)

    minutes = FloatField(default=0)
    points = SmallIntegerField(default=0)
    rebounds = SmallIntegerField(default=0)
    assists = SmallIntegerField(default=0)
    steals = SmallIntegerField(default=0)
    blocks = SmallIntegerField(default=0)
    three_pointers_made = SmallIntegerField(default=0)
    field_goals_made = SmallIntegerField(default=0)
    field_goals_attempted = SmallIntegerField(default=0)
    free_throws_made = SmallIntegerField(default=0)
    free_throws_attempted = SmallIntegerField(default=0)
    turnovers = SmallIntegerField(default=0)

    # Audit columns
    pipeline_run_id = UUIDField(null=True, index=True)
    created_at = DateTimeField(default=datetime.utcnow)
    updated_at = DateTimeField(default=datetime.utcnow)

    class Meta:
        table_name = "player_game_logs"
        indexes = (
            # One row per player per game date
            (("player_id", "game_date"), True),
            (("season", "player_id"), False),
        )

    def __repr__(self) -> str:
        return (
            f"<PlayerGameLog("
            f"player_id={self.player_id}, "
            f"date={self.game_date}, "
            f"pts={self.points})>"
        )

    def save(self, *args, **kwargs):
        """Override save to auto-update updated_at timestamp."""
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    def to_row(self) -> dict:
        """Plain dict in the shape the season-average computation consumes."""
        row = {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "team_abbreviation": self.team_abbreviation,
            "game_date": self.game_date,
            "minutes": self.minutes,
        }
        for column in STAT_COLUMNS:
            row[column] = getattr(self, column)
        return row

    @classmethod
    def upsert_game_log(
        cls,
        player_id: int,
        game_date: str,
        season: str,
        row: dict,
        pipeline_run_id: UUID | None = None,
    ) -> "PlayerGameLog":
        """
        Insert or update one player's game line.

        Args:
            player_id: NBA player ID
            game_date: ISO date string
            season: Season identifier
            row: Dict with player_name, team_abbreviation, minutes and stats
            pipeline_run_id: Optional pipeline run UUID

        Returns:
            The created or updated PlayerGameLog instance
        """
        defaults = {
            "season": season,
            "player_name": row.get("player_name", ""),
            "team_abbreviation": row.get("team_abbreviation"),
            "game_id": row.get("game_id"),
            "minutes": row.get("minutes", 0),
            "pipeline_run_id": pipeline_run_id,
        }
        for column in STAT_COLUMNS:
            defaults[column] = row.get(column, 0)

        record, created = cls.get_or_create(
            player_id=player_id,
            game_date=game_date,
            defaults=defaults,
        )

        if not created:
            for key, value in defaults.items():
                setattr(record, key, value)
            record.save()

        return record

    @classmethod
    def fetch_season_rows(
        cls,
        season: str,
        player_ids: Optional[Iterable[int]] = None,
    ) -> list[dict]:
        """
        Get every game line for a season as plain dicts.

        Args:
            season: Season identifier
            player_ids: Optional allow-list of player IDs

        Returns:
            List of row dicts (see to_row)
        """
        query = cls.select().where(cls.season == season)
        ids = list(player_ids or [])
        if ids:
            query = query.where(cls.player_id.in_(ids))
        return [record.to_row() for record in query]
