"""
Player Season Averages Table

Per-game season averages plus the nine category z-scores and the summed
total value for each player. One row per (player_id, season); every write
replaces the previous row for that key.
"""

from datetime import datetime
from uuid import UUID

from peewee import (
    AutoField,
    BooleanField,
    CharField,
    DateTimeField,
    FloatField,
    IntegerField,
    SmallIntegerField,
    UUIDField,
)

from db.base import BaseModel

AVERAGE_COLUMNS = (
    "minutes_per_game",
    "points_per_game",
    "rebounds_per_game",
    "assists_per_game",
    "steals_per_game",
    "blocks_per_game",
    "three_pointers_per_game",
    "field_goals_per_game",
    "field_goals_attempted_per_game",
    "field_goal_percentage",
    "free_throws_per_game",
    "free_throws_attempted_per_game",
    "free_throw_percentage",
    "turnovers_per_game",
)

Z_SCORE_COLUMNS = (
    "points_z",
    "rebounds_z",
    "assists_z",
    "steals_z",
    "blocks_z",
    "three_pointers_z",
    "fg_percentage_z",
    "ft_percentage_z",
    "turnovers_z",
)


class PlayerSeasonAverage(BaseModel):
    """
    Season averages and category z-scores for a player.

    Attributes:
        player_id, season: Natural key (unique together)
        player_name, team_abbreviation: From the player's most recent game
        games_played: Number of game lines aggregated
        qualified: Whether the player met the minimum-games threshold
        *_per_game, *_percentage: Per-game rates and shooting percentages
        *_z: Category z-scores (turnovers already negated)
        total_value: Sum of the nine z-scores
    """

    id = AutoField(primary_key=True)
    player_id = IntegerField()
    season = CharField(max_length=7, index=True)
    player_name = CharField(max_length=100)
    team_abbreviation = CharField(max_length=5, null=True)
    games_played = SmallIntegerField()
    qualified = BooleanField(default=False)

    minutes_per_game = FloatField(default=0)
    points_per_game = FloatField(default=0)
    rebounds_per_game = FloatField(default=0)
    assists_per_game = FloatField(default=0)
    steals_per_game = FloatField(default=0)
    blocks_per_game = FloatField(default=0)
    three_pointers_per_game = FloatField(default=0)
    field_goals_per_game = FloatField(default=0)
    field_goals_attempted_per_game = FloatField(default=0)
    field_goal_percentage = FloatField(default=0)
    free_throws_per_game = FloatField(default=0)
    free_throws_attempted_per_game = FloatField(default=0)
    free_throw_percentage = FloatField(default=0)
    turnovers_per_game = FloatField(default=0)

    points_z = FloatField(default=0)
    rebounds_z = FloatField(default=0)
    assists_z = FloatField(default=0)
    steals_z = FloatField(default=0)
    blocks_z = FloatField(default=0)
    three_pointers_z = FloatField(default=0)
    fg_percentage_z = FloatField(default=0)
    ft_percentage_z = FloatField(default=0)
    turnovers_z = FloatField(default=0)
    total_value = FloatField(default=0, index=True)

    # Audit columns
    pipeline_run_id = UUIDField(null=True, index=True)
    created_at = DateTimeField(default=datetime.utcnow)
    updated_at = DateTimeField(default=datetime.utcnow)

    class Meta:
        table_name = "player_season_averages"
        indexes = (
            (("player_id", "season"), True),
            (("season", "total_value"), False),
        )

    def __repr__(self) -> str:
        return (
            f"<PlayerSeasonAverage("
            f"player_id={self.player_id}, "
            f"season={self.season}, "
            f"gp={self.games_played}, "
            f"total_value={self.total_value})>"
        )

    def save(self, *args, **kwargs):
        """Override save to auto-update updated_at timestamp."""
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    def to_dict(self) -> dict:
        data = {
            "player_id": self.player_id,
            "season": self.season,
            "player_name": self.player_name,
            "team_abbreviation": self.team_abbreviation,
            "games_played": self.games_played,
            "qualified": self.qualified,
            "total_value": self.total_value,
        }
        for column in AVERAGE_COLUMNS + Z_SCORE_COLUMNS:
            data[column] = getattr(self, column)
        return data

    @classmethod
    def upsert_average(
        cls,
        record: dict,
        season: str,
        pipeline_run_id: UUID | None = None,
    ) -> "PlayerSeasonAverage":
        """
        Write a player's season averages, replacing any prior row.

        Every column is overwritten; nothing from the previous row for the
        same (player_id, season) survives.

        Args:
            record: Scored player dict (see pipelines.transformers.zscores)
            season: Season identifier
            pipeline_run_id: Optional pipeline run UUID

        Returns:
            The created or updated PlayerSeasonAverage instance
        """
        values = {
            "player_name": record["player_name"],
            "team_abbreviation": record.get("team_abbreviation"),
            "games_played": record["games_played"],
            "qualified": record.get("qualified", False),
            "total_value": record["total_value"],
            "pipeline_run_id": pipeline_run_id,
        }
        for column in AVERAGE_COLUMNS + Z_SCORE_COLUMNS:
            values[column] = record[column]

        row, created = cls.get_or_create(
            player_id=record["player_id"],
            season=season,
            defaults=values,
        )

        if not created:
            for key, value in values.items():
                setattr(row, key, value)
            row.save()

        return row

    @classmethod
    def get_season_rankings(cls, season: str, limit: int | None = None) -> list["PlayerSeasonAverage"]:
        """
        Get a season's rows ordered by total value (player_id breaks ties).

        Args:
            season: Season identifier
            limit: Optional maximum number of rows

        Returns:
            List of PlayerSeasonAverage, best first
        """
        query = (
            cls.select()
            .where(cls.season == season)
            .order_by(cls.total_value.desc(), cls.player_id.asc())
        )
        if limit:
            query = query.limit(limit)
        return list(query)
