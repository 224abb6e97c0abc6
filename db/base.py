from peewee import DatabaseProxy, Model
from playhouse.db_url import connect

# Bound at startup by init_db(); tests bind a throwaway SQLite file.
db = DatabaseProxy()


class BaseModel(Model):
    class Meta:
        database = db


def bind_database(database_url: str):
    """Create the database for a URL and point the proxy at it."""
    database = connect(database_url)
    db.initialize(database)
    return database


def get_models() -> list:
    """Models the data platform reads and writes, in creation order."""
    from .models.pipeline_run import PipelineRun
    from .models.player_game_logs import PlayerGameLog
    from .models.player_season_averages import PlayerSeasonAverage

    return [PipelineRun, PlayerGameLog, PlayerSeasonAverage]


def init_db(database_url: str | None = None):
    """Initialize database connection and create tables if they don't exist."""
    if database_url is None:
        from core.settings import settings

        database_url = settings.database_url

    bind_database(database_url)
    db.connect(reuse_if_open=True)

    # safe=True is idempotent
    db.create_tables(get_models(), safe=True)


def close_db():
    """Close database connection."""
    if db.obj is not None and not db.is_closed():
        db.close()
