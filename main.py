"""
Fantasy Hoops Data Platform API Server

Triggers the stats pipelines and serves rankings and schedule game counts.
Pipeline triggers require the PIPELINE_API_TOKEN bearer token.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8001

Environment Variables:
    PIPELINE_API_TOKEN - Secret token for the pipeline endpoints
    DATABASE_URL - peewee db_url (postgresql://... or sqlite:///...)
    DATA_DIR - Directory holding schedule.json, weeks.json, playoffs.json
"""

# Apply NBA API patch early, before any nba_api imports elsewhere
import utils.patches  # noqa: F401 - imported for side effect (patches nba_api)

from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from pydantic import BaseModel

from core.correlation_middleware import CorrelationMiddleware
from core.db_middleware import DatabaseMiddleware
from core.logging import get_logger, setup_logging_from_settings
from core.middleware import setup_middleware
from core.resilience import is_circuit_open
from core.settings import settings
from db.base import close_db, init_db
from api.v1 import historical, rankings, schedule
from api.v1 import pipelines as pipeline_api
from pipelines.context import CENTRAL_TZ


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging_from_settings()
    log = get_logger()
    log.info("api_starting", service=settings.service_name)

    init_db()
    log.info("database_initialized")

    yield

    close_db()
    log.info("api_stopped")


app = FastAPI(
    title="Fantasy Hoops Data Platform",
    description="Stats pipelines, category rankings and schedule game counts",
    version="1.0.0",
    lifespan=lifespan,
)

# Middlewares (order matters: first added = innermost)
app.add_middleware(DatabaseMiddleware)
app.add_middleware(CorrelationMiddleware)
setup_middleware(app)

app.include_router(pipeline_api.router, prefix="/v1")
app.include_router(rankings.router, prefix="/v1")
app.include_router(schedule.router, prefix="/v1")
app.include_router(historical.router, prefix="/v1")


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    circuits: dict[str, str]


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint (no auth required)."""
    circuits = {
        name: "open" if is_circuit_open(name) else "closed"
        for name in ("nba_api", "historical_snapshot")
    }
    return HealthResponse(
        status="degraded" if "open" in circuits.values() else "healthy",
        timestamp=datetime.now(CENTRAL_TZ).isoformat(),
        circuits=circuits,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
