from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.logging import get_logger
from core.settings import settings
from schemas.common import ApiStatus, error_response
from services.schedule_service import ScheduleDataError

log = get_logger("api")


def setup_middleware(app: FastAPI):
    """Setup CORS and global exception handlers"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        log.warning("request_validation_failed", path=request.url.path, errors=jsonable_errors(exc))
        return JSONResponse(
            status_code=422,
            content=error_response(
                message="Request validation failed",
                status=ApiStatus.VALIDATION_ERROR,
                error_code="VALIDATION_ERROR",
                data={"errors": jsonable_errors(exc)},
            ),
        )

    @app.exception_handler(ScheduleDataError)
    async def schedule_data_exception_handler(request: Request, exc: ScheduleDataError):
        log.error("schedule_data_unavailable", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=503,
            content=error_response(
                message=str(exc),
                status=ApiStatus.SERVER_ERROR,
                error_code="SCHEDULE_DATA_UNAVAILABLE",
            ),
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors with only JSON-safe fields (ctx may hold exceptions)."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
