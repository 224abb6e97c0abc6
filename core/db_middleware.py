import asyncio

from starlette.middleware.base import BaseHTTPMiddleware

from db.base import db


class DatabaseMiddleware(BaseHTTPMiddleware):
    """Open a connection for the request and release it afterwards."""

    async def dispatch(self, request, call_next):
        if db.is_closed():
            await asyncio.to_thread(db.connect, True)

        try:
            return await call_next(request)
        finally:
            if not db.is_closed():
                await asyncio.to_thread(db.close)
