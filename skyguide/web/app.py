"""FastAPI application factory."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from skyguide.session import SkyGuideSession
from skyguide.web.routes import create_router
from skyguide.web.websocket import create_ws_router


def create_app(session: SkyGuideSession) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Session callbacks fire on the tick thread; hop onto this loop
        session.set_event_loop(asyncio.get_running_loop())
        session.start()
        try:
            yield
        finally:
            session.stop()

    app = FastAPI(title="Sky Guide", version="0.1.0", lifespan=lifespan)
    app.include_router(create_router(session))
    app.include_router(create_ws_router(session))
    return app
