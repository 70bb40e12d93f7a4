"""HTTP app — REST API under /api."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from frecent.config import FrecentConfig
from frecent.server.api import router
from frecent.state import closeState, initState


def createApp(config: FrecentConfig | None = None, port: int | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        initState(config=config, port=port)
        yield
        closeState()

    app = FastAPI(title="frecent", lifespan=lifespan)
    app.include_router(router, prefix="/api")
    return app
