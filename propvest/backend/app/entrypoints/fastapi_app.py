# app/entrypoints/fastapi_app.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..domain.policies import InvalidArgument
from .api.routers import calculators, health, scenarios

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.API_TITLE)

    @app.exception_handler(InvalidArgument)
    async def _invalid_argument(request: Request, exc: InvalidArgument) -> JSONResponse:
        log.info("rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # Routers
    app.include_router(health.router)
    app.include_router(calculators.router)
    app.include_router(scenarios.router)

    return app
