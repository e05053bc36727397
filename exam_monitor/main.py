"""FastAPI application entry point."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from exam_monitor import __version__
from exam_monitor.api.router import api_router
from exam_monitor.config import Settings, get_settings
from exam_monitor.services.handler import ConnectionHandler
from exam_monitor.services.registry import SessionRegistry
from exam_monitor.services.sweeper import LivenessSweeper

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.sweeper.start()
    logger.info("Exam monitor running on port %s", app.state.settings.port)
    yield
    await app.state.sweeper.stop()


def create_app(
    settings: Settings | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    """Build the app with its own registry, handler and sweeper."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Exam Monitor",
        description="Tracks which exam sessions loaded the page and which are live over WebSockets.",
        version=__version__,
        lifespan=lifespan,
    )

    registry = SessionRegistry(clock=clock)
    app.state.settings = settings
    app.state.registry = registry
    app.state.connection_handler = ConnectionHandler(
        registry, send_timeout=settings.monitor.send_timeout
    )
    app.state.sweeper = LivenessSweeper(
        registry,
        interval=settings.monitor.sweep_interval,
        visit_expiry=settings.monitor.visit_expiry,
    )

    @app.middleware("http")
    async def permissive_cors(request: Request, call_next):
        # Preflight never reaches the router.
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def not_found_as_text(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return PlainTextResponse("Not found", status_code=404)
        return await http_exception_handler(request, exc)

    app.include_router(api_router)
    return app


app = create_app()
