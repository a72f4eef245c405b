"""API Dispatch — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - CORS is negotiated by the dispatcher, not by middleware
    - Logging configured on startup via the lifespan context manager
    - create_app() takes every collaborator explicitly; the module-level app is a demo wiring
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api_dispatch import __version__
from api_dispatch.api.error_handlers import register_error_handlers
from api_dispatch.api.routes import dispatch, health
from api_dispatch.config import Settings, get_settings
from api_dispatch.core.boundary_protocols import AuthorizationHook, LogSink, allow_all
from api_dispatch.infrastructure.observability import setup_logging
from api_dispatch.services.handler_registry import HandlerRegistry
from api_dispatch.services.request_dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)


def create_app(
    registry: HandlerRegistry,
    authorize: AuthorizationHook = allow_all,
    settings: Settings | None = None,
    log_sink: LogSink | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        logger.info(f"API Dispatch started with {len(registry)} action(s)")
        yield
        logger.info("API Dispatch shutting down")

    app = FastAPI(title="API Dispatch", version=__version__, lifespan=lifespan)
    dispatcher = RequestDispatcher.from_settings(
        registry, settings, authorize, log_sink,
    )
    app.state.dispatcher = dispatcher

    app.include_router(health.router)
    app.include_router(
        dispatch.build_dispatch_router(dispatcher, settings.api_prefix),
    )
    register_error_handlers(app)
    return app


def _build_default_registry() -> HandlerRegistry:
    registry = HandlerRegistry()

    @registry.action(whitelist=True)
    def ping():
        return {"pong": True}

    return registry


app = create_app(_build_default_registry())
