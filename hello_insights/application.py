"""
Application factory.

The telemetry sink is built here, once, before the returned app is handed
to a server, and is only read afterwards. On shutdown the lifespan gives
the telemetry queue ``telemetry.flush_timeout`` seconds to drain.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from .api import api_router
from .config import Settings, load_settings
from .health import health_router
from .telemetry import RequestTelemetryMiddleware, TelemetrySink, init_telemetry

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    sink: Optional[TelemetrySink] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Resolved settings (loaded from config.yml when omitted)
        sink: Telemetry sink (built from settings.azure.connection_string when omitted)
    """
    settings = settings or load_settings()
    if sink is None:
        sink = init_telemetry(
            settings.azure.connection_string,
            app_version=settings.app.version,
            options=settings.telemetry,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if sink.enabled:
            drained = await run_in_threadpool(sink.close, settings.telemetry.flush_timeout)
            if drained:
                logger.info("Telemetry flushed on shutdown")
            else:
                logger.warning(
                    f"Telemetry not fully flushed within {settings.telemetry.flush_timeout}s, "
                    f"pending items abandoned"
                )

    app = FastAPI(
        title=settings.app.name,
        description="Demo API instrumented with Application Insights telemetry",
        version=settings.app.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.telemetry = sink

    app.add_middleware(
        RequestTelemetryMiddleware,
        sink=sink,
        app_version=settings.app.version,
    )
    app.include_router(api_router)
    app.include_router(health_router)

    return app
