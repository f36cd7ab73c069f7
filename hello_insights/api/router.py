"""
Hello Insights API v1 Endpoints
===============================
Demo endpoints instrumented with custom events and metrics.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from ..config import Settings
from ..telemetry import Stopwatch, TelemetrySink, get_telemetry, mask_instrumentation_key

router = APIRouter(prefix="/api/v1", tags=["Hello"])

SIMULATED_WORK_SECONDS = 0.01


def get_settings(request: Request) -> Settings:
    """FastAPI dependency: settings resolved at startup."""
    return request.app.state.settings


@router.get("/hello")
def hello(
    settings: Settings = Depends(get_settings),
    telemetry: TelemetrySink = Depends(get_telemetry),
) -> Dict[str, Any]:
    """Greeting with app identity. Emits an event and a response-time metric."""
    timer = Stopwatch()

    telemetry.track_event(
        "hello_endpoint_called",
        {"app_name": settings.app.name, "version": settings.app.version},
    )

    # Simulate some work
    time.sleep(SIMULATED_WORK_SECONDS)

    response = {
        "message": "Ok",
        "app_name": settings.app.name,
        "version": settings.app.version,
        "timestamp": int(time.time()),
    }

    telemetry.track_metric("hello_response_time", timer.elapsed, {"endpoint": "/hello"})
    return response


@router.get("/config")
def get_config(
    settings: Settings = Depends(get_settings),
    telemetry: TelemetrySink = Depends(get_telemetry),
) -> Dict[str, Any]:
    """
    Public view of the running configuration.

    The instrumentation key is masked, and `enabled` reports the sink
    decided at startup rather than whether a connection string is set.
    """
    timer = Stopwatch()

    telemetry.track_event(
        "config_endpoint_accessed",
        {
            "app_name": settings.app.name,
            "version": settings.app.version,
            "debug_mode": "true",
        },
    )

    response = {
        "app": {
            "name": settings.app.name,
            "version": settings.app.version,
        },
        "telemetry": {
            "enabled": telemetry.enabled,
            "instrumentation_key": mask_instrumentation_key(telemetry.instrumentation_key),
        },
    }

    telemetry.track_metric("config_response_time", timer.elapsed, {"endpoint": "/config"})
    return response
