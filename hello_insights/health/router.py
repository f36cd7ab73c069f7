"""
Health Check Endpoint
=====================
Liveness plus the state of the telemetry pipeline.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..api.router import get_settings
from ..config import Settings
from ..telemetry import TelemetrySink, get_telemetry

router = APIRouter(tags=["Health"])


@router.get("/health")
def health(
    settings: Settings = Depends(get_settings),
    telemetry: TelemetrySink = Depends(get_telemetry),
):
    """
    Always 200 while the process serves requests.
    Telemetry counters are informational only.
    """
    status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "app_name": settings.app.name,
        "version": settings.app.version,
        "telemetry": {"enabled": telemetry.enabled},
    }
    if telemetry.enabled:
        status["telemetry"].update(telemetry.stats())
    return status
