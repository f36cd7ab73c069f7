"""Liveness and telemetry status"""

from .router import router as health_router

__all__ = ["health_router"]
