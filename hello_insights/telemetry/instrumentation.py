"""
Handler-side instrumentation helpers.

Usage:
    @router.get("/hello")
    def hello(telemetry: TelemetrySink = Depends(get_telemetry)):
        timer = Stopwatch()
        telemetry.track_event("hello_endpoint_called", {...})
        ...
        telemetry.track_metric("hello_response_time", timer.elapsed, {...})
"""

import time

from fastapi import Request

from .sink import DisabledSink, TelemetrySink

_DISABLED = DisabledSink()


class Stopwatch:
    """Handler-local timer, independent of the request middleware's."""

    def __init__(self):
        self._start = time.perf_counter()

    @property
    def elapsed(self) -> float:
        """Seconds since construction."""
        return time.perf_counter() - self._start


def get_telemetry(request: Request) -> TelemetrySink:
    """FastAPI dependency: the sink built at startup (DisabledSink if none)."""
    return getattr(request.app.state, "telemetry", None) or _DISABLED
