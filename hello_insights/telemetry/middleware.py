"""
Request Telemetry Middleware
============================

Times every inbound request and tracks one RequestRecord per call.

The timer stops when the last body chunk has been sent, so streamed
responses are measured in full.
"""

import logging
import time
from datetime import datetime, timezone

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .models import RequestRecord
from .sink import TelemetrySink

logger = logging.getLogger(__name__)


def route_template(request: Request) -> str:
    """Matched route path (e.g. ``/api/v1/items/{id}``), "" when nothing matched."""
    route = request.scope.get("route")
    return getattr(route, "path", "") or ""


class RequestTelemetryMiddleware:
    """
    Measures the whole downstream chain, handler instrumentation included.

    Exceptions the app did not turn into a response propagate untouched
    and are not tracked.
    """

    def __init__(self, app: ASGIApp, sink: TelemetrySink, app_version: str = ""):
        self.app = app
        self.sink = sink
        self.app_version = app_version

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.sink.enabled:
            await self.app(scope, receive, send)
            return

        started_at = datetime.now(timezone.utc)
        start_time = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                self._track(scope, status_code, time.perf_counter() - start_time, started_at)

        await self.app(scope, receive, send_wrapper)

    def _track(self, scope: Scope, status_code: int, duration: float, started_at: datetime) -> None:
        try:
            request = Request(scope)
            route = route_template(request)
            record = RequestRecord.build(
                method=request.method,
                url=str(request.url),
                duration=duration,
                status_code=status_code,
                operation=route or request.url.path,
                properties={
                    "route": route,
                    "user_agent": request.headers.get("user-agent", ""),
                    "app_version": self.app_version,
                },
                timestamp=started_at,
            )
            self.sink.track(record)
        except Exception:
            logger.debug("Failed to track request telemetry", exc_info=True)
