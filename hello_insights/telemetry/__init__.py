"""
Hello Insights Telemetry
Request traces, custom events and custom metrics for Application Insights.

Principles:
- Decided once at startup (enabled or disabled, never changes)
- Fire-and-forget from the request path (delivery by the applicationinsights SDK)
- Delivery failures never reach the HTTP caller
- The full instrumentation key is never logged
"""

from .connection import extract_instrumentation_key, mask_instrumentation_key
from .models import (
    TelemetryKind,
    TelemetryRecord,
    RequestRecord,
    EventRecord,
    MetricRecord,
)
from .client import create_client
from .sink import TelemetrySink, DisabledSink, EnabledSink
from .lifecycle import ENDPOINT_URL, init_telemetry
from .middleware import RequestTelemetryMiddleware
from .instrumentation import Stopwatch, get_telemetry

__all__ = [
    "extract_instrumentation_key",
    "mask_instrumentation_key",
    "TelemetryKind",
    "TelemetryRecord",
    "RequestRecord",
    "EventRecord",
    "MetricRecord",
    "create_client",
    "TelemetrySink",
    "DisabledSink",
    "EnabledSink",
    "ENDPOINT_URL",
    "init_telemetry",
    "RequestTelemetryMiddleware",
    "Stopwatch",
    "get_telemetry",
]
