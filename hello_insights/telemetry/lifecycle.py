"""
Telemetry startup decision.

``init_telemetry`` runs once, before the application is served, and
returns the sink every request will share. It never raises: any problem
results in a DisabledSink and a log line.
"""

import logging
from typing import Optional

from applicationinsights.channel import AsynchronousSender

from ..config import TelemetrySettings
from .client import create_client
from .connection import extract_instrumentation_key, mask_instrumentation_key
from .sink import DisabledSink, EnabledSink, TelemetrySink

logger = logging.getLogger(__name__)

ENDPOINT_URL = "https://dc.applicationinsights.azure.com/v2/track"


def init_telemetry(
    descriptor: Optional[str],
    app_version: str = "",
    sender: Optional[AsynchronousSender] = None,
    options: Optional[TelemetrySettings] = None,
) -> TelemetrySink:
    """
    Decide whether telemetry is enabled and build the sink.

    Args:
        descriptor: Connection descriptor (azure connection string)
        app_version: Reported as the application version
        sender: SDK sender; defaults to AsynchronousSender(ENDPOINT_URL)
        options: Queue threshold, batch size and send interval

    Returns:
        EnabledSink bound to the extracted key, or DisabledSink
    """
    if not descriptor:
        logger.warning("Azure connection string not configured, telemetry disabled")
        return DisabledSink()

    instrumentation_key = extract_instrumentation_key(descriptor)
    if not instrumentation_key:
        logger.warning("Could not extract InstrumentationKey from connection string, telemetry disabled")
        return DisabledSink()

    try:
        client = create_client(
            instrumentation_key,
            ENDPOINT_URL,
            app_version=app_version,
            sender=sender,
            options=options,
        )
    except Exception as e:
        logger.error(f"Failed to configure Application Insights, telemetry disabled: {type(e).__name__}")
        logger.debug("Telemetry client construction failed", exc_info=True)
        return DisabledSink()

    logger.info(
        f"Application Insights configured with InstrumentationKey: "
        f"{mask_instrumentation_key(instrumentation_key)}"
    )
    return EnabledSink(client)
