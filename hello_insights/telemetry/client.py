"""
Application Insights client construction.

Envelope encoding, queueing and background delivery are done by
Microsoft's ``applicationinsights`` SDK. This module only wires the SDK
channel to the ingestion endpoint with the service's tuning.
"""

from typing import Optional

from applicationinsights import TelemetryClient
from applicationinsights.channel import (
    AsynchronousQueue,
    AsynchronousSender,
    TelemetryChannel,
    TelemetryContext,
)

from ..config import TelemetrySettings


def create_client(
    instrumentation_key: str,
    endpoint_url: str,
    app_version: str = "",
    sender: Optional[AsynchronousSender] = None,
    options: Optional[TelemetrySettings] = None,
) -> TelemetryClient:
    """
    Build an SDK client that delivers from a background sender thread.

    Args:
        instrumentation_key: Key stamped on every envelope
        endpoint_url: Track endpoint the default sender posts to
        app_version: Reported as the application version
        sender: Replaces the default AsynchronousSender(endpoint_url)
        options: Queue threshold, batch size and send interval

    Returns:
        applicationinsights.TelemetryClient
    """
    options = options or TelemetrySettings()

    sender = sender or AsynchronousSender(endpoint_url)
    sender.send_buffer_size = options.batch_size
    sender.send_interval = options.flush_interval

    # the SDK queue is unbounded; reaching the threshold wakes the sender
    queue = AsynchronousQueue(sender)
    queue.max_queue_length = options.queue_size

    client = TelemetryClient(instrumentation_key, TelemetryChannel(TelemetryContext(), queue))
    if app_version:
        client.context.application.ver = app_version
    return client
