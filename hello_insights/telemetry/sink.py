"""
Telemetry sink capability.

Handlers and middleware depend on a ``TelemetrySink`` and never on a
possibly-missing client: the sink is either ``DisabledSink`` (every call
is a no-op) or ``EnabledSink`` wrapping an Application Insights
``TelemetryClient``. Neither variant raises from its tracking methods.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from applicationinsights import TelemetryClient

from .models import EventRecord, MetricRecord, RequestRecord, TelemetryRecord

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with a ``Z`` suffix, as the SDK stamps envelopes."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


class TelemetrySink(ABC):

    @property
    @abstractmethod
    def enabled(self) -> bool:
        ...

    @property
    def instrumentation_key(self) -> str:
        return ""

    @abstractmethod
    def track(self, record: TelemetryRecord) -> bool:
        """Hand one record off for delivery. Returns False if it was not accepted."""
        ...

    def track_event(self, name: str, properties: Optional[Mapping[str, Any]] = None) -> bool:
        return self.track(EventRecord(name=name, properties=properties or {}))

    def track_metric(
        self,
        name: str,
        value: float,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        return self.track(MetricRecord(name=name, value=value, properties=properties or {}))

    def flush(self, timeout: Optional[float] = None) -> bool:
        return True

    def close(self, timeout: Optional[float] = None) -> bool:
        return True

    def stats(self) -> Dict[str, Any]:
        return {}


class DisabledSink(TelemetrySink):
    """Telemetry off. Builds nothing, sends nothing."""

    @property
    def enabled(self) -> bool:
        return False

    def track(self, record: TelemetryRecord) -> bool:
        return False

    def track_event(self, name: str, properties: Optional[Mapping[str, Any]] = None) -> bool:
        return False

    def track_metric(
        self,
        name: str,
        value: float,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        return False

    def __repr__(self) -> str:
        return "DisabledSink()"


class EnabledSink(TelemetrySink):
    """
    Telemetry on, bound to one SDK client for the process lifetime.

    Tracking only builds an envelope and puts it on the SDK queue; the
    SDK sender thread posts batches in the background. ``flush`` and
    ``close`` drain the queue from the calling thread, bounded by a
    timeout.
    """

    def __init__(self, client: TelemetryClient):
        self._client = client
        self._lock = threading.Lock()
        self._tracked = 0
        self._dropped = 0
        self._closed = False

    @property
    def enabled(self) -> bool:
        return True

    @property
    def client(self) -> TelemetryClient:
        return self._client

    @property
    def instrumentation_key(self) -> str:
        return self._client.context.instrumentation_key

    def track(self, record: TelemetryRecord) -> bool:
        if self._closed:
            self._count(accepted=False)
            return False
        try:
            self._dispatch(record)
        except Exception:
            logger.debug(f"Failed to track {record.kind.value} telemetry", exc_info=True)
            self._count(accepted=False)
            return False
        self._count(accepted=True)
        return True

    def track_event(self, name: str, properties: Optional[Mapping[str, Any]] = None) -> bool:
        try:
            record = EventRecord(name=name, properties=properties or {})
        except Exception:
            logger.debug(f"Failed to build event {name}", exc_info=True)
            self._count(accepted=False)
            return False
        return self.track(record)

    def track_metric(
        self,
        name: str,
        value: float,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        try:
            record = MetricRecord(name=name, value=value, properties=properties or {})
        except Exception:
            logger.debug(f"Failed to build metric {name}", exc_info=True)
            self._count(accepted=False)
            return False
        return self.track(record)

    def _dispatch(self, record: TelemetryRecord) -> None:
        if isinstance(record, RequestRecord):
            self._client.track_request(
                record.name,
                record.url,
                record.success,
                start_time=format_timestamp(record.timestamp),
                duration=int(round(record.duration * 1000)),
                response_code=record.response_code,
                http_method=record.method,
                properties=dict(record.properties),
                request_id=record.id,
            )
        elif isinstance(record, EventRecord):
            self._client.track_event(record.name, properties=dict(record.properties))
        elif isinstance(record, MetricRecord):
            self._client.track_metric(record.name, record.value, properties=dict(record.properties))
        else:
            raise TypeError(f"Unsupported telemetry record: {type(record).__name__}")

    def _count(self, accepted: bool) -> None:
        with self._lock:
            if accepted:
                self._tracked += 1
            else:
                self._dropped += 1

    def _drain(self, timeout: Optional[float]) -> bool:
        """
        Send queued envelopes synchronously until the queue is empty or
        the deadline passes. Batches the sender fails to deliver are put
        back on the queue by the SDK and retried until the deadline.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        queue = self._client.channel.queue
        sender = queue.sender

        while deadline is None or time.monotonic() < deadline:
            batch = []
            while len(batch) < sender.send_buffer_size:
                item = queue.get()
                if not item:
                    break
                batch.append(item)
            if not batch:
                return True
            sender.send(batch)
        return False

    def flush(self, timeout: Optional[float] = None) -> bool:
        return self._drain(timeout)

    def close(self, timeout: Optional[float] = None) -> bool:
        """Stop accepting records, then drain. Returns False if items were left behind."""
        self._closed = True
        return self._drain(timeout)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "tracked": self._tracked,
                "dropped": self._dropped,
                "closed": self._closed,
            }

    def __repr__(self) -> str:
        return f"EnabledSink(client={type(self._client).__name__})"
