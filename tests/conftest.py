"""
Shared fixtures for Hello Insights tests.
"""

import threading
from typing import Any, Dict, List, Optional

import pytest
from applicationinsights.channel import AsynchronousSender

from hello_insights.config import (
    AppSettings,
    AzureSettings,
    Settings,
    TelemetrySettings,
)
from hello_insights.telemetry import (
    EventRecord,
    MetricRecord,
    RequestRecord,
    TelemetryRecord,
    TelemetrySink,
)

TEST_KEY = "ABCDEFGH12345"
TEST_DESCRIPTOR = f"InstrumentationKey={TEST_KEY};IngestionEndpoint=https://example.invalid/"


class RecordingSink(TelemetrySink):
    """Enabled sink that keeps every record in memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self.records: List[TelemetryRecord] = []
        self.closed = False

    @property
    def enabled(self) -> bool:
        return True

    @property
    def instrumentation_key(self) -> str:
        return TEST_KEY

    def track(self, record: TelemetryRecord) -> bool:
        with self._lock:
            self.records.append(record)
        return True

    def close(self, timeout: Optional[float] = None) -> bool:
        self.closed = True
        return True

    def of_type(self, cls) -> List[TelemetryRecord]:
        with self._lock:
            return [r for r in self.records if isinstance(r, cls)]

    @property
    def requests(self) -> List[RequestRecord]:
        return self.of_type(RequestRecord)

    @property
    def events(self) -> List[EventRecord]:
        return self.of_type(EventRecord)

    @property
    def metrics(self) -> List[MetricRecord]:
        return self.of_type(MetricRecord)


class FakeSender(AsynchronousSender):
    """
    applicationinsights sender that keeps envelopes in memory.

    No background thread is started, so delivery only happens when the
    sink drains the queue. With ``fail`` set every batch is put back on
    the queue, the way the SDK handles a rejected POST.
    """

    def __init__(self, fail: bool = False):
        super().__init__("https://example.invalid/v2/track")
        self._lock = threading.Lock()
        self.batches: List[List[Dict[str, Any]]] = []
        self.attempts = 0
        self.fail = fail

    def start(self):
        pass

    def send(self, data_to_send):
        with self._lock:
            self.attempts += 1
        if self.fail:
            for item in data_to_send:
                self.queue.put(item)
            return
        with self._lock:
            self.batches.append([item.write() for item in data_to_send])

    @property
    def envelopes(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [e for batch in self.batches for e in batch]

    @property
    def calls(self) -> int:
        with self._lock:
            return self.attempts


@pytest.fixture
def settings():
    return Settings(
        app=AppSettings(name="hello-insights-test", version="9.9.9"),
        azure=AzureSettings(connection_string=TEST_DESCRIPTOR),
        telemetry=TelemetrySettings(flush_interval=0.05, flush_timeout=2.0),
    )


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def fake_sender():
    return FakeSender()
