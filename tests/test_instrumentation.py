"""
Tests for sink variants and handler-side helpers.
"""

import time
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

from hello_insights.telemetry import (
    DisabledSink,
    EnabledSink,
    EventRecord,
    RequestRecord,
    Stopwatch,
    get_telemetry,
)
from hello_insights.telemetry.sink import format_timestamp

from conftest import RecordingSink


class TestStopwatch:

    def test_elapsed_increases(self):
        timer = Stopwatch()
        time.sleep(0.01)
        first = timer.elapsed
        assert first >= 0.01
        assert timer.elapsed >= first


class TestGetTelemetry:

    def test_returns_app_sink(self):
        sink = RecordingSink()
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(telemetry=sink)))
        assert get_telemetry(request) is sink

    def test_defaults_to_disabled(self):
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))
        assert isinstance(get_telemetry(request), DisabledSink)


class TestDisabledSink:

    def test_all_calls_are_noops(self):
        sink = DisabledSink()
        assert sink.enabled is False
        assert sink.track(EventRecord(name="e")) is False
        assert sink.track_event("e", {"a": 1}) is False
        assert sink.track_metric("m", 1.0) is False
        assert sink.flush(1.0) is True
        assert sink.close(1.0) is True
        assert sink.stats() == {}
        assert sink.instrumentation_key == ""


class TestEnabledSink:

    def test_event_and_metric_go_to_sdk_client(self):
        client = MagicMock()
        sink = EnabledSink(client)

        assert sink.track_event("hello", {"n": 1})
        assert sink.track_metric("latency", 0.5, {"endpoint": "/hello"})

        client.track_event.assert_called_once_with("hello", properties={"n": "1"})
        client.track_metric.assert_called_once_with("latency", 0.5, properties={"endpoint": "/hello"})
        assert sink.stats()["tracked"] == 2

    def test_request_record_mapped_to_track_request(self):
        client = MagicMock()
        sink = EnabledSink(client)
        record = RequestRecord.build(
            method="GET",
            url="http://testserver/api/v1/hello",
            duration=0.015,
            status_code=200,
            operation="/api/v1/hello",
            properties={"route": "/api/v1/hello"},
            timestamp=datetime(2024, 5, 1, 12, 30, 0, 123456, tzinfo=timezone.utc),
        )

        assert sink.track(record)

        client.track_request.assert_called_once_with(
            "GET /api/v1/hello",
            "http://testserver/api/v1/hello",
            True,
            start_time="2024-05-01T12:30:00.123456Z",
            duration=15,
            response_code="200",
            http_method="GET",
            properties={"route": "/api/v1/hello"},
            request_id=record.id,
        )

    def test_client_error_is_contained(self):
        client = MagicMock()
        client.track_event.side_effect = RuntimeError("queue exploded")
        sink = EnabledSink(client)
        assert sink.track_event("hello") is False
        assert sink.stats()["dropped"] == 1

    def test_invalid_metric_value_is_contained(self):
        client = MagicMock()
        sink = EnabledSink(client)
        assert sink.track_metric("latency", "not-a-number") is False
        client.track_metric.assert_not_called()

    def test_instrumentation_key_from_client_context(self):
        client = MagicMock()
        client.context.instrumentation_key = "KEY"
        assert EnabledSink(client).instrumentation_key == "KEY"


class TestFormatTimestamp:

    def test_aware_timestamp_converted_to_utc(self):
        value = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2024-05-01T12:30:00Z"

    def test_naive_timestamp_taken_as_utc(self):
        assert format_timestamp(datetime(2024, 5, 1, 12, 30)) == "2024-05-01T12:30:00Z"
