"""
Telemetry Records
Immutable pydantic models handed to the telemetry client.
"""

from enum import Enum
from typing import Any, ClassVar, Dict, Optional
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TelemetryKind(str, Enum):
    """Record variants understood by the backend."""
    REQUEST = "Request"
    EVENT = "Event"
    METRIC = "Metric"


class TelemetryRecord(BaseModel):
    """Common fields. Properties are always a str -> str mapping."""
    kind: ClassVar[TelemetryKind]

    properties: Dict[str, str] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("properties", mode="before")
    @classmethod
    def stringify_properties(cls, v: Any) -> Dict[str, str]:
        if v is None:
            return {}
        return {str(key): "" if value is None else str(value) for key, value in dict(v).items()}

    class Config:
        frozen = True


class RequestRecord(TelemetryRecord):
    """One inbound HTTP request as observed by the middleware."""
    kind: ClassVar[TelemetryKind] = TelemetryKind.REQUEST

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:16])
    name: str
    method: str
    url: str
    duration: float = Field(ge=0, description="Seconds")
    response_code: str
    success: bool

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        duration: float,
        status_code: int,
        operation: str = "",
        properties: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> "RequestRecord":
        """Derive name/success. ``operation`` is the route template or path."""
        data: Dict[str, Any] = {
            "name": f"{method} {operation or url}",
            "method": method,
            "url": url,
            "duration": max(duration, 0.0),
            "response_code": str(status_code),
            "success": status_code < 400,
            "properties": properties or {},
        }
        if timestamp is not None:
            data["timestamp"] = timestamp
        return cls(**data)


class EventRecord(TelemetryRecord):
    """Custom named event."""
    kind: ClassVar[TelemetryKind] = TelemetryKind.EVENT

    name: str


class MetricRecord(TelemetryRecord):
    """Single measurement of a named metric."""
    kind: ClassVar[TelemetryKind] = TelemetryKind.METRIC

    name: str
    value: float
