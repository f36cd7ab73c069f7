"""
Hello Insights exception hierarchy.

Telemetry failures are contained inside the telemetry subsystem;
only ConfigError is allowed to reach the process entry point.
"""

from typing import Optional


class HelloInsightsError(Exception):
    """Base exception for the service."""
    pass


class ConfigError(HelloInsightsError):
    """Configuration file missing, unreadable or invalid."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
