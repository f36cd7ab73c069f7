"""
Connection descriptor parsing.

A descriptor is a ``;``-separated list of ``Key=Value`` pairs, e.g.
``InstrumentationKey=00000000-...;IngestionEndpoint=https://...``.
"""

from typing import Optional

INSTRUMENTATION_KEY_PREFIX = "InstrumentationKey="
MASK_LENGTH = 8


def extract_instrumentation_key(descriptor: Optional[str]) -> str:
    """
    Return the value of the first segment starting with ``InstrumentationKey=``.

    The value is returned verbatim (no trimming). Returns "" when the
    descriptor is empty or has no such segment.
    """
    if not descriptor:
        return ""
    for segment in descriptor.split(";"):
        if segment.startswith(INSTRUMENTATION_KEY_PREFIX):
            return segment[len(INSTRUMENTATION_KEY_PREFIX):]
    return ""


def mask_instrumentation_key(key: str) -> str:
    """
    First 8 characters of the key plus an ellipsis. Safe to log.

    Keys of 8 characters or fewer would be shown whole, so they are
    masked completely.
    """
    if not key:
        return ""
    if len(key) <= MASK_LENGTH:
        return "..."
    return key[:MASK_LENGTH] + "..."
