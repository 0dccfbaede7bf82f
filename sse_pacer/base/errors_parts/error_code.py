"""
Normalized stream error codes (taxonomy).

Values are lowercase snake_case and are considered a stable public contract
for logging and for callers deciding how to present a failed session.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories.

    ``TRANSPORT``  network failure or a non-2xx status before streaming began.
    ``PROTOCOL``   a record that exhausted the framing/JSON repair heuristics.
    ``UPSTREAM``   an explicit ``error`` event or inline error body.
    ``TIMEOUT``    the connect deadline (or idle watchdog) expired.
    ``CANCELLED``  the caller cancelled the abort handle.
    """

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    UPSTREAM = "upstream"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
