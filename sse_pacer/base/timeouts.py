"""Unified timeout utilities for stream sessions.

This module centralizes the timeout values used by sessions and exposes the
connect deadline helper that turns an expired timer into a cancellation of the
session's abort handle.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use (and again whenever the relevant variables change). Supported
    environment variables (all optional):
        SSE_PACER_STREAM_TIMEOUT_SECONDS
        SSE_PACER_REQUEST_TIMEOUT_SECONDS

arm_deadline(loop, token, seconds)
    One-shot timer cancelling ``token`` with reason ``"Timeout"``. Armed when a
    session starts connecting and cleared as soon as the response opens; a live
    stream is its own liveness signal.
"""
from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass

from .cancellation import CancellationToken

TIMEOUT_REASON = "Timeout"

_ENV_STREAM = "SSE_PACER_STREAM_TIMEOUT_SECONDS"
_ENV_REQUEST = "SSE_PACER_REQUEST_TIMEOUT_SECONDS"


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        stream_timeout_seconds: Deadline for a streaming request to open.
        request_timeout_seconds: Deadline for plain request/response calls made
            by collaborators; sessions do not use it.

    The read inactivity watchdog lives in
    :class:`sse_pacer.config.StreamConfig` (``idle_timeout_seconds``).
    """

    stream_timeout_seconds: float = 60.0
    request_timeout_seconds: float = 30.0


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read a positive float from the environment, else return ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached `TimeoutConfig` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(n, "") for n in (_ENV_STREAM, _ENV_REQUEST))
    if _CACHED is not None and guard == _ENV_GUARD:
        return _CACHED
    _CACHED = TimeoutConfig(
        stream_timeout_seconds=_parse_env_float(_ENV_STREAM, 60.0),
        request_timeout_seconds=_parse_env_float(_ENV_REQUEST, 30.0),
    )
    _ENV_GUARD = guard
    return _CACHED


def arm_deadline(
    loop: asyncio.AbstractEventLoop,
    token: CancellationToken,
    seconds: float,
) -> asyncio.TimerHandle | None:
    """Cancel ``token`` with :data:`TIMEOUT_REASON` after ``seconds``.

    Returns the timer handle so the caller can ``cancel()`` it once the
    connection opens, or ``None`` when ``seconds`` <= 0 (no deadline).
    """
    if seconds <= 0:
        return None
    return loop.call_later(seconds, token.cancel, TIMEOUT_REASON)


__all__ = [
    "TIMEOUT_REASON",
    "TimeoutConfig",
    "get_timeout_config",
    "arm_deadline",
]
