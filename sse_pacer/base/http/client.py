"""HTTP client construction for stream sessions.

Purpose:
    Build the ``httpx.AsyncClient`` a session uses when the caller does not
    inject one. Sessions own their client for the lifetime of one request, so
    nothing here is pooled or shared across sessions.

Timeout strategy:
    - ``connect``/``write``/``pool`` phases use the session's stream timeout;
      the session additionally arms its own deadline on the abort handle.
    - ``read`` is the optional idle watchdog. ``None`` means a quiet but open
      stream is never timed out by the transport.
"""

from __future__ import annotations

from typing import Optional

import httpx

from ..timeouts import get_timeout_config


def build_stream_timeout(
    connect_seconds: Optional[float] = None,
    idle_seconds: Optional[float] = None,
) -> httpx.Timeout:
    """Return the ``httpx.Timeout`` for a streaming request."""
    cfg = get_timeout_config()
    connect = connect_seconds if connect_seconds is not None else cfg.stream_timeout_seconds
    return httpx.Timeout(connect, read=idle_seconds)


def build_async_client(
    connect_seconds: Optional[float] = None,
    idle_seconds: Optional[float] = None,
) -> httpx.AsyncClient:
    """Create a fresh ``httpx.AsyncClient`` for one streaming session.

    The caller owns the client and must close it (``async with`` or
    ``await client.aclose()``).
    """
    return httpx.AsyncClient(timeout=build_stream_timeout(connect_seconds, idle_seconds))


__all__ = ["build_async_client", "build_stream_timeout"]
