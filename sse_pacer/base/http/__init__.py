"""HTTP transport construction.

Exposes the ``httpx`` client and timeout builders used by stream sessions.
"""

from .client import build_async_client, build_stream_timeout

__all__ = ["build_async_client", "build_stream_timeout"]
