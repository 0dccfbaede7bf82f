"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose the abort handle used by stream sessions via the canonical
``sse_pacer.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts``.

Notes
-----
- ``CancellationToken`` is the externally owned abort handle. The session
  never decides cancellation policy; it reacts to the token and may cancel
  it itself when the connect deadline expires.
- ``CancelledError`` is raised by operations that observe a cancellation
  request.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
