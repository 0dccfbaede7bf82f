"""sse_pacer.config.defaults
=========================

Central place for the small, stable default values used across the
streaming pipeline. These can be overridden via environment variables, an
external config file, or in-code overrides (see ``sse_pacer.config``).

This module intentionally imports nothing from the rest of the package so
that any layer may depend on it without cycles.
"""

from __future__ import annotations

# ---- Consumption scheduler ----
# One tick per rendering frame at 60 Hz.
FRAME_INTERVAL_SECONDS = 1 / 60
# Each tick flushes roughly 1/30th of the outstanding backlog (at least one item).
BATCH_DIVISOR = 30

# ---- Chunk assembler ----
# Pending JSON buffer cap (characters) before eviction kicks in.
PENDING_BUFFER_CAP = 200_000
# Trailing window kept when the cap is exceeded without a complete object.
PENDING_BUFFER_KEEP = 50_000

# ---- Wire protocol ----
DONE_SENTINEL = "[DONE]"
EVENT_STREAM_CONTENT_TYPE = "text/event-stream"
PLAIN_TEXT_CONTENT_TYPE = "text/plain"
JSON_CONTENT_TYPE = "application/json"
DEFAULT_IMAGE_MIME = "image/png"

# ---- User-facing fallback messages ----
MSG_UNEXPECTED_RESPONSE = "Unexpected response"
MSG_REQUEST_FAILED = "Request failed"
MSG_STREAM_ERROR = "Stream response error"
MSG_STREAM_INTERRUPTED = "Stream interrupted unexpectedly"
MSG_STREAM_UNPARSEABLE = "Stream parse failure: upstream returned non-standard SSE data"


__all__ = [
    "FRAME_INTERVAL_SECONDS",
    "BATCH_DIVISOR",
    "PENDING_BUFFER_CAP",
    "PENDING_BUFFER_KEEP",
    "DONE_SENTINEL",
    "EVENT_STREAM_CONTENT_TYPE",
    "PLAIN_TEXT_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "DEFAULT_IMAGE_MIME",
    "MSG_UNEXPECTED_RESPONSE",
    "MSG_REQUEST_FAILED",
    "MSG_STREAM_ERROR",
    "MSG_STREAM_INTERRUPTED",
    "MSG_STREAM_UNPARSEABLE",
]
