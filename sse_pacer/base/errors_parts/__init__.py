"""Errors parts package public surface.

Prefer importing from `sse_pacer.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .stream_error import StreamError
from .classification import classify_exception, classify_status

__all__ = ["ErrorCode", "StreamError", "classify_exception", "classify_status"]
