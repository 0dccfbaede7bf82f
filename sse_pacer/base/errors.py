"""Unified stream error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``sse_pacer.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.stream_error import StreamError
from .errors_parts.classification import classify_exception, classify_status

__all__ = ["ErrorCode", "StreamError", "classify_exception", "classify_status"]
