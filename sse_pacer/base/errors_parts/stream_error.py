"""
Structured stream error exception type.

Every fatal session outcome is raised as a `StreamError`; it always carries
the text that had already been delivered so callers can keep partial output.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class StreamError(Exception):
    """Represents a failed stream session with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable message (the provider's own text for
            upstream errors).
        response_text: Text delivered to the sink before the session failed.
        status_code: HTTP status of the response, when one was received.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    response_text: str = ""
    status_code: Optional[int] = None
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.code.value}: {self.message}"


__all__ = ["StreamError"]
