"""Mutable per-session bookkeeping owned by :class:`StreamSession`."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..base.errors import ErrorCode


class SessionPhase(str, Enum):
    OPENING = "opening"
    STREAMING = "streaming"
    CLOSING = "closing"
    SETTLED = "settled"


@dataclass
class SessionState:
    """Error and lifecycle flags for one session.

    The first recorded error wins; later failures (typically knock-on effects
    of the first) are not allowed to mask it.
    """

    phase: SessionPhase = SessionPhase.OPENING
    error_message: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    status_code: Optional[int] = None
    finished: bool = False
    response_text: str = ""

    @property
    def failed(self) -> bool:
        return self.error_message is not None

    def record_error(self, message: str, code: ErrorCode, status_code: Optional[int] = None) -> bool:
        """Record a failure; return ``False`` if one was already recorded."""
        if self.failed:
            return False
        self.error_message = message
        self.error_code = code
        self.status_code = status_code
        return True


__all__ = ["SessionPhase", "SessionState"]
