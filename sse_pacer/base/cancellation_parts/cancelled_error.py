"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
of a stream session. Kept isolated to satisfy one-class-per-file policy.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when a session observes its abort handle being cancelled.

    Distinct from :class:`asyncio.CancelledError`: this one carries the
    cancel reason (for example ``"Timeout"``) and is never raised by the
    event loop itself.
    """

    @property
    def reason(self) -> str:
        return self.args[0] if self.args else "operation cancelled"


__all__ = ["CancelledError"]
