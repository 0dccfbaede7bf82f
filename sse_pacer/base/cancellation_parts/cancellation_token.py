"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class that plays the role of a session's
abort handle. Besides polling (``cancelled`` / ``raise_if_cancelled``), the
token notifies registered callbacks so a transport blocked on a read can be
interrupted the moment cancellation is requested.
"""

from __future__ import annotations

from contextlib import suppress
from threading import Lock
from typing import Callable, List, Optional

from .state import State
from .cancelled_error import CancelledError

CancelCallback = Callable[[Optional[str]], None]


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Thread-safe for basic ``cancel`` + ``raise_if_cancelled`` usage. Child tokens
    inherit cancellation when the parent is cancelled. Callbacks registered via
    :meth:`add_callback` run once, on the cancelling thread, after the state
    flips; a callback registered after cancellation runs immediately.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: List[CancelCallback] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation, notify callbacks and cascade to children.

        Only the first call has an effect; later reasons are ignored.
        """
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            children = list(self._children)
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            # A failing listener must not prevent the others from running.
            with suppress(Exception):
                callback(reason)
        for child in children:
            child.cancel(reason)

    def add_callback(self, callback: CancelCallback) -> Callable[[], None]:
        """Register ``callback(reason)`` to run on cancellation.

        Returns a function that unregisters the callback; calling it after the
        callback already ran is harmless.
        """
        with self._lock:
            run_now = self._state.cancelled
            if not run_now:
                self._callbacks.append(callback)
        if run_now:
            callback(self._state.reason)

        def _remove() -> None:
            with self._lock, suppress(ValueError):
                self._callbacks.remove(callback)

        return _remove

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
        if should_cancel:
            token.cancel(reason)
        return token

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def child(self) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, callbacks={len(self._callbacks)})"
        )


__all__ = ["CancellationToken"]
