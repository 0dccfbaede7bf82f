"""Unit tests for cooperative cancellation primitives.

Covers idempotent cancel, cascade to children, late link of child after
parent cancel, raise_if_cancelled, and cancellation callbacks.
"""
from __future__ import annotations

import pytest

from sse_pacer.base.cancellation import (
    CancellationToken,
    CancelledError,
)


def test_cancel_cascades_to_children_and_is_idempotent():
    parent = CancellationToken()
    child1 = parent.child()
    child2 = parent.child()

    parent.cancel(reason="stop")
    # idempotent second call
    parent.cancel(reason="ignored")

    assert parent.cancelled is True and parent.reason == "stop"  # nosec B101 - pytest assert in tests
    assert child1.cancelled is True and child1.reason == "stop"  # nosec B101 - pytest assert in tests
    assert child2.cancelled is True and child2.reason == "stop"  # nosec B101 - pytest assert in tests


def test_link_child_after_parent_cancel_immediately_cancels_child():
    parent = CancellationToken()
    parent.cancel("done")
    late_child = CancellationToken(parent=parent)
    assert late_child.cancelled is True and late_child.reason == "done"  # nosec B101 - pytest assert in tests


def test_raise_if_cancelled_carries_reason():
    token = CancellationToken()
    token.raise_if_cancelled()  # no-op while live
    token.cancel("terminate")
    with pytest.raises(CancelledError) as exc_info:
        token.raise_if_cancelled()
    assert exc_info.value.reason == "terminate"  # nosec B101


def test_callbacks_run_once_with_reason():
    token = CancellationToken()
    seen: list[str | None] = []
    token.add_callback(seen.append)

    token.cancel("user")
    token.cancel("again")

    assert seen == ["user"]  # nosec B101


def test_callback_added_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel("early")
    seen: list[str | None] = []
    token.add_callback(seen.append)
    assert seen == ["early"]  # nosec B101


def test_removed_callback_is_not_called():
    token = CancellationToken()
    seen: list[str | None] = []
    remove = token.add_callback(seen.append)
    remove()
    remove()  # harmless twice
    token.cancel("x")
    assert seen == []  # nosec B101


def test_failing_callback_does_not_block_others():
    token = CancellationToken()
    seen: list[str | None] = []

    def _boom(_reason):
        raise RuntimeError("listener failure")

    token.add_callback(_boom)
    token.add_callback(seen.append)
    token.cancel("go")
    assert seen == ["go"]  # nosec B101
