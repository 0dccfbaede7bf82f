"""Route parsed event payloads to the scheduler or straight to the sink.

Answer-family chunks are folded through the session's
:class:`~sse_pacer.streaming.delta_reducer.DeltaReducer` and turned into
text items; tool and interactive payloads are paced as structured items;
workflow bookkeeping bypasses pacing; ``error`` payloads are handed back to
the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from ..base.log_support import LogContext
from ..base.logging import log_event
from .animation_queue import ConsumptionScheduler
from .delta_reducer import DeltaReducer, ReductionStep
from .events import ANSWER_ALIASES, STRUCTURED_EVENTS, SSEEvent, UIItem


def _push_answer(step: ReductionStep, scheduler: ConsumptionScheduler) -> None:
    event = SSEEvent.ANSWER.value
    if step.reasoning:
        scheduler.push(UIItem(event, reasoning_text=step.reasoning))
    for char in step.text:
        scheduler.push(UIItem(event, text=char))


def _push_fast_answer(step: ReductionStep, scheduler: ConsumptionScheduler) -> None:
    event = SSEEvent.FAST_ANSWER.value
    if step.reasoning:
        scheduler.push(UIItem(event, reasoning_text=step.reasoning))
    if step.text:
        scheduler.push(UIItem(event, text=step.text))


def dispatch_event(
    event: str,
    payload: Mapping[str, Any],
    *,
    scheduler: ConsumptionScheduler,
    on_message: Callable[[UIItem], None],
    reducer: DeltaReducer,
    logger: Optional[logging.Logger] = None,
    ctx: Optional[LogContext] = None,
) -> Optional[Mapping[str, Any]]:
    """Handle one decoded payload of SSE event ``event``.

    Returns:
        The payload itself for ``error`` events, else ``None``.
    """
    if event in ANSWER_ALIASES:
        _push_answer(reducer.apply(payload), scheduler)
    elif event == SSEEvent.FAST_ANSWER.value:
        _push_fast_answer(reducer.apply(payload), scheduler)
    elif event in STRUCTURED_EVENTS:
        scheduler.push(UIItem(event, payload=dict(payload)))
    elif event == SSEEvent.FLOW_NODE_RESPONSE.value:
        on_message(UIItem(event, payload={"nodeResponse": dict(payload)}))
    elif event == SSEEvent.UPDATE_VARIABLES.value:
        on_message(UIItem(event, payload={"variables": dict(payload)}))
    elif event in (SSEEvent.FLOW_NODE_STATUS.value, SSEEvent.WORKFLOW_DURATION.value):
        on_message(UIItem(event, payload=dict(payload)))
    elif event == SSEEvent.ERROR.value:
        return payload
    elif logger is not None:
        log_event(logger, "stream.event.ignored", ctx, level=logging.DEBUG, sse_event=event)
    return None


def error_message_from_payload(payload: Any, fallback: str) -> str:
    """Pick a human-readable message out of an upstream error body.

    Looks at ``error.message``, ``error`` (string), ``message``, ``statusText``
    and ``msg`` in that order; a non-empty string payload is used as-is.
    """
    if isinstance(payload, str):
        return payload.strip() or fallback
    if not isinstance(payload, Mapping):
        return fallback
    err = payload.get("error")
    candidates: Dict[str, Any] = {
        "error.message": err.get("message") if isinstance(err, Mapping) else None,
        "error": err if isinstance(err, str) else None,
        "message": payload.get("message"),
        "statusText": payload.get("statusText"),
        "msg": payload.get("msg"),
    }
    for value in candidates.values():
        if isinstance(value, str) and value.strip():
            return value.strip()
    return fallback


__all__ = ["dispatch_event", "error_message_from_payload"]
