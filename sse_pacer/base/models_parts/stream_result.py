"""Settle value of a stream session that did not fail."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .completion_result import CompletionResult
from .session_metrics import SessionMetrics


@dataclass
class StreamResult:
    """Outcome of a successful or caller-cancelled session.

    Attributes:
        response_text: Concatenation of every text item delivered to the sink.
        completion: Folded view of the OpenAI-style chunks seen on the stream.
        cancelled: ``True`` when the caller cancelled the abort handle; the
            items buffered at that moment were still delivered.
        cancel_reason: Reason passed to ``CancellationToken.cancel``.
        metrics: Delivery metrics for the session.
    """

    response_text: str
    completion: CompletionResult = field(default_factory=CompletionResult)
    cancelled: bool = False
    cancel_reason: Optional[str] = None
    metrics: SessionMetrics = field(default_factory=SessionMetrics)


__all__ = ["StreamResult"]
