"""Per-session delivery metrics."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class SessionMetrics:
    """Collected metrics for a single stream session.

    Fields:
      emitted: items delivered to the ``on_message`` sink (paced and passthrough)
      time_to_first_item_ms: delay between session start and first delivery
      total_duration_ms: wall time from start to settle
      tokens: last usage mapping reported upstream (prompt/completion/total)
    """

    emitted: int = 0
    time_to_first_item_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    tokens: Optional[Dict[str, Any]] = None


__all__ = ["SessionMetrics"]
