"""Event names and the item type delivered to ``on_message`` sinks."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class SSEEvent(str, Enum):
    ANSWER = "answer"
    FAST_ANSWER = "fastAnswer"
    TOOL_CALL = "toolCall"
    TOOL_PARAMS = "toolParams"
    TOOL_RESPONSE = "toolResponse"
    INTERACTIVE = "interactive"
    ERROR = "error"
    FLOW_NODE_RESPONSE = "flowNodeResponse"
    FLOW_NODE_STATUS = "flowNodeStatus"
    WORKFLOW_DURATION = "workflowDuration"
    UPDATE_VARIABLES = "updateVariables"


class ItemKind(str, Enum):
    """How an item travels to the sink."""

    TEXT = "text"
    STRUCTURED = "structured"
    PASSTHROUGH = "passthrough"


# Sets hold the plain string values; enum members hash by name.
TEXT_EVENTS = frozenset({SSEEvent.ANSWER.value, SSEEvent.FAST_ANSWER.value})
STRUCTURED_EVENTS = frozenset(
    {
        SSEEvent.TOOL_CALL.value,
        SSEEvent.TOOL_PARAMS.value,
        SSEEvent.TOOL_RESPONSE.value,
        SSEEvent.INTERACTIVE.value,
    }
)
PASSTHROUGH_EVENTS = frozenset(
    {
        SSEEvent.FLOW_NODE_RESPONSE.value,
        SSEEvent.FLOW_NODE_STATUS.value,
        SSEEvent.WORKFLOW_DURATION.value,
        SSEEvent.UPDATE_VARIABLES.value,
    }
)
# Unnamed records and the SSE default name carry OpenAI-style chunks.
ANSWER_ALIASES = frozenset({"", "message", SSEEvent.ANSWER.value})


@dataclass(frozen=True)
class UIItem:
    """One unit of UI-visible output.

    Text items carry ``text`` (a character or a block) or ``reasoning_text``;
    structured and passthrough items carry their upstream payload.
    """

    event: str
    text: Optional[str] = None
    reasoning_text: Optional[str] = None
    payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> ItemKind:
        if self.event in TEXT_EVENTS:
            return ItemKind.TEXT
        if self.event in PASSTHROUGH_EVENTS:
            return ItemKind.PASSTHROUGH
        return ItemKind.STRUCTURED

    def to_dict(self) -> Dict[str, Any]:
        """Flatten to ``{"event": ..., "text": ..., **payload}`` without empty keys."""
        out: Dict[str, Any] = dict(self.payload)
        out["event"] = self.event
        if self.text is not None:
            out["text"] = self.text
        if self.reasoning_text is not None:
            out["reasoningText"] = self.reasoning_text
        return out


__all__ = [
    "SSEEvent",
    "ItemKind",
    "UIItem",
    "TEXT_EVENTS",
    "STRUCTURED_EVENTS",
    "PASSTHROUGH_EVENTS",
    "ANSWER_ALIASES",
]
