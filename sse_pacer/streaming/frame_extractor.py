"""Frame extractor: repairs non-standard SSE line framing.

Some OpenAI-compatible gateways wrap one logical ``data:`` record across
several physical lines without repeating the prefix, or emit bare JSON /
base64 fragments between records. The extractor reclassifies each line and
re-prefixes such continuations with ``data: `` so a standard SSE tokenizer
can consume the result.

The core is a pure function over an immutable :class:`FrameState`; the
:class:`FrameExtractor` class is a thin stateful wrapper for streaming use.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import List, Tuple

from ..config.defaults import DONE_SENTINEL

_LINE_BREAK = re.compile(r"\r?\n")
_FIELD = re.compile(r"^(data|event|id|retry)\s*:", re.IGNORECASE)
_DATA_FIELD = re.compile(r"^data\s*:", re.IGNORECASE)
_JSON_FRAGMENT = re.compile(r'^[\[{",}\]]')
_BASE64_LINE = re.compile(r"^[A-Za-z0-9+/=]+$")


@dataclass(frozen=True)
class FrameState:
    """Carry-over between reads.

    Attributes:
        pending_line: Trailing partial line held back until its line break
            arrives.
        continuation: Whether un-prefixed lines currently belong to an open
            ``data:`` record.
    """

    pending_line: str = ""
    continuation: bool = False


def repair_line(raw_line: str, continuation: bool) -> Tuple[str, bool]:
    """Classify one physical line; return ``(output_line, continuation)``."""
    line = raw_line.strip()
    if not line:
        return "", False
    if line.startswith(":"):
        return line, continuation
    if _FIELD.match(line):
        if _DATA_FIELD.match(line):
            payload = _DATA_FIELD.sub("", line, count=1).strip()
            continuation = payload != DONE_SENTINEL
        return line, continuation
    if continuation or _JSON_FRAGMENT.match(line) or _BASE64_LINE.match(line):
        return f"data: {line}", continuation
    return line, continuation


def _repair_lines(lines: List[str], continuation: bool) -> Tuple[List[str], bool]:
    out: List[str] = []
    for raw in lines:
        fixed, continuation = repair_line(raw, continuation)
        out.append(fixed)
    return out, continuation


def extract_frames(state: FrameState, text: str) -> Tuple[FrameState, List[str]]:
    """Feed newly arrived text; return the new state and the complete, repaired lines.

    The last (possibly partial) line is held back in the returned state until a
    later call supplies its line break.
    """
    if not text:
        return state, []
    lines = _LINE_BREAK.split(state.pending_line + text)
    pending = lines.pop()
    repaired, continuation = _repair_lines(lines, state.continuation)
    return FrameState(pending_line=pending, continuation=continuation), repaired


def flush_frames(state: FrameState) -> Tuple[FrameState, List[str]]:
    """Release the held-back partial line at end of stream."""
    if not state.pending_line:
        return state, []
    repaired, continuation = _repair_lines([state.pending_line], state.continuation)
    return replace(state, pending_line="", continuation=continuation), repaired


class FrameExtractor:
    """Stateful wrapper around :func:`extract_frames` for one stream."""

    def __init__(self) -> None:
        self.state = FrameState()

    def feed(self, text: str) -> List[str]:
        self.state, lines = extract_frames(self.state, text)
        return lines

    def finish(self) -> List[str]:
        self.state, lines = flush_frames(self.state)
        return lines


__all__ = [
    "FrameState",
    "FrameExtractor",
    "extract_frames",
    "flush_frames",
    "repair_line",
]
