"""Incremental JSON recovery over SSE data payloads.

Upstream gateways do not always put exactly one JSON document in each
``data:`` record. Observed shapes include objects split across records,
several objects concatenated in one record, ``data:`` prefixes embedded in a
payload, and line breaks inside string values. :class:`ChunkAssembler`
accumulates payload text and releases every complete object as soon as it
can be recovered, while keeping memory bounded.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from ..base.errors import ErrorCode
from ..base.log_support import LogContext
from ..base.logging import get_logger, log_event
from ..config.defaults import DONE_SENTINEL, PENDING_BUFFER_CAP, PENDING_BUFFER_KEEP

_EMBEDDED_DATA = re.compile(r"(?:^|[\r\n\s])data:\s*(?=\{|\[DONE\])", re.IGNORECASE)
_SEGMENT_BREAK = re.compile(r"\r?\n")
_LINE_BREAKS = re.compile(r"\r?\n")


def extract_json_objects(source: str) -> Tuple[List[str], str]:
    """Scan ``source`` for balanced top-level ``{...}`` objects.

    Braces inside string literals (including escaped quotes) are ignored and a
    stray ``}`` at depth zero is skipped.

    Returns:
        ``(objects, rest)`` where ``objects`` are the complete object texts in
        order and ``rest`` is the text to keep for the next read: the still
        open object starting at its ``{``, or the trailing text trimmed
        forward to its next ``{`` (``""`` when there is none).
    """
    objects: List[str] = []
    depth = 0
    start = -1
    in_string = False
    escaped = False
    last_end = 0
    for i, ch in enumerate(source):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                objects.append(source[start : i + 1])
                last_end = i + 1
                start = -1
    if depth > 0 and start >= 0:
        return objects, source[start:]
    tail = source[last_end:]
    brace = tail.find("{")
    return objects, tail[brace:] if brace >= 0 else ""


def _loads(text: str) -> Tuple[bool, Any]:
    """Parse ``text`` as-is, then with embedded line breaks removed."""
    candidates = [text]
    stripped = _LINE_BREAKS.sub("", text)
    if stripped != text:
        candidates.append(stripped)
    for candidate in candidates:
        try:
            return True, json.loads(candidate)
        except ValueError:
            continue
    return False, None


class ChunkAssembler:
    """Buffer payload text and emit complete JSON objects in arrival order.

    ``feed`` returns the dictionaries recovered by that call. Top-level arrays
    contribute their dictionary elements; other scalars count as parsed but
    are not emitted. ``finish`` flushes what is left and, when nothing at all
    parsed during the stream, retries once over the raw payload log.
    ``received_count`` counts non-empty, non-``[DONE]`` payloads fed.
    """

    def __init__(
        self,
        *,
        cap: int = PENDING_BUFFER_CAP,
        keep: int = PENDING_BUFFER_KEEP,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self.pending = ""
        self.parsed_count = 0
        self.received_count = 0
        self._cap = cap
        self._keep = keep
        self._raw_payloads: List[str] = []
        self._logger = logger or get_logger("sse_pacer.streaming.assembler")
        self._ctx = ctx

    def feed(self, payload: str) -> List[Dict[str, Any]]:
        """Consume one record payload."""
        cleaned = payload.replace("\x00", "")
        normalized = cleaned.strip()
        if not normalized:
            # Whitespace inside an open object is significant.
            if self.pending:
                self.pending += cleaned
            return []
        if normalized == DONE_SENTINEL:
            return []
        self._raw_payloads.append(normalized)
        self.received_count += 1
        if "data:" not in normalized:
            self.pending += cleaned
            return self._flush()

        out: List[Dict[str, Any]] = []
        segments = [s.strip() for s in _SEGMENT_BREAK.split(_EMBEDDED_DATA.sub("\n", normalized))]
        segments = [s for s in segments if s]
        if not segments:
            self.pending += normalized
            return self._flush()
        for segment in segments:
            if segment == DONE_SENTINEL:
                continue
            self.pending += segment
            out.extend(self._flush())
        return out

    def finish(self) -> List[Dict[str, Any]]:
        """Flush at end of stream; re-parse the raw log if nothing ever parsed."""
        out = self._flush()
        if self.parsed_count == 0 and self._raw_payloads:
            self.pending += "\n".join(self._raw_payloads).strip()
            out.extend(self._flush())
        return out

    def _flush(self) -> List[Dict[str, Any]]:
        text = self.pending.strip()
        if not text:
            self.pending = ""
            return []
        ok, value = _loads(text)
        if ok:
            self.pending = ""
            return self._accept(value)

        objects, rest = extract_json_objects(self.pending)
        if not objects:
            if len(self.pending) > self._cap:
                dropped = len(self.pending) - self._keep
                self.pending = self.pending[-self._keep :]
                log_event(
                    self._logger,
                    "stream.buffer.evicted",
                    self._ctx,
                    level=logging.WARNING,
                    dropped_chars=dropped,
                    kept_chars=len(self.pending),
                )
            return []
        self.pending = rest
        out: List[Dict[str, Any]] = []
        for obj in objects:
            ok, value = _loads(obj)
            if not ok:
                log_event(
                    self._logger,
                    "stream.decode_error",
                    self._ctx,
                    level=logging.WARNING,
                    error_code=ErrorCode.PROTOCOL.value,
                    preview=obj[:120],
                )
                continue
            out.extend(self._accept(value))
        return out

    def _accept(self, value: Any) -> List[Dict[str, Any]]:
        self.parsed_count += 1
        if isinstance(value, dict):
            return [value]
        if isinstance(value, list):
            return [v for v in value if isinstance(v, dict)]
        return []


__all__ = ["ChunkAssembler", "extract_json_objects"]
