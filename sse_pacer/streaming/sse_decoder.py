"""SSE tokenizer for repaired lines.

Groups ``event``/``data``/``id``/``retry`` fields into :class:`TransportEvent`
records on blank-line boundaries. Input is expected to come from the frame
extractor, so lines arrive already split and trimmed.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class TransportEvent:
    """One logical SSE record.

    ``event`` is ``""`` when the record carried no ``event:`` field; ``id`` is
    the last event id seen on the stream so far.
    """

    event: str
    data: str
    id: Optional[str] = None
    retry: Optional[int] = None


class SSEDecoder:
    """Incremental SSE record builder."""

    def __init__(self) -> None:
        self._data: List[str] = []
        self._event: Optional[str] = None
        self._retry: Optional[int] = None
        self._last_id: Optional[str] = None

    def feed_line(self, line: str) -> List[TransportEvent]:
        """Consume one line; return the record it completed, if any."""
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return []
        name, sep, value = line.partition(":")
        if not sep:
            value = ""
        elif value.startswith(" "):
            value = value[1:]
        name = name.strip().lower()
        if name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name == "id":
            if "\x00" not in value:
                self._last_id = value
        elif name == "retry":
            if value.isdigit():
                self._retry = int(value)
        return []

    def finish(self) -> List[TransportEvent]:
        """Dispatch a trailing record that was never terminated by a blank line."""
        return self._dispatch()

    def _dispatch(self) -> List[TransportEvent]:
        if not self._data and self._event is None:
            self._retry = None
            return []
        evt = TransportEvent(
            event=self._event or "",
            data="\n".join(self._data),
            id=self._last_id,
            retry=self._retry,
        )
        self._data = []
        self._event = None
        self._retry = None
        return [evt]


__all__ = ["SSEDecoder", "TransportEvent"]
