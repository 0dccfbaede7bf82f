"""Consumption scheduler: paced delivery of buffered UI items.

Items pushed by the reader are released to the sink in small batches, one
batch per frame tick, so a burst of tokens renders as a smooth stream rather
than one jump. Each tick releases roughly ``1/batch_divisor`` of the backlog
(at least one item), so the visible lag stays bounded as the backlog grows.

State machine::

    RUNNING --mark_finished()--> FINISHING --queue empty on tick--> DONE
    RUNNING --mark_finished(), queue empty--> DONE
    RUNNING/FINISHING --drain()--> DONE

``on_finish`` fires exactly once, on the transition to DONE.
"""
from __future__ import annotations

import asyncio
import math
from collections import deque
from contextlib import suppress
from enum import Enum
from typing import Callable, Deque, List, Optional

from ..config.defaults import BATCH_DIVISOR
from .events import TEXT_EVENTS, UIItem


class SchedulerState(str, Enum):
    RUNNING = "running"
    FINISHING = "finishing"
    DONE = "done"


def batch_size(backlog: int, divisor: int = BATCH_DIVISOR) -> int:
    """``max(1, round(backlog / divisor))`` with halves rounded up."""
    return max(1, math.floor(backlog / divisor + 0.5))


class ConsumptionScheduler:
    """Frame-paced queue between the stream reader and the ``on_consume`` sink.

    Args:
        on_consume: Receives every item exactly once, in push order.
        on_finish: Called once when the scheduler reaches DONE.
        is_visible: Returns ``False`` when the consumer is not rendering; a
            push then flushes the whole backlog synchronously.
        batch_divisor: Backlog fraction released per tick.
    """

    def __init__(
        self,
        on_consume: Callable[[UIItem], None],
        on_finish: Optional[Callable[[], None]] = None,
        *,
        is_visible: Optional[Callable[[], bool]] = None,
        batch_divisor: int = BATCH_DIVISOR,
    ) -> None:
        self._on_consume = on_consume
        self._on_finish = on_finish
        self._is_visible = is_visible or (lambda: True)
        self._divisor = batch_divisor
        self._queue: Deque[UIItem] = deque()
        self._state = SchedulerState.RUNNING
        self._text: List[str] = []
        self._finish_fired = False
        self._stopped = False
        self._wakeup: Optional[asyncio.Event] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state is SchedulerState.DONE

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def response_text(self) -> str:
        """Concatenated text of every TEXT item delivered so far."""
        return "".join(self._text)

    def push(self, item: UIItem) -> None:
        if self.done:
            self._consume(item)
            return
        self._queue.append(item)
        if not self._is_visible():
            self._flush(len(self._queue))

    def mark_finished(self) -> None:
        """No more items will arrive; complete once the backlog is empty.

        The remaining backlog keeps draining at the normal tick rate. An
        empty backlog completes immediately.
        """
        if self._state is not SchedulerState.RUNNING:
            return
        self._state = SchedulerState.FINISHING
        if not self._queue:
            self._complete()

    def drain(self) -> None:
        """Deliver the whole backlog now and complete."""
        if self.done:
            return
        self._flush(len(self._queue))
        self._complete()

    def tick(self) -> bool:
        """Release one batch; return ``True`` while further ticks are needed."""
        if self.done:
            return False
        self._flush(batch_size(len(self._queue), self._divisor))
        if self._state is SchedulerState.FINISHING and not self._queue:
            self._complete()
            return False
        return True

    async def run(self, frame_interval: float) -> None:
        """Tick once per ``frame_interval`` until DONE or :meth:`stop`."""
        self._wakeup = asyncio.Event()
        while not self._stopped and self.tick():
            if frame_interval <= 0:
                await asyncio.sleep(0)
                continue
            with suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._wakeup.wait(), frame_interval)
            self._wakeup.clear()

    def stop(self) -> None:
        """Stop the tick loop without delivering anything further."""
        self._stopped = True
        self._wake()

    def _flush(self, count: int) -> None:
        for _ in range(min(count, len(self._queue))):
            self._consume(self._queue.popleft())

    def _consume(self, item: UIItem) -> None:
        self._on_consume(item)
        if item.event in TEXT_EVENTS and item.text:
            self._text.append(item.text)

    def _complete(self) -> None:
        self._state = SchedulerState.DONE
        self._wake()
        if self._on_finish is not None and not self._finish_fired:
            self._finish_fired = True
            self._on_finish()

    def _wake(self) -> None:
        if self._wakeup is not None:
            self._wakeup.set()


__all__ = ["ConsumptionScheduler", "SchedulerState", "batch_size"]
