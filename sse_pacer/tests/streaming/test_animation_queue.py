"""Consumption scheduler tests: pacing, total delivery, drain and visibility."""
from __future__ import annotations

import asyncio

import pytest

from sse_pacer.streaming.animation_queue import ConsumptionScheduler, SchedulerState, batch_size
from sse_pacer.streaming.events import UIItem


def _items(n: int, event: str = "answer") -> list[UIItem]:
    return [UIItem(event, text=str(i % 10)) for i in range(n)]


@pytest.mark.parametrize(
    "backlog,expected",
    [(0, 1), (1, 1), (14, 1), (15, 1), (44, 1), (45, 2), (60, 2), (75, 3), (300, 10)],
)
def test_batch_size_rounds_half_up(backlog, expected):
    assert batch_size(backlog) == expected  # nosec B101


def test_ticks_deliver_everything_in_push_order():
    delivered: list[UIItem] = []
    finished: list[bool] = []
    sched = ConsumptionScheduler(delivered.append, lambda: finished.append(True))
    items = _items(100)
    for item in items:
        sched.push(item)
    sched.mark_finished()

    ticks = 0
    while sched.tick():
        ticks += 1
    assert delivered == items  # nosec B101
    assert finished == [True] and sched.state is SchedulerState.DONE  # nosec B101
    assert ticks > 1  # nosec B101 - paced, not one burst


def test_first_tick_releases_a_fraction_of_backlog():
    delivered: list[UIItem] = []
    sched = ConsumptionScheduler(delivered.append)
    for item in _items(60):
        sched.push(item)
    sched.tick()
    assert len(delivered) == 2 and sched.pending == 58  # nosec B101


def test_tick_without_finish_keeps_running_when_empty():
    sched = ConsumptionScheduler(lambda _i: None)
    assert sched.tick() is True  # nosec B101
    assert sched.state is SchedulerState.RUNNING  # nosec B101


def test_drain_flushes_all_and_completes_once():
    delivered: list[UIItem] = []
    finished: list[bool] = []
    sched = ConsumptionScheduler(delivered.append, lambda: finished.append(True))
    items = _items(50)
    for item in items[:30]:
        sched.push(item)
    sched.tick()
    for item in items[30:]:
        sched.push(item)

    sched.drain()
    sched.drain()
    assert delivered == items  # nosec B101
    assert finished == [True] and sched.done  # nosec B101
    assert sched.tick() is False  # nosec B101


def test_push_after_done_is_delivered_immediately():
    delivered: list[UIItem] = []
    sched = ConsumptionScheduler(delivered.append)
    sched.drain()
    late = UIItem("answer", text="z")
    sched.push(late)
    assert delivered == [late] and sched.pending == 0  # nosec B101


def test_hidden_consumer_flushes_on_push():
    visible = {"value": True}
    delivered: list[UIItem] = []
    sched = ConsumptionScheduler(delivered.append, is_visible=lambda: visible["value"])
    items = _items(10)
    for item in items[:5]:
        sched.push(item)
    assert delivered == []  # nosec B101

    visible["value"] = False
    sched.push(items[5])
    assert delivered == items[:6]  # nosec B101


def test_response_text_counts_only_text_items():
    sched = ConsumptionScheduler(lambda _i: None)
    sched.push(UIItem("answer", text="a"))
    sched.push(UIItem("answer", reasoning_text="hmm"))
    sched.push(UIItem("fastAnswer", text="bc"))
    sched.push(UIItem("toolCall", payload={"text": "ignored"}))
    sched.drain()
    assert sched.response_text == "abc"  # nosec B101


def test_run_loop_completes_after_mark_finished():
    delivered: list[UIItem] = []
    items = _items(40)

    async def _main() -> None:
        sched = ConsumptionScheduler(delivered.append)
        task = asyncio.create_task(sched.run(0))
        for item in items:
            sched.push(item)
        sched.mark_finished()
        await asyncio.wait_for(task, 5)

    asyncio.run(_main())
    assert delivered == items  # nosec B101


def test_drain_wakes_a_slow_run_loop():
    delivered: list[UIItem] = []

    async def _main() -> None:
        sched = ConsumptionScheduler(delivered.append)
        task = asyncio.create_task(sched.run(30.0))
        await asyncio.sleep(0)
        for item in _items(10):
            sched.push(item)
        sched.drain()
        await asyncio.wait_for(task, 1.0)

    asyncio.run(_main())
    assert len(delivered) == 10  # nosec B101


def test_stop_ends_loop_without_delivery():
    delivered: list[UIItem] = []

    async def _main() -> None:
        sched = ConsumptionScheduler(delivered.append)
        task = asyncio.create_task(sched.run(30.0))
        await asyncio.sleep(0)
        sched.push(UIItem("answer", text="x"))
        sched.stop()
        await asyncio.wait_for(task, 1.0)
        assert sched.pending == 1  # nosec B101

    asyncio.run(_main())
    assert delivered == []  # nosec B101


def test_finishing_backlog_keeps_the_frame_rate():
    delivered: list[UIItem] = []
    frame = 0.02

    async def _main() -> float:
        sched = ConsumptionScheduler(delivered.append)
        task = asyncio.create_task(sched.run(frame))
        for item in _items(60):
            sched.push(item)
        await asyncio.sleep(0)
        sched.mark_finished()
        started = asyncio.get_running_loop().time()
        await asyncio.wait_for(task, 10)
        return asyncio.get_running_loop().time() - started

    elapsed = asyncio.run(_main())
    assert len(delivered) == 60  # nosec B101
    # 58 items left at one or two per tick is roughly 30 frames.
    assert elapsed >= 20 * frame  # nosec B101


def test_mark_finished_on_empty_backlog_completes_at_once():
    finished: list[bool] = []
    sched = ConsumptionScheduler(lambda _i: None, lambda: finished.append(True))
    sched.mark_finished()
    assert sched.done and finished == [True]  # nosec B101
