"""Tests for the event queue: ordering, cancellation and failure isolation."""

import pytest

from populace.clock import Clock
from populace.errors import InvalidArgument
from populace.events import EventQueue
from populace.ids import SequentialIds


def make_queue(start: int = 0) -> tuple[Clock, EventQueue]:
    clock = Clock(start_time=start)
    return clock, EventQueue(clock)


@pytest.mark.asyncio
async def test_fires_in_time_order_with_fifo_ties():
    clock, queue = make_queue()
    fired: list[str] = []

    queue.schedule("a", 30, "late", fired.append)
    queue.schedule("b", 10, "first-tie", fired.append)
    queue.schedule("c", 10, "second-tie", fired.append)
    queue.schedule("d", 0, "now", fired.append)

    clock.advance(100)
    count = await queue.drain_due()

    assert count == 4
    assert fired == ["now", "first-tie", "second-tie", "late"]
    assert len(queue) == 0


@pytest.mark.asyncio
async def test_only_due_events_fire_and_never_twice():
    clock, queue = make_queue()
    fired: list[str] = []

    queue.schedule("early", 5, "early", fired.append)
    queue.schedule("later", 50, "later", fired.append)

    clock.advance(10)
    assert await queue.drain_due() == 1
    assert await queue.drain_due() == 0
    assert fired == ["early"]

    clock.advance(40)
    assert await queue.drain_due() == 1
    assert fired == ["early", "later"]


@pytest.mark.asyncio
async def test_cancel_before_fire_prevents_callback():
    clock, queue = make_queue()
    fired: list[str] = []

    event_id = queue.schedule("x", 10, "cancelled", fired.append)
    queue.schedule("y", 10, "kept", fired.append)

    assert queue.cancel(event_id) is True
    clock.advance(10)
    await queue.drain_due()

    assert fired == ["kept"]


@pytest.mark.asyncio
async def test_cancel_after_fire_returns_false():
    clock, queue = make_queue()
    event_id = queue.schedule("x", 0, None, lambda payload: None)

    await queue.drain_due()

    assert queue.cancel(event_id) is False
    assert queue.cancel("evt-unknown") is False


@pytest.mark.asyncio
async def test_cancel_during_drain_of_later_event_in_same_batch():
    clock, queue = make_queue()
    fired: list[str] = []
    ids: dict[str, str] = {}

    def first(payload):
        fired.append(payload)
        ids["cancel_result"] = queue.cancel(ids["second"])

    queue.schedule("a", 0, "first", first)
    ids["second"] = queue.schedule("b", 0, "second", fired.append)

    await queue.drain_due()

    # The due set was fixed before any callback ran.
    assert fired == ["first", "second"]
    assert ids["cancel_result"] is False


@pytest.mark.asyncio
async def test_events_scheduled_by_callbacks_wait_for_next_drain():
    clock, queue = make_queue()
    fired: list[str] = []

    def reschedule(payload):
        fired.append(payload)
        queue.schedule("again", 0, "follow-up", fired.append)

    queue.schedule("seed", 0, "seed", reschedule)

    assert await queue.drain_due() == 1
    assert fired == ["seed"]

    assert await queue.drain_due() == 1
    assert fired == ["seed", "follow-up"]


@pytest.mark.asyncio
async def test_failing_callback_does_not_abort_drain(capsys):
    clock, queue = make_queue()
    fired: list[str] = []

    def explode(payload):
        raise RuntimeError("boom")

    queue.schedule("bad", 0, None, explode)
    queue.schedule("good", 0, "survivor", fired.append)

    assert await queue.drain_due() == 2
    assert fired == ["survivor"]
    assert "boom" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_async_callbacks_are_awaited():
    clock, queue = make_queue()
    fired: list[str] = []

    async def handler(payload):
        fired.append(payload)

    queue.schedule("async", 0, "awaited", handler)
    await queue.drain_due()

    assert fired == ["awaited"]


def test_negative_delay_rejected():
    _, queue = make_queue()
    with pytest.raises(InvalidArgument):
        queue.schedule("x", -1, None, lambda payload: None)
    assert len(queue) == 0


def test_injected_id_factory_and_introspection():
    clock = Clock(start_time=1_000)
    queue = EventQueue(clock, id_factory=SequentialIds("job"))

    first = queue.schedule("reflection", 20, {"agent": "ana"}, lambda payload: None)
    second = queue.schedule("chat", 10, None, lambda payload: None)

    assert (first, second) == ("job-1", "job-2")
    assert [event.id for event in queue.peek()] == ["job-2", "job-1"]
    assert [event.id for event in queue.pending("reflection")] == ["job-1"]
    assert queue.get(first).fire_time == 1_020
    assert queue.get("job-99") is None


def test_cancel_compacts_heap():
    _, queue = make_queue()
    ids = [queue.schedule("x", 10, None, lambda payload: None) for _ in range(100)]
    for event_id in ids[:-1]:
        queue.cancel(event_id)

    assert len(queue) == 1
    assert len(queue._heap) <= 2 * len(queue) + 32
