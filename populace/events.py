"""Time-ordered event queue driven by the virtual clock.

Events are kept in a heap ordered by ``(fire_time, sequence)`` so that ties
fire in scheduling order and replays are deterministic. ``drain_due`` takes
every due event out of the queue before running any callback: a callback that
schedules (or reschedules) events only affects the next drain.
"""

from __future__ import annotations

import heapq
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .clock import Clock
from .errors import EventCallbackFailure, InvalidArgument
from .ids import IdFactory, SequentialIds
from .logging_utils import log_error


EventCallback = Callable[[Any], Union[None, Awaitable[None]]]
"""Receives the event payload. May be a plain function or a coroutine function."""


@dataclass(frozen=True)
class ScheduledEvent:
    """A callback registered to fire at ``fire_time``."""

    id: str
    kind: str
    fire_time: int
    payload: Any = field(compare=False)
    callback: EventCallback = field(compare=False, repr=False)
    sequence: int = 0

    def __lt__(self, other: "ScheduledEvent") -> bool:
        """Earlier time first, then scheduling order."""
        if self.fire_time != other.fire_time:
            return self.fire_time < other.fire_time
        return self.sequence < other.sequence


class EventQueue:
    """Priority queue of scheduled callbacks.

    Cancelled events are dropped from the id index immediately and skipped
    lazily when they reach the top of the heap.
    """

    def __init__(self, clock: Clock, *, id_factory: Optional[IdFactory] = None) -> None:
        self.clock = clock
        self._id_factory = id_factory or SequentialIds("evt")
        self._heap: List[ScheduledEvent] = []
        self._pending: Dict[str, ScheduledEvent] = {}
        self._sequence = 0

    def __len__(self) -> int:
        return len(self._pending)

    def schedule(
        self,
        kind: str,
        delay: int,
        payload: Any,
        callback: EventCallback,
    ) -> str:
        """Schedule ``callback(payload)`` to fire ``delay`` ms from now.

        Args:
            kind: Free-form tag (e.g., "reflection")
            delay: Milliseconds from ``clock.now()``, must be >= 0
            payload: Opaque value handed to the callback
            callback: Sync or async callable

        Returns:
            The new event id

        Raises:
            InvalidArgument: If delay is negative
        """
        if not delay >= 0:
            raise InvalidArgument(f"Event delay must be >= 0, got {delay}")

        self._sequence += 1
        event = ScheduledEvent(
            id=self._id_factory(),
            kind=kind,
            fire_time=self.clock.now() + int(delay),
            payload=payload,
            callback=callback,
            sequence=self._sequence,
        )
        if event.id in self._pending:
            raise InvalidArgument(f"id factory produced a duplicate event id: {event.id}")
        self._pending[event.id] = event
        heapq.heappush(self._heap, event)
        return event.id

    def cancel(self, event_id: str) -> bool:
        """Remove a pending event. Returns False if absent or already fired."""
        event = self._pending.pop(event_id, None)
        if event is None:
            return False
        # Rebuild once stale entries dominate the heap.
        if len(self._heap) > 2 * len(self._pending) + 32:
            self._heap = list(self._pending.values())
            heapq.heapify(self._heap)
        return True

    def _take_due(self, now: int) -> List[ScheduledEvent]:
        due: List[ScheduledEvent] = []
        while self._heap and self._heap[0].fire_time <= now:
            event = heapq.heappop(self._heap)
            if self._pending.get(event.id) is not event:
                continue  # cancelled
            del self._pending[event.id]
            due.append(event)
        return due

    async def drain_due(self) -> int:
        """Fire every event whose ``fire_time <= clock.now()``.

        The due set is fixed before the first callback runs. Failures are
        logged and do not stop the remaining callbacks.

        Returns:
            Number of events fired
        """
        due = self._take_due(self.clock.now())

        for event in due:
            try:
                result = event.callback(event.payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                failure = EventCallbackFailure(
                    event_id=event.id, kind=event.kind, underlying=exc
                )
                log_error(f"[Events] {failure}")

        return len(due)

    def peek(self, limit: int = 10) -> List[ScheduledEvent]:
        """Return up to ``limit`` soonest-firing pending events without mutation."""
        if limit <= 0:
            return []
        return heapq.nsmallest(limit, self._pending.values())

    def pending(self, kind: Optional[str] = None) -> List[ScheduledEvent]:
        """All pending events in firing order, optionally filtered by kind."""
        events = sorted(self._pending.values())
        if kind is None:
            return events
        return [event for event in events if event.kind == kind]

    def get(self, event_id: str) -> Optional[ScheduledEvent]:
        return self._pending.get(event_id)


__all__ = ["EventCallback", "ScheduledEvent", "EventQueue"]
