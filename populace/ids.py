"""Identifier generators injected into queues and stores.

Every component that mints ids takes an ``IdFactory`` in its constructor so
replays can use deterministic counters while live runs use UUIDs.
"""

from __future__ import annotations

import itertools
from typing import Callable
from uuid import uuid4


IdFactory = Callable[[], str]
"""Zero-argument callable returning a fresh, unique string id."""


class SequentialIds:
    """Monotonic counter ids (``evt-1``, ``evt-2``, ...)."""

    def __init__(self, prefix: str = "id", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


def uuid_ids() -> str:
    """Random-unique id factory."""

    return str(uuid4())


__all__ = ["IdFactory", "SequentialIds", "uuid_ids"]
