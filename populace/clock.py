"""Virtual simulation clock.

Time is an integer count of milliseconds. ``advance`` converts a wall-clock
delta into virtual time through ``scale`` (1 = real time, >1 = faster,
<1 = slower). The clock never moves backwards.
"""

from __future__ import annotations

import math
import time
from datetime import datetime, timezone
from typing import Optional

from .errors import InvalidArgument


MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR


class Clock:
    """Holds the virtual current time and the scale factor."""

    def __init__(self, start_time: Optional[int] = None, scale: float = 1.0) -> None:
        if start_time is None:
            start_time = int(time.time() * 1000)
        if start_time < 0:
            raise InvalidArgument(f"start_time must be >= 0, got {start_time}")
        self._validate_scale(scale)
        self._current_time = int(start_time)
        self._scale = float(scale)

    @staticmethod
    def _validate_scale(scale: float) -> None:
        if not (math.isfinite(scale) and scale > 0):
            raise InvalidArgument(f"Time scale must be positive and finite, got {scale}")

    @property
    def scale(self) -> float:
        return self._scale

    def now(self) -> int:
        """Return the current virtual time in milliseconds."""
        return self._current_time

    def set_scale(self, scale: float) -> None:
        """Change the wall-to-virtual multiplier.

        Raises:
            InvalidArgument: If scale is not strictly positive
        """
        self._validate_scale(scale)
        self._scale = float(scale)

    def advance(self, delta: float) -> int:
        """Advance by ``delta`` wall milliseconds scaled by ``scale``.

        Args:
            delta: Wall-clock milliseconds, must be >= 0

        Returns:
            The new virtual time

        Raises:
            InvalidArgument: If delta is negative or not finite
        """
        if not math.isfinite(delta) or delta < 0:
            raise InvalidArgument(f"Clock delta must be >= 0, got {delta}")
        self._current_time += int(round(delta * self._scale))
        return self._current_time

    def formatted(self) -> str:
        """Current virtual time as an ISO 8601 UTC string."""
        return datetime.fromtimestamp(self._current_time / 1000, tz=timezone.utc).isoformat()

    def __repr__(self) -> str:
        return f"Clock(now={self._current_time}, scale={self._scale})"


__all__ = ["Clock", "MS_PER_HOUR", "MS_PER_DAY"]
