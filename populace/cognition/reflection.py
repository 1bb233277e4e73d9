"""Reflection trigger state machine.

Reflection converts accumulated experiences into higher-level insights and
feeds them back into memory. The scheduler only decides *when* that should
happen and writes the insights back; producing insight text is an oracle
call supplied by the caller.

States::

    IDLE --(count >= threshold  or  now - last > 24h)--> DUE
    DUE  --(run_reflection / begin_reflection)---------> IDLE

Hosts that share the scheduler across tasks (``AgentState``) call
``begin_reflection`` and ``store_insights`` around their own lock so the
oracle is never awaited while the lock is held. ``run_reflection`` is the
same sequence in one call, for a scheduler with a single owner.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence

from populace.clock import Clock, MS_PER_DAY
from populace.errors import InvalidArgument
from populace.memory import MemoryStore
from populace.schemas import MemoryRecord


DEFAULT_REFLECTION_THRESHOLD = 10
DEFAULT_REFLECTION_INTERVAL_MS = MS_PER_DAY
INSIGHT_IMPORTANCE = 7.0

InsightGenerator = Callable[[Sequence[MemoryRecord]], Awaitable[Sequence[str]]]


class ReflectionPhase(str, Enum):
    IDLE = "idle"
    DUE = "due"


@dataclass(frozen=True)
class ReflectionState:
    """Snapshot of the scheduler counters."""

    interaction_count: int
    last_reflection_time: int


class ReflectionScheduler:
    """Interaction counter plus elapsed-time trigger for one agent.

    Parameters
    ----------
    memory:
        The agent's MemoryStore; insights are written here as semantic
        records with importance 7.
    clock:
        Shared virtual clock.
    threshold:
        Interactions that make reflection due (default 10).
    interval_ms:
        Elapsed virtual time since the last reflection that makes
        reflection due (default 24h). The comparison is strict.
    """

    def __init__(
        self,
        memory: MemoryStore,
        clock: Clock,
        *,
        threshold: int = DEFAULT_REFLECTION_THRESHOLD,
        interval_ms: int = DEFAULT_REFLECTION_INTERVAL_MS,
    ) -> None:
        if threshold < 1:
            raise InvalidArgument(f"Reflection threshold must be >= 1, got {threshold}")
        if interval_ms <= 0:
            raise InvalidArgument(f"Reflection interval must be positive, got {interval_ms}")
        self.memory = memory
        self.clock = clock
        self.threshold = threshold
        self.interval_ms = interval_ms
        self._interaction_count = 0
        self._last_reflection_time = clock.now()
        self._phase = ReflectionPhase.IDLE

    @property
    def state(self) -> ReflectionState:
        return ReflectionState(
            interaction_count=self._interaction_count,
            last_reflection_time=self._last_reflection_time,
        )

    @property
    def phase(self) -> ReflectionPhase:
        return self._phase

    @property
    def is_due(self) -> bool:
        return self._phase is ReflectionPhase.DUE

    def _trigger_fired(self) -> bool:
        if self._interaction_count >= self.threshold:
            return True
        return self.clock.now() - self._last_reflection_time > self.interval_ms

    def note_interaction(self) -> bool:
        """Count one interaction and evaluate the trigger.

        Returns ``True`` when reflection is due. The caller decides whether
        and when to actually run it.
        """
        self._interaction_count += 1
        if self._trigger_fired():
            self._phase = ReflectionPhase.DUE
        return self.is_due

    def begin_reflection(self) -> None:
        """Reset counters: the DUE -> IDLE transition."""
        self._interaction_count = 0
        self._last_reflection_time = self.clock.now()
        self._phase = ReflectionPhase.IDLE

    def store_insights(self, insights: Iterable[str]) -> List[MemoryRecord]:
        """Write each non-blank insight back as a semantic memory."""
        stored: List[MemoryRecord] = []
        for insight in insights:
            text = (insight or "").strip()
            if not text:
                continue
            stored.append(self.memory.record("semantic", text, INSIGHT_IMPORTANCE))
        return stored

    async def run_reflection(
        self,
        recent_memories: Sequence[MemoryRecord],
        generate_insights: Optional[InsightGenerator] = None,
    ) -> List[MemoryRecord]:
        """Reset the trigger and, if there is material, store new insights.

        Equivalent to ``begin_reflection``, then ``generate_insights``, then
        ``store_insights``, with no locking in between.

        Parameters
        ----------
        recent_memories:
            Source memories (typically the newest episodic records). When
            empty, only the reset happens.
        generate_insights:
            Async callable producing insight strings (the oracle). When
            omitted, nothing is written.

        Returns
        -------
        list[MemoryRecord]
            The semantic records that were written.
        """
        self.begin_reflection()
        if not recent_memories or generate_insights is None:
            return []

        insights = await generate_insights(list(recent_memories))
        return self.store_insights(insights)


__all__ = [
    "ReflectionScheduler",
    "ReflectionState",
    "ReflectionPhase",
    "InsightGenerator",
    "DEFAULT_REFLECTION_THRESHOLD",
    "DEFAULT_REFLECTION_INTERVAL_MS",
    "INSIGHT_IMPORTANCE",
]
