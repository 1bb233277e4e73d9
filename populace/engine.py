"""
Simulation engine.

Owns the clock, the event queue, the environment and the agent registry, and
drives the tick loop:
1. Advance the virtual clock
2. Drain due events (callbacks may mutate agents or schedule new events)
3. Run per-agent upkeep hooks

Agent-facing calls (utterances, planning) run outside the loop; each agent's
lock keeps them from overlapping with callbacks aimed at the same agent.
Reflection events only reset the trigger inside the drain; the oracle
round-trip runs as an engine-owned task, so a slow oracle never stretches a
tick. ``drain_reflections`` and ``wait_stopped`` wait for those tasks.
"""

from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from .agent import AgentState
from .clock import Clock
from .config import Config
from .environment import Environment
from .errors import DuplicateAgent, InvalidArgument
from .events import EventQueue
from .logging_utils import log_deterministic, log_error, log_info, log_success
from .schemas import MemoryRecord


REFLECTION_EVENT = "reflection"

UpkeepHook = Callable[[AgentState, int], Union[None, Awaitable[None]]]
AgentCallback = Callable[[AgentState, Any], Union[None, Awaitable[None]]]


class EngineState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class SimulationEngine:
    """Discrete-event driver for a population of agents."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        *,
        environment: Optional[Environment] = None,
        upkeep_hooks: Optional[List[UpkeepHook]] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            clock: Shared virtual clock; defaults to wall-clock start time
                scaled by Config.TIME_SCALE
            environment: Location registry; defaults to the four standard
                locations (home, office, park, cafe)
            upkeep_hooks: Callables invoked as ``hook(agent, now)`` for every
                agent at the end of each tick. Failures are logged and skipped.
        """
        self.clock = clock or Clock(scale=Config.TIME_SCALE)
        self.events = EventQueue(self.clock)
        self.environment = environment or Environment.with_defaults()
        self.upkeep_hooks: List[UpkeepHook] = list(upkeep_hooks or [])

        self._agents: Dict[str, AgentState] = {}
        self._reflection_events: Dict[str, str] = {}
        self._reflection_tasks: Set[asyncio.Task] = set()
        self._tick_lock = asyncio.Lock()
        self._state = EngineState.STOPPED
        self._stop_requested = False
        self._stopped = asyncio.Event()
        self._stopped.set()
        self.tick_count = 0

    def __repr__(self) -> str:
        return (
            f"SimulationEngine(state={self._state.value}, agents={len(self._agents)}, "
            f"pending_events={len(self.events)}, now={self.clock.now()})"
        )

    @property
    def state(self) -> EngineState:
        return self._state

    # ------------------------------------------------------------------
    # Agent registry
    # ------------------------------------------------------------------

    def register(self, agent: AgentState) -> None:
        """Add an agent and route its reflection requests through the queue.

        Raises:
            DuplicateAgent: If an agent with the same id is registered
        """
        if agent.agent_id in self._agents:
            raise DuplicateAgent(agent.agent_id)
        self._agents[agent.agent_id] = agent
        agent.on_reflection_due = self.submit_reflection

    def agent(self, agent_id: str) -> Optional[AgentState]:
        return self._agents.get(agent_id)

    def all_agents(self) -> List[AgentState]:
        """All registered agents in registration order."""
        return list(self._agents.values())

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule_for_agent(
        self,
        agent_id: str,
        kind: str,
        delay: int,
        payload: Any,
        callback: AgentCallback,
    ) -> str:
        """Schedule ``callback(agent, payload)`` to run under the agent's lock.

        The callback must touch the agent's stores directly. Awaiting the
        agent's own async API (``generate_utterance``, ``remember``, ...) from
        inside it deadlocks the tick, since that API takes the same
        non-reentrant lock.

        Returns:
            The event id

        Raises:
            InvalidArgument: If the agent is unknown or delay is negative
        """
        agent = self._agents.get(agent_id)
        if agent is None:
            raise InvalidArgument(f"Cannot schedule '{kind}' for unknown agent '{agent_id}'")

        async def _invoke(event_payload: Any) -> None:
            async with agent.lock:
                result = callback(agent, event_payload)
                if inspect.isawaitable(result):
                    await result

        return self.events.schedule(kind, delay, payload, _invoke)

    def submit_reflection(self, agent: AgentState) -> str:
        """Queue a reflection for ``agent`` on the next drain.

        At most one reflection is pending per agent; a second request while
        one is queued returns the existing event id.
        """
        pending_id = self._reflection_events.get(agent.agent_id)
        if pending_id is not None and self.events.get(pending_id) is not None:
            return pending_id

        async def _reflect(agent_id: str) -> None:
            self._reflection_events.pop(agent_id, None)
            target = self._agents.get(agent_id)
            if target is None:
                return
            recent = await target.begin_reflection()
            if not recent:
                return
            task = asyncio.create_task(
                self._finish_reflection(target, recent), name=f"reflection:{agent_id}"
            )
            self._reflection_tasks.add(task)
            task.add_done_callback(self._reflection_tasks.discard)

        # AgentState takes its own lock for each reflection step, so this
        # bypasses schedule_for_agent.
        event_id = self.events.schedule(REFLECTION_EVENT, 0, agent.agent_id, _reflect)
        self._reflection_events[agent.agent_id] = event_id
        return event_id

    async def _finish_reflection(self, agent: AgentState, recent: List[MemoryRecord]) -> None:
        try:
            insights = await agent.finish_reflection(recent)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log_error(f"[Reflection] Failed for agent {agent.agent_id}: {exc!r}")
            return
        log_deterministic(f"[Reflection] {agent.full_name} stored {len(insights)} insight(s)")

    @property
    def reflections_in_flight(self) -> int:
        return len(self._reflection_tasks)

    async def drain_reflections(self) -> None:
        """Wait until every in-flight reflection has stored its insights."""
        while self._reflection_tasks:
            await asyncio.gather(*list(self._reflection_tasks), return_exceptions=True)

    def cancel_reflection(self, agent_id: str) -> bool:
        """Cancel the pending reflection for an agent, if any."""
        event_id = self._reflection_events.pop(agent_id, None)
        if event_id is None:
            return False
        return self.events.cancel(event_id)

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    async def tick(self, wall_delta: float = 0) -> int:
        """Run one tick.

        Args:
            wall_delta: Wall milliseconds to advance (scaled by the clock).
                Zero still drains events that are already due.

        Returns:
            Number of events fired
        """
        async with self._tick_lock:
            # 1. Advance virtual time.
            now = self.clock.advance(wall_delta)

            # 2. Fire everything due. Events scheduled by these callbacks wait
            # for the next drain.
            fired = await self.events.drain_due()

            # 3. Per-agent upkeep.
            if self.upkeep_hooks:
                await self._run_upkeep(now)

            self.tick_count += 1
            return fired

    async def _run_upkeep(self, now: int) -> None:
        for agent in list(self._agents.values()):
            for hook in self.upkeep_hooks:
                try:
                    async with agent.lock:
                        result = hook(agent, now)
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    log_error(f"[Upkeep] Hook failed for agent {agent.agent_id}: {exc!r}")

    async def run(
        self,
        tick_interval: Optional[float] = None,
        wall_delta: Optional[float] = None,
        max_ticks: Optional[int] = None,
    ) -> int:
        """Tick repeatedly until ``stop()`` or ``max_ticks``.

        Calling ``run`` while already running is a no-op.

        Args:
            tick_interval: Seconds to sleep between ticks; defaults to
                Config.TICK_INTERVAL_SECONDS
            wall_delta: Milliseconds to advance per tick; defaults to the
                tick interval expressed in milliseconds
            max_ticks: Optional upper bound on ticks for this run

        Returns:
            Ticks completed by this call
        """
        if self._state is EngineState.RUNNING:
            return 0

        if tick_interval is None:
            tick_interval = Config.TICK_INTERVAL_SECONDS
        if tick_interval < 0:
            raise InvalidArgument(f"tick_interval must be >= 0, got {tick_interval}")
        if wall_delta is None:
            wall_delta = tick_interval * 1000
        if max_ticks is not None and max_ticks < 0:
            raise InvalidArgument(f"max_ticks must be >= 0, got {max_ticks}")

        self._state = EngineState.RUNNING
        self._stop_requested = False
        self._stopped.clear()
        log_info(
            f"Simulation started: {len(self._agents)} agents, "
            f"scale {self.clock.scale}x, virtual time {self.clock.formatted()}"
        )

        ticks = 0
        try:
            while not self._stop_requested:
                if max_ticks is not None and ticks >= max_ticks:
                    break
                await self.tick(wall_delta)
                ticks += 1
                await asyncio.sleep(tick_interval)
            await self.drain_reflections()
        finally:
            self._state = EngineState.STOPPED
            self._stop_requested = False
            self._stopped.set()

        log_success(f"Simulation stopped after {ticks} tick(s) at {self.clock.formatted()}")
        return ticks

    def stop(self) -> None:
        """Ask a running loop to exit before its next tick."""
        if self._state is EngineState.RUNNING:
            self._stop_requested = True

    async def wait_stopped(self) -> None:
        """Wait for the loop to exit and for in-flight reflections to finish."""
        await self._stopped.wait()
        await self.drain_reflections()


__all__ = ["SimulationEngine", "EngineState", "UpkeepHook", "AgentCallback", "REFLECTION_EVENT"]
