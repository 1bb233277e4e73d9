"""
Agent state: one resident of the simulation.

An AgentState composes the per-agent stores (memory, reflection trigger,
plans, relationships) with a shared OracleClient. Every mutation happens
while holding ``agent.lock``; oracle calls are awaited without it so a slow
oracle never blocks event callbacks aimed at the same agent.

Usage::

    agent = AgentState(profile, clock, build_oracle())
    reply = await agent.generate_utterance(history)
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence

from .clock import Clock
from .cognition import (
    DEFAULT_REFLECTION_INTERVAL_MS,
    PlanningQueue,
    ReflectionScheduler,
    RelationshipTable,
)
from .config import Config
from .errors import InvalidArgument
from .ids import SequentialIds
from .memory import DEFAULT_RECENT_LIMIT, MemoryStore
from .oracle import OracleClient
from .schemas import (
    MEMORY_KINDS,
    AgentProfile,
    ConversationEntry,
    MemoryRecord,
    PlanRecord,
)


# Importance given to knowledge distilled from conversation.
SEMANTIC_KNOWLEDGE_IMPORTANCE = 7.0
# Conversation lines used as retrieval context.
RETRIEVAL_CONTEXT_LINES = 3

ReflectionHook = Callable[["AgentState"], Any]


class AgentState:
    """Cognitive state of a single agent.

    Args:
        profile: Static identity (never modified)
        clock: Shared virtual clock
        oracle: Shared oracle client
        reflection_threshold: Interactions before reflection is due;
            defaults to Config.REFLECTION_THRESHOLD
        reflection_interval_ms: Elapsed time before reflection is due

    Attributes:
        memory: MemoryStore
        reflection: ReflectionScheduler
        plans: PlanningQueue
        relationships: RelationshipTable
        lock: asyncio.Lock guarding all of the above
        on_reflection_due: Called with the agent when an interaction makes
            reflection due (the engine installs one on register)
    """

    def __init__(
        self,
        profile: AgentProfile,
        clock: Clock,
        oracle: OracleClient,
        *,
        reflection_threshold: Optional[int] = None,
        reflection_interval_ms: int = DEFAULT_REFLECTION_INTERVAL_MS,
    ) -> None:
        self.profile = profile
        self.clock = clock
        self.oracle = oracle
        self.lock = asyncio.Lock()

        agent_id = profile.agent_id
        self.memory = MemoryStore(clock, id_factory=SequentialIds(f"{agent_id}:mem"))
        self.reflection = ReflectionScheduler(
            self.memory,
            clock,
            threshold=(
                Config.REFLECTION_THRESHOLD if reflection_threshold is None else reflection_threshold
            ),
            interval_ms=reflection_interval_ms,
        )
        self.plans = PlanningQueue(clock, id_factory=SequentialIds(f"{agent_id}:plan"))
        self.relationships = RelationshipTable()
        self.on_reflection_due: Optional[ReflectionHook] = None

    def __repr__(self) -> str:
        return f"AgentState(agent_id={self.agent_id!r}, name={self.full_name!r})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def agent_id(self) -> str:
        return self.profile.agent_id

    @property
    def full_name(self) -> str:
        return self.profile.full_name

    def summary(self) -> Dict[str, Any]:
        """Read-only snapshot for dashboards and analytics."""
        return {
            "agent_id": self.agent_id,
            "name": self.full_name,
            "memories": self.memory.counts(),
            "active_plans": len(self.plans.active_plans()),
            "relationships": self.relationships.snapshot(),
            "reflection": self.reflection.state,
        }

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    async def generate_utterance(self, history: Sequence[ConversationEntry]) -> str:
        """Produce the agent's next line and learn from the conversation.

        The latest line is stored as an episodic memory and any distilled
        knowledge as a semantic one. Relevant memories and active plans are
        then handed to the oracle. Finally the interaction is counted and,
        when reflection becomes due, ``on_reflection_due`` is notified.

        Args:
            history: Conversation so far (may be empty)

        Returns:
            The generated utterance (or the oracle's fallback line)
        """
        history = list(history)

        episode: Optional[str] = None
        importance = 0.0
        knowledge: Optional[str] = None
        if history:
            last = history[-1]
            episode = f'{last.speaker} said: "{last.text}"'
            importance = await self.oracle.evaluate_importance(episode)
            knowledge = await self.oracle.extract_semantic_knowledge(history)

        async with self.lock:
            if episode is not None:
                self.memory.record("episodic", episode, importance)
            if knowledge:
                self.memory.record("semantic", knowledge, SEMANTIC_KNOWLEDGE_IMPORTANCE)
            relevant = self.memory.retrieve_relevant(history[-RETRIEVAL_CONTEXT_LINES:])
            current_plans = self.plans.active_plans()

        response = await self.oracle.generate_utterance(
            self.profile, history, relevant, current_plans
        )

        async with self.lock:
            due = self.reflection.note_interaction()

        if due and self.on_reflection_due is not None:
            self.on_reflection_due(self)
        return response

    async def observe_interaction(self, target_id: str, text: str) -> float:
        """Rate an interaction with ``target_id`` and update the affinity.

        Returns:
            The new affinity score
        """
        quality = await self.oracle.evaluate_interaction_quality(text)
        async with self.lock:
            return self.relationships.update(target_id, quality)

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    async def remember(
        self, kind: str, content: str, importance: Optional[float] = None
    ) -> MemoryRecord:
        """Store a memory, asking the oracle for importance when omitted.

        Raises:
            InvalidArgument: If kind is unknown
        """
        if kind not in MEMORY_KINDS:
            raise InvalidArgument(
                f"Unknown memory kind '{kind}' (expected one of {', '.join(MEMORY_KINDS)})"
            )
        if importance is None:
            importance = await self.oracle.evaluate_importance(content)
        async with self.lock:
            return self.memory.record(kind, content, importance)

    async def begin_reflection(self) -> List[MemoryRecord]:
        """Reset the reflection trigger and return the memories to reflect on.

        Interactions that arrive after this call count toward the next
        reflection.
        """
        async with self.lock:
            recent = self.memory.recent("episodic", limit=DEFAULT_RECENT_LIMIT)
            self.reflection.begin_reflection()
        return recent

    async def finish_reflection(self, recent: Sequence[MemoryRecord]) -> List[MemoryRecord]:
        """Ask the oracle for insights on ``recent`` and store them.

        The oracle is awaited without holding the agent lock.
        """
        if not recent:
            return []
        insights = await self.oracle.generate_reflection_insights(list(recent))
        async with self.lock:
            return self.reflection.store_insights(insights)

    async def reflect(self) -> List[MemoryRecord]:
        """Turn the newest episodic memories into semantic insights.

        Returns:
            The insight records written (empty when there was nothing to
            reflect on)
        """
        recent = await self.begin_reflection()
        return await self.finish_reflection(recent)

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    async def create_plan(self, goal: str) -> PlanRecord:
        """Create a plan whose steps and priority come from the oracle.

        Raises:
            InvalidArgument: If goal is blank
        """
        if not goal or not goal.strip():
            raise InvalidArgument("Plan goal must be a non-empty string")

        steps = await self.oracle.generate_plan_steps(goal)
        priority = await self.oracle.evaluate_priority(goal)
        async with self.lock:
            return self.plans.add(goal, steps, priority)

    async def reprioritize_plans(self) -> int:
        """Re-score every active plan through the oracle.

        Plans created while the oracle is answering keep their priority.

        Returns:
            Number of plans updated
        """
        async with self.lock:
            active = self.plans.active_plans()
        if not active:
            return 0

        scores = await asyncio.gather(
            *(self.oracle.evaluate_priority(plan.goal) for plan in active)
        )
        new_priorities = {plan.id: score for plan, score in zip(active, scores)}

        async with self.lock:
            return self.plans.reprioritize(
                lambda plan: new_priorities.get(plan.id, plan.priority)
            )

    def current_plans(self) -> List[PlanRecord]:
        return self.plans.active_plans()


__all__ = ["AgentState", "ReflectionHook", "SEMANTIC_KNOWLEDGE_IMPORTANCE"]
