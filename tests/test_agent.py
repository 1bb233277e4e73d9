"""Tests for AgentState: conversation, memory, planning, relationships and reflection."""

import asyncio

import pytest

from populace.agent import AgentState, SEMANTIC_KNOWLEDGE_IMPORTANCE
from populace.clock import Clock
from populace.errors import InvalidArgument
from populace.oracle import HeuristicOracle, OracleClient
from populace.oracle.heuristic import DEFAULT_INSIGHTS, DEFAULT_PLAN_STEPS
from populace.schemas import ConversationEntry


def conversation(*lines: tuple[str, str]) -> list[ConversationEntry]:
    return [ConversationEntry(speaker=speaker, text=text) for speaker, text in lines]


@pytest.mark.asyncio
async def test_generate_utterance_stores_episode_and_knowledge(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle)
    history = conversation(
        ("Ben", "Morning Ana"),
        ("Ana Lopez", "Morning Ben"),
        ("Ben", "The market is closed, you must remember that"),
    )

    reply = await agent.generate_utterance(history)

    assert reply.startswith("I understand what you're saying")
    episodic = agent.memory.by_kind("episodic")
    assert [record.content for record in episodic] == [
        'Ben said: "The market is closed, you must remember that"'
    ]
    assert episodic[0].importance == 7  # "must" + "remember"
    semantic = agent.memory.by_kind("semantic")
    assert len(semantic) == 1
    assert semantic[0].importance == SEMANTIC_KNOWLEDGE_IMPORTANCE
    assert agent.reflection.state.interaction_count == 1


@pytest.mark.asyncio
async def test_generate_utterance_with_empty_history(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle)

    reply = await agent.generate_utterance([])

    assert reply == "Hello, I'm Ana. How can I help you?"
    assert len(agent.memory) == 0
    assert agent.reflection.state.interaction_count == 1


@pytest.mark.asyncio
async def test_oracle_sees_relevant_memories_and_active_plans(profile, clock):
    seen = {}

    class RecordingOracle(HeuristicOracle):
        async def generate_utterance(self, request):
            seen["memories"] = [record.content for record in request.relevant_memories]
            seen["plans"] = [plan.goal for plan in request.current_plans]
            return "ok"

    agent = AgentState(profile, clock, OracleClient(RecordingOracle(), timeout=1.0))
    await agent.remember("semantic", "Ben bakes sourdough", importance=9)
    plan = await agent.create_plan("Open a second cafe")

    await agent.generate_utterance(conversation(("Ben", "Hello")))

    assert seen["memories"][0] == "Ben bakes sourdough"
    assert 'Ben said: "Hello"' in seen["memories"]
    assert seen["plans"] == [plan.goal]


@pytest.mark.asyncio
async def test_reflection_hook_fires_when_threshold_reached(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle, reflection_threshold=3)
    notified: list[str] = []
    agent.on_reflection_due = lambda state: notified.append(state.agent_id)

    for _ in range(3):
        await agent.generate_utterance(conversation(("Ben", "How are you?")))

    assert notified == ["ana"]
    assert agent.reflection.is_due


@pytest.mark.asyncio
async def test_reflect_writes_insights_and_resets(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle, reflection_threshold=2)
    await agent.generate_utterance(conversation(("Ben", "Hi")))
    await agent.generate_utterance(conversation(("Ben", "Bye")))
    assert agent.reflection.is_due

    insights = await agent.reflect()

    assert [record.content for record in insights] == list(DEFAULT_INSIGHTS)
    assert all(record.kind == "semantic" and record.importance == 7 for record in insights)
    assert agent.reflection.state.interaction_count == 0
    assert not agent.reflection.is_due


@pytest.mark.asyncio
async def test_reflect_without_episodes_only_resets(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle)
    await agent.remember("semantic", "Knows the town", importance=5)

    assert await agent.reflect() == []
    assert len(agent.memory) == 1


@pytest.mark.asyncio
async def test_remember_uses_oracle_importance_when_missing(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle)

    scored = await agent.remember("episodic", "An urgent and critical leak")
    explicit = await agent.remember("procedural", "Shut the valve clockwise", importance=3)

    assert scored.importance == 7
    assert explicit.importance == 3
    with pytest.raises(InvalidArgument):
        await agent.remember("dream", "nope")


@pytest.mark.asyncio
async def test_create_and_reprioritize_plans(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle)

    relaxed = await agent.create_plan("Read a novel")
    urgent = await agent.create_plan("Urgent: renew the permit before the deadline")

    assert relaxed.steps == list(DEFAULT_PLAN_STEPS)
    assert urgent.priority == 7
    assert [plan.id for plan in agent.current_plans()] == [urgent.id, relaxed.id]

    assert await agent.reprioritize_plans() == 2
    assert [plan.priority for plan in agent.current_plans()] == [7, 5]

    with pytest.raises(InvalidArgument):
        await agent.create_plan("")


@pytest.mark.asyncio
async def test_observe_interaction_updates_affinity(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle)

    score = await agent.observe_interaction("ben", "Thank you, that was excellent and helpful")

    # quality 8 -> 5 * 0.8 + 8 * 0.2
    assert score == pytest.approx(5.6)
    assert agent.relationships.score("ben") == pytest.approx(5.6)
    assert agent.relationships.score("carla") == 5


@pytest.mark.asyncio
async def test_agent_lock_serialises_mutations(profile):
    clock = Clock(start_time=0)
    release = asyncio.Event()

    class GatedOracle(HeuristicOracle):
        async def evaluate_interaction_quality(self, request):
            return 10

    agent = AgentState(profile, clock, OracleClient(GatedOracle(), timeout=1.0))

    async def hold_lock():
        async with agent.lock:
            await release.wait()

    holder = asyncio.create_task(hold_lock())
    await asyncio.sleep(0)
    update = asyncio.create_task(agent.observe_interaction("ben", "great"))
    await asyncio.sleep(0.01)

    assert "ben" not in agent.relationships
    release.set()
    await asyncio.gather(holder, update)
    assert agent.relationships.score("ben") == pytest.approx(6.0)


def test_accessors_and_summary(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle)

    assert agent.agent_id == "ana"
    assert agent.full_name == "Ana Lopez"
    summary = agent.summary()
    assert summary["memories"] == {"episodic": 0, "semantic": 0, "procedural": 0}
    assert summary["active_plans"] == 0


def test_explicit_zero_reflection_threshold_rejected(profile, clock, oracle):
    with pytest.raises(InvalidArgument):
        AgentState(profile, clock, oracle, reflection_threshold=0)


@pytest.mark.asyncio
async def test_begin_reflection_resets_before_insights_arrive(profile, clock, oracle):
    agent = AgentState(profile, clock, oracle, reflection_threshold=1)
    await agent.generate_utterance(conversation(("Ben", "Hi")))
    assert agent.reflection.is_due

    recent = await agent.begin_reflection()
    assert [record.kind for record in recent] == ["episodic"]
    assert not agent.reflection.is_due
    assert agent.memory.by_kind("semantic") == []

    insights = await agent.finish_reflection(recent)
    assert [record.content for record in insights] == list(DEFAULT_INSIGHTS)
    assert await agent.finish_reflection([]) == []
