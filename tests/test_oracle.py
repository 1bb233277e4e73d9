"""Tests for the oracle client fallbacks and the built-in backends."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from pydantic import TypeAdapter, ValidationError

from populace.config import Config
from populace.errors import InvalidArgument
from populace.oracle import (
    FALLBACK_UTTERANCE,
    HeuristicOracle,
    LLMOracle,
    OracleClient,
    build_oracle,
)
from populace.oracle.requests import (
    ImportanceRequest,
    InsightsResponse,
    OracleRequest,
    PlanStepsResponse,
    ScoreResponse,
    UtteranceResponse,
)
from populace.schemas import ConversationEntry, MemoryRecord


class BrokenOracle(HeuristicOracle):
    """Every call raises."""

    name = "broken"

    async def dispatch(self, request):
        raise ConnectionError("oracle offline")


class SlowOracle(HeuristicOracle):
    name = "slow"

    async def dispatch(self, request):
        await asyncio.sleep(5)


class WeirdOracle(HeuristicOracle):
    """Answers with the wrong shapes."""

    name = "weird"

    async def evaluate_importance(self, request):
        return float("nan")

    async def evaluate_priority(self, request):
        return 99

    async def evaluate_interaction_quality(self, request):
        return -4

    async def generate_plan_steps(self, request):
        return "not a list"

    async def extract_semantic_knowledge(self, request):
        return "  None "


# ---------------------------------------------------------------------------
# Client fallbacks
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_failing_backend_yields_documented_defaults(profile, capsys):
    client = OracleClient(BrokenOracle(), timeout=1.0)
    memory = MemoryRecord(id="m1", kind="episodic", content="x", created_at=0, importance=5)

    assert await client.generate_utterance(profile, []) == FALLBACK_UTTERANCE
    assert await client.evaluate_importance("anything") == 5
    assert await client.extract_semantic_knowledge([]) is None
    assert await client.generate_plan_steps("goal") == []
    assert await client.evaluate_priority("goal") == 5
    assert await client.generate_reflection_insights([memory]) == []
    assert await client.evaluate_interaction_quality("hi") == 5

    assert sum(client.failures.values()) == 7
    assert "oracle offline" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_slow_backend_times_out_to_default():
    client = OracleClient(SlowOracle(), timeout=0.01)

    assert await client.evaluate_importance("slow") == 5
    assert client.failures["importance"] == 1


@pytest.mark.asyncio
async def test_out_of_range_answers_are_clamped_or_replaced():
    client = OracleClient(WeirdOracle(), timeout=1.0)

    assert await client.evaluate_importance("nan please") == 5  # non-finite -> default
    assert await client.evaluate_priority("too high") == 10
    assert await client.evaluate_interaction_quality("too low") == 0
    assert await client.generate_plan_steps("string answer") == []
    assert await client.extract_semantic_knowledge([]) is None


def test_client_rejects_non_positive_timeout():
    with pytest.raises(InvalidArgument):
        OracleClient(HeuristicOracle(), timeout=0)


@pytest.mark.asyncio
async def test_backend_can_be_mocked():
    backend = HeuristicOracle()
    backend.dispatch = AsyncMock(return_value=8)
    client = OracleClient(backend, timeout=1.0)

    assert await client.evaluate_priority("Finish the report") == 8
    request = backend.dispatch.await_args.args[0]
    assert request.kind == "priority"
    assert request.goal == "Finish the report"


def test_requests_route_on_kind_tag():
    adapter = TypeAdapter(OracleRequest)
    request = adapter.validate_python({"kind": "importance", "text": "Remember the deadline"})

    assert isinstance(request, ImportanceRequest)
    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "mystery", "text": "?"})


# ---------------------------------------------------------------------------
# Heuristic backend
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_heuristic_scores(oracle):
    assert await oracle.evaluate_importance("Lunch was fine") == 5
    assert await oracle.evaluate_importance("Important: you must remember the urgent deadline") == 9
    assert await oracle.evaluate_priority("URGENT and critical, asap") == 8
    assert await oracle.evaluate_interaction_quality("Thank you, that was great") == 7
    assert await oracle.evaluate_interaction_quality("bad, wrong, confusing, incorrect, misunderstood") == 1


@pytest.mark.asyncio
async def test_heuristic_utterances(oracle, profile):
    assert await oracle.generate_utterance(profile, []) == "Hello, I'm Ana. How can I help you?"

    greeting = [ConversationEntry(speaker="Ben", text="Hi there!")]
    reply = await oracle.generate_utterance(profile, greeting)
    assert reply.startswith("Hello! Nice to meet you. I'm Ana, a Chef")

    question = [ConversationEntry(speaker="Ben", text="Where do you buy flour?")]
    reply = await oracle.generate_utterance(profile, question)
    assert "runs the corner cafe" in reply

    own_line = [ConversationEntry(speaker="Ana Lopez", text="Anyone here?")]
    reply = await oracle.generate_utterance(profile, own_line)
    assert "clarify" in reply


@pytest.mark.asyncio
async def test_heuristic_knowledge_and_insights(oracle):
    short = [ConversationEntry(speaker="Ben", text="The cafe is open")]
    assert await oracle.extract_semantic_knowledge(short) is None

    history = [
        ConversationEntry(speaker="Ben", text="Morning"),
        ConversationEntry(speaker="Ana", text="Morning Ben"),
        ConversationEntry(speaker="Ben", text="The bakery was closed today"),
    ]
    knowledge = await oracle.extract_semantic_knowledge(history)
    assert knowledge.startswith("Learned from conversation: Morning Morning Ben The bakery was closed")

    assert await oracle.generate_reflection_insights([]) == []
    memory = MemoryRecord(id="m1", kind="episodic", content="x", created_at=0, importance=5)
    assert len(await oracle.generate_reflection_insights([memory])) == 3
    assert len(await oracle.generate_plan_steps("Open a bakery")) == 5


# ---------------------------------------------------------------------------
# LLM backend
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_llm_oracle_renders_prompts_and_parses_responses(monkeypatch, profile):
    calls: list[dict] = []
    responses = {
        UtteranceResponse: UtteranceResponse(text="  Fresh bread at noon!  "),
        ScoreResponse: ScoreResponse(score=7.5),
        PlanStepsResponse: PlanStepsResponse(steps=["Find a venue", " ", "Send invites"]),
        InsightsResponse: InsightsResponse(insights=["I like mornings"]),
    }

    async def fake_call(**kwargs):
        calls.append(kwargs)
        return responses[kwargs["response_model"]]

    monkeypatch.setattr("populace.oracle.llm.call_llm_with_retries", fake_call)
    client = OracleClient(LLMOracle("openai", "gpt-test"), timeout=1.0)

    history = [ConversationEntry(speaker="Ben", text="What's baking today?")]
    assert await client.generate_utterance(profile, history) == "Fresh bread at noon!"
    assert await client.evaluate_importance("x") == 7.5
    assert await client.generate_plan_steps("Host a party") == ["Find a venue", "Send invites"]

    utterance_call = calls[0]
    assert utterance_call["llm_provider"] == "openai"
    assert utterance_call["llm_model"] == "gpt-test"
    assert "Ana Lopez" in utterance_call["system_prompt"]
    assert "Ben: What's baking today?" in utterance_call["user_prompt"]
    assert "{{" not in utterance_call["system_prompt"] + utterance_call["user_prompt"]


@pytest.mark.asyncio
async def test_llm_oracle_failure_falls_back(monkeypatch):
    async def fake_call(**kwargs):
        raise RuntimeError("rate limited")

    monkeypatch.setattr("populace.oracle.llm.call_llm_with_retries", fake_call)
    client = OracleClient(LLMOracle("anthropic", "claude-test"), timeout=1.0)

    assert await client.evaluate_interaction_quality("fine") == 5
    assert client.failures["interaction_quality"] == 1


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def test_build_oracle_selects_backend(monkeypatch):
    assert isinstance(build_oracle("heuristic").backend, HeuristicOracle)

    client = build_oracle("openai", "gpt-test", timeout=2.0)
    assert isinstance(client.backend, LLMOracle)
    assert client.timeout == 2.0

    monkeypatch.setattr(Config, "ORACLE_MODEL", None)
    with pytest.raises(InvalidArgument):
        build_oracle("anthropic")
