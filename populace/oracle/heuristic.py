"""Offline keyword-rule oracle.

Deterministic and network-free; used as the default backend and in tests.
"""

from __future__ import annotations

import re
from typing import List, Optional

from populace.oracle.base import OracleBackend
from populace.oracle.requests import (
    ImportanceRequest,
    InteractionQualityRequest,
    PlanStepsRequest,
    PriorityRequest,
    ReflectionInsightsRequest,
    SemanticKnowledgeRequest,
    UtteranceRequest,
)


IMPORTANCE_KEYWORDS = (
    "critical", "important", "urgent", "significant", "essential",
    "remember", "don't forget", "must", "need", "should",
)

PRIORITY_KEYWORDS = (
    "urgent", "important", "critical", "essential", "immediate",
    "high priority", "asap", "deadline", "crucial", "vital",
)

POSITIVE_KEYWORDS = ("thank", "appreciate", "good", "great", "excellent", "helpful")
NEGATIVE_KEYWORDS = ("bad", "unhelpful", "confusing", "wrong", "incorrect", "misunderstood")

# Verbs whose presence marks a statement as factual enough to remember.
FACT_MARKERS = ("is", "are", "was", "were")

DEFAULT_PLAN_STEPS = (
    "Research and gather information",
    "Analyze available options",
    "Make a decision based on analysis",
    "Implement the chosen solution",
    "Evaluate results and adjust if needed",
)

DEFAULT_INSIGHTS = (
    "I should pay more attention to details in conversations",
    "It seems I have recurring interests in certain topics",
    "I notice patterns in how I respond to questions",
)


def _keyword_score(text: str, keywords: tuple[str, ...], *, base: int = 5) -> int:
    lowered = text.lower()
    return base + sum(1 for keyword in keywords if keyword in lowered)


class HeuristicOracle(OracleBackend):
    """Keyword heuristics standing in for a language model."""

    name = "heuristic"

    async def generate_utterance(self, request: UtteranceRequest) -> str:
        profile = request.profile
        history = request.conversation_history
        if not history:
            return f"Hello, I'm {profile.first_name}. How can I help you?"

        others = [entry for entry in history if entry.speaker != profile.full_name]
        if not others:
            return "I'm not sure what you're asking. Could you please clarify?"

        last = others[-1].text.lower()
        if {"hello", "hi"} & set(re.findall(r"[a-z]+", last)):
            interests = ", ".join(profile.traits) or "various things"
            return (
                f"Hello! Nice to meet you. I'm {profile.first_name}, "
                f"a {profile.occupation or 'person'} with interests in {interests}."
            )
        if "how are you" in last:
            return "I'm doing well, thank you for asking! How about yourself?"
        if "?" in last:
            return (
                f"That's an interesting question. As someone who "
                f"{profile.background or 'has my background'}, I would say it depends on the context."
            )
        return (
            f"I understand what you're saying. From my perspective as {profile.first_name}, "
            "I think it's important to consider different viewpoints."
        )

    async def evaluate_importance(self, request: ImportanceRequest) -> float:
        return float(min(10, _keyword_score(request.text, IMPORTANCE_KEYWORDS)))

    async def extract_semantic_knowledge(self, request: SemanticKnowledgeRequest) -> Optional[str]:
        if len(request.history) < 3:
            return None
        recent = " ".join(entry.text for entry in request.history[-3:])
        words = set(re.findall(r"[a-z]+", recent.lower()))
        if not words.intersection(FACT_MARKERS):
            return None
        return f"Learned from conversation: {recent[:100]}..."

    async def generate_plan_steps(self, request: PlanStepsRequest) -> List[str]:
        return list(DEFAULT_PLAN_STEPS)

    async def evaluate_priority(self, request: PriorityRequest) -> float:
        return float(min(10, _keyword_score(request.goal, PRIORITY_KEYWORDS)))

    async def generate_reflection_insights(self, request: ReflectionInsightsRequest) -> List[str]:
        if not request.memories:
            return []
        return list(DEFAULT_INSIGHTS)

    async def evaluate_interaction_quality(self, request: InteractionQualityRequest) -> float:
        lowered = request.text.lower()
        quality = 5
        quality += sum(1 for keyword in POSITIVE_KEYWORDS if keyword in lowered)
        quality -= sum(1 for keyword in NEGATIVE_KEYWORDS if keyword in lowered)
        return float(max(1, min(10, quality)))


__all__ = ["HeuristicOracle", "DEFAULT_PLAN_STEPS", "DEFAULT_INSIGHTS"]
