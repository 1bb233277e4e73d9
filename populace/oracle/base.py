"""Abstract oracle backend.

A backend answers each closed request variant with one async method.
Backends may raise; ``OracleClient`` turns any failure into a neutral
default so the simulation keeps running.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from populace.oracle.requests import (
    ImportanceRequest,
    InteractionQualityRequest,
    OracleRequest,
    PlanStepsRequest,
    PriorityRequest,
    ReflectionInsightsRequest,
    SemanticKnowledgeRequest,
    UtteranceRequest,
)


# Request kind -> backend method name
_HANDLERS: Dict[str, str] = {
    "utterance": "generate_utterance",
    "importance": "evaluate_importance",
    "semantic_knowledge": "extract_semantic_knowledge",
    "plan_steps": "generate_plan_steps",
    "priority": "evaluate_priority",
    "reflection_insights": "generate_reflection_insights",
    "interaction_quality": "evaluate_interaction_quality",
}


class OracleBackend(ABC):
    """Source of every judgement and generated text in the simulation."""

    name = "oracle"

    @abstractmethod
    async def generate_utterance(self, request: UtteranceRequest) -> str:
        """Return the agent's next line of dialogue."""

    @abstractmethod
    async def evaluate_importance(self, request: ImportanceRequest) -> float:
        """Return a 0-10 importance score for a piece of text."""

    @abstractmethod
    async def extract_semantic_knowledge(self, request: SemanticKnowledgeRequest) -> Optional[str]:
        """Return lasting knowledge from a conversation, or None."""

    @abstractmethod
    async def generate_plan_steps(self, request: PlanStepsRequest) -> List[str]:
        """Return ordered steps for a goal."""

    @abstractmethod
    async def evaluate_priority(self, request: PriorityRequest) -> float:
        """Return a 0-10 priority score for a goal."""

    @abstractmethod
    async def generate_reflection_insights(self, request: ReflectionInsightsRequest) -> List[str]:
        """Return insights drawn from a batch of memories."""

    @abstractmethod
    async def evaluate_interaction_quality(self, request: InteractionQualityRequest) -> float:
        """Return a 0-10 quality score for a social interaction."""

    async def dispatch(self, request: OracleRequest) -> Any:
        """Route a tagged request to the matching method."""
        method_name = _HANDLERS.get(request.kind)
        if method_name is None:
            raise ValueError(f"Unsupported oracle request kind '{request.kind}'")
        return await getattr(self, method_name)(request)


__all__ = ["OracleBackend"]
