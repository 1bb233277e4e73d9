"""Language-model backed oracle.

Each operation renders a prompt template and requests a structured pydantic
response through ``call_llm_with_retries`` (mirascope + tenacity).
"""

from __future__ import annotations

import os
from typing import List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from populace.llm_utils import call_llm_with_retries
from populace.logging_utils import log_llm
from populace.oracle.base import OracleBackend
from populace.oracle.prompts import (
    DEFAULT_PROMPTS,
    PromptLibrary,
    format_conversation,
    format_memories,
    format_plans,
    format_profile,
)
from populace.oracle.requests import (
    ImportanceRequest,
    InsightsResponse,
    InteractionQualityRequest,
    KnowledgeResponse,
    PlanStepsRequest,
    PlanStepsResponse,
    PriorityRequest,
    ReflectionInsightsRequest,
    ScoreResponse,
    SemanticKnowledgeRequest,
    UtteranceRequest,
    UtteranceResponse,
)


ResponseT = TypeVar("ResponseT", bound=BaseModel)


class LLMOracle(OracleBackend):
    """Oracle that asks a hosted model for every judgement.

    Args:
        provider: mirascope provider name (openai, anthropic, ...)
        model: Model identifier for that provider
        prompts: Template library; defaults to DEFAULT_PROMPTS
        max_attempts: Schema-validation retries per call
    """

    name = "llm"

    def __init__(
        self,
        provider: str,
        model: str,
        *,
        prompts: Optional[PromptLibrary] = None,
        max_attempts: int = 3,
    ) -> None:
        self.provider = provider
        self.model = model
        self.prompts = prompts or DEFAULT_PROMPTS
        self.max_attempts = max_attempts

    def __repr__(self) -> str:
        return f"LLMOracle(provider={self.provider!r}, model={self.model!r})"

    async def _ask(
        self,
        template_name: str,
        replacements: Mapping[str, str],
        response_model: Type[ResponseT],
    ) -> ResponseT:
        system_prompt, user_prompt = self.prompts.get(template_name).render(replacements)

        if os.getenv("DEBUG_LLM"):
            log_llm(f"[{template_name}] system prompt:\n{system_prompt}")
            log_llm(f"[{template_name}] user prompt:\n{user_prompt}")

        return await call_llm_with_retries(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            llm_provider=self.provider,
            llm_model=self.model,
            response_model=response_model,
            max_attempts=self.max_attempts,
        )

    async def generate_utterance(self, request: UtteranceRequest) -> str:
        response = await self._ask(
            "utterance",
            {
                "profile": format_profile(request.profile),
                "memories": format_memories(request.relevant_memories),
                "plans": format_plans(request.current_plans),
                "conversation": format_conversation(request.conversation_history),
            },
            UtteranceResponse,
        )
        return response.text.strip()

    async def evaluate_importance(self, request: ImportanceRequest) -> float:
        response = await self._ask("importance", {"text": request.text}, ScoreResponse)
        return response.score

    async def extract_semantic_knowledge(self, request: SemanticKnowledgeRequest) -> Optional[str]:
        if not request.history:
            return None
        response = await self._ask(
            "semantic_knowledge",
            {"conversation": format_conversation(request.history)},
            KnowledgeResponse,
        )
        return response.knowledge

    async def generate_plan_steps(self, request: PlanStepsRequest) -> List[str]:
        response = await self._ask("plan_steps", {"goal": request.goal}, PlanStepsResponse)
        steps = [step.strip() for step in response.steps if step.strip()]
        return steps or [f"Work towards: {request.goal}"]

    async def evaluate_priority(self, request: PriorityRequest) -> float:
        response = await self._ask("priority", {"goal": request.goal}, ScoreResponse)
        return response.score

    async def generate_reflection_insights(self, request: ReflectionInsightsRequest) -> List[str]:
        if not request.memories:
            return []
        response = await self._ask(
            "reflection_insights",
            {"memories": format_memories(request.memories)},
            InsightsResponse,
        )
        return response.insights

    async def evaluate_interaction_quality(self, request: InteractionQualityRequest) -> float:
        response = await self._ask("interaction_quality", {"text": request.text}, ScoreResponse)
        return response.score


__all__ = ["LLMOracle"]
