"""Closed request/response shapes for every oracle operation.

Each request variant carries a literal ``kind`` tag so a single
``OracleRequest`` union can be validated and routed without dynamic
payloads.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field
from typing_extensions import Annotated

from populace.schemas import (
    AgentProfile,
    ConversationEntry,
    MAX_SCORE,
    MIN_SCORE,
    MemoryRecord,
    PlanRecord,
)


# ============================================================================
# Requests
# ============================================================================


class UtteranceRequest(BaseModel):
    kind: Literal["utterance"] = "utterance"
    profile: AgentProfile
    conversation_history: List[ConversationEntry] = Field(default_factory=list)
    relevant_memories: List[MemoryRecord] = Field(default_factory=list)
    current_plans: List[PlanRecord] = Field(default_factory=list)


class ImportanceRequest(BaseModel):
    kind: Literal["importance"] = "importance"
    text: str


class SemanticKnowledgeRequest(BaseModel):
    kind: Literal["semantic_knowledge"] = "semantic_knowledge"
    history: List[ConversationEntry] = Field(default_factory=list)


class PlanStepsRequest(BaseModel):
    kind: Literal["plan_steps"] = "plan_steps"
    goal: str


class PriorityRequest(BaseModel):
    kind: Literal["priority"] = "priority"
    goal: str


class ReflectionInsightsRequest(BaseModel):
    kind: Literal["reflection_insights"] = "reflection_insights"
    memories: List[MemoryRecord] = Field(default_factory=list)


class InteractionQualityRequest(BaseModel):
    kind: Literal["interaction_quality"] = "interaction_quality"
    text: str


OracleRequest = Annotated[
    Union[
        UtteranceRequest,
        ImportanceRequest,
        SemanticKnowledgeRequest,
        PlanStepsRequest,
        PriorityRequest,
        ReflectionInsightsRequest,
        InteractionQualityRequest,
    ],
    Field(discriminator="kind"),
]


# ============================================================================
# Structured responses (used by LLM-backed oracles)
# ============================================================================


class UtteranceResponse(BaseModel):
    text: str = Field(..., description="What the agent says next, in character")


class ScoreResponse(BaseModel):
    score: float = Field(..., ge=MIN_SCORE, le=MAX_SCORE, description="Score from 0 to 10")


class KnowledgeResponse(BaseModel):
    knowledge: Optional[str] = Field(
        None, description="Concise third-person fact worth remembering, or null"
    )


class PlanStepsResponse(BaseModel):
    steps: List[str] = Field(default_factory=list, description="3-5 concrete steps in order")


class InsightsResponse(BaseModel):
    insights: List[str] = Field(default_factory=list, description="Short first-person insights")


__all__ = [
    "UtteranceRequest",
    "ImportanceRequest",
    "SemanticKnowledgeRequest",
    "PlanStepsRequest",
    "PriorityRequest",
    "ReflectionInsightsRequest",
    "InteractionQualityRequest",
    "OracleRequest",
    "UtteranceResponse",
    "ScoreResponse",
    "KnowledgeResponse",
    "PlanStepsResponse",
    "InsightsResponse",
]
