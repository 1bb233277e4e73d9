"""
Pydantic schemas for the Populace simulation core.

All records that cross a component boundary are defined here.

Design Philosophy:
- Records owned by a store are only mutated by that store
- MemoryRecord is frozen once created
- PlanRecord exposes status/priority changes only through PlanningQueue
- Timestamps are virtual integer milliseconds taken from the shared Clock
"""

import math
from typing import Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field

from populace.errors import InvalidArgument


MemoryKind = Literal["episodic", "semantic", "procedural"]
PlanStatus = Literal["active", "completed", "abandoned"]
LocationType = Literal["residential", "workplace", "recreation", "commercial", "other"]

MEMORY_KINDS: tuple[str, ...] = get_args(MemoryKind)
PLAN_STATUSES: tuple[str, ...] = get_args(PlanStatus)

MIN_SCORE = 0.0
MAX_SCORE = 10.0
NEUTRAL_SCORE = 5.0


def clamp_score(value: float) -> float:
    """Clamp a 0-10 score (importance, priority, affinity) into range.

    Raises:
        InvalidArgument: If value is NaN
    """

    value = float(value)
    if math.isnan(value):
        raise InvalidArgument("score must be a number, got NaN")
    return max(MIN_SCORE, min(MAX_SCORE, value))


# ============================================================================
# Agent Identity
# ============================================================================


class AgentProfile(BaseModel):
    """Static profile of an agent (WHO the agent IS).

    Profiles are external input: the core reads them to build oracle requests
    but never modifies them.
    """

    agent_id: str = Field(..., min_length=1, description="Unique, immutable agent identifier")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field("", description="Family name")
    age: Optional[int] = Field(None, ge=0, description="Age in years")
    occupation: Optional[str] = Field(None, description="Occupation or role")
    traits: List[str] = Field(default_factory=list, description="Personality traits")
    background: Optional[str] = Field(None, description="Short backstory")
    goals: List[str] = Field(default_factory=list, description="Long-running goals")
    values: List[str] = Field(default_factory=list, description="Personal values")
    # Format: {other_agent_id: "relationship description"}
    relationships: Dict[str, str] = Field(
        default_factory=dict, description="Known relationships {agent_id: description}"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ConversationEntry(BaseModel):
    """One line of a conversation transcript."""

    speaker: str
    text: str

    model_config = ConfigDict(frozen=True)


ConversationHistory = List[ConversationEntry]


# ============================================================================
# Cognitive Records
# ============================================================================


class MemoryRecord(BaseModel):
    """A single entry in an agent's memory stream.

    Memory kinds:
    - episodic: things that happened ("Ana said: 'see you at the cafe'")
    - semantic: distilled knowledge and reflection insights
    - procedural: how-to knowledge

    Importance (0-10, 5 = neutral) weights retrieval together with age.
    """

    id: str = Field(..., description="Unique memory identifier")
    kind: MemoryKind = Field(..., description="episodic, semantic or procedural")
    content: str = Field(..., description="Memory content (natural language)")
    created_at: int = Field(..., description="Virtual time of creation (ms)")
    importance: float = Field(..., ge=MIN_SCORE, le=MAX_SCORE, description="Importance 0-10")
    # Insertion order inside the owning store; breaks retrieval ties.
    sequence: int = Field(0, ge=0, description="Insertion order within the store")

    model_config = ConfigDict(frozen=True)


class PlanRecord(BaseModel):
    """A goal with ordered steps, owned by a PlanningQueue."""

    id: str = Field(..., description="Unique plan identifier")
    goal: str = Field(..., min_length=1, description="Goal text")
    steps: List[str] = Field(default_factory=list, description="Ordered steps")
    status: PlanStatus = Field("active", description="active, completed or abandoned")
    priority: float = Field(NEUTRAL_SCORE, ge=MIN_SCORE, le=MAX_SCORE, description="Priority 0-10")
    created_at: int = Field(..., description="Virtual time of creation (ms)")
    updated_at: int = Field(..., description="Virtual time of last change (ms)")
    sequence: int = Field(0, ge=0, description="Insertion order within the queue")


# ============================================================================
# Environment
# ============================================================================


class Location(BaseModel):
    """A named place with bounded capacity (passive lookup only)."""

    id: str = Field(..., min_length=1)
    name: str
    type: LocationType = "other"
    capacity: int = Field(..., ge=0, description="Maximum occupancy")

    model_config = ConfigDict(frozen=True)


__all__ = [
    "MemoryKind",
    "PlanStatus",
    "LocationType",
    "MEMORY_KINDS",
    "PLAN_STATUSES",
    "MIN_SCORE",
    "MAX_SCORE",
    "NEUTRAL_SCORE",
    "clamp_score",
    "AgentProfile",
    "ConversationEntry",
    "ConversationHistory",
    "MemoryRecord",
    "PlanRecord",
    "Location",
]
