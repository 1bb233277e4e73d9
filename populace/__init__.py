"""
Populace - generative-agent population simulation core.

Agents with memories, plans and relationships advance under a shared
discrete-event clock. Every judgement and every line of dialogue comes from
an oracle: offline keyword heuristics by default, or a hosted LLM.

Dependencies are injected: clock, oracle and environment can all be swapped.
"""

__version__ = "0.1.0"

# Main simulation components
from .engine import SimulationEngine, EngineState, REFLECTION_EVENT
from .agent import AgentState
from .population import generate_profiles, populate

# Core machinery
from .clock import Clock, MS_PER_DAY, MS_PER_HOUR
from .events import EventQueue, ScheduledEvent
from .memory import MemoryStore, relevance_score
from .cognition import (
    PlanningQueue,
    ReflectionScheduler,
    ReflectionState,
    ReflectionPhase,
    RelationshipTable,
)
from .environment import Environment
from .ids import SequentialIds, uuid_ids

# Oracle
from .oracle import (
    build_oracle,
    OracleBackend,
    OracleClient,
    HeuristicOracle,
    LLMOracle,
    FALLBACK_UTTERANCE,
)

# Core schemas
from .schemas import (
    AgentProfile,
    ConversationEntry,
    MemoryRecord,
    PlanRecord,
    Location,
)

# Errors
from .errors import (
    PopulaceError,
    InvalidArgument,
    NotFound,
    DuplicateAgent,
    OracleUnavailable,
    EventCallbackFailure,
)

from .config import Config

__all__ = [
    "__version__",
    "SimulationEngine",
    "EngineState",
    "REFLECTION_EVENT",
    "AgentState",
    "generate_profiles",
    "populate",
    "Clock",
    "MS_PER_DAY",
    "MS_PER_HOUR",
    "EventQueue",
    "ScheduledEvent",
    "MemoryStore",
    "relevance_score",
    "PlanningQueue",
    "ReflectionScheduler",
    "ReflectionState",
    "ReflectionPhase",
    "RelationshipTable",
    "Environment",
    "SequentialIds",
    "uuid_ids",
    "build_oracle",
    "OracleBackend",
    "OracleClient",
    "HeuristicOracle",
    "LLMOracle",
    "FALLBACK_UTTERANCE",
    "AgentProfile",
    "ConversationEntry",
    "MemoryRecord",
    "PlanRecord",
    "Location",
    "PopulaceError",
    "InvalidArgument",
    "NotFound",
    "DuplicateAgent",
    "OracleUnavailable",
    "EventCallbackFailure",
    "Config",
]
