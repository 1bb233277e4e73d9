"""Per-agent cognition stores.

This package houses the stateful pieces an agent carries between oracle
calls: the reflection trigger, the plan queue and the relationship table.
The memory stream lives in ``populace.memory``.
"""

from .planner import PlanningQueue, PriorityFn
from .reflection import (
    ReflectionScheduler,
    ReflectionState,
    ReflectionPhase,
    InsightGenerator,
    DEFAULT_REFLECTION_THRESHOLD,
    DEFAULT_REFLECTION_INTERVAL_MS,
    INSIGHT_IMPORTANCE,
)
from .relationships import RelationshipTable, SMOOTHING_ALPHA

__all__ = [
    "PlanningQueue",
    "PriorityFn",
    "ReflectionScheduler",
    "ReflectionState",
    "ReflectionPhase",
    "InsightGenerator",
    "DEFAULT_REFLECTION_THRESHOLD",
    "DEFAULT_REFLECTION_INTERVAL_MS",
    "INSIGHT_IMPORTANCE",
    "RelationshipTable",
    "SMOOTHING_ALPHA",
]
