"""Fault-tolerant front door to an oracle backend.

Every call is bounded by a timeout. Any failure (exception, timeout, or an
answer of the wrong shape) is logged as ``OracleUnavailable`` and replaced
with a neutral default, so callers never see oracle errors.
"""

from __future__ import annotations

import asyncio
import math
import os
from collections import Counter
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from populace.config import Config
from populace.errors import InvalidArgument, OracleUnavailable
from populace.logging_utils import log_error, log_llm
from populace.oracle.base import OracleBackend
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
from populace.schemas import (
    AgentProfile,
    ConversationEntry,
    MemoryRecord,
    NEUTRAL_SCORE,
    PlanRecord,
    clamp_score,
)


T = TypeVar("T")

FALLBACK_UTTERANCE = "I'm having trouble processing that right now. Let's continue our conversation."


def _as_score(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("boolean is not a score")
    score = float(value)
    if not math.isfinite(score):
        raise ValueError(f"non-finite score {value!r}")
    return clamp_score(score)


def _as_text(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected text, got {type(value).__name__}")
    return value


def _as_optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = _as_text(value).strip()
    if not text or text.lower() == "none":
        return None
    return text


def _as_text_list(value: Any) -> List[str]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise TypeError(f"expected a list of text, got {type(value).__name__}")
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class OracleClient:
    """Wraps an OracleBackend with timeouts and documented defaults.

    | Call                         | Default              |
    |------------------------------|----------------------|
    | generate_utterance           | FALLBACK_UTTERANCE   |
    | evaluate_importance          | 5                    |
    | extract_semantic_knowledge   | None                 |
    | generate_plan_steps          | []                   |
    | evaluate_priority            | 5                    |
    | generate_reflection_insights | []                   |
    | evaluate_interaction_quality | 5                    |

    Attributes:
        backend: The wrapped backend
        timeout: Seconds allowed per call
        failures: Count of fallbacks taken, keyed by request kind
    """

    def __init__(self, backend: OracleBackend, *, timeout: Optional[float] = None) -> None:
        if timeout is None:
            timeout = Config.ORACLE_TIMEOUT_SECONDS
        if not timeout > 0:
            raise InvalidArgument(f"Oracle timeout must be positive, got {timeout!r}")
        self.backend = backend
        self.timeout = timeout
        self.failures: Counter[str] = Counter()
        self._debug = bool(os.getenv("DEBUG_ORACLE"))

    def __repr__(self) -> str:
        return f"OracleClient(backend={self.backend.name!r}, timeout={self.timeout})"

    async def _call(self, request: OracleRequest, coerce: Callable[[Any], T], default: T) -> T:
        try:
            raw = await asyncio.wait_for(self.backend.dispatch(request), timeout=self.timeout)
            result = coerce(raw)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.failures[request.kind] += 1
            failure = OracleUnavailable(request.kind, exc)
            log_error(f"[Oracle] {failure}; using default {default!r}")
            return default

        if self._debug:
            log_llm(f"[Oracle:{self.backend.name}] {request.kind} -> {result!r}")
        return result

    async def generate_utterance(
        self,
        profile: AgentProfile,
        conversation_history: Sequence[ConversationEntry] = (),
        relevant_memories: Sequence[MemoryRecord] = (),
        current_plans: Sequence[PlanRecord] = (),
    ) -> str:
        request = UtteranceRequest(
            profile=profile,
            conversation_history=list(conversation_history),
            relevant_memories=list(relevant_memories),
            current_plans=list(current_plans),
        )
        return await self._call(request, _as_text, FALLBACK_UTTERANCE)

    async def evaluate_importance(self, text: str) -> float:
        return await self._call(ImportanceRequest(text=text), _as_score, NEUTRAL_SCORE)

    async def extract_semantic_knowledge(
        self, history: Sequence[ConversationEntry]
    ) -> Optional[str]:
        request = SemanticKnowledgeRequest(history=list(history))
        return await self._call(request, _as_optional_text, None)

    async def generate_plan_steps(self, goal: str) -> List[str]:
        return await self._call(PlanStepsRequest(goal=goal), _as_text_list, [])

    async def evaluate_priority(self, goal: str) -> float:
        return await self._call(PriorityRequest(goal=goal), _as_score, NEUTRAL_SCORE)

    async def generate_reflection_insights(self, memories: Sequence[MemoryRecord]) -> List[str]:
        request = ReflectionInsightsRequest(memories=list(memories))
        return await self._call(request, _as_text_list, [])

    async def evaluate_interaction_quality(self, text: str) -> float:
        request = InteractionQualityRequest(text=text)
        return await self._call(request, _as_score, NEUTRAL_SCORE)


__all__ = ["OracleClient", "FALLBACK_UTTERANCE"]
