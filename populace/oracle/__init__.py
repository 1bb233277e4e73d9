"""Oracle contract: tagged requests, backends and the fault-tolerant client."""

from __future__ import annotations

from typing import Optional

from populace.config import Config
from populace.errors import InvalidArgument
from populace.logging_utils import log_info

from .base import OracleBackend
from .client import FALLBACK_UTTERANCE, OracleClient
from .heuristic import HeuristicOracle
from .llm import LLMOracle
from .prompts import DEFAULT_PROMPTS, PromptLibrary, PromptTemplate
from .requests import (
    ImportanceRequest,
    InteractionQualityRequest,
    OracleRequest,
    PlanStepsRequest,
    PriorityRequest,
    ReflectionInsightsRequest,
    SemanticKnowledgeRequest,
    UtteranceRequest,
)


def build_oracle(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
) -> OracleClient:
    """Create an OracleClient for the configured backend.

    Args:
        provider: "heuristic" or a mirascope provider name; defaults to
            Config.ORACLE_PROVIDER
        model: Model identifier; defaults to Config.ORACLE_MODEL
        timeout: Seconds per call; defaults to Config.ORACLE_TIMEOUT_SECONDS

    Raises:
        InvalidArgument: If an LLM provider is requested without a model
    """
    provider = (provider or Config.ORACLE_PROVIDER or "heuristic").lower()
    model = model or Config.ORACLE_MODEL

    if provider == "heuristic":
        backend: OracleBackend = HeuristicOracle()
        label = provider
    else:
        if not model:
            raise InvalidArgument(f"A model name is required for the '{provider}' oracle provider")
        backend = LLMOracle(provider, model)
        label = f"{provider}/{model}"

    log_info(f"Oracle backend: {backend.name} ({label})")
    return OracleClient(backend, timeout=timeout)


__all__ = [
    "build_oracle",
    "OracleBackend",
    "OracleClient",
    "FALLBACK_UTTERANCE",
    "HeuristicOracle",
    "LLMOracle",
    "PromptTemplate",
    "PromptLibrary",
    "DEFAULT_PROMPTS",
    "OracleRequest",
    "UtteranceRequest",
    "ImportanceRequest",
    "SemanticKnowledgeRequest",
    "PlanStepsRequest",
    "PriorityRequest",
    "ReflectionInsightsRequest",
    "InteractionQualityRequest",
]
