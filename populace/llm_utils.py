"""Structured LLM calls with schema-correction retries.

Oracle backends ask a hosted model for a pydantic response model. When the
model's JSON fails validation, the validation errors are turned into
correction notes, appended to the prompt, and the call is repeated. Any
other failure (timeout, auth, network) propagates at once; the oracle client
decides on fallbacks.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from mirascope import llm
from pydantic import BaseModel, ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from populace.logging_utils import log_error


ModelT = TypeVar("ModelT", bound=BaseModel)
DEFAULT_LLM_TIMEOUT_SECONDS = 60.0
PREVIEW_LIMIT = 80


@dataclass(slots=True)
class SchemaFeedback:
    """Correction notes for a response that failed its schema.

    Attributes:
        prompt_text: Block appended to the next prompt
        issues: One line per validation error, for logging
    """

    prompt_text: str
    issues: Tuple[str, ...]


def _preview(value: Any) -> str:
    if value is None:
        return "null"
    text = repr(value)
    return text if len(text) <= PREVIEW_LIMIT else text[: PREVIEW_LIMIT - 3] + "..."


def _describe_issue(err: Dict[str, Any]) -> str:
    path = ".".join(str(part) for part in err.get("loc", ())) or "root"
    parts = [f"{path}: {err.get('msg', 'invalid value')}"]
    if err.get("type"):
        parts.append(f"[type={err['type']}]")
    if "input" in err:
        parts.append(f"| received={_preview(err['input'])}")
    return " ".join(parts)


def build_schema_feedback(error: ValidationError) -> SchemaFeedback:
    """Describe every validation error as a path/message/type/input line."""

    issues = tuple(_describe_issue(err) for err in error.errors(include_url=False))
    if not issues:
        issues = ("root: response did not match the expected schema",)

    lines = [
        "Your previous JSON response failed to validate against the required schema.",
        "Reply again with JSON that matches the schema exactly: no prose, no code fences.",
        "Problems found:",
        *(f"- {issue}" for issue in issues),
    ]
    return SchemaFeedback(prompt_text="\n".join(lines), issues=issues)


def compose_prompt(system_prompt: str, user_prompt: str, feedback: Optional[SchemaFeedback] = None) -> str:
    """Join the non-empty prompt sections with blank lines."""

    sections: List[str] = [system_prompt.strip(), user_prompt.strip()]
    if feedback is not None:
        sections.append(feedback.prompt_text)
    return "\n\n".join(section for section in sections if section)


async def call_llm_with_retries(
    *,
    system_prompt: str,
    user_prompt: str,
    llm_provider: str,
    llm_model: str,
    response_model: type[ModelT],
    max_attempts: int = 3,
    timeout: float = DEFAULT_LLM_TIMEOUT_SECONDS,
    feedback_builder: Callable[[ValidationError], SchemaFeedback] = build_schema_feedback,
) -> ModelT:
    """Ask ``llm_provider``/``llm_model`` for a ``response_model`` instance.

    Args:
        system_prompt: Role and rules for the model
        user_prompt: The request itself
        llm_provider: mirascope provider name (openai, anthropic, ...)
        llm_model: Model identifier
        response_model: Pydantic model the reply must validate against
        max_attempts: Total attempts, counting the first
        timeout: Seconds allowed per attempt
        feedback_builder: Turns a ValidationError into correction notes

    Returns:
        The validated response model

    Raises:
        ValidationError: If every attempt failed validation
        asyncio.TimeoutError: If an attempt exceeded ``timeout``
    """

    @llm.call(provider=llm_provider, model=llm_model, response_model=response_model)
    async def _ask(prompt: str) -> str:
        return prompt

    feedback: Optional[SchemaFeedback] = None
    attempt_number = 0

    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(ValidationError),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    ):
        with attempt:
            attempt_number += 1
            prompt = compose_prompt(system_prompt, user_prompt, feedback)
            try:
                return await asyncio.wait_for(_ask(prompt), timeout=timeout)
            except ValidationError as exc:
                feedback = feedback_builder(exc)
                log_error(
                    f"[LLM] {response_model.__name__} failed schema validation "
                    f"(attempt {attempt_number}/{max_attempts})"
                )
                for issue in feedback.issues:
                    log_error(f"    - {issue}")
                raise

    raise RuntimeError("retry loop exited without a result")


__all__ = [
    "SchemaFeedback",
    "build_schema_feedback",
    "compose_prompt",
    "call_llm_with_retries",
    "DEFAULT_LLM_TIMEOUT_SECONDS",
]
