"""Prompt templates for LLM-backed oracle operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, Mapping

from populace.schemas import AgentProfile, ConversationEntry, MemoryRecord, PlanRecord


@dataclass
class PromptTemplate:
    """Represents a templated prompt with ``{{placeholder}}`` slots."""

    name: str
    system: str
    user: str
    description: str = ""

    def render(self, replacements: Mapping[str, str]) -> tuple[str, str]:
        """Return ``(system, user)`` with every placeholder substituted."""
        system, user = self.system, self.user
        for key, value in replacements.items():
            token = "{{" + key + "}}"
            system = system.replace(token, value)
            user = user.replace(token, value)
        return system, user


class PromptLibrary:
    """Container for named prompt templates, one per oracle operation."""

    def __init__(self) -> None:
        self.templates: Dict[str, PromptTemplate] = {}

    def register(self, template: PromptTemplate) -> None:
        self.templates[template.name] = template

    def get(self, name: str) -> PromptTemplate:
        return self.templates[name]

    def __contains__(self, name: str) -> bool:
        return name in self.templates


# Formatting helpers -----------------------------------------------------------


def format_conversation(history: Iterable[ConversationEntry]) -> str:
    lines = [f"{entry.speaker}: {entry.text}" for entry in history]
    return "\n".join(lines) if lines else "No conversation history."


def format_memories(memories: Iterable[MemoryRecord]) -> str:
    lines = []
    for memory in memories:
        stamp = datetime.fromtimestamp(memory.created_at / 1000, tz=timezone.utc)
        lines.append(f"- {memory.content} ({stamp:%Y-%m-%d %H:%M})")
    return "\n".join(lines) if lines else "No relevant memories."


def format_plans(plans: Iterable[PlanRecord]) -> str:
    blocks = []
    for plan in plans:
        steps = "\n".join(f"  - {step}" for step in plan.steps)
        header = f"- Goal: {plan.goal} (Priority: {plan.priority:g}/10)"
        blocks.append(f"{header}\n{steps}" if steps else header)
    return "\n\n".join(blocks) if blocks else "No active plans."


def format_profile(profile: AgentProfile) -> str:
    age = f"{profile.age}-year-old " if profile.age is not None else ""
    lines = [
        f"You are {profile.full_name}, a {age}{profile.occupation or 'person'}.",
        f"Traits: {', '.join(profile.traits) or 'unspecified'}",
        f"Values: {', '.join(profile.values) or 'unspecified'}",
    ]
    if profile.background:
        lines.append(f"Background: {profile.background}")
    if profile.goals:
        lines.append(f"Goals: {'; '.join(profile.goals)}")
    return "\n".join(lines)


# Default templates ------------------------------------------------------------

DEFAULT_PROMPTS = PromptLibrary()

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="utterance",
        system=(
            "You are roleplaying a resident of a simulated town.\n\n"
            "## Your Character\n{{profile}}\n\n"
            "## Your Memories\n{{memories}}\n\n"
            "## Your Current Plans\n{{plans}}\n\n"
            "Respond as this character would, keeping their personality, values and knowledge. "
            "Keep it concise and natural, as in a real conversation. Never mention that you are roleplaying."
        ),
        user=(
            "Conversation so far:\n{{conversation}}\n\n"
            "Return JSON with a single field \"text\" holding your next line."
        ),
        description="Next line of dialogue for an agent.",
    )
)

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="importance",
        system=(
            "Rate how important the following piece of information is for the person who experienced it, "
            "from 0 (completely trivial) to 10 (life-changing)."
        ),
        user="Information:\n{{text}}\n\nReturn JSON: {\"score\": <number 0-10>}",
        description="Memory importance score.",
    )
)

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="semantic_knowledge",
        system=(
            "Extract lasting knowledge from a conversation: facts, beliefs or preferences worth remembering. "
            "State it concisely in the third person. If nothing is worth remembering, use null."
        ),
        user="Conversation:\n{{conversation}}\n\nReturn JSON: {\"knowledge\": <string or null>}",
        description="Distilled semantic knowledge from recent dialogue.",
    )
)

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="plan_steps",
        system="Break the goal into 3-5 concrete, ordered steps.",
        user="Goal:\n{{goal}}\n\nReturn JSON: {\"steps\": [\"...\", \"...\"]}",
        description="Steps for a new plan.",
    )
)

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="priority",
        system="Rate the priority of the goal from 0 (can wait indefinitely) to 10 (must happen now).",
        user="Goal:\n{{goal}}\n\nReturn JSON: {\"score\": <number 0-10>}",
        description="Plan priority score.",
    )
)

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="reflection_insights",
        system=(
            "You review a person's recent memories and identify 2-3 meaningful insights or patterns. "
            "Write each insight as one short first-person sentence."
        ),
        user="Recent memories:\n{{memories}}\n\nReturn JSON: {\"insights\": [\"...\"]}",
        description="Higher-level insights from recent episodic memories.",
    )
)

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="interaction_quality",
        system="Rate how positive the social interaction was, from 0 (hostile) to 10 (warm and helpful).",
        user="Interaction:\n{{text}}\n\nReturn JSON: {\"score\": <number 0-10>}",
        description="Interaction quality used for relationship updates.",
    )
)


__all__ = [
    "PromptTemplate",
    "PromptLibrary",
    "DEFAULT_PROMPTS",
    "format_conversation",
    "format_memories",
    "format_plans",
    "format_profile",
]
