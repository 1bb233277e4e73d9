"""Synthetic population builder.

Generates varied agent profiles from fixed vocabularies and registers them
with an engine. A seeded ``random.Random`` makes populations reproducible.
"""

from __future__ import annotations

import random
from typing import List, Optional

from .agent import AgentState
from .config import Config
from .engine import SimulationEngine
from .errors import InvalidArgument
from .logging_utils import log_success
from .oracle import OracleClient, build_oracle
from .schemas import AgentProfile


FIRST_NAMES = (
    "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda",
    "William", "Elizabeth", "David", "Susan", "Richard", "Jessica", "Joseph", "Sarah",
    "Thomas", "Karen", "Charles", "Nancy",
)
LAST_NAMES = (
    "Smith", "Johnson", "Williams", "Jones", "Brown", "Davis", "Miller", "Wilson",
    "Moore", "Taylor", "Anderson", "Thomas", "Jackson", "White", "Harris", "Martin",
    "Thompson", "Garcia", "Martinez", "Robinson",
)
OCCUPATIONS = (
    "Teacher", "Doctor", "Engineer", "Artist", "Writer", "Chef", "Programmer",
    "Scientist", "Lawyer", "Accountant", "Nurse", "Architect", "Musician",
    "Journalist", "Entrepreneur", "Farmer", "Mechanic", "Electrician", "Plumber",
    "Retail Worker",
)
TRAITS = (
    "creative", "analytical", "outgoing", "reserved", "optimistic", "pessimistic",
    "adventurous", "cautious", "organized", "spontaneous", "empathetic", "logical",
    "ambitious", "relaxed", "confident", "humble", "curious", "traditional",
    "innovative", "practical",
)
VALUES = (
    "Family", "Knowledge", "Success", "Freedom", "Creativity", "Security", "Adventure",
    "Spirituality", "Honesty", "Kindness", "Loyalty", "Independence", "Wisdom",
    "Harmony", "Courage", "Respect", "Responsibility", "Compassion", "Integrity",
    "Balance",
)

MIN_AGE = 18
MAX_AGE = 77


def generate_profiles(count: int, rng: Optional[random.Random] = None) -> List[AgentProfile]:
    """Build ``count`` distinct-id profiles.

    Each profile gets an 18-77 age, one occupation, 2-4 traits and 2-3
    values (no repeats), plus a background sentence and three goals derived
    from them.

    Raises:
        InvalidArgument: If count is negative
    """
    if count < 0:
        raise InvalidArgument(f"Population size must be >= 0, got {count}")
    rng = rng or random.Random()

    profiles: List[AgentProfile] = []
    for index in range(count):
        first_name = rng.choice(FIRST_NAMES)
        last_name = rng.choice(LAST_NAMES)
        age = rng.randint(MIN_AGE, MAX_AGE)
        occupation = rng.choice(OCCUPATIONS)
        traits = rng.sample(TRAITS, rng.randint(2, 4))
        values = rng.sample(VALUES, rng.randint(2, 3))

        background = (
            f"{first_name} is a {age}-year-old {occupation.lower()} who values "
            f"{' and '.join(values)}. They are known for being {' and '.join(traits)}."
        )
        goals = [
            f"Become a respected {occupation}",
            "Build meaningful relationships",
            f"Learn new skills related to {occupation}",
        ]

        profiles.append(
            AgentProfile(
                agent_id=f"agent-{index + 1:05d}",
                first_name=first_name,
                last_name=last_name,
                age=age,
                occupation=occupation,
                traits=traits,
                values=values,
                background=background,
                goals=goals,
            )
        )
    return profiles


def populate(
    engine: SimulationEngine,
    count: Optional[int] = None,
    oracle: Optional[OracleClient] = None,
    seed: Optional[int] = None,
) -> List[AgentState]:
    """Create and register ``count`` agents sharing one oracle client.

    Args:
        engine: Engine to register agents with
        count: Number of agents; defaults to Config.POPULATION_SIZE
        oracle: Shared oracle; defaults to ``build_oracle()``
        seed: Seed for profile generation

    Returns:
        The registered agents

    Raises:
        DuplicateAgent: If a generated id is already registered
    """
    if count is None:
        count = Config.POPULATION_SIZE
    oracle = oracle or build_oracle()

    agents = [
        AgentState(profile, engine.clock, oracle)
        for profile in generate_profiles(count, random.Random(seed))
    ]
    for agent in agents:
        engine.register(agent)

    log_success(f"Created {len(agents)} agents")
    return agents


__all__ = ["generate_profiles", "populate"]
