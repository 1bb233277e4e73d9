"""Tests for the synthetic population builder and the location registry."""

import random

import pytest

from populace.clock import Clock
from populace.engine import SimulationEngine
from populace.environment import DEFAULT_LOCATIONS, Environment
from populace.errors import DuplicateAgent, InvalidArgument
from populace.population import MAX_AGE, MIN_AGE, OCCUPATIONS, generate_profiles, populate
from populace.schemas import Location


def test_generate_profiles_is_varied_and_well_formed():
    profiles = generate_profiles(200, random.Random(7))

    assert len({profile.agent_id for profile in profiles}) == 200
    for profile in profiles:
        assert MIN_AGE <= profile.age <= MAX_AGE
        assert profile.occupation in OCCUPATIONS
        assert 2 <= len(profile.traits) <= 4
        assert len(set(profile.traits)) == len(profile.traits)
        assert 2 <= len(profile.values) <= 3
        assert profile.background.startswith(f"{profile.first_name} is a {profile.age}-year-old")
        assert len(profile.goals) == 3
    assert len({profile.occupation for profile in profiles}) > 5


def test_generate_profiles_is_reproducible_with_seed():
    first = generate_profiles(10, random.Random(42))
    second = generate_profiles(10, random.Random(42))
    assert first == second


def test_generate_profiles_rejects_negative_count():
    with pytest.raises(InvalidArgument):
        generate_profiles(-1)
    assert generate_profiles(0) == []


def test_populate_registers_agents_sharing_one_oracle(oracle):
    engine = SimulationEngine(Clock(start_time=0))

    agents = populate(engine, 25, oracle, seed=3)

    assert len(engine.all_agents()) == 25
    assert all(agent.oracle is oracle for agent in agents)
    assert all(agent.clock is engine.clock for agent in agents)
    assert all(agent.on_reflection_due is not None for agent in agents)

    with pytest.raises(DuplicateAgent):
        populate(engine, 1, oracle, seed=3)


def test_environment_lookup_and_replace():
    environment = Environment.with_defaults()
    assert len(environment) == len(DEFAULT_LOCATIONS)
    assert environment.location("office").name == "Office Building"
    assert environment.location("library") is None

    environment.add_location(Location(id="cafe", name="Night Cafe", type="commercial", capacity=12))
    assert environment.location("cafe").capacity == 12
    assert "cafe" in environment
    assert Environment().all_locations() == []
