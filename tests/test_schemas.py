"""Schema validation tests."""

import pytest
from pydantic import ValidationError

from populace.errors import InvalidArgument, NotFound, PopulaceError
from populace.schemas import (
    AgentProfile,
    Location,
    MemoryRecord,
    PlanRecord,
    clamp_score,
)


def test_profile_full_name_and_immutability():
    profile = AgentProfile(agent_id="cy", first_name="Cy")
    assert profile.full_name == "Cy"

    with pytest.raises(ValidationError):
        profile.first_name = "Sy"


def test_profile_requires_id():
    with pytest.raises(ValidationError):
        AgentProfile(agent_id="", first_name="Nobody")


def test_memory_record_bounds_and_kind():
    with pytest.raises(ValidationError):
        MemoryRecord(id="m", kind="episodic", content="x", created_at=0, importance=11)
    with pytest.raises(ValidationError):
        MemoryRecord(id="m", kind="rumour", content="x", created_at=0, importance=5)


def test_plan_record_defaults():
    plan = PlanRecord(id="p", goal="Walk the dog", created_at=1, updated_at=1)
    assert plan.status == "active"
    assert plan.priority == 5.0
    assert plan.steps == []


def test_location_capacity_non_negative():
    with pytest.raises(ValidationError):
        Location(id="x", name="Nowhere", capacity=-1)


def test_clamp_score():
    assert clamp_score(-2) == 0.0
    assert clamp_score(12) == 10.0
    assert clamp_score(6.5) == 6.5
    with pytest.raises(InvalidArgument):
        clamp_score(float("nan"))


def test_not_found_belongs_to_the_taxonomy():
    error = NotFound("plan-9")
    assert isinstance(error, PopulaceError)
    assert isinstance(error, KeyError)
