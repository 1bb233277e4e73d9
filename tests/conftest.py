"""Shared fixtures for Populace tests."""

from __future__ import annotations

import pytest

from populace.clock import Clock
from populace.oracle import HeuristicOracle, OracleClient
from populace.schemas import AgentProfile


START_TIME = 1_700_000_000_000


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.setenv("POPULACE_NO_COLOR", "1")


@pytest.fixture
def clock() -> Clock:
    return Clock(start_time=START_TIME)


@pytest.fixture
def profile() -> AgentProfile:
    return AgentProfile(
        agent_id="ana",
        first_name="Ana",
        last_name="Lopez",
        age=34,
        occupation="Chef",
        traits=["curious", "organized"],
        background="runs the corner cafe",
        goals=["Open a second cafe"],
        values=["Family", "Honesty"],
    )


@pytest.fixture
def oracle() -> OracleClient:
    return OracleClient(HeuristicOracle(), timeout=1.0)
