"""Tests for the virtual clock."""

import pytest

from populace.clock import Clock
from populace.errors import InvalidArgument


def test_advance_applies_scale():
    clock = Clock(start_time=1_000, scale=60.0)

    assert clock.advance(1_000) == 61_000
    assert clock.now() == 61_000


def test_advance_zero_keeps_time():
    clock = Clock(start_time=5_000)
    assert clock.advance(0) == 5_000


def test_advance_rounds_to_whole_milliseconds():
    clock = Clock(start_time=0, scale=0.5)
    clock.advance(3)
    assert clock.now() == 2  # round(1.5)


def test_negative_delta_rejected():
    clock = Clock(start_time=0)
    with pytest.raises(InvalidArgument):
        clock.advance(-1)
    assert clock.now() == 0


@pytest.mark.parametrize("scale", [0, -1.0, float("nan")])
def test_non_positive_scale_rejected(scale):
    clock = Clock(start_time=0)
    with pytest.raises(InvalidArgument):
        clock.set_scale(scale)
    with pytest.raises(InvalidArgument):
        Clock(start_time=0, scale=scale)
    assert clock.scale == 1.0


def test_set_scale_changes_future_advances():
    clock = Clock(start_time=0)
    clock.advance(10)
    clock.set_scale(3)
    clock.advance(10)
    assert clock.now() == 40


def test_default_start_time_is_wall_clock():
    clock = Clock()
    assert clock.now() > 1_600_000_000_000


def test_formatted_is_iso_utc():
    clock = Clock(start_time=0)
    assert clock.formatted() == "1970-01-01T00:00:00+00:00"


@pytest.mark.parametrize("delta", [float("inf"), float("nan")])
def test_non_finite_delta_rejected(delta):
    clock = Clock(start_time=10)
    with pytest.raises(InvalidArgument):
        clock.advance(delta)
    assert clock.now() == 10


def test_infinite_scale_rejected():
    with pytest.raises(InvalidArgument):
        Clock(start_time=0, scale=float("inf"))
