#!/usr/bin/env python3
"""
Unit tests for the backoff arithmetic.

Covers delay bounds and clamping, multiplier growth and its floor, and
the tenacity wait strategy built on the same curve.
"""
from unittest.mock import MagicMock

import pytest
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from conftest import FixedRandom
from edgeretry.edge_backoff import calculate_backoff, new_backoff, wait_edge_backoff


def test_calculate_backoff_adds_jitter_to_base() -> None:
    """Test delay is base plus (1 + U) * multiplier."""
    assert calculate_backoff(100, 10, 1000, FixedRandom(0.3)) == 113


def test_calculate_backoff_zero_draw_adds_multiplier_once() -> None:
    """Test a zero draw still adds the full multiplier."""
    assert calculate_backoff(100, 10, 1000, FixedRandom(0.0)) == 110


def test_calculate_backoff_clamps_to_maximum() -> None:
    """Test the delay never exceeds the maximum."""
    assert calculate_backoff(100, 10, 105, FixedRandom(0.9)) == 105
    assert calculate_backoff(5000, 20000, 30000, FixedRandom(0.99)) == 30000


@pytest.mark.parametrize("draw", [0.0, 0.25, 0.5, 0.75, 0.999])
def test_calculate_backoff_within_bounds(draw: float) -> None:
    """Test the delay lies between the base delay and the maximum."""
    delay = calculate_backoff(100, 300, 1000, FixedRandom(draw))
    assert 100 <= delay <= 1000


def test_new_backoff_grows_by_draw() -> None:
    """Test the multiplier grows by a factor of (1 + U)."""
    assert new_backoff(10, FixedRandom(0.3)) == 13
    assert new_backoff(13, FixedRandom(0.3)) == 17


def test_new_backoff_zero_draw_keeps_value() -> None:
    """Test a zero draw leaves a multiplier above the floor unchanged."""
    assert new_backoff(10, FixedRandom(0.0)) == 10


@pytest.mark.parametrize("current", [0, 1, 2])
def test_new_backoff_floor_replaces_small_values(current: int) -> None:
    """Test grown values below 3 become 3."""
    assert new_backoff(current, FixedRandom(0.0)) == 3


def test_wait_edge_backoff_returns_seconds() -> None:
    """Test the tenacity strategy returns the delay in seconds."""
    wait = wait_edge_backoff(50, 10, 1000, FixedRandom(0.3))
    assert wait(MagicMock()) == pytest.approx(0.063)


def test_wait_edge_backoff_reads_callable_multiplier() -> None:
    """Test a callable multiplier is read on every call."""
    multiplier = [10]
    wait = wait_edge_backoff(50, lambda: multiplier[0], 1000, FixedRandom(0.0))
    assert wait(MagicMock()) == pytest.approx(0.060)
    multiplier[0] = 100
    assert wait(MagicMock()) == pytest.approx(0.150)


def test_wait_edge_backoff_composes_with_tenacity_waits() -> None:
    """Test the strategy combines with other tenacity waits."""
    wait = wait_edge_backoff(50, 10, 1000, FixedRandom(0.0)) + wait_fixed(1)
    assert wait(MagicMock()) == pytest.approx(1.060)


def test_wait_edge_backoff_drives_retrying() -> None:
    """Test tenacity sleeps for the edge delay between attempts."""
    attempts: list[int] = []
    sleeps: list[float] = []

    def flaky_connect() -> str:
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionError("refused")
        return "connected"

    retrying = Retrying(
        wait=wait_edge_backoff(100, 10, 1000, FixedRandom(0.3)),
        retry=retry_if_exception_type(ConnectionError),
        stop=stop_after_attempt(5),
        sleep=sleeps.append,
    )

    assert retrying(flaky_connect) == "connected"
    assert len(attempts) == 3
    assert sleeps == [pytest.approx(0.113), pytest.approx(0.113)]


def test_new_backoff_rounding_to_two_is_lifted_to_three() -> None:
    """Test 1 * 1.6 rounds to 2 and is then lifted to 3."""
    assert new_backoff(1, FixedRandom(0.6)) == 3
