#!/usr/bin/env python3
"""Backoff arithmetic for edge reconnection.

A reconnect delay is the outcome's base delay plus a jittered share of
the current backoff multiplier, capped at the configured maximum:

    delay = min(base + round((1 + U) * multiplier), maximum)

with U uniform in [0, 1). After a real failure the multiplier itself
grows by a fresh (1 + U') factor, so repeated failures spread clients out
geometrically until the cap is reached.

wait_edge_backoff exposes the same curve as a tenacity wait strategy for
transports that retry their initial connect with tenacity.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from tenacity.wait import wait_base

from edgeretry.edge_constants import MIN_GROWN_BACKOFF

if TYPE_CHECKING:
    from tenacity import RetryCallState

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything with a random() method returning a float in [0, 1)."""

    def random(self) -> float: ...


def calculate_backoff(
    base_ms: int, multiplier: int, maximum_ms: int, rng: RandomSource
) -> int:
    """
    Compute the delay for one reconnect attempt.

    Args:
        base_ms: Base delay for the outcome being handled.
        multiplier: Current backoff multiplier (not modified).
        maximum_ms: Ceiling for the returned delay.
        rng: Source of the jitter draw.

    Returns:
        Delay in milliseconds, never more than maximum_ms.
    """
    delay = base_ms + round((1 + rng.random()) * multiplier)
    delay = min(delay, maximum_ms)
    logger.debug("Backing off %d ms", delay)
    return delay


def new_backoff(current: int, rng: RandomSource) -> int:
    """
    Grow the backoff multiplier after a failed connection.

    A grown value below 3 is replaced by 3 so a zero or tiny multiplier
    still escalates. Rounding can turn 1 into 2, which the floor also
    lifts to 3.
    """
    backoff = round((1 + rng.random()) * current)
    if backoff < MIN_GROWN_BACKOFF:
        backoff = MIN_GROWN_BACKOFF
    return backoff


class wait_edge_backoff(wait_base):
    """Tenacity wait strategy following the edge reconnect delay curve.

    The multiplier may be a fixed int or a zero-argument callable, which
    lets the strategy track a live EdgeRetryer's current multiplier.
    Returns seconds, as tenacity expects.
    """

    def __init__(
        self,
        base_ms: int,
        multiplier: int | Callable[[], int],
        maximum_ms: int,
        rng: RandomSource,
    ) -> None:
        self.base_ms = base_ms
        self.multiplier = multiplier
        self.maximum_ms = maximum_ms
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        multiplier = self.multiplier() if callable(self.multiplier) else self.multiplier
        return calculate_backoff(self.base_ms, multiplier, self.maximum_ms, self.rng) / 1000
