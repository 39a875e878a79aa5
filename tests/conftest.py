#!/usr/bin/env python3
"""Pytest fixtures for edge-retry tests.

Provides a pinned random source, a recording reconnector, and a factory
for retryers that are closed automatically after each test.
"""

import threading
from collections.abc import Callable, Generator

import pytest

from edgeretry.edge_retryer import EdgeRetryer


class FixedRandom:
    """Random source that always returns the same draw."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


class RecordingReconnector:
    """Reconnector that records calls and the thread they arrived on."""

    def __init__(self) -> None:
        self.calls = 0
        self.threads: list[int] = []
        self._lock = threading.Lock()

    def reconnect(self) -> None:
        with self._lock:
            self.calls += 1
            self.threads.append(threading.get_ident())


@pytest.fixture
def reconnector() -> RecordingReconnector:
    """Create a fresh RecordingReconnector."""
    return RecordingReconnector()


@pytest.fixture
def make_retryer() -> Generator[Callable[..., EdgeRetryer], None, None]:
    """Build retryers with small delays and close them on teardown.

    Defaults: 100/100/50 ms base delays, multiplier 10, maximum 1000 ms,
    and a random source pinned at 0.3.
    """
    created: list[EdgeRetryer] = []

    def _make(**kwargs) -> EdgeRetryer:
        params = {
            "server_connect_timeout_ms": 100,
            "server_disconnect_retry_ms": 100,
            "server_bye_reconnect_ms": 50,
            "backoff_multiplier": 10,
            "maximum_backoff_time_ms": 1000,
            "rng": FixedRandom(0.3),
        }
        params.update(kwargs)
        retryer = EdgeRetryer(**params)
        created.append(retryer)
        return retryer

    yield _make
    for retryer in created:
        retryer.close()
