#!/usr/bin/env python3
"""Reconnect controller for a streaming edge connection.

The transport calls edge_result() (or its alias report()) every time its
connection state changes. Depending on the outcome the retryer resets
its backoff, gives up for good, or schedules a reconnect on its single
worker thread after a jittered delay. Because there is exactly one
worker, reconnect attempts never overlap and run in the order they were
requested.

State machine:
- active: outcomes are handled as described in EdgeRetryer.edge_result
- terminal: API_KEY_NOT_FOUND was reported; every later outcome is ignored
- closed: close() was called; every later outcome is ignored

See edge_backoff.py for the delay arithmetic.
"""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from edgeretry.edge_backoff import (
    RandomSource,
    calculate_backoff,
    new_backoff,
    wait_edge_backoff,
)
from edgeretry.edge_config import EdgeRetryConfig
from edgeretry.edge_reconnector import EdgeReconnector
from edgeretry.edge_state import EdgeConnectionState

logger = logging.getLogger(__name__)


class EdgeRetryer:
    """
    Decide whether and when to reconnect to the edge server.

    Attributes are exposed read-only; the multiplier and terminal flag
    change only in response to reported outcomes.
    """

    def __init__(
        self,
        server_connect_timeout_ms: int,
        server_disconnect_retry_ms: int,
        server_bye_reconnect_ms: int,
        backoff_multiplier: int,
        maximum_backoff_time_ms: int,
        rng: RandomSource | None = None,
    ) -> None:
        self._server_connect_timeout_ms = server_connect_timeout_ms
        self._server_disconnect_retry_ms = server_disconnect_retry_ms
        self._server_bye_reconnect_ms = server_bye_reconnect_ms
        self._backoff_multiplier = backoff_multiplier
        self._maximum_backoff_time_ms = maximum_backoff_time_ms
        self._rng: RandomSource = rng if rng is not None else random.Random()

        # Changes over the lifetime of reconnect attempts.
        self._current_backoff_multiplier = backoff_multiplier
        # Once set we can never reconnect, so every later outcome is dropped.
        self._terminal_failure = False

        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._executor = self._make_executor()

        self._handlers: dict[
            EdgeConnectionState, Callable[[EdgeReconnector], Future[int | None] | None]
        ] = {
            EdgeConnectionState.SUCCESS: self._on_success,
            EdgeConnectionState.API_KEY_NOT_FOUND: self._on_api_key_not_found,
            EdgeConnectionState.SERVER_WAS_DISCONNECTED: lambda r: self._schedule(
                self._server_disconnect_retry_ms, True, r
            ),
            EdgeConnectionState.SERVER_SAID_BYE: lambda r: self._schedule(
                self._server_bye_reconnect_ms, False, r
            ),
            EdgeConnectionState.SERVER_CONNECT_TIMEOUT: lambda r: self._schedule(
                self._server_connect_timeout_ms, True, r
            ),
        }

    @classmethod
    def from_config(
        cls, config: EdgeRetryConfig, rng: RandomSource | None = None
    ) -> EdgeRetryer:
        """Create a retryer from a resolved EdgeRetryConfig."""
        return cls(
            server_connect_timeout_ms=config.server_connect_timeout_ms,
            server_disconnect_retry_ms=config.server_disconnect_retry_ms,
            server_bye_reconnect_ms=config.server_bye_reconnect_ms,
            backoff_multiplier=config.backoff_multiplier,
            maximum_backoff_time_ms=config.maximum_backoff_time_ms,
            rng=rng,
        )

    def _make_executor(self) -> ThreadPoolExecutor:
        # Separate so tests can substitute their own executor.
        return ThreadPoolExecutor(max_workers=1, thread_name_prefix="edge-retryer")

    @property
    def server_connect_timeout_ms(self) -> int:
        return self._server_connect_timeout_ms

    @property
    def server_disconnect_retry_ms(self) -> int:
        return self._server_disconnect_retry_ms

    @property
    def server_bye_reconnect_ms(self) -> int:
        return self._server_bye_reconnect_ms

    @property
    def backoff_multiplier(self) -> int:
        return self._backoff_multiplier

    @property
    def maximum_backoff_time_ms(self) -> int:
        return self._maximum_backoff_time_ms

    @property
    def current_backoff_multiplier(self) -> int:
        with self._lock:
            return self._current_backoff_multiplier

    @property
    def terminal_failure(self) -> bool:
        """True once the server has rejected the API key."""
        with self._lock:
            return self._terminal_failure

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def edge_result(
        self, state: EdgeConnectionState, reconnector: EdgeReconnector
    ) -> Future[int | None] | None:
        """
        Handle a connection outcome reported by the transport.

        SUCCESS resets the backoff multiplier. API_KEY_NOT_FOUND puts the
        retryer in its terminal state. SERVER_WAS_DISCONNECTED and
        SERVER_CONNECT_TIMEOUT schedule a reconnect and grow the multiplier;
        SERVER_SAID_BYE schedules a reconnect without growing it. Anything
        else is ignored, as is every call once terminal or closed.

        Never blocks on the reconnect itself.

        Args:
            state: The outcome of the last connection attempt.
            reconnector: Called back on the worker thread to reconnect.

        Returns:
            Future for the scheduled reconnect, resolving to the delay waited
            in ms (None if closed during the wait), or None when nothing was
            scheduled.
        """
        logger.debug("Retryer triggered by %s", state)
        with self._lock:
            if self._terminal_failure or self._closed.is_set():
                return None
            if not isinstance(state, EdgeConnectionState):
                return None
            handler = self._handlers.get(state)
            if handler is None:
                return None
            return handler(reconnector)

    report = edge_result

    def _on_success(self, reconnector: EdgeReconnector) -> None:
        # Caller holds self._lock.
        self._current_backoff_multiplier = self._backoff_multiplier

    def _on_api_key_not_found(self, reconnector: EdgeReconnector) -> None:
        # Caller holds self._lock.
        logger.warning(
            "Terminal failure connecting to edge: API key does not exist, "
            "no further reconnects will be attempted"
        )
        self._terminal_failure = True

    def _schedule(
        self, base_ms: int, adjust_backoff: bool, reconnector: EdgeReconnector
    ) -> Future[int | None]:
        # Caller holds self._lock, so close() cannot shut the executor down
        # between the guard and this submit.
        logger.debug(
            "Scheduling reconnect: base %d ms, adjust backoff %s", base_ms, adjust_backoff
        )
        return self._executor.submit(self._reconnect, base_ms, adjust_backoff, reconnector)

    def _reconnect(
        self, base_ms: int, adjust_backoff: bool, reconnector: EdgeReconnector
    ) -> int | None:
        """Wait out the backoff, grow it if asked, then reconnect.

        Runs on the worker thread. Returns the delay waited, or None if the
        retryer was closed during the wait.
        """
        delay = self._backoff(base_ms, adjust_backoff)
        if delay is None:
            logger.debug("Retryer closed during backoff, abandoning reconnect")
            return None

        try:
            reconnector.reconnect()
        except Exception:
            logger.exception("Reconnect attempt failed")
        return delay

    def _backoff(self, base_ms: int, adjust_backoff: bool) -> int | None:
        """
        Hold the worker thread for one backoff period.

        The wait ends early if the retryer is closed; in that case the
        multiplier is left alone and None is returned. The multiplier is
        also left alone once the retryer is terminal.

        Args:
            base_ms: Base delay for the outcome being handled.
            adjust_backoff: Whether to grow the multiplier afterwards.

        Returns:
            The delay in ms, or None if closed during the wait.
        """
        with self._lock:
            delay = calculate_backoff(
                base_ms,
                self._current_backoff_multiplier,
                self._maximum_backoff_time_ms,
                self._rng,
            )

        if self._closed.wait(delay / 1000):
            return None

        if adjust_backoff:
            with self._lock:
                if self._terminal_failure:
                    return delay
                self._current_backoff_multiplier = new_backoff(
                    self._current_backoff_multiplier, self._rng
                )
                logger.debug("Backoff multiplier now %d", self._current_backoff_multiplier)
        return delay

    def wait_strategy(self, state: EdgeConnectionState) -> wait_edge_backoff:
        """
        Tenacity wait strategy matching this retryer's delay for an outcome.

        The strategy reads the current multiplier each time it is called, so
        it follows growth and resets driven by reported outcomes.

        Raises:
            ValueError: If the outcome never schedules a reconnect.
        """
        base_ms = {
            EdgeConnectionState.SERVER_WAS_DISCONNECTED: self._server_disconnect_retry_ms,
            EdgeConnectionState.SERVER_SAID_BYE: self._server_bye_reconnect_ms,
            EdgeConnectionState.SERVER_CONNECT_TIMEOUT: self._server_connect_timeout_ms,
        }.get(state)
        if base_ms is None:
            raise ValueError(f"{state} does not schedule a reconnect")
        return wait_edge_backoff(
            base_ms,
            lambda: self.current_backoff_multiplier,
            self._maximum_backoff_time_ms,
            self._rng,
        )

    def close(self) -> None:
        """
        Stop the worker, abandoning any queued or waiting reconnect.

        Safe to call more than once. Does not wait for a reconnect call
        that is already in progress.
        """
        with self._lock:
            if self._closed.is_set():
                return
            self._closed.set()
            self._executor.shutdown(wait=False, cancel_futures=True)
        logger.debug("Retryer closed")

    def __enter__(self) -> EdgeRetryer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
