#!/usr/bin/env python3
"""Reconnect capability supplied by the edge transport."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EdgeReconnector(Protocol):
    """Something that can open a fresh connection to the edge server.

    The retryer calls reconnect() from its worker thread once the backoff
    delay has elapsed. The return value is ignored.
    """

    def reconnect(self) -> None:
        """Attempt a new connection now."""
        ...
