#!/usr/bin/env python3
"""Connection outcomes reported by an edge transport.

The transport reports exactly one of these each time its connection
state changes. The retryer decides from the outcome alone whether to
reconnect, so the set is deliberately small.
"""
from enum import Enum


class EdgeConnectionState(Enum):
    """Why the previous connection attempt ended (or that it succeeded)."""

    SUCCESS = "success"
    API_KEY_NOT_FOUND = "api_key_not_found"
    SERVER_WAS_DISCONNECTED = "server_was_disconnected"
    SERVER_SAID_BYE = "server_said_bye"
    SERVER_CONNECT_TIMEOUT = "server_connect_timeout"
