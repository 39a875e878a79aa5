#!/usr/bin/env python3
"""Tunable names and defaults for edge reconnection.

Each tunable can be set through an environment variable, a property
mapping, or left at its default. The environment variable name is the
property name with '.' and '-' replaced by '_'.
"""

# Delay before reconnecting after the initial connect timed out (ms).
SERVER_CONNECT_TIMEOUT_PROPERTY: str = "featurehub.edge.server-connect-timeout-ms"
DEFAULT_SERVER_CONNECT_TIMEOUT_MS: int = 5000

# Delay before reconnecting after the transport dropped (ms).
SERVER_DISCONNECT_RETRY_PROPERTY: str = "featurehub.edge.server-disconnect-retry-ms"
DEFAULT_SERVER_DISCONNECT_RETRY_MS: int = 5000

# Delay before reconnecting after the server closed gracefully (ms).
# The property name is spelled "by" in every released client; keep it.
SERVER_BYE_RECONNECT_PROPERTY: str = "featurehub.edge.server-by-reconnect-ms"
DEFAULT_SERVER_BYE_RECONNECT_MS: int = 3000

# Starting jitter multiplier, restored after every successful connection.
BACKOFF_MULTIPLIER_PROPERTY: str = "featurehub.edge.backoff-multiplier"
DEFAULT_BACKOFF_MULTIPLIER: int = 10

# Upper bound on any single reconnect delay (ms).
MAXIMUM_BACKOFF_PROPERTY: str = "featurehub.edge.maximum-backoff-ms"
DEFAULT_MAXIMUM_BACKOFF_MS: int = 30000

# A grown multiplier is never less than this.
MIN_GROWN_BACKOFF: int = 3
