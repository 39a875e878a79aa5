#!/usr/bin/env python3
"""Configuration for the edge retryer.

Resolves the five reconnect tunables from the environment, then from a
property mapping, then from the defaults in edge_constants. Explicit
keyword overrides are applied on top of whatever was resolved.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

from edgeretry.edge_constants import (
    BACKOFF_MULTIPLIER_PROPERTY,
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_MAXIMUM_BACKOFF_MS,
    DEFAULT_SERVER_BYE_RECONNECT_MS,
    DEFAULT_SERVER_CONNECT_TIMEOUT_MS,
    DEFAULT_SERVER_DISCONNECT_RETRY_MS,
    MAXIMUM_BACKOFF_PROPERTY,
    SERVER_BYE_RECONNECT_PROPERTY,
    SERVER_CONNECT_TIMEOUT_PROPERTY,
    SERVER_DISCONNECT_RETRY_PROPERTY,
)

logger = logging.getLogger(__name__)


class EdgeConfigError(ValueError):
    """
    Exception raised when a tunable cannot be parsed.

    Raised with the property name and the offending value so the caller
    can report which setting is wrong.
    """

    pass


@dataclass(frozen=True)
class EdgeRetryConfig:
    """
    Reconnect tunables for one edge connection session.

    Attributes:
        server_connect_timeout_ms: Base delay after a connect timeout.
        server_disconnect_retry_ms: Base delay after a dropped connection.
        server_bye_reconnect_ms: Base delay after a graceful server close.
        backoff_multiplier: Starting jitter multiplier.
        maximum_backoff_time_ms: Ceiling on any computed delay.
    """

    server_connect_timeout_ms: int = DEFAULT_SERVER_CONNECT_TIMEOUT_MS
    server_disconnect_retry_ms: int = DEFAULT_SERVER_DISCONNECT_RETRY_MS
    server_bye_reconnect_ms: int = DEFAULT_SERVER_BYE_RECONNECT_MS
    backoff_multiplier: int = DEFAULT_BACKOFF_MULTIPLIER
    maximum_backoff_time_ms: int = DEFAULT_MAXIMUM_BACKOFF_MS


# Field name -> property name, in declaration order.
PROPERTY_NAMES: dict[str, str] = {
    "server_connect_timeout_ms": SERVER_CONNECT_TIMEOUT_PROPERTY,
    "server_disconnect_retry_ms": SERVER_DISCONNECT_RETRY_PROPERTY,
    "server_bye_reconnect_ms": SERVER_BYE_RECONNECT_PROPERTY,
    "backoff_multiplier": BACKOFF_MULTIPLIER_PROPERTY,
    "maximum_backoff_time_ms": MAXIMUM_BACKOFF_PROPERTY,
}


def env_var_name(property_name: str) -> str:
    """
    Map a property name to its environment variable name.

    Example: "featurehub.edge.backoff-multiplier" becomes
    "featurehub_edge_backoff_multiplier".
    """
    return property_name.replace(".", "_").replace("-", "_")


def property_or_env(
    property_name: str,
    default: int,
    properties: Mapping[str, str],
    environ: Mapping[str, str],
) -> int:
    """
    Resolve one tunable as an integer.

    Args:
        property_name: Dotted property name of the tunable.
        default: Value used when neither source sets it.
        properties: Property mapping consulted after the environment.
        environ: Environment mapping, consulted first.

    Returns:
        The resolved integer value.

    Raises:
        EdgeConfigError: If the resolved value is not an integer.
    """
    raw = environ.get(env_var_name(property_name))
    if raw is None:
        raw = properties.get(property_name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError as e:
        raise EdgeConfigError(
            f"Invalid value for {property_name}: {raw!r} is not an integer"
        ) from e


def load_edge_retry_config(
    properties: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: int | None,
) -> EdgeRetryConfig:
    """
    Build an EdgeRetryConfig from environment, properties and defaults.

    Args:
        properties: Optional property mapping (name -> value string).
        environ: Environment mapping; defaults to os.environ.
        **overrides: Field values that replace the resolved ones. None
            values are ignored so optional CLI options can be passed through.

    Returns:
        The resolved configuration.

    Raises:
        EdgeConfigError: If a value cannot be parsed as an integer.
        TypeError: If an override names an unknown field.
    """
    properties = properties or {}
    environ = os.environ if environ is None else environ

    defaults = EdgeRetryConfig()
    resolved = {
        f.name: property_or_env(
            PROPERTY_NAMES[f.name], getattr(defaults, f.name), properties, environ
        )
        for f in fields(EdgeRetryConfig)
    }
    config = EdgeRetryConfig(**resolved)

    explicit = {name: value for name, value in overrides.items() if value is not None}
    if explicit:
        config = replace(config, **explicit)

    logger.debug("Resolved edge retry config: %s", config)
    return config
