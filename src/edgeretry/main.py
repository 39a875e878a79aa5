"""CLI handling for edge-retry.

This module provides a small diagnostic command that resolves the
reconnect tunables the same way an SDK session would, prints them, and
then feeds a sequence of connection outcomes through an EdgeRetryer so
the resulting delays and backoff growth can be inspected.

Reconnects actually wait out their delay, so use small values when
trying long sequences.

Usage:
    edge-retry [-D NAME=VALUE]... [--verbose] [OUTCOME]...
"""

import click
import sys

from edgeretry.edge_config import PROPERTY_NAMES, EdgeConfigError, EdgeRetryConfig, load_edge_retry_config
from edgeretry.edge_state import EdgeConnectionState
from edgeretry.main_logging import configure_logging
from edgeretry.main_options import parse_properties


class EchoReconnector:
    """Reconnector that only counts and logs reconnect requests."""

    def __init__(self) -> None:
        self.attempts = 0

    def reconnect(self) -> None:
        self.attempts += 1
        click.echo(f"reconnect attempt {self.attempts}")


@click.command()
@click.argument(
    "outcomes",
    nargs=-1,
    type=click.Choice([s.name for s in EdgeConnectionState], case_sensitive=False),
)
@click.option(
    "-D",
    "--property",
    "properties",
    multiple=True,
    metavar="NAME=VALUE",
    callback=parse_properties,
    help="Set a tunable by property name, e.g. -D featurehub.edge.backoff-multiplier=5",
)
@click.option("--connect-timeout-ms", type=int, help="Base delay after a connect timeout")
@click.option("--disconnect-retry-ms", type=int, help="Base delay after a dropped connection")
@click.option("--bye-reconnect-ms", type=int, help="Base delay after a graceful server close")
@click.option("--backoff-multiplier", type=int, help="Starting backoff multiplier")
@click.option("--maximum-backoff-ms", type=int, help="Ceiling on any reconnect delay")
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable DEBUG-level logging",
)
def main(
    outcomes: tuple[str, ...],
    properties: dict[str, str],
    connect_timeout_ms: int | None,
    disconnect_retry_ms: int | None,
    bye_reconnect_ms: int | None,
    backoff_multiplier: int | None,
    maximum_backoff_ms: int | None,
    verbose: bool,
) -> None:
    """Show edge reconnect settings and simulate connection OUTCOMES."""
    configure_logging(verbose)

    try:
        config = load_edge_retry_config(
            properties,
            server_connect_timeout_ms=connect_timeout_ms,
            server_disconnect_retry_ms=disconnect_retry_ms,
            server_bye_reconnect_ms=bye_reconnect_ms,
            backoff_multiplier=backoff_multiplier,
            maximum_backoff_time_ms=maximum_backoff_ms,
        )
    except EdgeConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _print_config(config)
    _run_outcomes(config, outcomes)


def _print_config(config: EdgeRetryConfig) -> None:
    """Print each tunable under its property name.

    Args:
        config: The resolved configuration.
    """
    for field_name, property_name in PROPERTY_NAMES.items():
        click.echo(f"{property_name} = {getattr(config, field_name)}")


def _run_outcomes(config: EdgeRetryConfig, outcomes: tuple[str, ...]) -> None:
    """Report each outcome in order, waiting for any reconnect it schedules.

    Args:
        config: The resolved configuration.
        outcomes: Outcome names as given on the command line.
    """
    from edgeretry.edge_retryer import EdgeRetryer

    reconnector = EchoReconnector()
    with EdgeRetryer.from_config(config) as retryer:
        for name in outcomes:
            state = EdgeConnectionState[name.upper()]
            future = retryer.report(state, reconnector)
            if future is None:
                click.echo(f"{state.name}: no reconnect scheduled")
                continue
            delay = future.result()
            click.echo(
                f"{state.name}: waited {delay} ms, "
                f"backoff multiplier now {retryer.current_backoff_multiplier}"
            )
        if retryer.terminal_failure:
            click.echo("API key rejected, retryer is in its terminal state")
