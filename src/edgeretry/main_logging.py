"""Logging setup for the edge-retry command.

Reconnects are logged from the retryer's worker thread while outcomes
are logged from the caller, so every record carries its thread name.
"""
import logging

LOG_FORMAT = "%(levelname)s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(verbose: bool) -> None:
    """Send edgeretry logs to stderr.

    Args:
        verbose: If True, log the retryer's DEBUG trail (outcomes, delays,
            multiplier growth); otherwise only warnings such as a rejected
            API key.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("edgeretry").setLevel(level)
    # tenacity only matters to transports driving their own retry loops.
    logging.getLogger("tenacity").setLevel(logging.DEBUG if verbose else logging.ERROR)
