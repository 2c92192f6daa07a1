"""Logging setup for the vaultlock CLI.

Lock decisions (acquire, denial, takeover, release) are logged on the
``vaultlock`` logger at INFO and WARNING. Heartbeat ticks are DEBUG records
on their own logger and only show at ``-vv``, since a held lock emits one
every interval.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "vaultlock"
HEARTBEAT_LOGGER = "vaultlock.core.heartbeat"


def lock_log_levels(verbosity: int = 0, quiet: bool = False) -> tuple[int, int]:
    """Pick log levels for the CLI flags.

    Args:
        verbosity: Number of -v flags
        quiet: Only show warnings and errors (takes precedence over verbosity)

    Returns:
        (package level, heartbeat level)
    """
    if quiet:
        return logging.WARNING, logging.WARNING
    if verbosity >= 2:
        return logging.DEBUG, logging.DEBUG
    if verbosity == 1:
        return logging.DEBUG, logging.INFO
    return logging.INFO, logging.INFO


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
) -> Console:
    """Configure logging based on CLI options.

    Args:
        verbosity: Number of -v flags (1=lock decisions in detail, 2+=heartbeat ticks)
        quiet: Suppress non-error output
        no_color: Disable colored output

    Returns:
        Configured Rich console for output
    """
    console = Console(
        stderr=True,
        force_terminal=not no_color,
        no_color=no_color,
    )

    # Tick timestamps are what show a heartbeat keeping pace with its interval
    handler = RichHandler(
        console=console,
        show_time=verbosity >= 2,
        show_path=verbosity >= 2,
    )

    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    package_level, heartbeat_level = lock_log_levels(verbosity, quiet)
    logging.getLogger(PACKAGE_LOGGER).setLevel(package_level)
    logging.getLogger(HEARTBEAT_LOGGER).setLevel(heartbeat_level)

    return console
