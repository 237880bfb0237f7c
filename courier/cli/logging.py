"""
Logging setup for the CLI.

Library modules log through `logging.getLogger(__name__)` under the `courier`
namespace; the CLI attaches a rich handler to that namespace for the duration
of a command.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "courier"


@dataclass(frozen=True, slots=True)
class LoggingState:
    level: int
    handlers: tuple[logging.Handler, ...]
    propagate: bool


def _level_for_verbosity(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(*, verbosity: int) -> LoggingState:
    """Install a stderr rich handler on the `courier` logger; returns the prior state."""
    logger = logging.getLogger(_LOGGER_NAME)
    previous = LoggingState(
        level=logger.level,
        handlers=tuple(logger.handlers),
        propagate=logger.propagate,
    )
    handler = RichHandler(
        console=Console(file=sys.stderr, force_terminal=False),
        show_path=False,
        rich_tracebacks=verbosity >= 2,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.handlers = [handler]
    logger.setLevel(_level_for_verbosity(verbosity))
    logger.propagate = False
    return previous


def restore_logging(state: LoggingState) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.handlers = list(state.handlers)
    logger.setLevel(state.level)
    logger.propagate = state.propagate
