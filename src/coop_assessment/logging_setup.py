"""
Logging setup for the assessment engine.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
CLI (or any host application) decides where records go.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


_LOG_THEME = Theme({
    "logging.level.debug": "dim cyan",
    "logging.level.info": "green",
    "logging.level.warning": "yellow",
    "logging.level.error": "bold red",
    "logging.level.critical": "bold white on red",
})

_console = Console(theme=_LOG_THEME, stderr=True)

ROOT_LOGGER_NAME = 'coop_assessment'


def setup_logging(
    level: str = 'WARNING',
    rich_tracebacks: bool = True,
    show_path: bool = False,
) -> logging.Logger:
    """
    Attach a Rich console handler to the package logger.

    Calling it again replaces the previous handler instead of stacking a
    second one.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rich_tracebacks: Whether to render exception tracebacks with rich
        show_path: Whether to show the emitting file and line

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=_console,
        rich_tracebacks=rich_tracebacks,
        show_path=show_path,
        markup=False,
    )
    handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(handler)
    return logger
