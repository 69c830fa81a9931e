"""Logging set-up driven by the ``app`` section of the settings."""

import logging
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from kg_accessor.config.settings import AppConfig

PACKAGE_LOGGER = "kg_accessor"

# Third-party loggers held at AppConfig.driver_log_level
DRIVER_LOGGERS = ("neo4j",)


def setup_logging(config: "AppConfig", console: Optional[Console] = None) -> RichHandler:
    """
    Route all log records through a single Rich handler on stderr.

    The package logger follows ``config.log_level``; driver loggers are never
    more verbose than ``config.driver_log_level``. Calling this again
    replaces the previous handler.

    Args:
        config: Application logging settings
        console: Console to log to (stderr by default)

    Returns:
        The installed handler
    """
    level = logging.getLevelName(config.log_level)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=config.log_show_time,
        show_path=config.log_show_path,
        rich_tracebacks=True,
        # messages carry Cypher patterns such as -[r:LABEL]->
        markup=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    driver_level = max(level, logging.getLevelName(config.driver_log_level))
    for name in DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(driver_level)

    return handler


def get_logger(name: str) -> logging.Logger:
    """Logger under the package namespace (``__name__`` is used as is)."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
