"""Logging setup for the jira_links package."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "jira_links"
LOG_FORMAT_ENV = "JIRA_LINKS_LOG_FORMAT"
DEFAULT_LOG_FORMAT = "%(message)s"


def verbosity_to_level(verbose: int) -> int:
    """Map a -v count to a log level: WARNING, INFO, then DEBUG."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(
    verbose: int = 0,
    log_format: str | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Send package log records to stderr through rich.

    Calling it again replaces the handler installed by a previous call.

    Args:
        verbose: Verbosity count, see :func:`verbosity_to_level`
        log_format: logging format string, defaults to $JIRA_LINKS_LOG_FORMAT
        console: Console to write to, stderr when None

    Returns:
        The package logger
    """
    log_format = log_format or os.getenv(LOG_FORMAT_ENV) or DEFAULT_LOG_FORMAT

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose > 1,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(log_format))
    handler.set_name(PACKAGE_LOGGER)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        if existing.get_name() == PACKAGE_LOGGER:
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(verbosity_to_level(verbose))
    return logger
