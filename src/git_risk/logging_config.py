"""Logging setup for git-risk entry points.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, by the CLI, never on import.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def resolve_level(verbose: bool = False, quiet: bool = False, default: str = "WARNING") -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.getLevelName(default.upper())


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: str | None = None,
    default_level: str = "WARNING",
) -> logging.Logger:
    """Configure the ``git_risk`` logger with a rich stderr handler.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to append logs to
        default_level: Level used when neither flag is set

    Returns:
        The configured ``git_risk`` logger
    """
    level = resolve_level(verbose, quiet, default_level)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handlers.append(file_handler)

    logger = logging.getLogger("git_risk")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
