"""
Logging configuration for Ricci Analyzer.

Terminal records go through rich on stderr. An optional log file keeps the
full debug trail of a run regardless of the terminal level.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "ricci_analyzer"

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure terminal logging and, optionally, a log file.

    Args:
        verbose: Show DEBUG records on the terminal
        quiet: Show only ERROR records on the terminal
        log_file: Append every record, down to DEBUG, to this file

    Returns:
        The ricci_analyzer package logger
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    # stderr, so a report on stdout stays pipeable
    terminal = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    terminal.setLevel(level)
    handlers: list[logging.Handler] = [terminal]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    root_level = logging.DEBUG if log_file else level
    logging.basicConfig(
        level=root_level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(root_level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for a module, always under the ricci_analyzer namespace."""
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
