# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Logging setup shared by all ankh modules.

Console output goes through rich's RichHandler on standard error. If the
`ANKH_LOG_FILE` environment variable points to a file, every record is also
appended to it in plain text, so that a failed provisioning run leaves a
transcript behind (including the debug-level command lines).
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .config import CFG

FILE_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# one handler per log file shared by all loggers; None if the file cannot be opened
_file_handlers: dict[str, logging.FileHandler | None] = {}


def get_logger(name: str, show_time: bool = False) -> logging.Logger:
    """
    Return a logger with unified formatting.

    Args:
        name (str): Name of the logger, typically `__name__`.
        show_time (bool): Show timestamps on the console even outside debug mode.

    Returns:
        logging.Logger: Configured logger. Calling this function repeatedly
        with the same name does not stack handlers.
    """
    logger = logging.getLogger(name)

    debug_mode = os.environ.get(CFG.env_vars.debug_mode) is not None
    level = logging.DEBUG if debug_mode else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    # drop handlers installed by a previous call
    for old in list(logger.handlers):
        logger.removeHandler(old)
        if old not in _file_handlers.values():
            old.close()

    console = Console(stderr=True)
    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_path=False,
        show_level=True,
        show_time=show_time or debug_mode,
        log_time_format=CFG.date_formats.standard,
        tracebacks_width=None,
        tracebacks_code_width=None,
    )
    handler.setLevel(level)
    logger.addHandler(handler)

    if log_file := os.environ.get(CFG.env_vars.log_file):
        if file_handler := _get_file_handler(log_file, logger):
            # the transcript always contains debug records
            logger.setLevel(logging.DEBUG)
            logger.addHandler(file_handler)

    return logger


def _get_file_handler(
    log_file: str, logger: logging.Logger
) -> logging.FileHandler | None:
    """
    Return the shared handler writing into `log_file`.

    If the file cannot be opened, a warning is logged once and None is returned.
    """
    if log_file not in _file_handlers:
        try:
            handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Cannot write the log file '{log_file}': {e}.")
            _file_handlers[log_file] = None
        else:
            handler.setFormatter(
                logging.Formatter(FILE_LOG_FORMAT, datefmt=CFG.date_formats.standard)
            )
            handler.setLevel(logging.DEBUG)
            _file_handlers[log_file] = handler

    return _file_handlers[log_file]
