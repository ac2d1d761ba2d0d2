"""Logging configuration for textanchor.

Library modules only create loggers; handlers and levels are configured once
by the command line entry point through setup_logging().
"""

import logging
import os
import sys

ROOT_LOGGER_NAME = "textanchor"
LOG_LEVEL_ENV_VAR = "TEXTANCHOR_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_handler: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Module name, usually __name__

    Returns:
        Logger inside the textanchor hierarchy
    """
    return logging.getLogger(name)


def _resolve_level(verbose: bool, quiet: bool) -> int:
    env_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if env_level:
        level = logging.getLevelName(env_level.upper())
        if isinstance(level, int):
            return level
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure the textanchor logger hierarchy.

    Logs go to stderr so that command output on stdout stays machine-readable.
    Calling this again replaces the previous handler.

    Args:
        verbose: Enable DEBUG output
        quiet: Only show warnings and errors
    """
    global _handler

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(_handler)
    root.setLevel(_resolve_level(verbose, quiet))
