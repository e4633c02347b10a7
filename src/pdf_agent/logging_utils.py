"""Logging setup shared by the ``pdf-agent`` CLI and the MCP server.

Everything is written to stderr. For the server, stdout is the MCP stdio
transport; for the CLI it carries the rendered or JSON search output.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_PLAIN_FORMAT = "%(levelname)s: %(message)s"
_TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
_TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# httpx and httpcore log every request at INFO/DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(log_level: int | str) -> int:
    """Translate a level name or number into a numeric logging level.

    Unknown names fall back to ``logging.INFO``.
    """
    if isinstance(log_level, int):
        return log_level
    return getattr(logging, str(log_level).upper().strip(), logging.INFO)


def configure_logging(
    log_level: int | str,
    trace_mode: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install a single stderr handler on the root logger.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g. ``"INFO"``).
    trace_mode : bool, default False
        Include timestamps and logger names. The MCP server always uses it,
        since its log is usually read from a client's log file.
    stream : TextIO, optional
        Destination stream; defaults to ``sys.stderr`` at call time.

    Returns
    -------
    logging.Logger
        The configured root logger.

    """
    level = resolve_log_level(log_level)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    if trace_mode:
        handler.setFormatter(logging.Formatter(_TRACE_FORMAT, datefmt=_TRACE_DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    noisy_level = level if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return root_logger
