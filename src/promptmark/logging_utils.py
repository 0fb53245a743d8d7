"""Logging setup for the ``promptmark`` command.

The library itself only creates module loggers; handlers are installed here,
by the command line entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

CLI_HANDLER_NAME = "promptmark-cli"

LOG_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(level: int | str) -> int:
    """Return the numeric level for a level name or number.

    Unknown names resolve to ``WARNING``.

    Examples
    --------
        >>> resolve_log_level("debug")
        10
        >>> resolve_log_level("chatty")
        30

    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def _install(root_logger: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.set_name(CLI_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Install stderr and optional file handlers on the root logger.

    Handlers installed by an earlier call are replaced; handlers added by
    other code stay in place.

    Parameters
    ----------
    log_level : int | str
        Numeric level or level name, e.g. ``"INFO"``
    log_file : str, optional
        Also append log records to this file
    trace_mode : bool, default False
        Include timestamps and logger names in each record

    Returns
    -------
    logging.Logger
        The root logger

    """
    level = resolve_log_level(log_level)
    if trace_mode:
        formatter = logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT)
    else:
        formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if h.get_name() == CLI_HANDLER_NAME]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(level)

    _install(root_logger, logging.StreamHandler(sys.stderr), level, formatter)
    if log_file:
        try:
            _install(root_logger, logging.FileHandler(log_file, mode="a", encoding="utf-8"), level, formatter)
        except OSError as e:
            root_logger.warning("Could not open log file %s: %s", log_file, e)

    return root_logger
