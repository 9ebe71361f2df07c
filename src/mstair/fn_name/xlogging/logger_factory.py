# File: src/mstair/fn_name/xlogging/logger_factory.py
"""
Logger factory for creating CoreLogger instances.

Loggers are registered through logging.getLogger() so they join the standard
hierarchy (parents, propagation, pytest's caplog). Anonymous loggers are named
after the calling module.
"""

import logging
import sys
from pathlib import Path

from mstair.fn_name.base.caller_frame import caller_module_name_and_level
from mstair.fn_name.xlogging.core_logger import CoreLogger


__all__ = ["create_logger", "get_caller_logger_name"]


def create_logger(
    name: str | None = None,
    *,
    level: int | str | None = None,
    stacklevel: int = 1,
) -> CoreLogger:
    """
    Return a CoreLogger with a consistent, context-aware name.

    Handles:
    - Normal imports (uses given name)
    - Direct script execution (``__main__`` becomes the script's stem)
    - Anonymous loggers (uses the caller's module name)
    """
    logger_name: str = name or ""

    if logger_name == "__main__":
        arg0 = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
        logger_name = arg0.stem if arg0 and arg0.exists() else "embedded_main"

    if not logger_name:
        logger_name = get_caller_logger_name(stacklevel=stacklevel + 1)

    existing = logging.Logger.manager.loggerDict.get(logger_name)
    if isinstance(existing, CoreLogger):
        if level is not None:
            existing.setLevel(level)
        return existing

    logger = _get_core_logger_from_logging(logger_name)
    if level is not None:
        logger.setLevel(level)
    return logger


def _get_core_logger_from_logging(name: str) -> CoreLogger:
    """
    Create or retrieve a CoreLogger through logging.getLogger().

    :raises TypeError: If getLogger() returns another logger class.
    """
    logging_class = logging.getLoggerClass()
    if logging_class is not CoreLogger:
        logging.setLoggerClass(CoreLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        if logging_class is not CoreLogger:
            logging.setLoggerClass(logging_class)
    if not isinstance(logger, CoreLogger):
        raise TypeError(f"Failed to create CoreLogger: {logger!r}")
    return logger


def get_caller_logger_name(*, stacklevel: int = 1) -> str:
    """Resolve a logger name from the caller's module (script stem for ``__main__``)."""
    name = caller_module_name_and_level(stacklevel=stacklevel + 1)[0]
    if not name or name == "__main__":
        executable = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
        name = Path(executable).stem
    return name


# End of file: src/mstair/fn_name/xlogging/logger_factory.py
