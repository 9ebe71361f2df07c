# File: src/mstair/fn_name/xlogging/core_logger.py
"""
Structured logging that names the function each record came from.

Example:
    >>> from mstair.fn_name.xlogging.logger_factory import create_logger
    >>> logger = create_logger(__name__)
    >>> def load() -> None:
    ...     with logger.prefix_with("[INIT]"):
    ...         logger.warning("Loading configuration")
    >>> load()  # WARNING ... load() [INIT] > Loading configuration

Features:
- Custom levels: TRACE, SUPPRESS
- Stack-aware caller resolution; every record carries `qualifiedName`, the
  emitting function's path as produced by mstair.fn_name.uninstantiated()
- Context-local, nestable message prefixes
- Non-primitive arguments rendered with repr() so formatting never raises

Design:
- Only the root logger owns handlers/formatters; CoreLogger instances propagate.
- Log levels are controlled per-logger (via environment and LogLevelConfig).
- initialize_root() is the only supported entry point for root setup; its state
  is kept on a root logger attribute, never in a module global.
"""

from __future__ import annotations

import contextvars
import inspect
import logging
import os
import re
import sys
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from types import FrameType, TracebackType
from typing import Any, Final, TextIO

from mstair.fn_name.base import config as cfg
from mstair.fn_name.xlogging.frame_analyzer import StackFrameInfo
from mstair.fn_name.xlogging.logger_constants import (
    K_QUALIFIED_NAME,
    TRACE,
    initialize_logger_constants,
)
from mstair.fn_name.xlogging.logger_formatter import CoreFormatter
from mstair.fn_name.xlogging.logger_util import LogLevelConfig


__all__: list[str] = [
    "CoreLogger",
    "initialize_root",
]

DEFAULT_LOG_FORMAT: Final[str] = (
    r"%(levelName)s %(asctime)s %(fileAndLine)s %(qualifiedName)s %(message)s"
)

_LOG_KWARGS_FORBIDDEN: set[str] = {"filename", "lineno", "msg", "args", "levelname", "levelno"}
_LOG_KWARGS_STANDARD: set[str] = {"exc_info", "stack_info", "stacklevel"}
_LOG_ROOT_ATTR_NAME = "_mstair_fn_name_corelogger_initialized"
_PRIMITIVE_TYPES: tuple[type, ...] = (str, int, float, complex, bool, type(None))

# Frames in these files are never reported as the caller of a log record
_NOISE_FILES: frozenset[str] = frozenset(
    os.path.normcase(os.path.abspath(f)) for f in (__file__, logging.__file__)
)


_cached_caller_info: contextvars.ContextVar[StackFrameInfo | None] = contextvars.ContextVar(
    "cached_caller_info", default=None
)
_log_prefix: contextvars.ContextVar[str] = contextvars.ContextVar("log_prefix", default="")


class CoreLogger(logging.Logger):
    """
    Application logger that extends logging.Logger with:

    - Custom levels: TRACE, SUPPRESS.
    - Accurate caller info using stack inspection.
    - The emitting function's qualified name on every record.
    - Safe rendering of non-primitive args.
    - Prefix context manager for scoped message prefixes.

    Handlers are not attached directly; all CoreLogger instances propagate
    to the root logger, which holds a single stderr handler per initialize_root().
    """

    def __init__(
        self,
        name: str,
        level: int | str | None = logging.NOTSET,
    ) -> None:
        """
        Initialize the CoreLogger with a name and log level.

        :param name: The name of the logger, typically the module name.
        :param level: The initial log level. NOTSET resolves it from the environment.
        """
        initialize_logger_constants()

        levels: set[int | str] = {logging.NOTSET, "NOTSET", ""}
        level = level if level in levels or isinstance(level, int) else logging.NOTSET
        if level in levels:
            level = LogLevelConfig.get_instance().get_effective_level(name)
        super().__init__(name, level)

        root_level = logging.getLogger().getEffectiveLevel()
        if self.level < root_level:
            self.setLevel(root_level)

    def __repr__(self) -> str:
        level = self.getEffectiveLevel()
        return f"<{self.__class__.__name__} '{self.name}' {logging.getLevelName(level)}={level}>"

    def log(self, level: int, *args: Any, **kwargs: Any) -> None:
        """
        Emit a log record attributed to the calling function.

        Delegates to super().log() so handler filtering, propagation and level
        checks behave exactly as for a standard logger.
        """
        initialize_root()
        if cfg.in_analysis_mode():
            return
        if not self.isEnabledFor(level):
            return

        _validate_and_move_kwargs_to_extra(kwargs)
        _normalize_exc_info(kwargs)

        found_frame_info = _find_caller_frame(kwargs.pop("stacklevel", 1))
        extra: dict[str, Any] = kwargs.setdefault("extra", {})
        extra.setdefault(K_QUALIFIED_NAME, found_frame_info.qualified_name())

        args = _normalize_unsupported_args(*args)
        prefix = _log_prefix.get()
        if prefix and args:
            args = (f"{prefix}{args[0]}", *args[1:])

        msg = args[0] if args else ""
        token = _cached_caller_info.set(found_frame_info)
        try:
            super().log(
                level,
                msg,
                *args[1:],
                exc_info=kwargs.get("exc_info"),
                stack_info=kwargs.get("stack_info", False),
                stacklevel=1,
                extra=extra,
            )
        finally:
            _cached_caller_info.reset(token)

    def findCaller(
        self,
        stack_info: bool = False,
        stacklevel: int = 1,
    ) -> tuple[str, int, str, str | None]:
        """
        Use the frame already resolved by log() instead of walking the stack again.

        The cached info is reset as soon as super().log() returns; it must not
        outlive the call or it would keep stack frames alive.
        """
        if (info := _cached_caller_info.get()) is not None:
            sinfo: str | None = None
            if stack_info:
                sinfo = "Stack (most recent call last):\n" + "".join(
                    traceback.format_stack(info.frame)
                ).rstrip("\n")
            return (info.f_code_filename, info.frame.f_lineno, info.f_code_name, sinfo)
        return super().findCaller(stack_info=stack_info, stacklevel=stacklevel)

    def trace(self, *args: Any, **kwargs: Any) -> None:
        """Log a message at TRACE level (below DEBUG)."""
        self.log(TRACE, *args, **kwargs)

    def debug(self, *args: Any, **kwargs: Any) -> None:
        """Log a message at DEBUG level."""
        self.log(logging.DEBUG, *args, **kwargs)

    def info(self, *args: Any, **kwargs: Any) -> None:
        """Log a message at INFO level."""
        self.log(logging.INFO, *args, **kwargs)

    def warning(self, *args: Any, **kwargs: Any) -> None:
        """Log a message at WARNING level."""
        self.log(logging.WARNING, *args, **kwargs)

    def error(self, *args: Any, **kwargs: Any) -> None:
        """Log a message at ERROR level."""
        self.log(logging.ERROR, *args, **kwargs)

    def critical(self, *args: Any, **kwargs: Any) -> None:
        """Log a message at CRITICAL level with a stack trace."""
        kwargs.setdefault("stack_info", True)
        self.log(logging.CRITICAL, *args, **kwargs)

    def exception(self, *args: Any, **kwargs: Any) -> None:
        """Log a message at ERROR level with exception info and a stack trace."""
        kwargs.setdefault("exc_info", True)
        kwargs.setdefault("stack_info", True)
        self.log(logging.ERROR, *args, **kwargs)

    @contextmanager
    def prefix_with(self, prefix: str) -> Iterator[None]:
        """
        Prefix every message logged within the block (any CoreLogger, this context).

        Nested prefixes accumulate: ``[A] > [B] > message``.
        """
        formatted_prefix = (prefix + " > ") if not prefix.endswith("\n") else (prefix[:-1] + " >\n")
        token = _log_prefix.set(_log_prefix.get() + formatted_prefix)
        try:
            yield
        finally:
            _log_prefix.reset(token)


def initialize_root(
    fmt: str | None = None,
    datefmt: str | None = None,
    level: int | str | None = None,
    force: bool = False,
) -> None:
    """
    Idempotently configure the root logger for CoreLogger.

    - Ensures exactly one stderr StreamHandler with CoreFormatter exists.
    - If `force=True`, removes and recreates the stderr handler.
    - Sets root level to `level` if provided, otherwise WARNING if unset.
    - Does not modify non-stderr handlers owned by the host application.

    :param fmt: Format string. Defaults to LOG_FORMAT or DEFAULT_LOG_FORMAT.
    :param datefmt: Date format. Defaults to LOG_DATEFMT. Without percent
        directives, timestamps are removed from the format.
    :param level: Root logger level (int or name).
    :param force: Reinitialize even if already initialized.
    """
    root = logging.getLogger()
    if getattr(root, _LOG_ROOT_ATTR_NAME, False) and not force:
        return
    setattr(root, _LOG_ROOT_ATTR_NAME, True)

    initialize_logger_constants()

    if force:
        root.handlers = [
            h
            for h in root.handlers
            if not (isinstance(h, logging.StreamHandler) and h.stream is sys.stderr)
        ]

    _ensure_stderr_coreformatter(fmt=fmt, datefmt=datefmt)

    if level is not None:
        if isinstance(level, str):
            level = logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)
        root.setLevel(level)
    elif root.getEffectiveLevel() == logging.NOTSET:
        root.setLevel(logging.WARNING)


def _ensure_stderr_coreformatter(*, fmt: str | None = None, datefmt: str | None = None) -> None:
    """Give the root logger one stderr handler using CoreFormatter, upgrading in place if needed."""
    fmt = fmt or os.environ.get("LOG_FORMAT", DEFAULT_LOG_FORMAT)
    datefmt = os.environ.get("LOG_DATEFMT", "%-I:%M%p") if datefmt is None else datefmt
    if "%" not in datefmt:
        fmt = re.sub(r"\s*%\(asctime\)s\s*", " ", fmt).strip()
        datefmt = None

    root = logging.getLogger()
    stderr_handlers: list[logging.StreamHandler[TextIO]] = [
        h for h in root.handlers if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr
    ]
    if not stderr_handlers:
        handler: logging.StreamHandler[TextIO] = logging.StreamHandler(sys.stderr)
        handler.setFormatter(CoreFormatter(fmt, datefmt))
        root.addHandler(handler)
        return

    if not any(isinstance(h.formatter, CoreFormatter) for h in stderr_handlers):
        stderr_handlers[0].setFormatter(CoreFormatter(fmt, datefmt))


def _find_caller_frame(stacklevel: int) -> StackFrameInfo:
    """
    Return the `stacklevel`-th frame outside the logging machinery.

    stacklevel=1 is the function that called the CoreLogger method.
    """
    if stacklevel < 1:
        raise ValueError("stacklevel must be greater than 0")

    current_frame: FrameType | None = inspect.currentframe()
    if current_frame is None:
        raise RuntimeError("Cannot retrieve current stack frame for caller resolution")

    remaining = stacklevel
    frames_walked = 0
    try:
        while current_frame is not None:
            if not _is_noise_frame(current_frame):
                remaining -= 1
                if remaining == 0:
                    return StackFrameInfo.from_raw_frame(raw_frame=current_frame)
            current_frame = current_frame.f_back
            frames_walked += 1
    finally:
        del current_frame
    raise RuntimeError(
        f"Stack walk completed without finding valid caller frame (walked {frames_walked} frames)"
    )


def _is_noise_frame(frame: FrameType) -> bool:
    """Frames inside CoreLogger itself or the stdlib logging module."""
    return os.path.normcase(os.path.abspath(frame.f_code.co_filename)) in _NOISE_FILES


def _validate_and_move_kwargs_to_extra(kwargs: dict[str, Any]) -> None:
    """
    Move non-standard keyword arguments into ``extra``.

    :raises ValueError: If a keyword would clobber a reserved LogRecord attribute.
    """
    for key, value in list(kwargs.items()):
        if key in _LOG_KWARGS_FORBIDDEN:
            raise ValueError(f"Invalid keyword argument '{key}={value!r}'")
        if key not in _LOG_KWARGS_STANDARD and key != "extra":
            kwargs.pop(key)
            kwargs.setdefault("extra", {})[key] = value


def _normalize_unsupported_args(*args: Any) -> tuple[Any, ...]:
    """Render non-primitive arguments with repr(), reporting bad format strings."""
    if len(args) > 1:
        if not isinstance(args[0], str):
            logging.getLogger(__name__).warning(
                "First log() argument must be a format string if args are provided: %r", args[0]
            )
        else:
            try:
                _ = args[0] % tuple(args[1:])
            except (TypeError, ValueError) as e:
                logging.getLogger(__name__).warning(
                    "Bad log format string or args: %r %% %r failed (%s: %s)",
                    args[0],
                    args[1:],
                    type(e).__name__,
                    e,
                )

    normalized: list[Any] = []
    for arg in args:
        if isinstance(arg, _PRIMITIVE_TYPES):
            normalized.append(arg)
            continue
        try:
            normalized.append(repr(arg))
        except Exception as e:
            normalized.append(f"<unrepresentable: {type(arg).__name__}: {e}>")
    return tuple(normalized)


def _normalize_exc_info(kwargs: dict[str, Any]) -> None:
    """Drop a malformed exc_info (the record gets none), reporting why."""
    exc_info = kwargs.get("exc_info")
    if exc_info is None or isinstance(exc_info, bool | BaseException):
        return

    problem = ""
    if not isinstance(exc_info, tuple) or len(exc_info) != 3:
        problem = f"not a 3-tuple: {type(exc_info).__name__}"
    elif not (isinstance(exc_info[0], type) and issubclass(exc_info[0], BaseException)):
        problem = f"exc_info[0] is not an exception type: {type(exc_info[0]).__name__}"
    elif not isinstance(exc_info[1], BaseException):
        problem = f"exc_info[1] is not an exception: {type(exc_info[1]).__name__}"
    elif not isinstance(exc_info[2], TracebackType | None):
        problem = f"exc_info[2] is not a traceback: {type(exc_info[2]).__name__}"

    if problem:
        logging.getLogger(__name__).warning(f"Invalid exc_info ({problem}), disabling")
        kwargs["exc_info"] = None


# End of file: src/mstair/fn_name/xlogging/core_logger.py
