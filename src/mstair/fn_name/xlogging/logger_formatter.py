# File: src/mstair/fn_name/xlogging/logger_formatter.py
"""
CoreFormatter: colorized log lines that show where a record came from.

Extra format fields available to the format string:

- ``%(levelName)s``: colored level name
- ``%(fileAndLine)s``: source path relative to the project root, plus line
- ``%(qualifiedName)s``: emitting function's path followed by ``()``,
  e.g. ``GenericType[_].generic_method()``
"""

import logging
import os
import re
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

import pytz
from colorama import Fore

from mstair.fn_name.base import config as cfg
from mstair.fn_name.base.fs_helpers import fs_project_relpath
from mstair.fn_name.xlogging.logger_constants import (
    K_COLOR,
    K_QUALIFIED_NAME,
    MODULE_SCOPE_NAME,
    RE_PATH_BACKSLASH,
)


__all__ = ["CoreFormatter", "get_color_code", "rgb_code"]


FormatStyle = Literal["%", "{", "$"]


def rgb_code(r: int, g: int, b: int) -> str:
    """Return the ANSI 24-bit foreground escape code for an RGB color (components clamped)."""
    return f"\033[38;2;{max(0, min(255, r))};{max(0, min(255, g))};{max(0, min(255, b))}m"


RGB_CALLER_0 = rgb_code(3 << 4, 12 << 4, 10 << 4)
RGB_CALLER_1 = rgb_code(4 << 4, 8 << 4, 10 << 4)
COLOR_MAP: dict[str | None, str] = {
    "fileAndLine": RGB_CALLER_1,
    "qualifiedName": RGB_CALLER_0,
    "TRACE": rgb_code(96, 0, 64),
    "DEBUG": rgb_code(0, 0, 0),
    "INFO": rgb_code(184, 184, 216),
    "WARNING": rgb_code(192, 176, 0),
    "ERROR": rgb_code(224, 128, 0),
    "CRITICAL": rgb_code(255, 64, 64),
    "SUPPRESS": rgb_code(0, 0, 128),
    None: Fore.RESET,
}


def get_color_code(key: Any = None) -> str:
    """
    Resolve a color key to an ANSI code; empty outside desktop mode.

    Keys: a COLOR_MAP entry, a ``#rrggbb`` hex string, or a colorama ``Fore``
    name (``"magenta"``, ``"bright_red"``). Unknown keys reset.
    """
    if not cfg.in_desktop_mode():
        return ""

    if key in {"", "RESET"} or key is None:
        return Fore.RESET
    if key in COLOR_MAP:
        return COLOR_MAP[key]
    if isinstance(key, str) and re.fullmatch(r"#[0-9a-fA-F]{6}", key):
        return rgb_code(*[int(key[i : i + 2], 16) for i in (1, 3, 5)])

    clean_key = str(key).upper().replace("BRIGHT", "LIGHT").replace("LIGHT_", "LIGHT")
    if "LIGHT" in clean_key and not clean_key.endswith("_EX"):
        clean_key += "_EX"
    return getattr(Fore, clean_key, Fore.RESET)


class CoreFormatter(logging.Formatter):
    """Formatter for CoreLogger records: project-relative locations, function names, colors."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: FormatStyle = "%",
        validate: bool = True,
        *,
        defaults: dict[str, Any] | None = None,
        tz: str | None = None,
    ) -> None:
        """
        :param fmt: The format string for log messages.
        :param datefmt: The date format string for log timestamps.
        :param style: The style for the format string (default is "%").
        :param validate: Whether to validate the format strings (default is True).
        :param defaults: Default values for format fields.
        :param tz: Time zone name for timestamps; defaults to LOG_TIMEZONE or UTC.
        """
        super().__init__(fmt=fmt, datefmt=datefmt, style=style, validate=validate, defaults=defaults)
        self.tz = pytz.timezone(tz or os.environ.get("LOG_TIMEZONE") or "UTC")

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers see the same record; decorate a copy
        record = logging.makeLogRecord(record.__dict__)
        record.fileAndLine = self.format_fileAndLine(record.pathname, record.lineno)
        record.qualifiedName = self.format_qualifiedName(record)
        record.levelName = get_color_code(record.levelname) + record.levelname + get_color_code()

        try:
            message_str = super().format(record)
            message_str = self.apply_message_colors(record, message_str)
        except Exception as exc:
            message_str = format_logging_error(record, exc)
        return message_str

    @staticmethod
    def format_file(file: str) -> str:
        """Return `file` relative to its project root; pseudo-files (``<string>``) unchanged."""
        if not file or file.startswith("<"):
            return file or "<unknown file>"
        return fs_project_relpath(file)

    def format_fileAndLine(self, file: str, lineno: int) -> str:
        fileAndLine = f"{self.format_file(file)}:{lineno}"
        return get_color_code("fileAndLine") + fileAndLine + get_color_code()

    @staticmethod
    def format_qualifiedName(record: logging.LogRecord) -> str:
        """Render the record's function name; records from stdlib loggers fall back to funcName."""
        name = getattr(record, K_QUALIFIED_NAME, None) or record.funcName or MODULE_SCOPE_NAME
        text = name if name == MODULE_SCOPE_NAME or name.endswith("()") else f"{name}()"
        return get_color_code("qualifiedName") + text + get_color_code()

    @staticmethod
    def apply_message_colors(record: logging.LogRecord, formatted_message: str) -> str:
        color_key = getattr(record, K_COLOR, record.levelname)
        if os.name == "nt":
            formatted_message = re.sub(RE_PATH_BACKSLASH, "/", formatted_message)
        return get_color_code(color_key) + formatted_message + get_color_code()

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        _datetime = datetime.fromtimestamp(record.created, self.tz)
        result = ""
        if datefmt:
            try:
                # "%-I" is not portable: drop the flag, then the leading zero
                result = _datetime.strftime(datefmt.replace("%-", "%"))
                result = result.replace("AM", "am").replace("PM", "pm").lstrip("0")
            except ValueError as e:
                print(f"{type(e).__name__}: {e}: '{datefmt}'", file=sys.stderr)
        return result or _datetime.isoformat()


def format_logging_error(record: logging.LogRecord, exc: Exception) -> str:
    """Describe a record that could not be formatted, instead of losing it."""
    posix_path = Path(getattr(record, "pathname", "<unknown>")).as_posix()
    message_lines = [
        "Internal error: Failed to format log record",
        f"{posix_path}:{getattr(record, 'lineno', '?')}",
        f"{type(exc).__name__}: {exc}",
        f"record.msg: {getattr(record, 'msg', None)!r}",
        f"record.args: {getattr(record, 'args', None)!r}",
        "",
        *traceback.format_exc().splitlines(),
        ".",
    ]
    return "\n>> " + "\n>> ".join(message_lines) + "\n\n"


# End of file: src/mstair/fn_name/xlogging/logger_formatter.py
