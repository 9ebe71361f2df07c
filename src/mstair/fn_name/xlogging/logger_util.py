# File: src/mstair/fn_name/xlogging/logger_util.py
"""
Environment variable-driven log level configuration.

Two sources are supported, both optionally loaded from a `.env` file:
- Pattern DSL strings in LOG_LEVEL / LOG_LEVELS, e.g. ``"myapp.*:DEBUG; INFO"``
- Per-logger overrides in variables like LOG_LEVEL_<NAME>

Only the level of individual loggers is resolved here; the root logger's level
is owned by initialize_root() in mstair.fn_name.xlogging.core_logger.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import ClassVar, Final, NamedTuple

from mstair.fn_name.base.fs_helpers import fs_load_env_file
from mstair.fn_name.xlogging.logger_constants import initialize_logger_constants


__all__ = ["LogEnvVar", "LogLevelConfig"]

_FRAGMENT_SEPARATOR_RX: Final[re.Pattern[str]] = re.compile(r"[;, ]+")
_ASSIGNMENT_OPERATOR_RX: Final[re.Pattern[str]] = re.compile(r"[:=]+")
_GLOB_CHARS: Final[str] = "*?["

_log_level_config_instance: LogLevelConfig | None = None


class LogEnvPatternLevel(NamedTuple):
    """One ``pattern -> level`` entry parsed from an environment variable."""

    pattern: str
    level: int


@dataclass(slots=True)
class LogEnvVar:
    """
    A LOG_LEVEL / LOG_LEVELS environment variable, with its optional logger suffix.

    ``LOG_LEVEL_MYAPP_CORE`` targets logger ``myapp.core``; a doubled underscore
    escapes a literal one (``LOG_LEVEL_MY__APP`` -> ``my_app``). The ``ROOT``
    suffix, or no suffix, targets the default level.
    """

    NAME_RX: ClassVar[re.Pattern[str]] = re.compile(
        r"""
        ^(?P<BASENAME>LOG_LEVELS?)          # LOG_LEVEL or LOG_LEVELS
        (?P<SUFFIX>(?:_[A-Z][A-Z0-9_]*)*)$  # optional logger suffix
        """,
        re.VERBOSE,
    )

    name: str = field(default="", repr=False)
    module: str = ""
    value: str = field(default="", repr=False)

    @classmethod
    def from_env_var(cls, name: str, value: str) -> LogEnvVar | None:
        """Return a LogEnvVar if `name` is a log level variable, else None."""
        match = cls.NAME_RX.match(name)
        if match is None:
            return None
        suffix = match["SUFFIX"].lstrip("_")
        module = ""
        if suffix and suffix.upper() != "ROOT":
            module = suffix.replace("__", "\0").replace("_", ".").replace("\0", "_").lower()
        return cls(name=name, module=module, value=value)

    @classmethod
    def from_environ(cls) -> Iterator[LogEnvVar]:
        """Yield LogEnvVar instances for all matching environment variables."""
        fs_load_env_file()
        for name, value in sorted(os.environ.items(), reverse=True):
            if (env_var := cls.from_env_var(name, value)) is not None:
                yield env_var


@dataclass(slots=True)
class LogLevelConfig:
    """
    Resolve per-logger levels from the environment.

    Precedence: exact > ancestor > most specific glob > default > fallback.
    Matching is case-insensitive.
    """

    pattern_to_level: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.pattern_to_level:
            self.update_from_environment()

    @classmethod
    def get_instance(cls) -> LogLevelConfig:
        """Return the process-wide LogLevelConfig, creating it on first use."""
        global _log_level_config_instance
        if _log_level_config_instance is None:
            initialize_logger_constants()
            _log_level_config_instance = cls()
        return _log_level_config_instance

    def update_from_environment(self) -> None:
        """Rebuild the pattern->level mapping from the current environment."""
        self.pattern_to_level.clear()
        for var in LogEnvVar.from_environ():
            for entry in self.parse_log_var(var):
                self.pattern_to_level[entry.pattern] = entry.level

    def parse_log_var(self, var: LogEnvVar) -> Iterator[LogEnvPatternLevel]:
        """Parse one variable's DSL value into pattern->level entries, skipping bad levels."""
        level_names = _level_names_mapping()
        for fragment in _FRAGMENT_SEPARATOR_RX.split(var.value):
            if not (fragment := fragment.strip()):
                continue

            parts = _ASSIGNMENT_OPERATOR_RX.split(fragment, maxsplit=1)
            pattern, level_name = ("", parts[0]) if len(parts) == 1 else (parts[0], parts[1])
            pattern = pattern.strip().strip("'\"")
            level_name = level_name.strip().strip("'\"").upper()

            if var.module:
                pattern = var.module if pattern in {"", "root"} else f"{var.module}.{pattern}"
            if pattern.lower() == "root":
                pattern = ""

            level = level_names.get(level_name, logging.NOTSET)
            if level != logging.NOTSET:
                yield LogEnvPatternLevel(pattern, level)

    def get_effective_level(self, logger_name: str, *, default: int = logging.WARNING) -> int:
        """Return the configured level for `logger_name`."""
        name_lc = logger_name.lower()
        lc_map = {k.lower(): v for k, v in self.pattern_to_level.items() if k}

        if name_lc in lc_map:
            return lc_map[name_lc]

        parts = name_lc.split(".")
        for end in range(len(parts) - 1, 0, -1):
            ancestor = ".".join(parts[:end])
            if ancestor in lc_map:
                return lc_map[ancestor]

        best: tuple[int, int] | None = None
        for pattern, level in lc_map.items():
            if not any(ch in pattern for ch in _GLOB_CHARS):
                continue
            if fnmatch.fnmatch(name_lc, pattern):
                specificity = min(
                    (i for i, ch in enumerate(pattern) if ch in _GLOB_CHARS), default=len(pattern)
                )
                if best is None or specificity > best[0]:
                    best = (specificity, level)
        if best is not None:
            return best[1]

        return self.pattern_to_level.get("", default)


def _level_names_mapping() -> dict[str, int]:
    """Uppercase level names (including TRACE and SUPPRESS) -> numeric level."""
    initialize_logger_constants()
    return {
        k.upper(): v
        for k, v in logging.getLevelNamesMapping().items()
        if isinstance(k, str) and k.isupper() and isinstance(v, int)
    }


# End of file: src/mstair/fn_name/xlogging/logger_util.py
