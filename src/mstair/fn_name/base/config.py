# File: src/mstair/fn_name/base/config.py
"""
Execution context flags read by the logging stack.

- analysis mode: CoreLogger drops every record (nestable, see analysis_mode_context())
- test mode: running under pytest/unittest or CI
- desktop mode: log lines may carry ANSI colors (tests, or stderr is a terminal)

Test and desktop mode can be overridden per thread; ``override=`` sets the
value, ``unset_override=True`` returns to detection.
"""

from __future__ import annotations

import os
import sys
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class ContextFlags:
    """Per-thread state: analysis nesting depth and explicit overrides by flag name."""

    analysis_depth: int = 0
    overrides: dict[str, bool] = field(default_factory=dict)


_tls = threading.local()


def _flags() -> ContextFlags:
    flags = getattr(_tls, "flags", None)
    if flags is None:
        flags = _tls.flags = ContextFlags()
    return flags


def _resolve(
    name: str,
    detect: Callable[[], bool],
    *,
    unset_override: bool,
    override: bool | None,
) -> bool:
    overrides = _flags().overrides
    if unset_override:
        overrides.pop(name, None)
    if override is not None:
        overrides[name] = override
    return overrides[name] if name in overrides else detect()


@contextmanager
def analysis_mode_context() -> Iterator[None]:
    """Enable analysis mode for the duration of the block."""
    flags = _flags()
    flags.analysis_depth += 1
    try:
        yield
    finally:
        flags.analysis_depth -= 1


def in_analysis_mode() -> bool:
    return _flags().analysis_depth > 0


def _detect_test_mode() -> bool:
    if "pytest" in sys.modules or "unittest" in sys.modules:
        return True
    return bool(os.environ.get("PYTEST_CURRENT_TEST") or os.environ.get("CI") == "true")


def in_test_mode(*, unset_override: bool = False, override: bool | None = None) -> bool:
    """
    True under a test runner. Analysis mode always reports False.

    Detection: pytest/unittest imported, then PYTEST_CURRENT_TEST or CI=true.
    """
    if in_analysis_mode():
        return False
    return _resolve("test_mode", _detect_test_mode, unset_override=unset_override, override=override)


def _detect_desktop_mode() -> bool:
    if in_test_mode():
        return True
    if in_analysis_mode():
        return False
    return sys.stderr is not None and sys.stderr.isatty()


def in_desktop_mode(*, unset_override: bool = False, override: bool | None = None) -> bool:
    """True when output goes to an interactive display: under tests, or stderr is a terminal."""
    return _resolve(
        "desktop_mode", _detect_desktop_mode, unset_override=unset_override, override=override
    )


# End of file: src/mstair/fn_name/base/config.py
