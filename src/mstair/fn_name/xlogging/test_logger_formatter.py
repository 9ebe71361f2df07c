# File: src/mstair/fn_name/xlogging/test_logger_formatter.py
"""
Tests for CoreFormatter and color resolution.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from colorama import Fore

from mstair.fn_name.base import config as cfg
from mstair.fn_name.xlogging.logger_formatter import CoreFormatter, get_color_code, rgb_code


@pytest.fixture
def plain_output() -> Iterator[None]:
    cfg.in_desktop_mode(override=False)
    yield
    cfg.in_desktop_mode(unset_override=True)


@pytest.fixture
def color_output() -> Iterator[None]:
    cfg.in_desktop_mode(override=True)
    yield
    cfg.in_desktop_mode(unset_override=True)


def _record(msg: str = "hello", **attrs: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="fn_name_tests.formatter",
        level=logging.WARNING,
        pathname="<fixture>",
        lineno=7,
        msg=msg,
        args=(),
        exc_info=None,
        func="run",
    )
    record.__dict__.update(attrs)
    return record


# ---------- Colors ----------


def test_colors_disabled_outside_desktop_mode(plain_output: None) -> None:
    assert get_color_code("WARNING") == ""
    assert get_color_code("#ff0000") == ""


def test_color_keys(color_output: None) -> None:
    assert get_color_code() == Fore.RESET
    assert get_color_code("#ff0000") == rgb_code(255, 0, 0)
    assert get_color_code("magenta") == Fore.MAGENTA
    assert get_color_code("bright_red") == Fore.LIGHTRED_EX
    assert get_color_code("no-such-color") == Fore.RESET


def test_rgb_code_clamps_components() -> None:
    assert rgb_code(-5, 300, 16) == "\033[38;2;0;255;16m"


# ---------- Formatting ----------


def test_qualified_name_field(plain_output: None) -> None:
    formatter = CoreFormatter("%(qualifiedName)s %(message)s")
    record = _record(qualifiedName="GenericType[_].generic_method")
    assert formatter.format(record) == "GenericType[_].generic_method() hello"


def test_format_does_not_modify_the_record(plain_output: None) -> None:
    formatter = CoreFormatter("%(levelName)s %(qualifiedName)s %(message)s")
    record = _record(qualifiedName="Service.run")
    formatter.format(record)
    assert record.qualifiedName == "Service.run"
    assert not hasattr(record, "levelName")


def test_module_scope_and_fallback_names(plain_output: None) -> None:
    formatter = CoreFormatter("%(qualifiedName)s")
    assert formatter.format(_record(qualifiedName="<module>")) == "<module>"
    assert formatter.format(_record()) == "run()"


def test_file_and_line_for_pseudo_file(plain_output: None) -> None:
    formatter = CoreFormatter("%(fileAndLine)s")
    assert formatter.format(_record()) == "<fixture>:7"


def test_format_time_uses_configured_timezone() -> None:
    formatter = CoreFormatter(tz="UTC")
    record = _record()
    record.created = 0.0
    assert formatter.formatTime(record, "%Y-%m-%d %H:%M") == "1970-01-01 00:00"
    assert formatter.formatTime(record) == "1970-01-01T00:00:00+00:00"


def test_unformattable_record_is_reported(plain_output: None) -> None:
    formatter = CoreFormatter("%(message)s")
    record = _record("value %d", args=("not a number",))
    text = formatter.format(record)
    assert "Failed to format log record" in text
    assert "TypeError" in text


# End of file: src/mstair/fn_name/xlogging/test_logger_formatter.py
