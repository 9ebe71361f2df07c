# File: src/mstair/fn_name/xlogging/test_core_logger.py
"""
Tests for CoreLogger, initialize_root() and create_logger().

Confirms that:
- Every record carries the emitting function's qualified name.
- Caller attribution skips the logging machinery and honors stacklevel.
- Prefixes, extra keywords and non-primitive arguments are handled.
- Levels from the environment never undercut the root logger.
- Root setup is idempotent.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator

import pytest

from mstair.fn_name.base import config as cfg
from mstair.fn_name.xlogging import logger_util as lu
from mstair.fn_name.xlogging.core_logger import CoreLogger, initialize_root
from mstair.fn_name.xlogging.logger_factory import create_logger
from mstair.fn_name.xlogging.logger_formatter import CoreFormatter


_ROOT_ATTR = "_mstair_fn_name_corelogger_initialized"
_LOGGER_NAME = "fn_name_tests.core_logger"


# ---------- Fixtures ----------


@pytest.fixture(autouse=False)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear LOG_LEVEL* vars and reset singleton; do not read .env during tests."""
    monkeypatch.setattr(lu, "fs_load_env_file", lambda *a, **k: False, raising=False)
    for k in [k for k in os.environ if k.startswith("LOG_LEVEL")]:
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setattr(lu, "_log_level_config_instance", None, raising=False)
    yield
    monkeypatch.setattr(lu, "_log_level_config_instance", None, raising=False)


@pytest.fixture(autouse=False)
def clean_logging() -> Iterator[None]:
    """Reset root logger state (handlers, level, init flag) around tests."""
    root = logging.getLogger()
    prev_level = root.level
    prev_handlers = list(root.handlers)
    prev_attr = getattr(root, _ROOT_ATTR, None)

    root.handlers = []
    root.setLevel(logging.WARNING)
    if hasattr(root, _ROOT_ATTR):
        delattr(root, _ROOT_ATTR)

    yield

    root.handlers = prev_handlers
    root.setLevel(prev_level)
    if prev_attr is not None:
        setattr(root, _ROOT_ATTR, prev_attr)
    elif hasattr(root, _ROOT_ATTR):
        delattr(root, _ROOT_ATTR)


@pytest.fixture
def log(clean_env: None, clean_logging: None) -> CoreLogger:
    return create_logger(_LOGGER_NAME, level=logging.DEBUG)


def _records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == _LOGGER_NAME]


# ---------- Emitters ----------


class Service[T]:
    def __init__(self, log: CoreLogger) -> None:
        self.log = log

    def run(self) -> None:
        self.log.warning("running")

    def run_with_prefix(self) -> None:
        with self.log.prefix_with("[A]"), self.log.prefix_with("[B]"):
            self.log.warning("hello")


def emit_for_caller(log: CoreLogger) -> None:
    log.warning("attributed upward", stacklevel=2)


def calls_emit_for_caller(log: CoreLogger) -> None:
    emit_for_caller(log)


# ---------- Records ----------


def test_record_carries_qualified_name(log: CoreLogger, caplog: pytest.LogCaptureFixture) -> None:
    Service(log).run()
    (record,) = _records(caplog)
    assert record.qualifiedName == "Service[_].run"
    assert record.funcName == "run"
    assert record.pathname.endswith("test_core_logger.py")


def test_nested_function_qualified_name(log: CoreLogger, caplog: pytest.LogCaptureFixture) -> None:
    def inner() -> None:
        log.error("inside")

    inner()
    (record,) = _records(caplog)
    assert record.qualifiedName == (
        "test_nested_function_qualified_name.<locals>.inner"
    )


def test_naming_the_caller_emits_no_records_of_its_own(
    log: CoreLogger, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG)

    def emitter() -> None:
        log.debug("hello")

    emitter()
    assert [r.getMessage() for r in caplog.records] == ["hello"]


def test_module_scope_qualified_name(log: CoreLogger, caplog: pytest.LogCaptureFixture) -> None:
    exec(compile("log.warning('from module scope')", "<fixture>", "exec"), {"log": log})
    (record,) = _records(caplog)
    assert record.qualifiedName == "<module>"


def test_stacklevel_attributes_to_callers_caller(
    log: CoreLogger, caplog: pytest.LogCaptureFixture
) -> None:
    calls_emit_for_caller(log)
    (record,) = _records(caplog)
    assert record.qualifiedName == "calls_emit_for_caller"
    assert record.funcName == "calls_emit_for_caller"


def test_prefixes_nest(log: CoreLogger, caplog: pytest.LogCaptureFixture) -> None:
    Service(log).run_with_prefix()
    log.warning("after")
    messages = [r.getMessage() for r in _records(caplog)]
    assert messages == ["[A] > [B] > hello", "after"]


def test_non_primitive_args_are_rendered(log: CoreLogger, caplog: pytest.LogCaptureFixture) -> None:
    log.warning("value %s", [1, 2])
    (record,) = _records(caplog)
    assert record.args == ("[1, 2]",)
    assert record.getMessage() == "value [1, 2]"


def test_extra_keywords_become_record_attributes(
    log: CoreLogger, caplog: pytest.LogCaptureFixture
) -> None:
    log.warning("tagged", request_id="abc")
    (record,) = _records(caplog)
    assert record.request_id == "abc"


def test_reserved_keywords_are_rejected(log: CoreLogger) -> None:
    with pytest.raises(ValueError, match="lineno"):
        log.warning("x", lineno=3)


def test_analysis_mode_drops_records(log: CoreLogger, caplog: pytest.LogCaptureFixture) -> None:
    with cfg.analysis_mode_context():
        log.error("dropped")
    assert _records(caplog) == []


def test_exception_records_exc_info(log: CoreLogger, caplog: pytest.LogCaptureFixture) -> None:
    try:
        raise KeyError("missing")
    except KeyError:
        log.exception("failed")
    (record,) = _records(caplog)
    assert record.exc_info is not None
    assert record.exc_info[0] is KeyError
    assert record.stack_info


def test_malformed_exc_info_is_disabled(log: CoreLogger, caplog: pytest.LogCaptureFixture) -> None:
    log.warning("bad exc_info", exc_info=("not", "a", "triple"))
    records = _records(caplog)
    assert records[-1].getMessage() == "bad exc_info"
    assert records[-1].exc_info is None


# ---------- Levels ----------


def test_env_trace_does_not_lower_logger_below_root(
    clean_env: None, clean_logging: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOG_LEVELS", "pkg.*:TRACE")
    log = CoreLogger("pkg.module")
    assert log.level == logging.WARNING
    assert not log.isEnabledFor(logging.DEBUG)


def test_root_level_is_the_logger_floor(
    clean_env: None, clean_logging: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOG_LEVELS", "pkg.*:TRACE")
    logging.getLogger().setLevel(logging.DEBUG)
    log = CoreLogger("pkg.module")
    assert log.level == logging.DEBUG
    assert log.isEnabledFor(logging.DEBUG)


def test_env_level_above_root_is_kept(
    clean_env: None, clean_logging: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOG_LEVEL_PKG", "ERROR")
    log = CoreLogger("pkg.module")
    assert log.level == logging.ERROR


# ---------- initialize_root ----------


def _stderr_handlers() -> list[logging.Handler]:
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr
    ]


def test_initialize_root_is_idempotent(clean_env: None, clean_logging: None) -> None:
    initialize_root()
    initialize_root()
    handlers = _stderr_handlers()
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, CoreFormatter)

    initialize_root(force=True, level="INFO")
    assert len(_stderr_handlers()) == 1
    assert logging.getLogger().level == logging.INFO


def test_initialize_root_upgrades_existing_stderr_handler(
    clean_env: None, clean_logging: None
) -> None:
    existing = logging.StreamHandler(sys.stderr)
    logging.getLogger().addHandler(existing)
    initialize_root()
    assert _stderr_handlers() == [existing]
    assert isinstance(existing.formatter, CoreFormatter)


# ---------- create_logger ----------


def test_create_logger_reuses_instances(clean_env: None, clean_logging: None) -> None:
    first = create_logger("fn_name_tests.factory")
    second = create_logger("fn_name_tests.factory", level=logging.INFO)
    assert first is second
    assert isinstance(first, CoreLogger)
    assert first.level == logging.INFO


def test_create_logger_defaults_to_caller_module(clean_env: None, clean_logging: None) -> None:
    assert create_logger().name == __name__


def test_create_logger_rejects_existing_plain_logger(clean_env: None, clean_logging: None) -> None:
    logging.getLogger("fn_name_tests.plain")
    with pytest.raises(TypeError):
        create_logger("fn_name_tests.plain")


# End of file: src/mstair/fn_name/xlogging/test_core_logger.py
