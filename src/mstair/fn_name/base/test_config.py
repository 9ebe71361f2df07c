# File: src/mstair/fn_name/base/test_config.py

from __future__ import annotations

import io
import sys
import threading

import pytest

from mstair.fn_name.base import config as cfg


def test_analysis_mode_context_nests() -> None:
    assert not cfg.in_analysis_mode()
    with cfg.analysis_mode_context():
        with cfg.analysis_mode_context():
            assert cfg.in_analysis_mode()
        assert cfg.in_analysis_mode()
    assert not cfg.in_analysis_mode()


def test_test_mode_detected_under_pytest() -> None:
    assert cfg.in_test_mode()
    with cfg.analysis_mode_context():
        assert not cfg.in_test_mode()


class _Terminal(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.mark.parametrize(("stream", "expected"), [(_Terminal(), True), (io.StringIO(), False)])
def test_desktop_mode_outside_tests_follows_stderr(
    monkeypatch: pytest.MonkeyPatch, stream: io.StringIO, expected: bool
) -> None:
    monkeypatch.setattr(sys, "stderr", stream)
    cfg.in_test_mode(override=False)
    try:
        assert cfg.in_desktop_mode() is expected
        with cfg.analysis_mode_context():
            assert cfg.in_desktop_mode() is False
    finally:
        cfg.in_test_mode(unset_override=True)


def test_desktop_mode_override_is_thread_local() -> None:
    seen: list[bool] = []
    cfg.in_desktop_mode(override=False)
    try:
        thread = threading.Thread(target=lambda: seen.append(cfg.in_desktop_mode()))
        thread.start()
        thread.join()
        assert cfg.in_desktop_mode() is False
        assert seen == [True]
    finally:
        cfg.in_desktop_mode(unset_override=True)


# End of file: src/mstair/fn_name/base/test_config.py
