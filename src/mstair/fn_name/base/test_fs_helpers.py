# File: src/mstair/fn_name/base/test_fs_helpers.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from mstair.fn_name.base.fs_helpers import fs_load_env_file, fs_project_relpath, fs_project_root


_VAR = "MSTAIR_FN_NAME_TEST_VALUE"


def test_project_relpath_inside_project(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
    package = tmp_path / "src" / "pkg"
    package.mkdir(parents=True)
    module = package / "mod.py"
    module.write_text("", encoding="utf-8")

    assert fs_project_root(package.resolve()) == tmp_path.resolve()
    assert fs_project_relpath(module) == "src/pkg/mod.py"


def test_project_relpath_outside_any_project(tmp_path: Path) -> None:
    module = tmp_path / "loose.py"
    module.write_text("", encoding="utf-8")
    assert fs_project_relpath(module) == module.resolve().as_posix()


def test_env_file_does_not_override_by_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"{_VAR}=from_file\n", encoding="utf-8")
    monkeypatch.setenv(_VAR, "from_env")

    fs_load_env_file(dotenv_path=env_file)
    assert os.environ[_VAR] == "from_env"

    assert fs_load_env_file(dotenv_path=env_file, override=True)
    assert os.environ[_VAR] == "from_file"


def test_missing_env_file(tmp_path: Path) -> None:
    assert fs_load_env_file(dotenv_path=tmp_path / "missing.env") is False


# End of file: src/mstair/fn_name/base/test_fs_helpers.py
