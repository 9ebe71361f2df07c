# File: src/mstair/fn_name/base/fs_helpers.py
"""
File System Helpers for the logging stack.

- fs_load_env_file(): LOG_* settings from a `.env` file
- fs_project_root() / fs_project_relpath(): shorten source paths in log lines
  to the project that contains them (nearest `pyproject.toml`)
"""

import functools
from pathlib import Path
from typing import TypeAlias

import dotenv


StrPath: TypeAlias = str | Path

PROJECT_MARKER = "pyproject.toml"


def fs_load_env_file(*, dotenv_path: StrPath | None = None, override: bool = False) -> bool:
    """
    Load variables from `dotenv_path`, or the nearest `.env` above the working directory.

    Variables already in the environment win unless `override` is set.

    :return: True if at least one variable was set.
    """
    path = dotenv_path or dotenv.find_dotenv(usecwd=True)
    if not path:
        return False
    return dotenv.load_dotenv(path, override=override, encoding="utf-8")


@functools.lru_cache(maxsize=256)
def fs_project_root(start_dir: Path) -> Path | None:
    """Return the nearest directory at or above `start_dir` holding a pyproject.toml."""
    for directory in (start_dir, *start_dir.parents):
        if (directory / PROJECT_MARKER).is_file():
            return directory
    return None


def fs_project_relpath(file: StrPath) -> str:
    """Return `file` relative to its project root, or as an absolute POSIX path outside any project."""
    path = Path(file).resolve()
    root = fs_project_root(path.parent)
    if root is None:
        return path.as_posix()
    return path.relative_to(root).as_posix()


# End of file: src/mstair/fn_name/base/fs_helpers.py
