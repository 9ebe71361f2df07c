# File: src/mstair/fn_name/markers.py
"""
Module: mstair.fn_name.markers

Marker constructs whose reflective names thread through an enclosing function.

A class or lambda written inside a function body is named by Python as
``<function qualname>.<locals>.<name>``. The markers built here are given exactly
that name for a given enclosing path, so the path can be recovered from the
marker's reflective name by stripping a known prefix and suffix.

The ``<locals>`` segment and the ``<lambda>`` label are host conventions, not a
public contract. They are detected from real objects at import time rather than
hard-coded, and pinned by tests.
"""

from __future__ import annotations

import types
from collections.abc import Callable
from typing import Final

from mstair.fn_name.reflection import SEPARATOR


__all__ = [
    "ANONYMOUS_CALLABLE_LABEL",
    "LOCALS_SEGMENT",
    "MARKER_TYPE_NAME",
    "MARKER_TYPE_SUFFIX",
    "MARKER_VALUE_SUFFIX",
    "marker_type",
    "marker_value",
]

MARKER_TYPE_NAME: Final[str] = "Here"


def _detect_locals_segment() -> str:
    def _scope() -> type:
        class Here:
            pass

        return Here

    # "_detect_locals_segment.<locals>._scope.<locals>.Here"
    return _scope().__qualname__.split(SEPARATOR)[-2]


LOCALS_SEGMENT: Final[str] = _detect_locals_segment()
"""Segment Python inserts between a function and the names defined in its body."""

ANONYMOUS_CALLABLE_LABEL: Final[str] = (lambda: None).__name__
"""Python's name for every anonymous callable."""

MARKER_TYPE_SUFFIX: Final[str] = f"{SEPARATOR}{LOCALS_SEGMENT}{SEPARATOR}{MARKER_TYPE_NAME}"
MARKER_VALUE_SUFFIX: Final[str] = f"{SEPARATOR}{LOCALS_SEGMENT}{SEPARATOR}{ANONYMOUS_CALLABLE_LABEL}"


def marker_type(*, module: str, enclosing_path: str) -> type:
    """
    Declare a fresh, empty marker class nested under `enclosing_path`.

    The class is named as if ``class Here: pass`` had been written in the
    enclosing function's body. Each call creates a distinct class.
    """
    here = types.new_class(MARKER_TYPE_NAME)
    here.__module__ = module
    here.__qualname__ = f"{enclosing_path}{MARKER_TYPE_SUFFIX}"
    return here


def marker_value(*, module: str, enclosing_path: str) -> Callable[[], None]:
    """
    Construct a zero-capture anonymous callable nested under `enclosing_path`.

    The lambda is never invoked; only its name is read. `enclosing_path` carries
    the generic bindings of the call site, which is what distinguishes a marker
    value from a marker type.
    """
    here: Callable[[], None] = lambda: None  # noqa: E731
    here.__module__ = module
    here.__qualname__ = f"{enclosing_path}{MARKER_VALUE_SUFFIX}"
    return here


# End of file: src/mstair/fn_name/markers.py
