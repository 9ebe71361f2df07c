# File: src/mstair/fn_name/reflection.py
"""
Module: mstair.fn_name.reflection

The two host primitives the extractor is built on:

- `module_path(frame)`: the module path of an invocation site.
- `type_name(tp)` / `type_name_of_val(value)`: the reflective, fully qualified
  name of a type or value, rendered as ``"{__module__}.{__qualname__}"``.

Python's own rendering is used unchanged: nested scopes appear as
``outer.<locals>.inner`` and classes as ``Outer.Inner``.
"""

from __future__ import annotations

import builtins
import inspect
import types
import typing
from types import FrameType
from typing import Any, Final


__all__ = [
    "SEPARATOR",
    "format_type_arg",
    "module_path",
    "type_name",
    "type_name_of_val",
]

SEPARATOR: Final[str] = "."
"""Path separator between module and qualname, and between qualname segments."""


def module_path(frame: FrameType) -> str:
    """
    Return the module path of the code running in `frame`.

    Code executed in a namespace without ``__name__`` (``exec`` into a bare dict)
    has no module path; an empty string is returned and the prefix degenerates to
    the separator alone.
    """
    name = frame.f_globals.get("__name__")
    return name if isinstance(name, str) else ""


def type_name(tp: type) -> str:
    """Return the fully qualified name of a type, e.g. ``"pkg.mod.Outer.Inner"``."""
    module = getattr(tp, "__module__", None)
    qualname = getattr(tp, "__qualname__", None) or tp.__name__
    return f"{module if isinstance(module, str) else ''}{SEPARATOR}{qualname}"


def type_name_of_val(value: Any) -> str:
    """
    Return the fully qualified name that identifies `value`.

    Every Python function shares the single ``function`` type, so for routines
    (functions, lambdas, methods, builtins) the identity is the routine's own
    qualified name. Any other value is named by its type.
    """
    if inspect.isroutine(value):
        module = getattr(value, "__module__", None)
        qualname = getattr(value, "__qualname__", None) or getattr(value, "__name__", "")
        return f"{module if isinstance(module, str) else ''}{SEPARATOR}{qualname}"
    return type_name(type(value))


def format_type_arg(tp: Any) -> str:
    """
    Render one concrete generic argument for display inside ``[...]``.

    Builtins render bare (``int``), other classes fully qualified, and typing
    constructs (``list[int]``, ``int | None``) by their own repr with the
    ``typing.`` prefix removed.
    """
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, typing.TypeVar):
        return tp.__name__
    if isinstance(tp, type) and not isinstance(tp, types.GenericAlias):
        if tp.__module__ == builtins.__name__:
            return tp.__qualname__
        return type_name(tp)
    return repr(tp).replace("typing.", "")


# End of file: src/mstair/fn_name/reflection.py
