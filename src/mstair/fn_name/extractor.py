# File: src/mstair/fn_name/extractor.py
"""
Name the function or method a call is made from.

Example:
    >>> from mstair.fn_name import instantiated, uninstantiated
    >>> class GenericType[A]:
    ...     def __init__(self, value: A) -> None:
    ...         self.value = value
    ...
    ...     def generic_method[B](self, flag: B) -> tuple[str, str]:
    ...         return uninstantiated(), instantiated()
    >>> GenericType(42).generic_method(False)
    ('GenericType[_].generic_method', 'GenericType[int].generic_method[bool]')

Both modes follow the same recipe. A marker is declared under the enclosing
function's path, its reflective name ``<module>.<path>.<locals>.<marker>`` is
read back, and the known module prefix and marker suffix are trimmed off:

- `uninstantiated()` uses a marker *type*, declared under the generic skeleton
  of the path (``_`` for every parameter of a generic class on the path).
- `instantiated()` uses a marker *value* (a lambda), declared under the path
  with the generic bindings of this particular call.

Results are plain ``str`` values with no references back into the stack.
"""

from __future__ import annotations

import inspect
from types import FrameType

from mstair.fn_name.base.caller_frame import caller_frame
from mstair.fn_name.generics import render_path
from mstair.fn_name.markers import (
    MARKER_TYPE_SUFFIX,
    MARKER_VALUE_SUFFIX,
    marker_type,
    marker_value,
)
from mstair.fn_name.reflection import SEPARATOR, module_path, type_name, type_name_of_val


__all__ = [
    "InvocationContextError",
    "QualifiedNameError",
    "enclosing_name",
    "instantiated",
    "trim_enclosing_path",
    "uninstantiated",
]


class InvocationContextError(RuntimeError):
    """Raised when a name is requested from somewhere that is not a function body."""


class QualifiedNameError(ValueError):
    """Raised when a reflective name does not have the expected prefix and suffix."""


def uninstantiated(*, stacklevel: int = 1, include_module: bool = False) -> str:
    """
    Return the name of the calling function, generic parameters unresolved.

    :param stacklevel: 1 names the caller; 2 names the caller's caller, and so on.
    :param include_module: Prepend the module path (``"pkg.mod.func"``).
    :return str: e.g. ``"GenericType[_].generic_method"``.
    :raises InvocationContextError: If called from module scope or a class body.
    """
    frame = _invocation_frame(stacklevel)
    try:
        return enclosing_name(frame, instantiated=False, include_module=include_module)
    finally:
        del frame


def instantiated(*, stacklevel: int = 1, include_module: bool = False) -> str:
    """
    Return the name of the calling function, generic parameters bound for this call.

    :param stacklevel: 1 names the caller; 2 names the caller's caller, and so on.
    :param include_module: Prepend the module path (``"pkg.mod.func"``).
    :return str: e.g. ``"GenericType[int].generic_method[bool]"``.
    :raises InvocationContextError: If called from module scope or a class body.
    """
    frame = _invocation_frame(stacklevel)
    try:
        return enclosing_name(frame, instantiated=True, include_module=include_module)
    finally:
        del frame


def enclosing_name(
    frame: FrameType,
    *,
    instantiated: bool = False,
    include_module: bool = False,
) -> str:
    """
    Return the name of the function running in `frame`.

    This is the frame-level entry point behind `uninstantiated()` and
    `instantiated()`, for callers that already hold a frame (log handlers,
    tracers, profilers).

    :raises InvocationContextError: If `frame` is not executing a function body.
    """
    if not _is_function_frame(frame):
        raise InvocationContextError(
            f"Not inside a function: {frame.f_code.co_qualname!r} "
            f"at {frame.f_code.co_filename}:{frame.f_lineno}"
        )

    module = module_path(frame)
    prefix = f"{module}{SEPARATOR}"
    path = render_path(frame, instantiated=instantiated)

    if instantiated:

        def _type_name_of_val[T](value: T) -> str:
            return type_name_of_val(value)

        here = marker_value(module=module, enclosing_path=path)
        name = trim_enclosing_path(_type_name_of_val(here), prefix, MARKER_VALUE_SUFFIX)
    else:
        name = trim_enclosing_path(
            type_name(marker_type(module=module, enclosing_path=path)),
            prefix,
            MARKER_TYPE_SUFFIX,
        )

    return f"{prefix}{name}" if include_module and module else name


def trim_enclosing_path(raw_name: str, prefix: str, suffix: str) -> str:
    """
    Return `raw_name` with `prefix` removed from the front and `suffix` from the back.

    :raises QualifiedNameError: If `raw_name` is not ``prefix + middle + suffix``.
    """
    if (
        len(raw_name) < len(prefix) + len(suffix)
        or not raw_name.startswith(prefix)
        or not raw_name.endswith(suffix)
    ):
        raise QualifiedNameError(
            f"Cannot trim {raw_name!r}: expected prefix {prefix!r} and suffix {suffix!r}"
        )
    return raw_name[len(prefix) : len(raw_name) - len(suffix)]


def _invocation_frame(stacklevel: int) -> FrameType:
    """Frame of the function `stacklevel` levels above the public API call."""
    if stacklevel < 1:
        raise ValueError("stacklevel must be greater than 0")
    try:
        # +1 for the public API function between this helper and its caller
        return caller_frame(stacklevel=stacklevel + 1)
    except RuntimeError as exc:
        raise InvocationContextError(str(exc)) from exc


def _is_function_frame(frame: FrameType) -> bool:
    """Function bodies are compiled with optimized locals; module and class bodies are not."""
    return bool(frame.f_code.co_flags & inspect.CO_OPTIMIZED)


# End of file: src/mstair/fn_name/extractor.py
