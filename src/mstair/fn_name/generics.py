# File: src/mstair/fn_name/generics.py
"""
Module: mstair.fn_name.generics

Render the qualified path of the function running in a frame, either as a
generic skeleton or with the generic bindings of that particular call.

Python erases generic arguments at runtime, so bindings are recovered from
what the call leaves behind:

- owner class parameters: the instance's ``__orig_class__``
  (``GenericType[int](...)``), a specialized base in ``__orig_bases__``
  (``class IntBox(GenericType[int])``), then the type of an instance attribute
  annotated with the parameter;
- function parameters (PEP 695 ``__type_params__``, or type variables used in
  the signature): the type of the first argument annotated with the parameter.

Whatever cannot be recovered renders as the ``_`` placeholder. All lookups
here are best effort and never raise into the caller.
"""

from __future__ import annotations

import gc
import inspect
import logging
import typing
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import CodeType, FrameType, FunctionType, MemberDescriptorType
from typing import Any, Final

from mstair.fn_name.markers import LOCALS_SEGMENT
from mstair.fn_name.reflection import SEPARATOR, format_type_arg


__all__ = [
    "PLACEHOLDER",
    "FrameSubject",
    "render_path",
    "resolve_subject",
]

# Plain stdlib logger: CoreLogger asks this module for names while logging.
_LOG = logging.getLogger(__name__)

PLACEHOLDER: Final[str] = "_"
"""Rendering of a generic parameter whose concrete type is unknown."""

_MISSING: Final = object()


@dataclass(slots=True)
class FrameSubject:
    """What a frame is running: its code, and the function and class behind it."""

    code: CodeType
    function: FunctionType | None = None
    """The function object whose ``__code__`` the frame executes, if found."""

    owner: type | None = None
    """The class whose body defines the function, if any."""

    klass: type | None = None
    """The runtime class of the bound instance (or the bound class for classmethods)."""

    instance: object | None = None
    """The bound instance for instance methods."""

    segment_classes: dict[int, type] = field(default_factory=dict)
    """Qualname segment index -> class, for every segment known to be a class."""


def render_path(frame: FrameType, *, instantiated: bool) -> str:
    """
    Return the qualified path of the function running in `frame`.

    With ``instantiated=False`` generic classes on the path carry one ``_`` per
    type parameter and the function itself carries nothing. With
    ``instantiated=True`` the owner class and the function carry their
    bindings for this call.
    """
    subject = resolve_subject(frame, find_function=instantiated)
    segments = subject.code.co_qualname.split(SEPARATOR)
    rendered: list[str] = []
    last = len(segments) - 1
    for index, segment in enumerate(segments):
        args: list[str] = []
        klass = subject.segment_classes.get(index)
        if klass is not None:
            args = _render_class_args(subject, klass, instantiated=instantiated)
        elif index == last and instantiated and subject.function is not None:
            args = _render_function_args(frame, subject)
        rendered.append(f"{segment}[{', '.join(args)}]" if args else segment)
    return SEPARATOR.join(rendered)


def resolve_subject(frame: FrameType, *, find_function: bool = True) -> FrameSubject:
    """
    Find the function object, owner class and bound instance behind `frame`.

    Nested functions and lambdas are only reachable from their code through
    the GC. That scan runs only when `find_function` is set; skeleton names
    never read the function object.
    """
    code = frame.f_code
    subject = FrameSubject(code=code)

    _resolve_from_first_argument(frame, subject)
    if subject.function is None:
        _resolve_from_globals(frame, subject)
    if subject.function is None and find_function:
        subject.function = _find_function_by_code(code)
        if subject.function is None:
            _LOG.debug("No function object found for %s", code.co_qualname)

    _index_segment_classes(frame, subject)
    return subject


# ---------------------------------------------------------------------------
# Subject resolution
# ---------------------------------------------------------------------------


def _resolve_from_first_argument(frame: FrameType, subject: FrameSubject) -> None:
    """Methods: look the code up in the MRO of the first argument's class."""
    code = subject.code
    if code.co_argcount < 1:
        return
    try:
        first = frame.f_locals.get(code.co_varnames[0])
    except Exception:  # interpreter teardown, exotic frames
        return
    if first is None:
        return
    klass = first if isinstance(first, type) else type(first)
    for candidate in klass.__mro__:
        for attr in vars(candidate).values():
            function = _function_with_code(attr, code)
            if function is not None:
                subject.function = function
                subject.owner = candidate
                subject.klass = klass
                subject.instance = None if isinstance(first, type) else first
                return


def _resolve_from_globals(frame: FrameType, subject: FrameSubject) -> None:
    """Module-level functions and static methods: walk the qualname from the globals."""
    qualname = subject.code.co_qualname
    if LOCALS_SEGMENT in qualname:
        return
    parts = qualname.split(SEPARATOR)
    target: Any = frame.f_globals.get(parts[0])
    parent: Any = None
    for part in parts[1:]:
        parent = target
        target = vars(target).get(part) if isinstance(target, type) else getattr(target, part, None)
        if target is None:
            return
    function = _function_with_code(target, subject.code)
    if function is not None:
        subject.function = function
        if isinstance(parent, type):
            subject.owner = parent


def _find_function_by_code(code: CodeType) -> FunctionType | None:
    """Last resort for nested functions and closures: ask the GC who holds the code."""
    for referrer in gc.get_referrers(code):
        if isinstance(referrer, FunctionType) and referrer.__code__ is code:
            return referrer
    return None


def _function_with_code(obj: Any, code: CodeType) -> FunctionType | None:
    for function in _iter_functions(obj):
        if function.__code__ is code:
            return function
    return None


def _iter_functions(obj: Any) -> Iterator[FunctionType]:
    """Yield the plain functions behind a class attribute, unwrapping decorators."""
    if isinstance(obj, (staticmethod, classmethod)):
        obj = obj.__func__
    if isinstance(obj, property):
        for accessor in (obj.fget, obj.fset, obj.fdel):
            yield from _iter_functions(accessor)
        return
    seen: set[int] = set()
    while obj is not None and id(obj) not in seen:
        seen.add(id(obj))
        if isinstance(obj, FunctionType):
            yield obj
        # Static lookup: never run a class attribute's __getattr__
        obj = inspect.getattr_static(obj, "__wrapped__", None)


def _index_segment_classes(frame: FrameType, subject: FrameSubject) -> None:
    """Record which qualname segments name classes."""
    parts = subject.code.co_qualname.split(SEPARATOR)

    # Leading segments resolvable from the module namespace
    target: Any = frame.f_globals
    for index, part in enumerate(parts[:-1]):
        if part == LOCALS_SEGMENT:
            break
        target = target.get(part) if isinstance(target, Mapping) else vars(target).get(part)
        if not isinstance(target, type):
            break
        subject.segment_classes[index] = target

    # The owner found through the bound instance, even when defined in <locals>
    owner = subject.owner
    if owner is not None and subject.code.co_qualname.startswith(owner.__qualname__ + SEPARATOR):
        subject.segment_classes[len(owner.__qualname__.split(SEPARATOR)) - 1] = owner


# ---------------------------------------------------------------------------
# Type parameters and bindings
# ---------------------------------------------------------------------------


def class_type_params(klass: type) -> tuple[Any, ...]:
    """Type parameters declared by `klass` (PEP 695 or ``Generic[...]``)."""
    params = vars(klass).get("__type_params__") or vars(klass).get("__parameters__") or ()
    return tuple(params)


def function_type_params(function: FunctionType, *, exclude: tuple[Any, ...] = ()) -> tuple[Any, ...]:
    """
    Type parameters of `function`.

    PEP 695 parameters come from ``__type_params__``. Otherwise the legacy type
    variables appearing in the signature annotations are collected in order,
    minus those in `exclude` (the owner class's parameters). Parameters declared
    with PEP 695 syntax belong to the scope that declared them, so a nested
    function annotated with its enclosing function's ``T`` has no parameters.
    """
    params = getattr(function, "__type_params__", ())
    if params:
        return tuple(params)
    found: list[Any] = []
    for annotation in _annotations(function).values():
        for tv in _iter_type_vars(annotation):
            if _declared_by_syntax(tv):
                continue
            if not any(tv is p for p in (*found, *exclude)):
                found.append(tv)
    return tuple(found)


def _render_class_args(subject: FrameSubject, klass: type, *, instantiated: bool) -> list[str]:
    params = class_type_params(klass)
    if not params:
        return []
    bindings: dict[int, Any] = {}
    if instantiated and klass is subject.owner and subject.klass is not None:
        bindings = _bind_class_params(klass, params, subject.klass, subject.instance)
    return [_render_binding(bindings, p) for p in params]


def _render_function_args(frame: FrameType, subject: FrameSubject) -> list[str]:
    function = subject.function
    if function is None:
        return []
    owner_params = class_type_params(subject.owner) if subject.owner is not None else ()
    params = function_type_params(function, exclude=owner_params)
    if not params:
        return []
    bindings = _bind_function_params(frame, function, params)
    return [_render_binding(bindings, p) for p in params]


def _render_binding(bindings: dict[int, Any], param: Any) -> str:
    bound = bindings.get(id(param), param)
    if bound is param or _is_type_param(bound):
        return PLACEHOLDER
    return format_type_arg(bound)


def _bind_class_params(
    target: type, params: tuple[Any, ...], klass: type, instance: object | None
) -> dict[int, Any]:
    """Bindings for `target`'s parameters as seen from `klass` / `instance`."""
    bindings: dict[int, Any] = {}

    orig_class = getattr(instance, "__orig_class__", None) if instance is not None else None
    if orig_class is not None and typing.get_origin(orig_class) is target:
        bindings.update(_zip_bindings(params, typing.get_args(orig_class)))
    else:
        bindings.update(_bindings_from_bases(target, params, klass, instance))

    if instance is not None:
        # Class-level field annotations, then __init__ parameters stored under the same name
        for annotations in (_annotations(target), _annotations(vars(target).get("__init__"))):
            for name, annotation in annotations.items():
                for p in params:
                    if not _is_type_param(bindings.get(id(p), p)):
                        continue
                    if not _annotation_is(annotation, p):
                        continue
                    value = _stored_value(instance, name)
                    if value is not _MISSING:
                        bindings[id(p)] = type(value)
    return bindings


def _bindings_from_bases(
    target: type, params: tuple[Any, ...], klass: type, instance: object | None
) -> dict[int, Any]:
    """
    Follow ``__orig_bases__`` from `klass` up to a specialization of `target`.

    A base specialized with the declaring class's own parameters
    (``class Wrapper[W](GenericType[W])``) takes its arguments from the
    bindings of the declaring class, which may come from the instance's
    ``__orig_class__`` (``Wrapper[str](...)``) or from a further subclass.
    """
    for declaring in klass.__mro__:
        for base in vars(declaring).get("__orig_bases__", ()):
            if typing.get_origin(base) is not target:
                continue
            args = list(typing.get_args(base))
            declaring_params = class_type_params(declaring)
            if declaring_params and any(map(_is_type_param, args)):
                outer = _bind_class_params(declaring, declaring_params, klass, instance)
                args = [outer.get(id(a), a) if _is_type_param(a) else a for a in args]
            return _zip_bindings(params, args)
    return {}


def _bind_function_params(
    frame: FrameType, function: FunctionType, params: tuple[Any, ...]
) -> dict[int, Any]:
    """Bind each parameter to the type of the first argument annotated with it."""
    code = function.__code__
    varargs_name = ""
    if code.co_flags & inspect.CO_VARARGS:
        varargs_name = code.co_varnames[code.co_argcount + code.co_kwonlyargcount]

    bindings: dict[int, Any] = {}
    try:
        locals_ = frame.f_locals
    except Exception:
        return bindings
    for name, annotation in _annotations(function).items():
        if name == "return" or name not in locals_:
            continue
        for p in params:
            if id(p) in bindings or not _annotation_is(annotation, p):
                continue
            value = locals_[name]
            if name == varargs_name:
                if not value:
                    continue
                value = value[0]
            bindings[id(p)] = type(value)
    return bindings


def _zip_bindings(params: tuple[Any, ...], args: Any) -> dict[int, Any]:
    return {id(p): a for p, a in zip(params, args, strict=False)}


def _annotations(obj: Any) -> dict[str, Any]:
    if obj is None:
        return {}
    try:
        return dict(inspect.get_annotations(obj))
    except Exception as exc:
        _LOG.debug("Cannot read annotations of %r: %s", obj, exc)
        return {}


def _annotation_is(annotation: Any, param: Any) -> bool:
    """True if `annotation` is exactly `param` (or its name, under postponed evaluation)."""
    if annotation is param:
        return True
    return isinstance(annotation, str) and annotation.strip().strip("'\"") == param.__name__


def _is_type_param(obj: Any) -> bool:
    return isinstance(obj, (typing.TypeVar, typing.ParamSpec, typing.TypeVarTuple))


def _stored_value(instance: object, name: str) -> Any:
    """
    The value stored under `name` on `instance`, or `_MISSING`.

    Only the instance dict and slots are read. Properties and other computed
    attributes are never evaluated.
    """
    instance_dict = getattr(instance, "__dict__", None)
    if isinstance(instance_dict, dict) and name in instance_dict:
        return instance_dict[name]
    value = inspect.getattr_static(type(instance), name, _MISSING)
    if isinstance(value, MemberDescriptorType):
        try:
            return value.__get__(instance, type(instance))
        except AttributeError:
            return _MISSING
    if hasattr(type(value), "__get__"):
        return _MISSING
    return value


def _declared_by_syntax(param: Any) -> bool:
    """PEP 695 ``[T]`` / ``[**P]`` parameters always infer variance; ``TypeVar("T")`` does not by default."""
    return bool(getattr(param, "__infer_variance__", False))


def _iter_type_vars(annotation: Any) -> Iterator[Any]:
    if _is_type_param(annotation):
        yield annotation
        return
    for arg in typing.get_args(annotation):
        yield from _iter_type_vars(arg)


# End of file: src/mstair/fn_name/generics.py
