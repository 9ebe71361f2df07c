# File: src/mstair/fn_name/base/caller_frame.py
"""
Module: mstair.fn_name.base.caller_frame

Call stack helpers used to locate the frame that invoked a public API.
"""

from __future__ import annotations

import inspect
from types import FrameType


__all__ = [
    "caller_frame",
    "caller_module_name_and_level",
    "is_module_frame",
]


def is_module_frame(frame: FrameType) -> bool:
    """Return True for top-level `<module>` frames."""
    return frame.f_code.co_name == "<module>"


def caller_frame(*, stacklevel: int = 1) -> FrameType:
    """
    Return the frame `stacklevel` levels above the function calling `caller_frame()`.

    With ``stacklevel=1`` the result is the frame of whoever called the function
    that called this helper, which is what a public API wants when it names "my caller".

    The caller owns the returned frame and should drop the reference when done
    (``del frame``) so that cyclic GC can reclaim it promptly.

    :param stacklevel: Number of frames to walk above the immediate caller.
    :return FrameType: The resolved frame.
    :raises ValueError: If stacklevel is less than 1.
    :raises RuntimeError: If the stack is shallower than requested.
    """
    if stacklevel < 1:
        raise ValueError("stacklevel must be greater than 0")

    frame: FrameType | None = inspect.currentframe()
    if frame is None:
        raise RuntimeError("Cannot retrieve current stack frame for caller resolution")
    try:
        # One step for this helper, one for the API function that called it
        for _ in range(stacklevel + 1):
            frame = frame.f_back
            if frame is None:
                raise RuntimeError(
                    f"Stack walk ran out of frames (stacklevel={stacklevel} is too deep)"
                )
        return frame
    finally:
        del frame


def caller_module_name_and_level(
    *, stacklevel: int = 1, skip_module_frames: bool = True
) -> tuple[str, int]:
    """
    Resolve the name of the calling module and return it along with its actual stacklevel.

    This function traverses the call stack, skipping `<module>` frames if requested,
    and returns the first meaningful module name it finds. The frame's globals are
    consulted before `inspect.getmodule()`, so code executed in a bare namespace
    still resolves to its `__name__`.

    :param stacklevel: Number of meaningful (non-<module>) frames to skip.
    :param skip_module_frames: Skip top-level frames like `<module>`. Default is True.
    :return tuple[str, int]: (module name or "", number of frames walked from this call)
    """
    if stacklevel < 1:
        raise ValueError("stacklevel must be greater than 0")

    frame: FrameType | None = inspect.currentframe()
    resolved_level = 0
    resolved_name = ""
    try:
        for _ in range(stacklevel):
            while skip_module_frames and frame and is_module_frame(frame):
                frame = frame.f_back
                resolved_level += 1

            if not frame:
                break

            frame = frame.f_back
            resolved_level += 1

        if frame:
            name = frame.f_globals.get("__name__")
            if isinstance(name, str) and name:
                resolved_name = name
            else:
                module = inspect.getmodule(frame)
                if module and module.__name__:
                    resolved_name = module.__name__

        return resolved_name, resolved_level

    finally:
        # Break reference cycle: frame -> f_locals -> frame
        del frame


# End of file: src/mstair/fn_name/base/caller_frame.py
