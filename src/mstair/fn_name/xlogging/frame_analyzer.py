# File: src/mstair/fn_name/xlogging/frame_analyzer.py
"""
Module: mstair.fn_name.xlogging.frame_analyzer

Stack frame snapshots used by CoreLogger to attribute a record to its caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import CodeType, FrameType

from mstair.fn_name.extractor import InvocationContextError, enclosing_name
from mstair.fn_name.xlogging.logger_constants import MODULE_SCOPE_NAME


@dataclass
class StackFrameInfo:
    frame: FrameType
    """The frame object from which this info was extracted."""

    f_code_name: str
    """Bare name of the function, or `<module>`."""

    f_code_qualname: str
    """Python's qualified name of the code, e.g. `outer.<locals>.inner`."""

    f_code_filename: str
    """Path to source file (script path, import path, "<string>", or "<stdin>")"""

    @classmethod
    def from_raw_frame(
        cls,
        *,
        raw_frame: FrameType,
    ) -> StackFrameInfo:
        """Snapshot a frame. Robust to interpreter teardown."""

        def _get_code_attr(code: CodeType | None, attr: str, default: str = "") -> str:
            val = getattr(code, attr, default)
            return val if isinstance(val, str) else default

        _f_code: CodeType | None = getattr(raw_frame, "f_code", None)
        _f_code_filename = _get_code_attr(_f_code, "co_filename")
        _f_code_name = _get_code_attr(_f_code, "co_name", "<unknown>")
        return StackFrameInfo(
            frame=raw_frame,
            f_code_name=_f_code_name,
            f_code_qualname=_get_code_attr(_f_code, "co_qualname", _f_code_name),
            f_code_filename=_f_code_filename,
        )

    def qualified_name(self) -> str:
        """
        Name of the function running in this frame, generics as placeholders.

        Module scope and class bodies have no enclosing function; they render as
        `<module>` and the class body's qualname respectively.
        """
        if self.f_code_name == MODULE_SCOPE_NAME:
            return MODULE_SCOPE_NAME
        try:
            return enclosing_name(self.frame)
        except InvocationContextError:
            return self.f_code_qualname


# End of file: src/mstair/fn_name/xlogging/frame_analyzer.py
