"""Call-site capture for contextual errors."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from itertools import islice
from types import FrameType
from typing import Self


@dataclass(frozen=True, slots=True)
class Location:
    """Source position of the call that attached context. Column is 1-based, 0 when unknown."""

    file: str
    line: int
    column: int = 0
    function: str = ""

    @classmethod
    def unknown(cls) -> Self:
        return cls("<unknown>", 0)

    @classmethod
    def from_frame(cls, frame: FrameType) -> Self:
        code = frame.f_code
        position = next(islice(code.co_positions(), frame.f_lasti // 2, None), None)
        column = position[2] + 1 if position and position[2] is not None else 0
        return cls(code.co_filename, frame.f_lineno or 0, column, code.co_name)

    @property
    def is_known(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


def capture_location(stacklevel: int = 1) -> Location:
    """Location of the caller's caller, like warnings.warn's stacklevel.

    stacklevel=1 is the code calling the function that calls capture_location.
    Returns Location.unknown() when capture is disabled in settings or the
    stack is shallower than requested.
    """
    from bizerror.foundation.config import get_context_settings
    if not get_context_settings().capture_location:
        return Location.unknown()
    try:
        return Location.from_frame(sys._getframe(stacklevel + 1))
    except ValueError:
        return Location.unknown()
