"""Bounded call-stack snapshots with lazy rendering.

Capture only records code objects and line numbers for the current thread;
turning them into ``file:line function`` text happens when a caller asks for
it. Frame objects are never retained, so snapshots do not keep locals alive.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from types import CodeType
from typing import Callable, Final, NamedTuple

MAX_STACK_FRAMES: Final[int] = 32

_frame_limit = MAX_STACK_FRAMES

StackTraceCleaner = Callable[[list[str]], list[str]]


class RawFrame(NamedTuple):
    """One captured frame: code object plus the line executing at capture."""

    code: CodeType
    lineno: int


@dataclass(frozen=True, slots=True)
class StackFrame:
    """Resolved, human-readable frame location."""

    file: str
    line: int
    function: str

    def __str__(self) -> str:
        return f"{self.file}:{self.line} {self.function}"


@dataclass(frozen=True, slots=True)
class StackTrace:
    """One immutable snapshot plus the error message active when it was taken."""

    frames: tuple[RawFrame | StackFrame, ...]
    message: str

    def top(self) -> StackFrame | None:
        """Return the innermost captured frame, or ``None`` for an empty trace."""
        if not self.frames:
            return None
        return _resolve(self.frames[0])

    def __reduce__(self) -> tuple[object, ...]:
        # Code objects do not pickle; ship the resolved locations instead.
        return (StackTrace, (tuple(resolve_frames(self)), self.message))


def set_frame_limit(limit: int) -> None:
    """Set the default snapshot depth, clamped to ``1..MAX_STACK_FRAMES``."""
    global _frame_limit
    _frame_limit = max(1, min(limit, MAX_STACK_FRAMES))


def get_frame_limit() -> int:
    """Return the default snapshot depth used by ``capture``."""
    return _frame_limit


def capture(skip: int = 0, *, limit: int | None = None) -> tuple[RawFrame, ...]:
    """Snapshot the calling thread's stack.

    ``skip=0`` starts at the immediate caller of ``capture``; every additional
    unit drops one more frame so helpers can hide themselves. At most
    ``limit`` frames are recorded, defaulting to ``get_frame_limit()`` and never
    more than ``MAX_STACK_FRAMES``.
    """
    depth = max(0, min(_frame_limit if limit is None else limit, MAX_STACK_FRAMES))
    if depth == 0:
        return ()
    try:
        frame = sys._getframe(1 + max(skip, 0))
    except ValueError:
        # Asked to skip past the outermost frame.
        return ()

    frames: list[RawFrame] = []
    while frame is not None and len(frames) < depth:
        frames.append(RawFrame(frame.f_code, frame.f_lineno or 0))
        frame = frame.f_back
    return tuple(frames)


def resolve_frames(trace: StackTrace) -> list[StackFrame]:
    """Resolve every raw frame of ``trace`` into a ``StackFrame``."""
    return [_resolve(raw) for raw in trace.frames]


def format_stack(
    trace: StackTrace, cleaner: StackTraceCleaner | None = None
) -> list[str]:
    """Render ``trace`` as ``file:line function`` lines.

    The cleaner only sees the rendered copy; the snapshot itself is never
    touched, so repeated calls produce identical output.
    """
    lines = [str(frame) for frame in resolve_frames(trace)]
    if cleaner is not None:
        lines = list(cleaner(list(lines)))
    return lines


def render_stack(trace: StackTrace, cleaner: StackTraceCleaner | None = None) -> str:
    """Return ``format_stack`` output joined with newlines."""
    return "\n".join(format_stack(trace, cleaner))


def _resolve(raw: RawFrame | StackFrame) -> StackFrame:
    """Map one raw frame onto file, line and qualified function name."""
    if isinstance(raw, StackFrame):
        return raw
    code = raw.code
    return StackFrame(
        file=code.co_filename,
        line=raw.lineno,
        function=getattr(code, "co_qualname", code.co_name),
    )
