"""Document path compilation and per-row traversal.

A path is compiled once, after variable substitution, into an immutable
tuple of segments. Each row then walks it with a fresh PathCursor (a plain
integer position over that tuple) obtained from ``PathResolver.begin()``.

The document builder must call ``begin()`` at the start of every row.
Skipping it leaves the previous row's partially consumed cursor in place;
that is not detected.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from row_document.core.exceptions import PathCompilationError, PathCursorError
from row_document.core.variables import substitute

logger = logging.getLogger(__name__)


def compile_path(raw_path: str, variables: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Substitute variables in *raw_path* and split it on ``.``.

    There is no escaping: a key containing a literal dot cannot be
    expressed. A blank path compiles to ``()``.
    """
    path = substitute(raw_path, variables)
    if not path.strip():
        return ()
    return tuple(path.split("."))


class PathCursor:
    """Traversal position over a compiled segment tuple."""

    __slots__ = ("_segments", "_position")

    def __init__(self, segments: tuple[str, ...]) -> None:
        self._segments = segments
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._segments)

    def peek(self) -> str | None:
        """Return the next segment without consuming it, or None at the end."""
        if self.exhausted:
            return None
        return self._segments[self._position]

    def advance(self) -> str:
        """Consume and return the next segment."""
        if self.exhausted:
            raise PathCursorError(self._segments)
        segment = self._segments[self._position]
        self._position += 1
        return segment

    def remaining(self) -> tuple[str, ...]:
        """Segments not yet consumed."""
        return self._segments[self._position :]

    def __len__(self) -> int:
        return len(self._segments) - self._position

    def __repr__(self) -> str:
        return f"PathCursor(segments={self._segments!r}, position={self._position})"


class PathResolver:
    """Compiles one document path and hands out per-row cursors.

    Args:
        raw_path: The dot path as authored, possibly with variables.
    """

    def __init__(self, raw_path: str) -> None:
        self._raw_path = raw_path
        self._segments: tuple[str, ...] | None = None
        self._cursor: PathCursor | None = None

    @property
    def raw_path(self) -> str:
        return self._raw_path

    @property
    def compiled(self) -> bool:
        return self._segments is not None

    @property
    def segments(self) -> tuple[str, ...]:
        if self._segments is None:
            raise PathCompilationError(self._raw_path, "not compiled")
        return self._segments

    def compile(self, variables: Mapping[str, str] | None = None) -> tuple[str, ...]:
        """Compile the path. Must be called exactly once, before any row."""
        if self._segments is not None:
            raise PathCompilationError(self._raw_path, "already compiled")
        self._segments = compile_path(self._raw_path, variables)
        logger.debug("Compiled document path %r into %r", self._raw_path, self._segments)
        return self._segments

    def begin(self) -> PathCursor:
        """Start a new row: replace the current cursor with a fresh one."""
        self._cursor = PathCursor(self.segments)
        return self._cursor

    @property
    def cursor(self) -> PathCursor:
        """The cursor of the current row (the one from the last ``begin()``)."""
        if self._cursor is None:
            raise PathCompilationError(self._raw_path, "begin() has not been called")
        return self._cursor

    def peek(self) -> str | None:
        return self.cursor.peek()

    def advance(self) -> str:
        return self.cursor.advance()

    def remaining(self) -> tuple[str, ...]:
        return self.cursor.remaining()
