"""Source locations and an in-memory store of source files split into lines."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SrcLocation:
    """A position in a source file (1-indexed line and column)."""

    path: str
    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.col}"


@dataclass(frozen=True)
class SrcSpan:
    """A region of source code from ``start`` to ``end``."""

    start: SrcLocation
    end: SrcLocation

    @property
    def path(self) -> str:
        return self.start.path


class SrcManager:
    """Holds the text of source files so diagnostics can quote them."""

    def __init__(self) -> None:
        self._files: dict[str, list[str]] = {}

    def add_source_file(self, path: str, content: str) -> None:
        """Register ``content`` under ``path``, replacing any earlier text."""
        lines = content.split("\n")
        if lines[-1] == "":
            lines.pop()
        self._files[path] = lines

    def get_line(self, path: str, line_num: int) -> str | None:
        """Return line ``line_num`` (1-indexed), or None if unavailable."""
        lines = self._files.get(path)
        if lines is None or not 1 <= line_num <= len(lines):
            return None
        return lines[line_num - 1]

    def get_lines(self, path: str, start_line: int, end_line: int) -> list[str]:
        """Return the available lines in the inclusive range."""
        found = (self.get_line(path, n) for n in range(start_line, end_line + 1))
        return [line for line in found if line is not None]

    def line_count(self, path: str) -> int:
        """Number of lines in ``path``, or 0 if it is unknown."""
        return len(self._files.get(path, ()))