"""Error types with formatted source context.

Highlighting itself never raises: malformed Bithoven source is always
classified. These errors report misuse by the host (an edit that does not
fit the document) or a broken configuration.
"""

from __future__ import annotations

import re
from pathlib import Path


# "\r\n", a lone "\r" and "\n" each end one line
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def line_col(source: str, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of *offset* in *source*."""
    offset = max(0, min(offset, len(source)))
    line = 1
    line_start = 0
    for match in _LINE_BREAK.finditer(source, 0, offset):
        line += 1
        line_start = match.end()
    return line, offset - line_start + 1


class EditError(Exception):
    """Raised when an edit delta does not describe a range of the current text."""

    def __init__(self, message: str, offset: int, source: str) -> None:
        self.message = message
        self.offset = offset
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.bithoven") -> str:
        line, col = line_col(self.source, self.offset)
        lines = _LINE_BREAK.split(self.source)
        line_idx = line - 1

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx]
        else:
            source_line = ""

        pad = " " * (col - 1)
        line_num = str(line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )


class ConfigError(Exception):
    """Raised on an invalid keyword table, tag map, or theme."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(self.format())

    def format(self) -> str:
        if self.path is None:
            return f"error: {self.message}"
        return f"error: {self.message}\n  --> {self.path}"
