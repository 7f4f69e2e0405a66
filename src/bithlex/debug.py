"""--debug token dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from bithlex.tokens import Token


def format_token(tok: Token) -> str:
    return f"{tok.kind.name:<16} {tok.start}:{tok.end} {tok.lexeme!r}"


def dump_tokens(tokens: Iterable[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one line per token to *file*."""
    for tok in tokens:
        file.write(format_token(tok) + "\n")
