"""Shared test fixtures and helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from bithlex.spans import SpanBuilder
from bithlex.tokens import Token, TokenKind

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"


@pytest.fixture
def builder() -> SpanBuilder:
    """A span builder with the default configuration."""
    return SpanBuilder()


@pytest.fixture
def lex(builder: SpanBuilder):
    """Return a helper that tokenizes and classifies source."""

    def _lex(source: str) -> list[Token]:
        return builder.tokenize(source)

    return _lex


def find_example_files() -> list[Path]:
    """Find all .bithoven files in the examples directory."""
    return sorted(EXAMPLES_DIR.glob("*.bithoven"))


def read_example(name: str) -> str:
    return (EXAMPLES_DIR / name).read_text(encoding="utf-8")


def assert_kinds(tokens: list[Token], expected: list[TokenKind]) -> None:
    """Assert that the token kinds match the expected list."""
    actual = [t.kind for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_lexemes(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token lexemes match the expected list."""
    actual = [t.lexeme for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_partition(tokens: list[Token] | tuple[Token, ...], source: str) -> None:
    """Assert that the tokens cover *source* exactly, in order, without gaps."""
    offset = 0
    for tok in tokens:
        assert tok.start == offset, f"Gap or overlap at {offset}: {tok}"
        assert tok.end > tok.start, f"Empty token {tok}"
        assert source[tok.start : tok.end] == tok.lexeme, f"Lexeme mismatch: {tok}"
        offset = tok.end
    assert offset == len(source)
    assert "".join(t.lexeme for t in tokens) == source


def find_tokens(tokens: list[Token], kind: TokenKind) -> list[Token]:
    """Return all tokens of the given kind."""
    return [t for t in tokens if t.kind == kind]


def pairs(tokens: list[Token]) -> list[tuple[TokenKind, str]]:
    """Tokens as (kind, lexeme) pairs, for compact comparisons."""
    return [(t.kind, t.lexeme) for t in tokens]
