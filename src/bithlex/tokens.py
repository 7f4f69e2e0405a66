"""Token kinds, scanner states, the Token record, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    """Semantic token category. The value is the default category tag."""

    # Pragma header
    PRAGMA_KEYWORD = "pragma-keyword"  # pragma version target
    PRAGMA_VALUE = "pragma-value"  # bithoven segwit taproot 0.0.1

    # Keywords
    CONTROL_KEYWORD = "control-keyword"  # if else return verify
    TIMELOCK_KEYWORD = "timelock-keyword"  # older after
    OPCODE_KEYWORD = "opcode-keyword"  # checksig sha256
    TYPE_KEYWORD = "type-keyword"  # bool string signature
    BOOL_LITERAL = "bool-literal"  # true false

    # Content
    IDENTIFIER = "identifier"
    STRING_LITERAL = "string-literal"
    NUMBER_LITERAL = "number-literal"
    OPERATOR = "operator"  # ( ) { } [ ] , ; : == && ||

    # Trivia
    LINE_COMMENT = "line-comment"
    BLOCK_COMMENT = "block-comment"
    WHITESPACE = "whitespace"

    UNKNOWN = "unknown"  # unrecognized character or unterminated string


# Kinds a keyword table may map a word to.
KEYWORD_KINDS = frozenset(
    {
        TokenKind.PRAGMA_KEYWORD,
        TokenKind.PRAGMA_VALUE,
        TokenKind.CONTROL_KEYWORD,
        TokenKind.TIMELOCK_KEYWORD,
        TokenKind.OPCODE_KEYWORD,
        TokenKind.TYPE_KEYWORD,
        TokenKind.BOOL_LITERAL,
    }
)


class ScanState(Enum):
    DEFAULT = auto()
    IN_LINE_COMMENT = auto()
    IN_BLOCK_COMMENT = auto()
    IN_STRING_LITERAL = auto()


@dataclass(frozen=True, slots=True)
class Token:
    """A classified slice of the document, ``source[start:end] == lexeme``."""

    kind: TokenKind
    start: int
    end: int
    lexeme: str

    def shifted(self, delta: int) -> Token:
        """Return the same token moved by *delta* characters."""
        if delta == 0:
            return self
        return Token(self.kind, self.start + delta, self.end + delta, self.lexeme)


# Two-character operators are matched before the single-character set.
OPERATORS_2 = frozenset({"==", "&&", "||"})
OPERATORS_1 = frozenset("(){}[],;:")

LINE_TERMINATORS = "\n\r"


def is_word_start(ch: str) -> bool:
    """Return True if ch can begin an identifier or keyword."""
    return ch.isalpha() or ch == "_"


def is_word_char(ch: str) -> bool:
    """Return True if ch can continue an identifier or keyword."""
    return ch.isalnum() or ch == "_"


def is_digit(ch: str) -> bool:
    """Return True if ch is an ASCII decimal digit."""
    return ch != "" and ch in "0123456789"


def is_word(text: str) -> bool:
    """Return True if text would scan as exactly one word token."""
    return (
        text != ""
        and is_word_start(text[0])
        and all(is_word_char(ch) for ch in text[1:])
    )
