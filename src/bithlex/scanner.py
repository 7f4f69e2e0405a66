"""Bithoven scanner: a finite-state scanner that slices source text into raw tokens.

The scanner never fails. Every character lands in exactly one token, and
malformed constructs (unterminated strings, stray characters) become
``UNKNOWN`` tokens bounded to the current line.
"""

from __future__ import annotations

from collections.abc import Iterator

from bithlex.tokens import (
    LINE_TERMINATORS,
    OPERATORS_1,
    OPERATORS_2,
    ScanState,
    Token,
    TokenKind,
    is_digit,
    is_word_char,
    is_word_start,
)


class Scanner:
    """Produce raw tokens from Bithoven source, one at a time.

    Word tokens come out as ``IDENTIFIER``; keyword resolution is left to
    the classifier.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._start = 0
        self._state = ScanState.DEFAULT

    @property
    def source(self) -> str:
        return self._source

    def next_token(
        self, offset: int, state: ScanState = ScanState.DEFAULT
    ) -> tuple[Token, ScanState] | None:
        """Scan one token starting at *offset* in lexical *state*.

        Returns the token and the state at its end, or None at end of input.
        """
        if offset >= len(self._source):
            return None
        self._pos = offset
        self._start = offset
        self._state = state

        tok: Token | None = None
        while tok is None:
            if self._state == ScanState.DEFAULT:
                tok = self._lex_default()
            elif self._state == ScanState.IN_LINE_COMMENT:
                tok = self._lex_line_comment()
            elif self._state == ScanState.IN_BLOCK_COMMENT:
                tok = self._lex_block_comment()
            else:
                tok = self._lex_string()
        return tok, self._state

    def tokens(
        self, offset: int = 0, state: ScanState = ScanState.DEFAULT
    ) -> Iterator[Token]:
        """Yield raw tokens from *offset* to end of input."""
        while True:
            result = self.next_token(offset, state)
            if result is None:
                return
            tok, state = result
            offset = tok.end
            yield tok

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _emit(self, kind: TokenKind) -> Token:
        return Token(kind, self._start, self._pos, self._source[self._start : self._pos])

    # ------------------------------------------------------------------
    # Default state
    # ------------------------------------------------------------------

    def _lex_default(self) -> Token | None:
        ch = self._peek()

        if ch == "/" and self._peek(1) == "/":
            self._pos += 2
            self._state = ScanState.IN_LINE_COMMENT
            return None

        if ch == "/" and self._peek(1) == "*":
            self._pos += 2
            self._state = ScanState.IN_BLOCK_COMMENT
            return None

        if ch == '"':
            self._pos += 1
            self._state = ScanState.IN_STRING_LITERAL
            return None

        if is_digit(ch):
            return self._lex_number()

        if is_word_start(ch):
            while not self._at_end() and is_word_char(self._peek()):
                self._pos += 1
            return self._emit(TokenKind.IDENTIFIER)

        if ch + self._peek(1) in OPERATORS_2:
            self._pos += 2
            return self._emit(TokenKind.OPERATOR)

        if ch in OPERATORS_1:
            self._pos += 1
            return self._emit(TokenKind.OPERATOR)

        if ch.isspace():
            while not self._at_end() and self._peek().isspace():
                self._pos += 1
            return self._emit(TokenKind.WHITESPACE)

        # Anything else is a single UNKNOWN character
        self._pos += 1
        return self._emit(TokenKind.UNKNOWN)

    def _lex_number(self) -> Token:
        while is_digit(self._peek()):
            self._pos += 1

        # 0.0.1 style version literal
        dotted = False
        while self._peek() == "." and is_digit(self._peek(1)):
            self._pos += 1
            while is_digit(self._peek()):
                self._pos += 1
            dotted = True

        return self._emit(TokenKind.PRAGMA_VALUE if dotted else TokenKind.NUMBER_LITERAL)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _lex_line_comment(self) -> Token | None:
        while not self._at_end() and self._peek() not in LINE_TERMINATORS:
            self._pos += 1
        self._state = ScanState.DEFAULT
        if self._pos == self._start:
            # Resumed right at a line terminator: nothing left of the comment
            return None
        return self._emit(TokenKind.LINE_COMMENT)

    def _lex_block_comment(self) -> Token:
        close = self._source.find("*/", self._pos)
        # Unterminated: the comment stops at end of input and the state resets
        self._pos = len(self._source) if close < 0 else close + 2
        self._state = ScanState.DEFAULT
        return self._emit(TokenKind.BLOCK_COMMENT)

    # ------------------------------------------------------------------
    # String literals
    # ------------------------------------------------------------------

    def _lex_string(self) -> Token | None:
        while not self._at_end():
            ch = self._peek()
            if ch == '"':
                self._pos += 1
                self._state = ScanState.DEFAULT
                return self._emit(TokenKind.STRING_LITERAL)
            if ch in LINE_TERMINATORS:
                break
            self._pos += 1

        # Unterminated: bounded to end of line, scanning resumes on the next one
        self._state = ScanState.DEFAULT
        if self._pos == self._start:
            return None
        return self._emit(TokenKind.UNKNOWN)


def scan(source: str) -> list[Token]:
    """Convenience function: scan source text and return the raw token list."""
    return list(Scanner(source).tokens())
