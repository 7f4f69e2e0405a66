"""Keyword table and the classifier that resolves raw word tokens to semantic kinds."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from bithlex.errors import ConfigError
from bithlex.tokens import KEYWORD_KINDS, Token, TokenKind, is_word


@dataclass(frozen=True, slots=True)
class KeywordTable:
    """Immutable, case-sensitive word -> kind table."""

    entries: Mapping[str, TokenKind] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @classmethod
    def from_groups(cls, groups: Mapping[TokenKind, Iterable[str]]) -> KeywordTable:
        """Build a table from ``{kind: [word, ...]}``, validating every entry."""
        entries: dict[str, TokenKind] = {}
        for kind, words in groups.items():
            if kind not in KEYWORD_KINDS:
                raise ConfigError(f"'{kind.value}' is not a keyword category")
            for word in words:
                if not isinstance(word, str) or not is_word(word):
                    raise ConfigError(f"keyword {word!r} is not a single word")
                existing = entries.get(word)
                if existing is not None and existing != kind:
                    raise ConfigError(
                        f"keyword '{word}' listed as both '{existing.value}' and '{kind.value}'"
                    )
                entries[word] = kind
        return cls(entries)

    def groups(self) -> dict[TokenKind, list[str]]:
        """Return the table as ``{kind: [word, ...]}`` in insertion order."""
        result: dict[TokenKind, list[str]] = {}
        for word, kind in self.entries.items():
            result.setdefault(kind, []).append(word)
        return result

    def extended(self, groups: Mapping[TokenKind, Iterable[str]]) -> KeywordTable:
        """Return a new table with *groups* added to this one."""
        merged: dict[TokenKind, list[str]] = self.groups()
        for kind, words in groups.items():
            merged.setdefault(kind, []).extend(words)
        return KeywordTable.from_groups(merged)

    def lookup(self, word: str) -> TokenKind:
        return self.entries.get(word, TokenKind.IDENTIFIER)


DEFAULT_KEYWORDS = KeywordTable.from_groups(
    {
        TokenKind.PRAGMA_KEYWORD: ["pragma", "version", "target"],
        TokenKind.PRAGMA_VALUE: ["bithoven", "segwit", "taproot"],
        TokenKind.CONTROL_KEYWORD: ["if", "else", "return", "verify"],
        TokenKind.TIMELOCK_KEYWORD: ["older", "after"],
        TokenKind.OPCODE_KEYWORD: ["checksig", "sha256"],
        TokenKind.TYPE_KEYWORD: ["bool", "string", "signature"],
        TokenKind.BOOL_LITERAL: ["true", "false"],
    }
)


class Classifier:
    """Resolve the final kind of raw tokens by whole-lexeme keyword lookup.

    Pragma words (``bithoven``, ``segwit``, ...) are matched through the
    same flat table, so they are highlighted the same way wherever they
    appear.
    """

    def __init__(self, keywords: KeywordTable = DEFAULT_KEYWORDS) -> None:
        self._keywords = keywords

    @property
    def keywords(self) -> KeywordTable:
        return self._keywords

    def classify(self, token: Token) -> Token:
        if token.kind != TokenKind.IDENTIFIER:
            return token
        kind = self._keywords.lookup(token.lexeme)
        if kind == TokenKind.IDENTIFIER:
            return token
        return Token(kind, token.start, token.end, token.lexeme)

    def classify_all(self, tokens: Iterable[Token]) -> list[Token]:
        return [self.classify(tok) for tok in tokens]
