"""Incremental re-lexing of a classified token stream.

After an edit only the tokens around the edited region are rescanned:

1. Walk back from the edit to the nearest safe restart boundary, a token
   end that the scanner is known to reach in the DEFAULT state and whose
   surrounding text the edit cannot affect.
2. Rescan the new text forward from there.
3. Stop as soon as a freshly scanned token lines up with a cached token
   past the edit (same kind, same lexeme, same post-edit offset).
4. Splice: cached prefix + rescanned tokens + cached tail shifted by the
   edit's length delta.

A boundary token is decided by at most one character past its end, so a
boundary ending strictly before the edit start is unchanged by the edit, and
once the new and old streams share a token boundary past the edit the
remaining tokens are identical. The result therefore always equals a full
rescan of the new text.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Sequence
from dataclasses import dataclass, field

from bithlex.classifier import Classifier
from bithlex.errors import EditError
from bithlex.scanner import Scanner
from bithlex.tokens import Token, TokenKind


@dataclass(frozen=True, slots=True)
class Edit:
    """Replace ``text[start:end]`` of the prior document with ``text``."""

    start: int
    end: int
    text: str = ""

    @property
    def delta(self) -> int:
        """Change in document length caused by this edit."""
        return len(self.text) - (self.end - self.start)

    @property
    def new_end(self) -> int:
        """End of the inserted text in the new document."""
        return self.start + len(self.text)

    def check(self, source: str) -> None:
        """Raise EditError unless this edit fits *source*."""
        if self.start < 0 or self.start > len(source):
            raise EditError(f"edit start {self.start} is outside the document", self.start, source)
        if self.end < self.start:
            raise EditError(f"edit end {self.end} is before its start {self.start}", self.start, source)
        if self.end > len(source):
            raise EditError(f"edit end {self.end} is outside the document", self.end, source)

    def apply(self, source: str) -> str:
        self.check(source)
        return source[: self.start] + self.text + source[self.end :]

    @classmethod
    def between(cls, old: str, new: str) -> Edit:
        """Derive the smallest single edit turning *old* into *new*."""
        limit = min(len(old), len(new))
        prefix = 0
        while prefix < limit and old[prefix] == new[prefix]:
            prefix += 1
        suffix = 0
        while (
            suffix < limit - prefix
            and old[len(old) - 1 - suffix] == new[len(new) - 1 - suffix]
        ):
            suffix += 1
        return cls(prefix, len(old) - suffix, new[prefix : len(new) - suffix])


def combine_edits(pending: Edit, edit: Edit, new_source: str) -> Edit:
    """Fold *edit* into *pending*, both expressed against the committed text.

    *pending* turns the committed text into the current one, *edit* applies
    to the current text and *new_source* is the result. The returned edit
    turns the committed text directly into *new_source*.
    """
    start = min(pending.start, edit.start)
    current_end = max(pending.new_end, edit.end)
    committed_end = pending.end + (current_end - pending.new_end)
    new_end = current_end + edit.delta
    return Edit(start, committed_end, new_source[start:new_end])


@dataclass(frozen=True, slots=True)
class TokenCache:
    """A document's text together with its classified token stream.

    ``rescanned`` counts the tokens the scanner produced to build this
    cache (the whole stream for a full scan, the edited region otherwise).
    """

    text: str
    tokens: tuple[Token, ...]
    starts: tuple[int, ...] = field(default=(), repr=False)
    rescanned: int = 0

    def __post_init__(self) -> None:
        if len(self.starts) != len(self.tokens):
            object.__setattr__(self, "starts", tuple(tok.start for tok in self.tokens))


# Token kinds whose end is a restart boundary when the token is complete.
_BOUNDARY_KINDS = frozenset(
    {
        TokenKind.WHITESPACE,
        TokenKind.OPERATOR,
        TokenKind.LINE_COMMENT,
        TokenKind.BLOCK_COMMENT,
        TokenKind.STRING_LITERAL,
    }
)


def is_restart_boundary(tok: Token) -> bool:
    """Return True if scanning may safely resume at the end of *tok*."""
    if tok.kind not in _BOUNDARY_KINDS:
        return False
    if tok.kind == TokenKind.BLOCK_COMMENT:
        # "/*/" ends in "*/" but is still open
        return len(tok.lexeme) >= 4 and tok.lexeme.endswith("*/")
    return True


def restart_index(tokens: Sequence[Token], starts: Sequence[int], edit_start: int) -> int:
    """Index of the first token to rescan for an edit beginning at *edit_start*.

    Every token before the returned index ends strictly before the edit
    and the token just before it is a restart boundary (or it is 0).
    """
    # Tokens starting at or after the edit are certainly affected
    idx = bisect_left(starts, edit_start)
    while idx > 0:
        prev = tokens[idx - 1]
        if prev.end < edit_start and is_restart_boundary(prev):
            return idx
        idx -= 1
    return 0


def relex(prior: TokenCache, edit: Edit, classifier: Classifier) -> TokenCache:
    """Apply *edit* to *prior* and return the new cache, rescanning as little as possible."""
    new_text = edit.apply(prior.text)
    old_tokens = prior.tokens
    old_starts = prior.starts
    delta = edit.delta

    first = restart_index(old_tokens, old_starts, edit.start)
    offset = old_tokens[first - 1].end if first > 0 else 0

    # Cached tokens at or past the removed range are resync candidates
    tail = bisect_left(old_starts, edit.end)

    fresh: list[Token] = []
    resync: int | None = None
    for raw in Scanner(new_text).tokens(offset):
        tok = classifier.classify(raw)
        if tok.start >= edit.new_end:
            old_start = tok.start - delta
            j = bisect_left(old_starts, old_start, lo=tail)
            if j < len(old_tokens) and old_starts[j] == old_start:
                old = old_tokens[j]
                if old.kind == tok.kind and old.lexeme == tok.lexeme:
                    resync = j
                    break
        fresh.append(tok)

    tokens = list(old_tokens[:first])
    tokens.extend(fresh)
    if resync is not None:
        tokens.extend(tok.shifted(delta) for tok in old_tokens[resync:])

    return TokenCache(new_text, tuple(tokens), rescanned=len(fresh) + (resync is not None))
