"""Span builder: classified tokens in, decoration spans out."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from bithlex.classifier import Classifier
from bithlex.config import DEFAULT_CONFIG, HighlightConfig
from bithlex.incremental import Edit, TokenCache, relex
from bithlex.scanner import Scanner
from bithlex.tokens import Token


@dataclass(frozen=True, slots=True)
class DecorationSpan:
    """A ``[start, end)`` region of the document and the tag to color it with."""

    start: int
    end: int
    tag: str


class SpanBuilder:
    """Tokenize, re-lex after edits, and coalesce tokens into decoration spans."""

    def __init__(self, config: HighlightConfig = DEFAULT_CONFIG) -> None:
        self._config = config
        self._classifier = Classifier(config.keywords)

    @property
    def config(self) -> HighlightConfig:
        return self._config

    @property
    def classifier(self) -> Classifier:
        return self._classifier

    def tokenize(self, text: str) -> list[Token]:
        """Full scan from offset 0 in the default state, classified."""
        return self._classifier.classify_all(Scanner(text).tokens())

    def load(self, text: str) -> TokenCache:
        tokens = tuple(self.tokenize(text))
        return TokenCache(text, tokens, rescanned=len(tokens))

    def relex(self, prior: TokenCache, edit: Edit) -> TokenCache:
        """Return the cache for *prior* with *edit* applied; equal to ``load`` of the new text."""
        return relex(prior, edit, self._classifier)

    def build_spans(self, tokens: Iterable[Token]) -> list[DecorationSpan]:
        """Merge consecutive tokens that share a category tag."""
        spans: list[DecorationSpan] = []
        for tok in tokens:
            tag = self._config.tag(tok.kind)
            if spans and spans[-1].tag == tag and spans[-1].end == tok.start:
                spans[-1] = DecorationSpan(spans[-1].start, tok.end, tag)
            else:
                spans.append(DecorationSpan(tok.start, tok.end, tag))
        return spans

    def highlight(self, text: str) -> list[DecorationSpan]:
        return self.build_spans(self.tokenize(text))
