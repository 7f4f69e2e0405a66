"""Per-document highlighting state.

A DocumentHighlighter owns one document's text and its last committed
token cache. Edits update the text immediately and are folded into a
single pending edit against the committed cache. Highlighting runs as a
pass over that pending edit; a pass that is overtaken by a newer edit
before it is committed is thrown away, so only the most recent edit's
result is ever rendered.
"""

from __future__ import annotations

import logging

from bithlex.incremental import Edit, TokenCache, combine_edits
from bithlex.spans import DecorationSpan, SpanBuilder
from bithlex.tokens import Token

logger = logging.getLogger(__name__)


class HighlightPass:
    """One relex of a document's pending edit, tagged with the generation it started at."""

    def __init__(
        self,
        builder: SpanBuilder,
        generation: int,
        prior: TokenCache,
        edit: Edit | None,
    ) -> None:
        self.generation = generation
        self._builder = builder
        self._prior = prior
        self._edit = edit
        self._result: TokenCache | None = None

    @property
    def done(self) -> bool:
        return self._result is not None

    def run(self) -> TokenCache:
        if self._result is None:
            if self._edit is None:
                self._result = self._prior
            else:
                self._result = self._builder.relex(self._prior, self._edit)
                logger.debug(
                    "relex gen=%d edit=%d:%d+%d rescanned=%d of %d tokens",
                    self.generation,
                    self._edit.start,
                    self._edit.end,
                    len(self._edit.text),
                    self._result.rescanned,
                    len(self._result.tokens),
                )
        return self._result


class DocumentHighlighter:
    """Text, committed token cache, and pending edit of one open document."""

    def __init__(self, text: str = "", builder: SpanBuilder | None = None) -> None:
        self._builder = builder if builder is not None else SpanBuilder()
        self._cache = self._builder.load(text)
        self._text = text
        self._pending: Edit | None = None
        self._generation = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def builder(self) -> SpanBuilder:
        return self._builder

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def apply_edit(self, edit: Edit) -> int:
        """Apply *edit* to the current text and return the new generation.

        Raises EditError, leaving the document untouched, if the edit does
        not fit the current text.
        """
        new_text = edit.apply(self._text)
        if self._pending is None:
            self._pending = edit
        else:
            self._pending = combine_edits(self._pending, edit, new_text)
        self._text = new_text
        self._generation += 1
        return self._generation

    def replace_text(self, text: str) -> int:
        """Replace the whole document, as a single edit.

        Identical text is not an edit: the generation stays put.
        """
        edit = Edit.between(self._text, text)
        if edit.start == edit.end and not edit.text:
            return self._generation
        return self.apply_edit(edit)

    def start_pass(self) -> HighlightPass:
        """Capture the pending edit as a pass that can run later."""
        return HighlightPass(self._builder, self._generation, self._cache, self._pending)

    def commit(self, hl_pass: HighlightPass) -> bool:
        """Adopt *hl_pass*'s result unless a newer edit has superseded it."""
        if hl_pass.generation != self._generation:
            logger.debug(
                "discarding stale pass gen=%d (current %d)", hl_pass.generation, self._generation
            )
            return False
        self._cache = hl_pass.run()
        self._pending = None
        return True

    def refresh(self) -> TokenCache:
        """Run and commit a pass synchronously and return the current cache."""
        if self._pending is not None:
            self.commit(self.start_pass())
        return self._cache

    def tokens(self) -> tuple[Token, ...]:
        return self.refresh().tokens

    def spans(self) -> list[DecorationSpan]:
        return self._builder.build_spans(self.refresh().tokens)
