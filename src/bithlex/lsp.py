"""Minimal LSP server for Bithoven: semantic-token highlighting only.

Editor vocabulary stays in this module. Content changes become ``Edit``
deltas for a per-document DocumentHighlighter, and decoration spans become
LSP semantic tokens.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Iterator, Sequence
from typing import Any

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    SemanticTokens,
    SemanticTokensLegend,
    SemanticTokensParams,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from bithlex import __version__
from bithlex.config import DEFAULT_CONFIG, HighlightConfig
from bithlex.document import DocumentHighlighter
from bithlex.errors import EditError
from bithlex.incremental import Edit
from bithlex.spans import DecorationSpan, SpanBuilder

logger = logging.getLogger(__name__)


def utf16_len(text: str) -> int:
    """Length of *text* in UTF-16 code units."""
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in text)


class LineIndex:
    """Convert between document offsets and LSP (line, UTF-16 character) positions.

    ``\\n``, ``\\r\\n`` and a lone ``\\r`` all end a line.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n" or (ch == "\r" and text[i + 1 : i + 2] != "\n"):
                starts.append(i + 1)
        self._starts = starts

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_bounds(self, line: int) -> tuple[int, int]:
        """Start offset and end offset (before the terminator) of *line*."""
        start = self._starts[line]
        if line + 1 >= len(self._starts):
            return start, len(self._text)
        end = self._starts[line + 1] - 1
        if end > start and self._text[end] == "\n" and self._text[end - 1] == "\r":
            end -= 1
        return start, end

    def line_of(self, offset: int) -> int:
        return bisect_right(self._starts, offset) - 1

    def offset_at(self, line: int, character: int) -> int:
        """Offset of an LSP position, clamped to the document and the line."""
        if line < 0:
            return 0
        if line >= len(self._starts):
            return len(self._text)
        offset, end = self.line_bounds(line)
        units = 0
        while offset < end and units < character:
            units += 2 if ord(self._text[offset]) > 0xFFFF else 1
            offset += 1
        return offset

    def position_at(self, offset: int) -> tuple[int, int]:
        line = self.line_of(offset)
        return line, utf16_len(self._text[self._starts[line] : offset])

    def pieces(self, start: int, end: int) -> Iterator[tuple[int, int]]:
        """Split ``[start, end)`` at line breaks, dropping the terminators."""
        if start >= end:
            return
        for line in range(self.line_of(start), self.line_of(end - 1) + 1):
            line_start, line_end = self.line_bounds(line)
            piece_start = max(start, line_start)
            piece_end = min(end, line_end)
            if piece_start < piece_end:
                yield piece_start, piece_end


def encode_semantic_tokens(
    text: str, spans: Sequence[DecorationSpan], token_types: Sequence[str]
) -> list[int]:
    """Encode spans as LSP relative semantic token data.

    Spans whose tag is not in *token_types* (whitespace) are skipped.
    """
    type_index = {name: i for i, name in enumerate(token_types)}
    index = LineIndex(text)
    data: list[int] = []
    prev_line = 0
    prev_char = 0
    for span in spans:
        type_idx = type_index.get(span.tag)
        if type_idx is None:
            continue
        for piece_start, piece_end in index.pieces(span.start, span.end):
            line, char = index.position_at(piece_start)
            delta_line = line - prev_line
            delta_start = char - prev_char if delta_line == 0 else char
            data.extend(
                [delta_line, delta_start, utf16_len(text[piece_start:piece_end]), type_idx, 0]
            )
            prev_line, prev_char = line, char
    return data


def change_to_edit(text: str, change: Any) -> Edit:
    """Translate one LSP content change against *text* into an Edit."""
    change_range = getattr(change, "range", None)
    if change_range is None:
        return Edit.between(text, change.text)
    index = LineIndex(text)
    start = index.offset_at(change_range.start.line, change_range.start.character)
    end = index.offset_at(change_range.end.line, change_range.end.character)
    return Edit(start, end, change.text)


class HighlightServer(LanguageServer):
    """Language server holding one DocumentHighlighter per open document."""

    def __init__(self, *args: Any, config: HighlightConfig = DEFAULT_CONFIG, **kwargs: Any) -> None:
        kwargs.setdefault("text_document_sync_kind", TextDocumentSyncKind.Incremental)
        super().__init__(*args, **kwargs)
        self.builder = SpanBuilder(config)
        self.token_types = config.tag_names(include_whitespace=False)
        self.highlighters: dict[str, DocumentHighlighter] = {}

    @property
    def legend(self) -> SemanticTokensLegend:
        return SemanticTokensLegend(token_types=list(self.token_types), token_modifiers=[])

    def highlighter_for(self, uri: str) -> DocumentHighlighter:
        """Return the highlighter for *uri*, loading it from the workspace if unseen."""
        doc = self.highlighters.get(uri)
        if doc is None:
            source = self.workspace.get_text_document(uri).source
            doc = DocumentHighlighter(source, self.builder)
            self.highlighters[uri] = doc
        return doc


server = HighlightServer("bithlex-lsp", __version__)


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: HighlightServer, params: DidOpenTextDocumentParams) -> None:
    doc = params.text_document
    ls.highlighters[doc.uri] = DocumentHighlighter(doc.text, ls.builder)
    logger.debug("opened %s (%d chars)", doc.uri, len(doc.text))


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: HighlightServer, params: DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    doc = ls.highlighters.get(uri)
    if doc is None:
        ls.highlighter_for(uri)
        return
    try:
        for change in params.content_changes:
            doc.apply_edit(change_to_edit(doc.text, change))
    except EditError as exc:
        logger.warning("out-of-sync change for %s, reloading: %s", uri, exc.message)
        ls.highlighters.pop(uri, None)
        ls.highlighter_for(uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: HighlightServer, params: DidCloseTextDocumentParams) -> None:
    ls.highlighters.pop(params.text_document.uri, None)


@server.feature(TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL, server.legend)
def semantic_tokens_full(ls: HighlightServer, params: SemanticTokensParams) -> SemanticTokens:
    doc = ls.highlighter_for(params.text_document.uri)
    spans = doc.spans()
    return SemanticTokens(data=encode_semantic_tokens(doc.text, spans, ls.token_types))


def main() -> None:
    server.start_io()
