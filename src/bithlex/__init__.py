"""Incremental syntax highlighting for the Bithoven contract language."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bithlex.config import HighlightConfig
    from bithlex.spans import DecorationSpan

__version__ = "0.1.0"


def highlight(source: str, config: HighlightConfig | None = None) -> list[DecorationSpan]:
    """Scan, classify, and coalesce Bithoven source into decoration spans."""
    from bithlex.config import DEFAULT_CONFIG
    from bithlex.spans import SpanBuilder

    return SpanBuilder(config if config is not None else DEFAULT_CONFIG).highlight(source)
