"""Renderers that turn decoration spans into colored terminal text, HTML, or JSON."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from bithlex.errors import ConfigError
from bithlex.spans import DecorationSpan
from bithlex.tokens import TokenKind

# SGR foreground codes
ANSI_COLORS = {
    "black": 30,
    "red": 31,
    "green": 32,
    "yellow": 33,
    "blue": 34,
    "magenta": 35,
    "cyan": 36,
    "white": 37,
    "bright_black": 90,
    "bright_red": 91,
    "bright_green": 92,
    "bright_yellow": 93,
    "bright_blue": 94,
    "bright_magenta": 95,
    "bright_cyan": 96,
    "bright_white": 97,
}

DEFAULT_THEME: dict[str, str] = {
    "pragma-keyword": "magenta",
    "pragma-value": "cyan",
    "control-keyword": "bright_magenta",
    "timelock-keyword": "bright_yellow",
    "opcode-keyword": "bright_blue",
    "type-keyword": "bright_cyan",
    "bool-literal": "yellow",
    "string-literal": "green",
    "number-literal": "yellow",
    "line-comment": "bright_black",
    "block-comment": "bright_black",
    "unknown": "red",
}

_RESET = "\x1b[0m"


def resolve_theme(
    overrides: Mapping[str, Any] | None, path: Path | None = None
) -> dict[str, str]:
    """Merge a ``[theme]`` table over the default theme, validating color names."""
    theme = dict(DEFAULT_THEME)
    if overrides is None:
        return theme
    if not isinstance(overrides, Mapping):
        raise ConfigError("[theme] must be a table", path)
    for tag, color in overrides.items():
        if not isinstance(color, str) or color not in ANSI_COLORS:
            raise ConfigError(f"theme.{tag}: unknown color {color!r}", path)
        theme[str(tag)] = color
    return theme


def render_ansi(text: str, spans: Sequence[DecorationSpan], theme: Mapping[str, str]) -> str:
    """Render *text* with SGR color codes around every themed span."""
    parts: list[str] = []
    for span in spans:
        chunk = text[span.start : span.end]
        color = theme.get(span.tag)
        if color is None:
            parts.append(chunk)
        else:
            parts.append(f"\x1b[{ANSI_COLORS[color]}m{chunk}{_RESET}")
    return "".join(parts)


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def _escape_html(text: str) -> str:
    """Escape text for HTML body content."""
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        else:
            result.append(ch)
    return "".join(result)


def render_html(
    text: str,
    spans: Sequence[DecorationSpan],
    *,
    class_prefix: str = "bh-",
    whitespace_tag: str = TokenKind.WHITESPACE.value,
) -> str:
    """Render *text* as a ``<pre>`` block with one ``<span>`` per non-whitespace span.

    *whitespace_tag* is the tag the config gives whitespace; those spans
    are written bare.
    """
    parts: list[str] = ['<pre class="bithoven">']
    for span in spans:
        chunk = _escape_html(text[span.start : span.end])
        if span.tag == whitespace_tag:
            parts.append(chunk)
        else:
            parts.append(f'<span class="{class_prefix}{span.tag}">{chunk}</span>')
    parts.append("</pre>\n")
    return "".join(parts)


def render_json(spans: Sequence[DecorationSpan]) -> str:
    return json.dumps(
        [{"start": s.start, "end": s.end, "tag": s.tag} for s in spans],
        indent=2,
    ) + "\n"
