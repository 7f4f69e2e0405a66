"""Command-line interface for bithlex: highlight a Bithoven file to the terminal, HTML, or JSON."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from bithlex.config import HighlightConfig, config_from_mapping, load_config
from bithlex.errors import ConfigError
from bithlex.tokens import Token, TokenKind

if TYPE_CHECKING:
    from bithlex.document import DocumentHighlighter

logger = logging.getLogger(__name__)

FORMATS = ("ansi", "html", "json", "tokens")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    output_format: str
    config: HighlightConfig
    theme: dict[str, str]
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="bithlex",
        description="Syntax highlighter for the Bithoven contract language",
    )
    p.add_argument("input", help="Input .bithoven file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format (default: ansi)",
    )
    p.add_argument(
        "--tag",
        action="append",
        default=[],
        metavar="CATEGORY=TAG",
        help="Rename a category tag, e.g. line-comment=comment (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover bithlex.toml)",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-highlight")
    p.add_argument("--debug", action="store_true", help="Dump tokens to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Log relex details to stderr")
    return p


def parse_tag_arg(s: str) -> tuple[str, str]:
    """Parse a CATEGORY=TAG string into (category, tag)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid tag format (expected CATEGORY=TAG): {s}")
    name, _, tag = s.partition("=")
    return name, tag


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    from bithlex.render import resolve_theme

    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    data = load_config(config_path, input_dir)
    source_path = config_path if config_path is not None else input_dir / "bithlex.toml"

    # Tags: config < CLI
    tags: dict[str, str] = {}
    cfg_tags = data.get("tags")
    if isinstance(cfg_tags, dict):
        tags.update(cfg_tags)
    for raw in args.tag:
        name, tag = parse_tag_arg(raw)
        tags[name] = tag
    merged = dict(data)
    if tags:
        merged["tags"] = tags

    config = config_from_mapping(merged, source_path if data else None)
    theme = resolve_theme(data.get("theme"), source_path)

    # Output format: config < CLI
    output_format = "ansi"
    cfg_output = data.get("output")
    if isinstance(cfg_output, dict):
        cfg_format = cfg_output.get("format")
        if cfg_format is not None:
            if cfg_format not in FORMATS:
                raise ConfigError(f"output.format must be one of {', '.join(FORMATS)}", source_path)
            output_format = cfg_format
    if args.format is not None:
        output_format = args.format

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        output_format=output_format,
        config=config,
        theme=theme,
        watch=args.watch,
        debug=args.debug,
    )


def render_tokens(options: CliOptions, text: str, tokens: Sequence[Token]) -> str:
    """Render an already classified token stream in the selected output format."""
    from bithlex.debug import format_token
    from bithlex.render import render_ansi, render_html, render_json
    from bithlex.spans import SpanBuilder

    if options.output_format == "tokens":
        return "".join(format_token(tok) + "\n" for tok in tokens)

    spans = SpanBuilder(options.config).build_spans(tokens)
    if options.output_format == "html":
        return render_html(text, spans, whitespace_tag=options.config.tag(TokenKind.WHITESPACE))
    if options.output_format == "json":
        return render_json(spans)
    return render_ansi(text, spans, options.theme)


def highlight_file(options: CliOptions) -> str:
    """Read and highlight a Bithoven file, returning the rendered output."""
    from bithlex.debug import dump_tokens
    from bithlex.spans import SpanBuilder

    text = options.input_file.read_text(encoding="utf-8")
    tokens = SpanBuilder(options.config).tokenize(text)

    if options.debug:
        dump_tokens(tokens, file=sys.stderr)

    return render_tokens(options, text, tokens)


def _write(options: CliOptions, output: str) -> None:
    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)
        sys.stdout.flush()


def watch_step(
    options: CliOptions, document: DocumentHighlighter | None, last_mtime: float
) -> tuple[DocumentHighlighter | None, float]:
    """Poll the input file once; re-highlight and write output if it changed.

    Returns the (possibly new) document and the mtime seen, to pass back in
    on the next poll.
    """
    from bithlex.document import DocumentHighlighter
    from bithlex.spans import SpanBuilder

    try:
        mtime = options.input_file.stat().st_mtime
    except OSError:
        return document, last_mtime
    if mtime == last_mtime:
        return document, last_mtime

    try:
        text = options.input_file.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return document, mtime

    if document is None:
        document = DocumentHighlighter(text, SpanBuilder(options.config))
    else:
        document.replace_text(text)
    _write(options, render_tokens(options, document.text, document.tokens()))
    print(f"Highlighted {options.input_file}", file=sys.stderr)
    return document, mtime


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, re-highlighting incrementally on each modification."""
    document: DocumentHighlighter | None = None
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            document, last_mtime = watch_step(options, document, last_mtime)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, ConfigError) as exc:
        message = str(exc)
        print(message if message.startswith("error:") else f"error: {message}", file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    try:
        output = highlight_file(options)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: cannot read {options.input_file}: {exc}", file=sys.stderr)
        return 1

    _write(options, output)
    logger.debug("highlighted %s as %s", options.input_file, options.output_format)
    return 0
