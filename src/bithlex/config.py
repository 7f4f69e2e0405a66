"""Highlighting configuration: the immutable keyword table + category tag map, and TOML loading."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from bithlex.classifier import DEFAULT_KEYWORDS, KeywordTable
from bithlex.errors import ConfigError
from bithlex.tokens import TokenKind

CONFIG_FILENAME = "bithlex.toml"


@dataclass(frozen=True, slots=True)
class HighlightConfig:
    """Everything the classifier and span builder need, fixed at construction.

    ``tags`` maps every kind to the category tag the host binds a color
    to. Kinds left out of the mapping keep their default tag.
    """

    keywords: KeywordTable = DEFAULT_KEYWORDS
    tags: Mapping[TokenKind, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        full = {kind: self.tags.get(kind, kind.value) for kind in TokenKind}
        object.__setattr__(self, "tags", MappingProxyType(full))

    def tag(self, kind: TokenKind) -> str:
        return self.tags[kind]

    def tag_names(self, *, include_whitespace: bool = True) -> list[str]:
        """Distinct tags in declaration order of their first kind."""
        names: list[str] = []
        for kind in TokenKind:
            if kind == TokenKind.WHITESPACE and not include_whitespace:
                continue
            tag = self.tags[kind]
            if tag not in names:
                names.append(tag)
        return names


DEFAULT_CONFIG = HighlightConfig()

_KINDS_BY_TAG = {kind.value: kind for kind in TokenKind}


def kind_for_tag(name: str, section: str, path: Path | None = None) -> TokenKind:
    """Resolve a default tag name used as a config key back to its kind."""
    kind = _KINDS_BY_TAG.get(name)
    if kind is None:
        raise ConfigError(f"unknown category '{name}' in [{section}]", path)
    return kind


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML: {exc}", path) from exc


def config_from_mapping(data: Mapping[str, Any], path: Path | None = None) -> HighlightConfig:
    """Build a HighlightConfig from the ``[keywords]`` and ``[tags]`` tables.

    ``[keywords]`` adds words to the default table, keyed by category:
    ``control-keyword = ["require"]``. ``[tags]`` renames categories:
    ``line-comment = "comment"``.
    """
    keywords = DEFAULT_KEYWORDS
    cfg_keywords = data.get("keywords")
    if cfg_keywords is not None:
        if not isinstance(cfg_keywords, dict):
            raise ConfigError("[keywords] must be a table", path)
        groups: dict[TokenKind, list[str]] = {}
        for name, words in cfg_keywords.items():
            kind = kind_for_tag(str(name), "keywords", path)
            if not isinstance(words, list):
                raise ConfigError(f"keywords.{name} must be a list of words", path)
            groups[kind] = list(words)
        try:
            keywords = DEFAULT_KEYWORDS.extended(groups)
        except ConfigError as exc:
            raise ConfigError(exc.message, path) from exc

    tags: dict[TokenKind, str] = {}
    cfg_tags = data.get("tags")
    if cfg_tags is not None:
        if not isinstance(cfg_tags, dict):
            raise ConfigError("[tags] must be a table", path)
        for name, tag in cfg_tags.items():
            kind = kind_for_tag(str(name), "tags", path)
            if not isinstance(tag, str) or not tag or any(ch.isspace() for ch in tag):
                raise ConfigError(f"tags.{name} must be a non-empty name", path)
            tags[kind] = tag

    return HighlightConfig(keywords=keywords, tags=tags)
