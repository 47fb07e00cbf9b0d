"""Deck file loading — the top-level YAML file naming a deck's slide files."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .defaults import merge_defaults
from .errors import DeckFileError, HarveyError
from .models import MetaConfig
from .resources import builtin_defaults
from .yaml_source import load_mapping

logger = logging.getLogger(__name__)

KNOWN_KEYS = {
    "markdown",
    "context",
    "meta",
    "tree-sitter-highlight",
    "styles",
    "scripts",
    "template-path",
    "slides",
}

BLOCKQUOTE_KINDS = ("note", "tip", "important", "warning", "caution")


@dataclass(frozen=True)
class DeckFile:
    """A decoded deck file, with the built-in defaults already merged in."""

    slides: tuple[str, ...]
    meta: MetaConfig = field(default_factory=MetaConfig)
    styles: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    template_path: tuple[str, ...] = ()
    markdown: Mapping[str, Any] = field(default_factory=dict)
    context: Mapping[str, Any] = field(default_factory=dict)
    tree_sitter_highlight: Mapping[str, str] = field(default_factory=dict)
    path: str | None = None

    @property
    def base_dir(self) -> Path:
        return Path(self.path).parent if self.path else Path(".")


def _string_list(data: Mapping[str, Any], key: str, builtin: Any, source: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        value = builtin or []
    if not isinstance(value, list):
        raise DeckFileError(f"{key} must be a list of strings", source=source, keys=(key,))
    value = merge_defaults(value, builtin)
    bad = [item for item in value if not isinstance(item, str)]
    if bad:
        raise DeckFileError(
            f"{key} entries must be strings, got {bad[0]!r}", source=source, keys=(key,)
        )
    return tuple(value)


def _string_map(value: Any, builtin: Any, key: str, source: str) -> dict[str, str]:
    if value is None:
        value = builtin or {}
    if not isinstance(value, Mapping):
        raise DeckFileError(f"{key} must be a mapping", source=source, keys=(key,))
    value = merge_defaults(value, builtin)
    bad = [k for k, v in value.items() if not isinstance(k, str) or not isinstance(v, str)]
    if bad:
        raise DeckFileError(
            f"{key} must map strings to strings (bad entry {bad[0]!r})",
            source=source,
            keys=(key,),
        )
    return dict(value)


def _markdown(value: Any, builtin: Mapping[str, Any], source: str) -> dict[str, Any]:
    if value is None:
        value = {}
    if not isinstance(value, Mapping):
        raise DeckFileError("markdown must be a mapping", source=source, keys=("markdown",))

    markdown: dict[str, Any] = {
        "blockquote": _string_map(
            value.get("blockquote"),
            builtin.get("blockquote"),
            "markdown.blockquote",
            source,
        )
    }
    unknown = set(markdown["blockquote"]) - set(BLOCKQUOTE_KINDS)
    if unknown:
        logger.warning("Unknown blockquote kind(s) in %s: %s", source, sorted(unknown))

    for key in ("code-block-prefix", "code-block-focus"):
        setting = value.get(key, builtin.get(key))
        if setting is not None and not isinstance(setting, str):
            raise DeckFileError(
                f"markdown.{key} must be a string", source=source, keys=(f"markdown.{key}",)
            )
        markdown[key] = setting
    return markdown


def parse_deck_file(
    data: Any, source: str = "<deck>", defaults: Mapping[str, Any] | None = None
) -> DeckFile:
    """Build a :class:`DeckFile` from decoded YAML, merging in *defaults*.

    *defaults* are the built-in deck defaults unless given.
    """
    if not isinstance(data, Mapping):
        raise DeckFileError("deck file must be a mapping", source=source)
    if "slides" not in data:
        raise DeckFileError("deck file must list its slides", source=source, keys=("slides",))
    if defaults is None:
        defaults = builtin_defaults()

    for key in data:
        if key not in KNOWN_KEYS:
            logger.warning("Ignoring unknown deck file key %r in %s", key, source)

    slides = data["slides"]
    if not isinstance(slides, list) or not all(isinstance(s, str) for s in slides):
        raise DeckFileError("slides must be a list of file names", source=source, keys=("slides",))
    if not slides:
        logger.warning("Deck file %s lists no slides", source)

    context = data.get("context") or {}
    if not isinstance(context, Mapping):
        raise DeckFileError("context must be a mapping", source=source, keys=("context",))

    try:
        meta = MetaConfig().merged(defaults.get("meta") or {})
        meta = meta.merged(data.get("meta") or {})
    except HarveyError as exc:
        exc.source = exc.source or source
        raise

    deck = DeckFile(
        slides=tuple(slides),
        meta=meta,
        styles=_string_list(data, "styles", defaults.get("styles"), source),
        scripts=_string_list(data, "scripts", defaults.get("scripts"), source),
        template_path=_string_list(data, "template-path", defaults.get("template-path"), source),
        markdown=_markdown(data.get("markdown"), defaults.get("markdown") or {}, source),
        context=dict(context),
        tree_sitter_highlight=_string_map(
            data.get("tree-sitter-highlight"),
            defaults.get("tree-sitter-highlight"),
            "tree-sitter-highlight",
            source,
        ),
        path=source,
    )
    logger.debug(
        "Deck file %s: %d slide file(s), %d style(s), %d script(s)",
        source, len(deck.slides), len(deck.styles), len(deck.scripts),
    )
    return deck


def load_deck_file(path: str | Path, defaults: Mapping[str, Any] | None = None) -> DeckFile:
    """Read and decode a deck file from disk."""
    source = str(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = f.read()
    except OSError as exc:
        raise DeckFileError(f"cannot read deck file: {exc.strerror or exc}", source=source) from exc
    except UnicodeDecodeError as exc:
        raise DeckFileError(
            f"deck file is not valid UTF-8: {exc.reason} at byte {exc.start}", source=source
        ) from exc
    try:
        data = load_mapping(raw, name=source)
    except yaml.YAMLError as exc:
        raise DeckFileError(f"bad YAML in deck file: {exc}", source=source) from exc
    except TypeError as exc:
        raise DeckFileError(f"deck file must be a mapping: {exc}", source=source) from exc
    return parse_deck_file(data, source=source, defaults=defaults)
