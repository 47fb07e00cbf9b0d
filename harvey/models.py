"""Shared data models and slide grammar constants."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from .defaults import DEFAULT_SENTINEL, merge_defaults
from .errors import InvalidRatio, MetadataDecodeError

logger = logging.getLogger(__name__)

# A marker line opens a slide: three or more dashes and nothing else.
MARKER_RE = re.compile(r"^-{3,}$")

# Metadata under a marker wider than three dashes ends at this line.
LONG_METADATA_TERMINATOR = "..."

NOTES_SEPARATOR = "???"
FRAGMENT_SEPARATOR = "***"

RATIO_RE = re.compile(r"^(\d+):(\d+)$")

META_KEY = "meta"
TEMPLATE_KEY = "template"


@dataclass(frozen=True)
class Ratio:
    width: int
    height: int

    @classmethod
    def parse(cls, value: Any) -> Ratio:
        """Parse ``"16:9"`` style text into a Ratio."""
        if isinstance(value, Ratio):
            return value
        match = RATIO_RE.match(value) if isinstance(value, str) else None
        if match is None:
            raise InvalidRatio(
                f"ratio must look like W:H, got {value!r}", keys=("ratio",)
            )
        width, height = int(match.group(1)), int(match.group(2))
        if width <= 0 or height <= 0:
            raise InvalidRatio(
                f"ratio components must be positive, got {value!r}", keys=("ratio",)
            )
        return cls(width, height)

    def __str__(self) -> str:
        return f"{self.width}:{self.height}"


_STRING_FIELDS = {
    "content-name": "content_name",
    "content-list": "content_list",
    "default-template": "default_template",
}

_SET_FIELDS = {
    "inherit": "inherit",
    "require": "require",
    "deny": "deny",
}


@dataclass(frozen=True)
class MetaConfig:
    """The reserved ``meta`` block which steers metadata resolution."""

    content_name: str = "harvey-content"
    content_list: str = "harvey-contents"
    default_template: str = "harvey-slide"
    inherit: frozenset[str] = frozenset({META_KEY, TEMPLATE_KEY})
    require: frozenset[str] = frozenset()
    deny: frozenset[str] = frozenset()
    ratio: Ratio = Ratio(16, 9)

    def merged(self, overrides: Mapping[str, Any] | MetaConfig) -> MetaConfig:
        """Return a copy with every key present in *overrides* replaced.

        ``inherit``, ``require`` and ``deny`` are replaced as whole sets.  A
        ``default`` element in one of those lists splices in the value this
        config currently holds.
        """
        if isinstance(overrides, MetaConfig):
            return overrides
        if not isinstance(overrides, Mapping):
            raise MetadataDecodeError(
                f"meta must be a mapping, got {type(overrides).__name__}",
                keys=(META_KEY,),
            )

        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key in _STRING_FIELDS:
                if not isinstance(value, str):
                    raise MetadataDecodeError(
                        f"meta.{key} must be a string, got {value!r}",
                        keys=(f"meta.{key}",),
                    )
                changes[_STRING_FIELDS[key]] = value
            elif key in _SET_FIELDS:
                attr = _SET_FIELDS[key]
                changes[attr] = _key_set(key, value, getattr(self, attr))
            elif key == "ratio":
                changes["ratio"] = Ratio.parse(value)
            else:
                logger.warning("Ignoring unknown meta key %r", key)
        return replace(self, **changes)

    def __post_init__(self) -> None:
        for key, name in (("content-name", self.content_name), ("content-list", self.content_list)):
            if name in (META_KEY, TEMPLATE_KEY):
                raise MetadataDecodeError(
                    f"meta.{key} may not use the reserved name {name!r}",
                    keys=(f"meta.{key}",),
                )
        if self.content_name == self.content_list:
            raise MetadataDecodeError(
                f"meta.content-name and meta.content-list must differ, both are {self.content_name!r}",
                keys=("meta.content-name", "meta.content-list"),
            )

    def to_mapping(self) -> dict[str, Any]:
        """Plain kebab-case mapping, suitable for YAML or JSON output."""
        return {
            "content-name": self.content_name,
            "content-list": self.content_list,
            "default-template": self.default_template,
            "inherit": sorted(self.inherit),
            "require": sorted(self.require),
            "deny": sorted(self.deny),
            "ratio": str(self.ratio),
        }


def _key_set(name: str, value: Any, current: frozenset[str]) -> frozenset[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
        raise MetadataDecodeError(
            f"meta.{name} must be a list of key names, got {value!r}",
            keys=(f"meta.{name}",),
        )
    value = list(value)
    if DEFAULT_SENTINEL in value:
        value = merge_defaults(value, sorted(current))
    bad = [item for item in value if not isinstance(item, str)]
    if bad:
        raise MetadataDecodeError(
            f"meta.{name} entries must be strings, got {bad[0]!r}",
            keys=(f"meta.{name}",),
        )
    return frozenset(value)


@dataclass(frozen=True)
class RawSlide:
    """One slide as found by the splitter, before any YAML is decoded."""

    source: str
    number: int
    line: int
    marker_width: int
    metadata_text: str
    body_text: str


@dataclass(frozen=True)
class Slide:
    """A fully resolved slide, ready for template expansion."""

    index: int
    source: str
    number: int
    line: int
    metadata: Mapping[str, Any]
    template: str
    parts: tuple[str, ...]
    notes: str

    @property
    def meta(self) -> MetaConfig:
        return self.metadata[META_KEY]

    @property
    def content(self) -> str:
        return self.metadata[self.meta.content_name]


@dataclass(frozen=True)
class Deck:
    slides: tuple[Slide, ...]
    base_meta: MetaConfig
    styles: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    template_paths: tuple[str, ...] = ()
    global_context: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    path: str | None = None


def plain_metadata(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of *metadata* with the MetaConfig turned into a plain mapping."""
    plain = dict(metadata)
    meta = plain.get(META_KEY)
    if isinstance(meta, MetaConfig):
        plain[META_KEY] = meta.to_mapping()
    return plain
