"""YAML decoding for deck files, slide metadata and built-in resources.

All YAML goes through :func:`load_yaml` so that every document is read with
the same rules: duplicate keys are an error, and ``16:9`` stays a string
instead of becoming a base-60 integer.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import yaml

from .errors import MetadataDecodeError

logger = logging.getLogger(__name__)

_INT_TAG = "tag:yaml.org,2002:int"
_MERGE_TAG = "tag:yaml.org,2002:merge"

# YAML 1.1 integers minus the sexagesimal form (``16:9`` -> 969).
_INT_RE = re.compile(
    r"""^(?:[-+]?0b[0-1_]+
    |[-+]?0[0-7_]+
    |[-+]?(?:0|[1-9][0-9_]*)
    |[-+]?0x[0-9a-fA-F_]+)$""",
    re.X,
)


class HarveyLoader(yaml.SafeLoader):
    """SafeLoader which refuses duplicate mapping keys."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen: set[str] = set()
            for key_node, _ in node.value:
                if key_node.tag == _MERGE_TAG or not isinstance(key_node, yaml.ScalarNode):
                    continue
                if key_node.value in seen:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key_node.value!r}",
                        key_node.start_mark,
                    )
                seen.add(key_node.value)
        return super().construct_mapping(node, deep=deep)


HarveyLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _INT_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
HarveyLoader.add_implicit_resolver(_INT_TAG, _INT_RE, list("-+0123456789"))


def load_yaml(text: str, *, name: str = "<string>") -> Any:
    """Decode one YAML document; raises :class:`yaml.YAMLError` on bad input."""
    logger.debug("Decoding YAML from %s (%d chars)", name, len(text))
    return yaml.load(text, Loader=HarveyLoader)


def load_mapping(text: str, *, name: str = "<string>") -> dict[str, Any] | None:
    """Decode a YAML document which must be a mapping (or empty).

    Returns None for an empty document and raises :class:`TypeError` when the
    document is something other than a mapping.
    """
    data = load_yaml(text, name=name)
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a mapping, got {type(data).__name__}")
    return dict(data)


def load_slide_metadata(
    text: str, *, source: str, slide: int, line: int
) -> dict[str, Any]:
    """Decode the metadata block of one slide into a mapping.

    *line* is the line of the slide's marker; YAML error positions are
    translated to lines of the slide file.
    """
    try:
        data = load_mapping(text, name=f"{source} slide {slide}")
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        where = line + 1 + mark.line if mark is not None else line
        problem = getattr(exc, "problem", None) or str(exc)
        raise MetadataDecodeError(
            f"bad YAML in slide metadata: {problem}",
            source=source,
            slide=slide,
            line=where,
        ) from exc
    except TypeError as exc:
        raise MetadataDecodeError(
            f"slide metadata must be a mapping: {exc}",
            source=source,
            slide=slide,
            line=line,
        ) from exc
    if data is None:
        return {}
    bad_keys = [key for key in data if not isinstance(key, str)]
    if bad_keys:
        raise MetadataDecodeError(
            f"metadata keys must be strings, got {bad_keys[0]!r}",
            source=source,
            slide=slide,
            line=line,
        )
    return data
