"""Resource lookup: template-path directories first, then built-in assets.

Template paths are searched last-to-first, so a directory listed later in a
deck's ``template-path`` overrides one listed earlier.  Anything not found
on disk is looked up among the assets shipped inside the package.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from importlib import resources
from pathlib import Path
from typing import Any

from .yaml_source import load_mapping

logger = logging.getLogger(__name__)

BUILTIN_PREFIX = "builtin:"
DEFAULTS_RESOURCE = "defaults.yaml"
TEMPLATE_SUFFIX = ".html"


def _builtin(name: str):
    return resources.files(__package__) / "assets" / name


def find_resource(name: str, search_paths: Iterable[str | Path] = ()) -> str | None:
    """Locate *name*, returning a filesystem path or ``builtin:<name>``."""
    for directory in reversed(list(search_paths)):
        candidate = Path(directory) / name
        if candidate.is_file():
            logger.debug("Resource %s found at %s", name, candidate)
            return str(candidate)
    if _builtin(name).is_file():
        logger.debug("Resource %s found among built-in assets", name)
        return BUILTIN_PREFIX + name
    logger.debug("Resource %s not found", name)
    return None


def read_resource(name: str, search_paths: Iterable[str | Path] = ()) -> str:
    """Read the text of resource *name*; raises FileNotFoundError if absent."""
    found = find_resource(name, search_paths)
    if found is None:
        raise FileNotFoundError(f"resource not found: {name}")
    if found.startswith(BUILTIN_PREFIX):
        return _builtin(name).read_text(encoding="utf-8")
    with open(found, encoding="utf-8") as f:
        return f.read()


def find_template(template: str, search_paths: Iterable[str | Path] = ()) -> str | None:
    """Locate the file for a template name such as ``harvey-slide``."""
    return find_resource(template + TEMPLATE_SUFFIX, search_paths)


def builtin_defaults() -> dict[str, Any]:
    """The built-in deck defaults, decoded from ``defaults.yaml``."""
    text = read_resource(DEFAULTS_RESOURCE)
    return load_mapping(text, name=BUILTIN_PREFIX + DEFAULTS_RESOURCE) or {}
