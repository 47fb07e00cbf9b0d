"""Splice built-in defaults into user configuration.

Wherever a deck (or a slide) supplies a mapping or a list, the author can ask
for the built-in value to be kept and extended rather than replaced:

* a mapping with a truthy ``default`` key gets the built-in mapping
  underneath it, user entries winning;
* a list with a ``"default"`` element gets the built-in list spliced in at
  the position of that element.

Anything without the sentinel is returned as it is.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

DEFAULT_SENTINEL = "default"


def has_sentinel(value: Any) -> bool:
    """True if *value* asks for built-in defaults to be merged in."""
    if isinstance(value, Mapping):
        return bool(value.get(DEFAULT_SENTINEL))
    if _is_list(value):
        return DEFAULT_SENTINEL in value
    return False


def merge_defaults(user: Any, builtin: Any) -> Any:
    """Merge *builtin* into *user* where *user* carries the default sentinel.

    Only the first ``"default"`` element of a list is expanded; any later
    ones are kept as literal elements.  Strings, numbers, booleans and None
    always come back unchanged.
    """
    if isinstance(user, Mapping):
        if not user.get(DEFAULT_SENTINEL):
            return user
        base = _as_mapping(builtin)
        merged = dict(base)
        merged.update((k, v) for k, v in user.items() if k != DEFAULT_SENTINEL)
        return merged

    if _is_list(user):
        if DEFAULT_SENTINEL not in user:
            return user
        base = _as_list(builtin)
        at = list(user).index(DEFAULT_SENTINEL)
        return [*user[:at], *base, *user[at + 1:]]

    return user


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _as_mapping(builtin: Any) -> Mapping[str, Any]:
    if builtin is None:
        return {}
    if not isinstance(builtin, Mapping):
        raise TypeError(
            f"cannot merge a mapping onto a default of type {type(builtin).__name__}"
        )
    return builtin


def _as_list(builtin: Any) -> list[Any]:
    if builtin is None:
        return []
    if not _is_list(builtin):
        raise TypeError(
            f"cannot splice a default of type {type(builtin).__name__} into a list"
        )
    return list(builtin)
