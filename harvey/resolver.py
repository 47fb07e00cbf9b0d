"""Metadata resolver — turns raw slides into resolved :class:`Slide` objects.

Resolution is a left fold over the slides of a deck.  The running
:class:`ResolverState` holds the current ``meta`` configuration and the
values carried forward from the previous slide; each call to
:func:`resolve_slide` consumes one raw slide and returns the resolved slide
together with the state for the next one.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .defaults import has_sentinel, merge_defaults
from .errors import (
    ForbiddenKeyPresent,
    HarveyError,
    InvariantViolation,
    MetadataDecodeError,
    MissingRequiredKey,
)
from .models import META_KEY, TEMPLATE_KEY, MetaConfig, RawSlide, Slide
from .sections import SlideSections, section_body
from .yaml_source import load_slide_metadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolverState:
    meta: MetaConfig
    carry: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


def overlay(carry: Mapping[str, Any], own: Mapping[str, Any]) -> dict[str, Any]:
    """Lay a slide's own metadata over the carried values.

    A mapping or list which carries the default sentinel is merged with the
    carried value of the same key instead of replacing it.
    """
    mapping = copy.deepcopy(dict(carry))
    for key, value in own.items():
        if key != META_KEY and has_sentinel(value):
            try:
                value = merge_defaults(value, mapping.get(key))
            except TypeError as exc:
                raise MetadataDecodeError(str(exc), keys=(key,)) from exc
        mapping[key] = value
    return mapping


def check_meta(meta: MetaConfig) -> None:
    if META_KEY not in meta.inherit:
        raise InvariantViolation(
            "meta.inherit must always contain 'meta'", keys=("meta.inherit",)
        )
    if META_KEY in meta.deny:
        raise InvariantViolation(
            "meta.deny must never contain 'meta'", keys=("meta.deny",)
        )


def check_keys(meta: MetaConfig, mapping: Mapping[str, Any]) -> None:
    """Enforce ``meta.require`` and ``meta.deny`` on the overlaid mapping."""
    missing = sorted(key for key in meta.require if key not in mapping)
    if missing:
        raise MissingRequiredKey(
            f"missing required key(s): {', '.join(missing)}", keys=tuple(missing)
        )
    denied = sorted(key for key in meta.deny if key in mapping)
    if denied:
        raise ForbiddenKeyPresent(
            f"denied key(s) present: {', '.join(denied)}", keys=tuple(denied)
        )


def resolve_slide(
    state: ResolverState,
    own: Mapping[str, Any],
    sections: SlideSections,
    *,
    index: int = 1,
    source: str = "<string>",
    number: int = 1,
    line: int = 1,
) -> tuple[Slide, ResolverState]:
    """Resolve one slide from its decoded metadata and sectioned body.

    Returns the resolved slide and the state for the following slide.
    Every :class:`HarveyError` raised here is stamped with the slide's
    location before it propagates.
    """
    try:
        mapping = overlay(state.carry, own)

        meta = state.meta
        if META_KEY in mapping:
            meta = meta.merged(mapping[META_KEY])
        check_meta(meta)
        check_keys(meta, mapping)

        template = mapping.get(TEMPLATE_KEY, meta.default_template)
        if not isinstance(template, str):
            raise MetadataDecodeError(
                f"template must be a string, got {template!r}", keys=(TEMPLATE_KEY,)
            )
    except HarveyError as exc:
        exc.source = exc.source or source
        exc.slide = exc.slide if exc.slide is not None else number
        exc.line = exc.line if exc.line is not None else line
        raise

    for generated in (meta.content_name, meta.content_list):
        if generated in own:
            logger.debug(
                "%s slide %d: generated key %r replaces the value from metadata",
                source, number, generated,
            )
    parts = sections.parts
    mapping[META_KEY] = meta
    mapping[meta.content_name] = sections.content
    mapping[meta.content_list] = list(parts)

    slide = Slide(
        index=index,
        source=source,
        number=number,
        line=line,
        metadata=MappingProxyType(mapping),
        template=template,
        parts=parts,
        notes=sections.notes,
    )
    carry = copy.deepcopy(
        {key: value for key, value in mapping.items() if key in meta.inherit}
    )
    logger.debug(
        "%s slide %d: template=%s, %d key(s), carrying %s",
        source, number, template, len(mapping), sorted(carry),
    )
    return slide, ResolverState(meta=meta, carry=MappingProxyType(carry))


def resolve_raw_slide(
    state: ResolverState, raw: RawSlide, *, index: int = 1
) -> tuple[Slide, ResolverState]:
    """Decode, section and resolve one :class:`RawSlide`."""
    own = load_slide_metadata(
        raw.metadata_text, source=raw.source, slide=raw.number, line=raw.line
    )
    return resolve_slide(
        state,
        own,
        section_body(raw.body_text),
        index=index,
        source=raw.source,
        number=raw.number,
        line=raw.line,
    )


def resolve_slides(
    raw_slides: Iterable[RawSlide],
    base_meta: MetaConfig,
    *,
    on_error: Callable[[HarveyError], None] | None = None,
) -> list[Slide]:
    """Resolve *raw_slides* in order, threading inheritance between them.

    The first error is raised unless *on_error* is given; in that case the
    error is handed to it, the failing slide is dropped, and resolution
    continues with the state from before that slide.
    """
    state = ResolverState(meta=base_meta)
    slides: list[Slide] = []
    for raw in raw_slides:
        try:
            slide, state = resolve_raw_slide(state, raw, index=len(slides) + 1)
        except HarveyError as exc:
            if on_error is None:
                raise
            logger.debug("Skipping %s slide %d: %s", raw.source, raw.number, exc)
            on_error(exc)
            continue
        slides.append(slide)
    return slides
