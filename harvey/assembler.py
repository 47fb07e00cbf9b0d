"""Assemble a deck: load the deck file, split and resolve its slide files."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .deckfile import DeckFile, load_deck_file
from .errors import DeckFileError, HarveyError, MalformedDeck
from .models import Deck, RawSlide, Slide, plain_metadata
from .resolver import resolve_slides
from .resources import find_template
from .splitter import load_slide_file

logger = logging.getLogger(__name__)


def global_context(deck_file: DeckFile) -> dict[str, Any]:
    """The values injected into every slide's render context."""
    context = dict(deck_file.context)
    context["markdown"] = dict(deck_file.markdown)
    context["tree-sitter-highlight"] = dict(deck_file.tree_sitter_highlight)
    return context


def _template_dirs(deck_file: DeckFile) -> tuple[str, ...]:
    return tuple(str(deck_file.base_dir / p) for p in deck_file.template_path)


def load_raw_slides(deck_file: DeckFile) -> list[RawSlide]:
    """Split every slide file named by *deck_file*, in deck order."""
    raw_slides: list[RawSlide] = []
    for name in deck_file.slides:
        raw_slides.extend(_load_one(deck_file, name))
    return raw_slides


def _load_one(deck_file: DeckFile, name: str) -> list[RawSlide]:
    path = deck_file.base_dir / name
    try:
        raws = load_slide_file(path, source=name)
    except OSError as exc:
        raise DeckFileError(
            f"cannot read slide file {name}: {exc.strerror or exc}",
            source=deck_file.path,
            keys=("slides",),
        ) from exc
    except UnicodeDecodeError as exc:
        raise MalformedDeck(
            f"slide file is not valid UTF-8: {exc.reason} at byte {exc.start}",
            source=name,
        ) from exc
    logger.debug("Loaded %d raw slide(s) from %s", len(raws), path)
    return raws


def assemble(deck_file: DeckFile, slides: list[Slide]) -> Deck:
    return Deck(
        slides=tuple(slides),
        base_meta=deck_file.meta,
        styles=deck_file.styles,
        scripts=deck_file.scripts,
        template_paths=_template_dirs(deck_file),
        global_context=MappingProxyType(global_context(deck_file)),
        path=deck_file.path,
    )


def build_deck(path: str | Path, defaults: Mapping[str, Any] | None = None) -> Deck:
    """Build the fully resolved deck described by the deck file at *path*.

    The first error anywhere aborts the build.
    """
    deck_file = load_deck_file(path, defaults=defaults)
    raw_slides = load_raw_slides(deck_file)
    slides = resolve_slides(raw_slides, deck_file.meta)
    logger.info("Built deck %s: %d slide(s)", path, len(slides))
    return assemble(deck_file, slides)


def lint_deck(path: str | Path, defaults: Mapping[str, Any] | None = None) -> list[HarveyError]:
    """Check a deck, collecting every error instead of stopping at the first.

    A slide file which cannot be split contributes its error and no slides;
    a slide which fails to resolve is skipped and the following slides are
    resolved against the state from before it.
    """
    errors: list[HarveyError] = []
    try:
        deck_file = load_deck_file(path, defaults=defaults)
    except HarveyError as exc:
        return [exc]

    raw_slides: list[RawSlide] = []
    for name in deck_file.slides:
        try:
            raw_slides.extend(_load_one(deck_file, name))
        except HarveyError as exc:
            errors.append(exc)
    resolve_slides(raw_slides, deck_file.meta, on_error=errors.append)
    logger.info("Linted deck %s: %d problem(s)", path, len(errors))
    return errors


def render_context(deck: Deck, slide: Slide) -> dict[str, Any]:
    """The flat context a template engine expands *slide*'s template with."""
    context = dict(deck.global_context)
    context.update(plain_metadata(slide.metadata))
    context["notes"] = slide.notes
    return context


def template_variables(context: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of *context* with dashes in top-level keys turned into underscores.

    Engines which only accept identifiers as variable names (the built-in
    templates among them) expand against this view.  A key which already
    exists in underscore form keeps its own value.
    """
    variables = dict(context)
    for key, value in context.items():
        variables.setdefault(key.replace("-", "_"), value)
    return variables


def render_jobs(deck: Deck) -> list[dict[str, Any]]:
    """One entry per slide: which template to expand, and with what."""
    jobs = []
    for slide in deck.slides:
        template_file = find_template(slide.template, deck.template_paths)
        if template_file is None:
            logger.warning(
                "%s slide %d: template %r not found", slide.source, slide.number, slide.template
            )
        jobs.append({
            "index": slide.index,
            "source": slide.source,
            "slide": slide.number,
            "template": slide.template,
            "template-file": template_file,
            "context": render_context(deck, slide),
        })
    return jobs


def extract_metadata(deck: Deck) -> list[dict[str, Any]]:
    """Each slide's resolved metadata, keyed by source file and slide number."""
    return [
        {
            "index": slide.index,
            "source": slide.source,
            "slide": slide.number,
            "line": slide.line,
            "metadata": plain_metadata(slide.metadata),
        }
        for slide in deck.slides
    ]
