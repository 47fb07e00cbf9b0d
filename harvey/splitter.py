"""Split a slide file into raw slide records.

A slide file is a run of slides, each opened by a marker line of three or
more dashes.  The marker width decides how the slide's YAML metadata ends:

* ``---`` (exactly three dashes): metadata ends at the first blank line;
* ``----`` or wider: metadata ends at a line which is exactly ``...``.

Everything after the terminator, up to the next marker line, is the body.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import MalformedDeck
from .models import LONG_METADATA_TERMINATOR, MARKER_RE, RawSlide

logger = logging.getLogger(__name__)


def marker_width(line: str) -> int | None:
    """Width of *line* if it is a marker line, else None."""
    return len(line) if MARKER_RE.match(line) else None


def split_lines(text: str) -> list[str]:
    """Split *text* on ``\\n`` and ``\\r\\n`` only, without line endings."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _is_terminator(line: str, width: int) -> bool:
    if width == 3:
        return line.strip() == ""
    return line == LONG_METADATA_TERMINATOR


def split_slides(text: str, source: str = "<string>") -> list[RawSlide]:
    """Split the text of one slide file into :class:`RawSlide` records.

    Raises :class:`MalformedDeck` if the text does not open with a marker
    line, if a marker appears inside a metadata block, or if the input ends
    before a metadata block is terminated.
    """
    lines = split_lines(text)
    if not lines or marker_width(lines[0]) is None:
        raise MalformedDeck(
            "deck must open with a slide marker", source=source, line=1
        )

    slides: list[RawSlide] = []
    # Per-slide state: marker line number and width, collected text, and
    # whether we are still inside the metadata block.
    start = 0
    width = 0
    meta_lines: list[str] = []
    body_lines: list[str] = []
    in_metadata = False

    def _finish() -> None:
        slide = RawSlide(
            source=source,
            number=len(slides) + 1,
            line=start,
            marker_width=width,
            metadata_text="".join(meta_lines),
            body_text="".join(body_lines),
        )
        logger.debug(
            "  Slide %d at line %d: marker=%d, metadata=%d chars, body=%d chars",
            slide.number, slide.line, slide.marker_width,
            len(slide.metadata_text), len(slide.body_text),
        )
        slides.append(slide)

    for lineno, line in enumerate(lines, start=1):
        found = marker_width(line)

        if in_metadata:
            if _is_terminator(line, width):
                in_metadata = False
            elif found is not None:
                raise MalformedDeck(
                    f"slide marker at line {lineno} inside metadata opened by "
                    f"a {width}-dash marker (expected "
                    f"{'a blank line' if width == 3 else repr(LONG_METADATA_TERMINATOR)})",
                    source=source,
                    slide=len(slides) + 1,
                    line=start,
                )
            else:
                meta_lines.append(line + "\n")
            continue

        if found is not None:
            if lineno > 1:
                _finish()
            start, width = lineno, found
            meta_lines, body_lines = [], []
            in_metadata = True
            continue

        body_lines.append(line + "\n")

    if in_metadata:
        raise MalformedDeck(
            "unterminated metadata block",
            source=source,
            slide=len(slides) + 1,
            line=start,
        )
    _finish()

    logger.debug("Split %s into %d slide(s)", source, len(slides))
    return slides


def load_slide_file(path: str | Path, source: str | None = None) -> list[RawSlide]:
    """Read a slide file from disk and split it into raw slides."""
    with open(path, encoding="utf-8") as f:
        raw = f.read()
    return split_slides(raw, source=source or str(path))
