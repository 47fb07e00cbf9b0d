"""Split a slide body into content fragments and speaker notes."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import FRAGMENT_SEPARATOR, NOTES_SEPARATOR

# Leading blank lines, and trailing whitespace of any kind.
_LEADING_BLANK_RE = re.compile(r"\A(?:[ \t]*\n)+")

# One line with its ending; only "\n" ends a line.
_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+\Z")

# Fragments are joined back into the whole-content string with one blank line.
FRAGMENT_JOINER = "\n\n"


def _trim(text: str) -> str:
    return _LEADING_BLANK_RE.sub("", text).rstrip()


@dataclass(frozen=True)
class SlideSections:
    """Raw and trimmed views of one slide body.

    ``raw_parts`` and ``raw_notes`` hold the text exactly as written, so
    :func:`join_sections` can rebuild the body.  ``raw_notes`` is None when
    the body has no ``???`` line.
    """

    raw_parts: tuple[str, ...]
    raw_notes: str | None = None

    @property
    def parts(self) -> tuple[str, ...]:
        return tuple(_trim(part) for part in self.raw_parts)

    @property
    def content(self) -> str:
        return FRAGMENT_JOINER.join(self.parts)

    @property
    def notes(self) -> str:
        return _trim(self.raw_notes) if self.raw_notes is not None else ""


def section_body(body: str) -> SlideSections:
    """Split *body* on the first ``???`` line, then the content on ``***`` lines."""
    parts: list[list[str]] = [[]]
    notes: list[str] | None = None

    for line in _LINE_RE.findall(body):
        if notes is not None:
            notes.append(line)
            continue
        bare = line.removesuffix("\n").removesuffix("\r")
        if bare == NOTES_SEPARATOR:
            notes = []
        elif bare == FRAGMENT_SEPARATOR:
            parts.append([])
        else:
            parts[-1].append(line)

    return SlideSections(
        raw_parts=tuple("".join(part) for part in parts),
        raw_notes="".join(notes) if notes is not None else None,
    )


def join_sections(sections: SlideSections) -> str:
    """Rebuild the body text which :func:`section_body` was given."""
    body = (FRAGMENT_SEPARATOR + "\n").join(sections.raw_parts)
    if sections.raw_notes is not None:
        body += NOTES_SEPARATOR + "\n" + sections.raw_notes
    return body
