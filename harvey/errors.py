"""Errors raised while loading and resolving a deck.

Every error knows where it came from (file, slide number, line) and which
metadata key(s) were involved, so the message points straight at the source.
"""

from __future__ import annotations


class HarveyError(ValueError):
    """Base class for every fatal deck problem."""

    def __init__(
        self,
        reason: str,
        *,
        source: str | None = None,
        slide: int | None = None,
        line: int | None = None,
        keys: tuple[str, ...] = (),
    ) -> None:
        self.reason = reason
        self.source = source
        self.slide = slide
        self.line = line
        self.keys = tuple(keys)
        super().__init__(str(self))

    def location(self) -> str:
        parts: list[str] = []
        if self.source:
            parts.append(str(self.source))
        if self.slide is not None:
            parts.append(f"slide {self.slide}")
        if self.line is not None:
            parts.append(f"line {self.line}")
        return ", ".join(parts)

    def __str__(self) -> str:
        where = self.location()
        return f"{where}: {self.reason}" if where else self.reason


class MalformedDeck(HarveyError):
    """The slide file does not follow the marker/terminator grammar."""


class MetadataDecodeError(HarveyError):
    """Slide metadata is not valid YAML, not a mapping, or has bad types."""


class InvariantViolation(HarveyError):
    """``meta`` was dropped from ``inherit`` or added to ``deny``."""


class MissingRequiredKey(HarveyError):
    pass


class ForbiddenKeyPresent(HarveyError):
    pass


class InvalidRatio(HarveyError):
    """A ratio is not ``W:H`` with two positive integers."""


class DeckFileError(HarveyError):
    """The deck file is not a usable mapping (e.g. ``slides`` is missing)."""
