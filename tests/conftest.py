"""Shared fixtures for harvey tests."""

from __future__ import annotations

import textwrap

import pytest


# ---------------------------------------------------------------------------
# Minimal decks (strings) used across multiple test modules
# ---------------------------------------------------------------------------

SINGLE_SLIDE = "---\ntemplate: title-page\n\n# Hi\n\n???\n\nNotes.\n"

THREE_SLIDES = textwrap.dedent("""\
    ---
    title: Opening
    meta:
      inherit: [meta, template, footer]
    footer: ACME

    # Welcome

    ---
    title: Middle

    ## Point one

    ***

    ## Point two

    ???

    Say the points slowly.

    ----
    title: Closing
    template: harvey-plain

    # blank lines do not end this block
    ...

    # Thanks
    """)

DECK_FILE = textwrap.dedent("""\
    slides:
      - deck.md
    """)


@pytest.fixture
def write_deck(tmp_path):
    """Return a helper that writes a deck file plus slide files and returns its path."""

    def _write(deck_yaml: str = DECK_FILE, **slide_files: str):
        for name, text in slide_files.items():
            (tmp_path / f"{name}.md").write_text(text)
        deck = tmp_path / "deck.yaml"
        deck.write_text(deck_yaml)
        return deck

    return _write


@pytest.fixture
def tmp_deck(write_deck):
    """A deck file whose single slide file holds THREE_SLIDES."""
    return write_deck(deck=THREE_SLIDES)
