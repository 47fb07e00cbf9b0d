"""Tests for harvey.sections — content fragments and speaker notes."""

from __future__ import annotations

import pytest

from harvey.sections import join_sections, section_body


class TestNotes:
    def test_notes_split_on_first_marker(self):
        sections = section_body("\n# Hi\n\n???\n\nNotes.\n")
        assert sections.content == "# Hi"
        assert sections.notes == "Notes."

    def test_no_notes(self):
        sections = section_body("# Hi\n")
        assert sections.notes == ""
        assert sections.raw_notes is None

    def test_second_marker_is_notes_text(self):
        sections = section_body("A\n???\nB\n???\nC\n")
        assert sections.notes == "B\n???\nC"

    def test_fragment_separator_in_notes_is_text(self):
        sections = section_body("A\n???\nB\n***\nC\n")
        assert sections.parts == ("A",)
        assert sections.notes == "B\n***\nC"

    def test_marker_must_be_exact(self):
        sections = section_body("A\n??? \n ???\nB\n")
        assert sections.notes == ""
        assert "???" in sections.content


class TestFragments:
    def test_single_fragment_is_trimmed_content(self):
        sections = section_body("\n\n# Title\n\nText.  \n\n")
        assert sections.parts == ("# Title\n\nText.",)
        assert sections.content == "# Title\n\nText."

    def test_fragments_split_on_separator(self):
        sections = section_body("## One\n\n***\n\n## Two\n***\n## Three\n")
        assert sections.parts == ("## One", "## Two", "## Three")

    def test_content_joins_fragments_with_blank_line(self):
        sections = section_body("## One\n***\n## Two\n")
        assert sections.content == "## One\n\n## Two"

    def test_indentation_of_first_line_kept(self):
        sections = section_body("\n    code block\n")
        assert sections.parts == ("    code block",)

    def test_empty_body(self):
        sections = section_body("")
        assert sections.parts == ("",)
        assert sections.content == ""


class TestRoundTrip:
    @pytest.mark.parametrize("body", [
        "",
        "# Hi\n",
        "\n# Hi\n\n???\n\nNotes.\n",
        "A\n\n***\n\nB\n***\nC\n???\nnotes\n***\nmore notes\n",
        "***\n***\n???\n",
    ])
    def test_join_reproduces_body(self, body):
        assert join_sections(section_body(body)) == body

    @pytest.mark.parametrize("separator", ["\x0c", "\x85", "\u2028"])
    def test_only_newline_separates_markers(self, separator):
        body = f"A{separator}***\nB{separator}???\nC\n"
        sections = section_body(body)
        assert sections.parts == (f"A{separator}***\nB{separator}???\nC",)
        assert sections.raw_notes is None
        assert join_sections(sections) == body
