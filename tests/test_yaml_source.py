"""Tests for harvey.yaml_source — YAML decoding rules."""

from __future__ import annotations

import pytest
import yaml

from harvey.errors import MetadataDecodeError
from harvey.yaml_source import load_mapping, load_slide_metadata, load_yaml


class TestLoadYaml:
    def test_ratio_stays_a_string(self):
        assert load_yaml("ratio: 16:9") == {"ratio": "16:9"}

    def test_plain_integers(self):
        assert load_yaml("[0, 12, -3, 0x1f, 1_000]") == [0, 12, -3, 31, 1000]

    def test_floats_and_booleans(self):
        assert load_yaml("[1.5, true, null]") == [1.5, True, None]

    def test_duplicate_keys_rejected(self):
        with pytest.raises(yaml.YAMLError, match="duplicate key 'a'"):
            load_yaml("a: 1\nb: 2\na: 3\n")

    def test_nested_duplicate_keys_rejected(self):
        with pytest.raises(yaml.YAMLError, match="duplicate"):
            load_yaml("outer:\n  x: 1\n  x: 2\n")

    def test_merge_keys_allowed(self):
        data = load_yaml("base: &b {x: 1}\nother:\n  <<: *b\n  x: 2\n")
        assert data["other"] == {"x": 2}

    def test_safe_loader_rejects_python_tags(self):
        with pytest.raises(yaml.YAMLError):
            load_yaml("!!python/object/apply:os.system ['true']")


class TestLoadMapping:
    def test_empty_is_none(self):
        assert load_mapping("") is None

    def test_list_rejected(self):
        with pytest.raises(TypeError, match="mapping"):
            load_mapping("- a\n- b\n")


class TestLoadSlideMetadata:
    def test_mapping(self):
        data = load_slide_metadata("title: x\n", source="d.md", slide=1, line=1)
        assert data == {"title": "x"}

    def test_empty_is_empty_mapping(self):
        assert load_slide_metadata("", source="d.md", slide=1, line=1) == {}

    def test_scalar_rejected(self):
        with pytest.raises(MetadataDecodeError, match="must be a mapping") as info:
            load_slide_metadata("just text\n", source="d.md", slide=2, line=7)
        assert info.value.slide == 2
        assert info.value.line == 7
        assert info.value.source == "d.md"

    def test_bad_yaml_reports_file_line(self):
        with pytest.raises(MetadataDecodeError, match="bad YAML") as info:
            load_slide_metadata("a: 1\nb: [\n", source="d.md", slide=1, line=10)
        assert info.value.line > 10

    def test_duplicate_key_is_decode_error(self):
        with pytest.raises(MetadataDecodeError, match="duplicate"):
            load_slide_metadata("a: 1\na: 2\n", source="d.md", slide=1, line=1)

    def test_non_string_keys_rejected(self):
        with pytest.raises(MetadataDecodeError, match="keys must be strings"):
            load_slide_metadata("1: one\n", source="d.md", slide=1, line=1)
