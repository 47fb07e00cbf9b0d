"""Tests for harvey.models — ratios and the meta configuration."""

from __future__ import annotations

import pytest

from harvey.errors import InvalidRatio, MetadataDecodeError
from harvey.models import MetaConfig, Ratio, plain_metadata


class TestRatio:
    def test_parse(self):
        assert Ratio.parse("4:3") == Ratio(4, 3)

    def test_str(self):
        assert str(Ratio(16, 9)) == "16:9"

    @pytest.mark.parametrize("value", ["16x9", "16:", ":9", "a:b", "16:9:1", 969, None])
    def test_malformed(self, value):
        with pytest.raises(InvalidRatio):
            Ratio.parse(value)

    @pytest.mark.parametrize("value", ["0:9", "16:0"])
    def test_non_positive(self, value):
        with pytest.raises(InvalidRatio, match="positive"):
            Ratio.parse(value)


class TestMetaConfigDefaults:
    def test_builtin_values(self):
        meta = MetaConfig()
        assert meta.content_name == "harvey-content"
        assert meta.content_list == "harvey-contents"
        assert meta.default_template == "harvey-slide"
        assert meta.inherit == {"meta", "template"}
        assert meta.require == frozenset()
        assert meta.deny == frozenset()
        assert meta.ratio == Ratio(16, 9)

    def test_to_mapping(self):
        assert MetaConfig().to_mapping() == {
            "content-name": "harvey-content",
            "content-list": "harvey-contents",
            "default-template": "harvey-slide",
            "inherit": ["meta", "template"],
            "require": [],
            "deny": [],
            "ratio": "16:9",
        }


class TestMetaConfigMerge:
    def test_present_keys_replace(self):
        meta = MetaConfig().merged({"content-name": "body", "ratio": "4:3"})
        assert meta.content_name == "body"
        assert meta.ratio == Ratio(4, 3)
        assert meta.content_list == "harvey-contents"

    def test_sets_replaced_not_unioned(self):
        meta = MetaConfig().merged({"inherit": ["meta", "footer"]})
        assert meta.inherit == {"meta", "footer"}

    def test_default_sentinel_extends_current_set(self):
        meta = MetaConfig().merged({"inherit": ["default", "footer"]})
        assert meta.inherit == {"meta", "template", "footer"}

    def test_merged_from_mapping_roundtrip(self):
        meta = MetaConfig().merged({"require": ["title"], "deny": ["draft"]})
        assert MetaConfig().merged(meta.to_mapping()) == meta

    def test_merged_with_metaconfig(self):
        other = MetaConfig(content_name="x")
        assert MetaConfig().merged(other) is other

    def test_unknown_key_ignored(self, caplog):
        meta = MetaConfig().merged({"colour": "blue"})
        assert meta == MetaConfig()
        assert "colour" in caplog.text

    @pytest.mark.parametrize("overrides", [
        {"content-name": 3},
        {"inherit": "meta"},
        {"require": [1]},
        {"deny": {"a": 1}},
    ])
    def test_bad_types(self, overrides):
        with pytest.raises(MetadataDecodeError):
            MetaConfig().merged(overrides)

    def test_not_a_mapping(self):
        with pytest.raises(MetadataDecodeError, match="mapping"):
            MetaConfig().merged(["inherit"])

    def test_bad_ratio(self):
        with pytest.raises(InvalidRatio):
            MetaConfig().merged({"ratio": "wide"})

    @pytest.mark.parametrize("overrides", [
        {"content-name": "meta"},
        {"content-name": "template"},
        {"content-list": "meta"},
        {"content-list": "template"},
    ])
    def test_reserved_content_names(self, overrides):
        with pytest.raises(MetadataDecodeError, match="reserved"):
            MetaConfig().merged(overrides)

    def test_content_names_must_differ(self):
        with pytest.raises(MetadataDecodeError, match="must differ") as info:
            MetaConfig().merged({"content-list": "harvey-content"})
        assert info.value.keys == ("meta.content-name", "meta.content-list")

    def test_content_names_swapped_together(self):
        meta = MetaConfig().merged({"content-name": "harvey-contents", "content-list": "harvey-content"})
        assert meta.content_name == "harvey-contents"
        assert meta.content_list == "harvey-content"

    def test_constructor_checks_content_names(self):
        with pytest.raises(MetadataDecodeError):
            MetaConfig(content_name="template")


class TestPlainMetadata:
    def test_meta_becomes_mapping(self):
        plain = plain_metadata({"meta": MetaConfig(), "title": "x"})
        assert plain["meta"]["content-name"] == "harvey-content"
        assert plain["title"] == "x"

    def test_original_untouched(self):
        metadata = {"meta": MetaConfig()}
        plain_metadata(metadata)
        assert isinstance(metadata["meta"], MetaConfig)
