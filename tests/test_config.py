"""
Tests for resolution options and option files.
"""

import json

import pytest

from openwith.config import ConfigManager, InvalidOptionsError, ResolveOptions


class TestResolveOptions:
    def test_defaults(self):
        opts = ResolveOptions()
        assert opts.include_alternate is True
        assert opts.max_results is None
        assert opts.max_uti_depth is None
        assert opts.include_wildcard is False
        assert opts.skip_compatibility_check is False
        assert opts.source_timeout > 0

    @pytest.mark.parametrize("value", [0, -1, 2.5, True, "3"])
    def test_bad_max_results(self, value):
        with pytest.raises(InvalidOptionsError):
            ResolveOptions(max_results=value)

    @pytest.mark.parametrize("value", [0, -2, False])
    def test_bad_max_uti_depth(self, value):
        with pytest.raises(InvalidOptionsError):
            ResolveOptions(max_uti_depth=value)

    @pytest.mark.parametrize("value", [0, -1.0, True, None])
    def test_bad_timeout(self, value):
        with pytest.raises(InvalidOptionsError):
            ResolveOptions(source_timeout=value)

    def test_invalid_options_is_value_error(self):
        with pytest.raises(ValueError):
            ResolveOptions(max_results=0)

    def test_from_dict_camel_case(self):
        opts = ResolveOptions.from_dict({
            "includeAlternate": "no",
            "maxResults": 20,
            "maxUTIDepth": 2,
            "includeWildcard": "yes",
            "skipCompatibilityCheck": 1,
            "sourceTimeout": "2.5",
        })
        assert opts == ResolveOptions(
            include_alternate=False,
            max_results=20,
            max_uti_depth=2,
            include_wildcard=True,
            skip_compatibility_check=True,
            source_timeout=2.5,
        )

    def test_round_trip_dict(self):
        opts = ResolveOptions(max_results=3, include_wildcard=True)
        assert ResolveOptions.from_dict(opts.to_dict()) == opts

    def test_bad_timeout_string(self):
        with pytest.raises(InvalidOptionsError):
            ResolveOptions.from_dict({"sourceTimeout": "soon"})

    def test_merged_ignores_none(self):
        opts = ResolveOptions(max_results=5).merged(max_results=None, include_alternate=False)
        assert opts.max_results == 5
        assert opts.include_alternate is False


class TestConfigManager:
    def test_missing_file(self, tmp_path):
        assert ConfigManager(tmp_path / "nope.json").load() == ResolveOptions()

    def test_corrupt_file_falls_back(self, tmp_path):
        path = tmp_path / "openwith.json"
        path.write_text("{not json", encoding="utf-8")
        assert ConfigManager(path).load() == ResolveOptions()

    def test_non_object_falls_back(self, tmp_path):
        path = tmp_path / "openwith.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert ConfigManager(path).load() == ResolveOptions()

    def test_loads_values(self, tmp_path):
        path = tmp_path / "openwith.json"
        path.write_text(json.dumps({"maxResults": 4, "includeAlternate": False}), encoding="utf-8")
        opts = ConfigManager(path).load()
        assert opts.max_results == 4
        assert opts.include_alternate is False

    def test_invalid_value_raises(self, tmp_path):
        path = tmp_path / "openwith.json"
        path.write_text(json.dumps({"maxResults": 0}), encoding="utf-8")
        with pytest.raises(InvalidOptionsError):
            ConfigManager(path).load()
