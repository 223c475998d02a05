"""
Tests for option parsing and target version detection.
"""

import json

import pytest

from runtimecheck.errors import ConfigError, VersionSpecError
from runtimecheck.options import ParsedOptions, load_config, parse_options
from runtimecheck.version_detector import (
    DEFAULT_VERSION,
    detect_target_version,
    find_manifest,
    read_engines_version,
)
from runtimecheck.version_range import parse_version


def write_manifest(directory, engines):
    (directory / "package.json").write_text(json.dumps({"name": "app", "engines": engines}))


class TestParseOptions:
    """Test validation of the option mapping."""

    def test_full_options(self, small_registry):
        options = parse_options({
            "version": ">=8.0.0",
            "ignoreModuleItems": ["fs.exists"],
            "ignoreGlobalItems": ["new Buffer()", "Buffer()"],
            "allowExperimental": True,
        }, registry=small_registry)
        assert str(options.target_range) == ">=8.0.0"
        assert options.ignored_module_names == frozenset({"fs.exists"})
        assert options.ignored_global_names == frozenset({"new Buffer()", "Buffer()"})
        assert options.allow_experimental is True

    def test_defaults(self, tmp_path):
        options = parse_options({}, project_dir=tmp_path)
        assert str(options.target_range) == DEFAULT_VERSION
        assert options.ignored_global_names == frozenset()
        assert options.allow_experimental is False

    def test_options_are_frozen(self):
        options = parse_options({"version": "12"})
        with pytest.raises(AttributeError):
            options.allow_experimental = True
        assert isinstance(options, ParsedOptions)

    def test_unknown_option(self):
        with pytest.raises(ConfigError, match="Unknown options"):
            parse_options({"versions": "12"})

    def test_bad_version(self):
        with pytest.raises(VersionSpecError):
            parse_options({"version": ">=banana"})

    def test_version_must_be_string(self):
        with pytest.raises(ConfigError):
            parse_options({"version": 12})

    def test_allow_experimental_must_be_bool(self):
        with pytest.raises(ConfigError):
            parse_options({"version": "12", "allowExperimental": "yes"})

    def test_unknown_ignore_name(self, small_registry):
        with pytest.raises(ConfigError, match="fs.readFile"):
            parse_options({"version": "12", "ignoreModuleItems": ["fs.readFile"]}, registry=small_registry)

    def test_ignore_names_are_per_namespace(self, small_registry):
        with pytest.raises(ConfigError):
            parse_options({"version": "12", "ignoreModuleItems": ["new Buffer()"]}, registry=small_registry)

    def test_undecorated_name_is_not_accepted(self, small_registry):
        with pytest.raises(ConfigError):
            parse_options({"version": "12", "ignoreGlobalItems": ["Buffer"]}, registry=small_registry)

    def test_duplicate_ignore_name(self, small_registry):
        with pytest.raises(ConfigError, match="more than once"):
            parse_options({"version": "12", "ignoreModuleItems": ["domain", "domain"]}, registry=small_registry)

    def test_ignore_items_must_be_list(self):
        with pytest.raises(ConfigError):
            parse_options({"version": "12", "ignoreModuleItems": "fs.exists"})


class TestLoadConfig:
    """Test reading option files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "runtimecheck.yaml"
        path.write_text("version: '>=10'\nignoreModuleItems:\n  - fs.exists\n")
        assert load_config(path) == {"version": ">=10", "ignoreModuleItems": ["fs.exists"]}

    def test_json(self, tmp_path):
        path = tmp_path / "runtimecheck.json"
        path.write_text('{"version": "8.5.0", "allowExperimental": true}')
        assert load_config(path) == {"version": "8.5.0", "allowExperimental": True}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "runtimecheck.yaml"
        path.write_text("")
        assert load_config(path) == {}

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "runtimecheck.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.yaml")


class TestVersionDetector:
    """Test falling back to the project's package.json."""

    def test_configured_version_wins(self, tmp_path):
        write_manifest(tmp_path, {"node": ">=14"})
        assert detect_target_version("12", tmp_path) == "12"

    def test_engines_field(self, tmp_path):
        write_manifest(tmp_path, {"node": ">=14.17.0"})
        assert detect_target_version(None, tmp_path) == ">=14.17.0"

    def test_manifest_in_parent_directory(self, tmp_path):
        write_manifest(tmp_path, {"node": "^18"})
        nested = tmp_path / "src" / "lib"
        nested.mkdir(parents=True)
        assert find_manifest(nested) == (tmp_path / "package.json").resolve()
        options = parse_options({}, project_dir=nested)
        assert options.target_range.contains(parse_version("18.4.0"))
        assert not options.target_range.contains(parse_version("19.0.0"))

    def test_manifest_without_engines(self, tmp_path):
        (tmp_path / "package.json").write_text('{"name": "app"}')
        assert detect_target_version(None, tmp_path) == DEFAULT_VERSION

    def test_unreadable_manifest(self, tmp_path):
        (tmp_path / "package.json").write_text("{not json")
        assert read_engines_version(tmp_path / "package.json") is None

    def test_no_project_dir(self):
        assert detect_target_version() == DEFAULT_VERSION
