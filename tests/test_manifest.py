"""
Tests for manifest resolution — includes, overrides, ordering, shape errors.
"""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from dynamic_plugins.core.config.manifest import load_manifest, resolve, resolve_plugins
from dynamic_plugins.core.errors import ManifestError


def _write(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content))
    return path


@pytest.fixture
def included_yaml(tmp_path: Path) -> Path:
    return _write(tmp_path / "dynamic-plugins.default.yaml", """\
        plugins:
          - package: "@acme/plugin-a@1.0.0"
            disabled: false
            pluginConfig:
              a: 1
          - package: "@acme/plugin-b@2.0.0"
            disabled: true
            integrity: sha512-bbbb
    """)


class TestLoadManifest:
    """Tests for load_manifest()."""

    def test_missing_file_returns_none(self, tmp_path: Path):
        assert load_manifest(tmp_path / "dynamic-plugins.yaml") is None

    def test_empty_file_returns_none(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "")
        assert load_manifest(path) is None

    def test_blank_file_returns_none(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "   \n\n")
        assert load_manifest(path) is None

    def test_non_mapping_raises(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "- a\n- b\n")
        with pytest.raises(ManifestError, match="must be a YAML object"):
            load_manifest(path)

    def test_invalid_yaml_raises(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", ":: invalid: yaml: [")
        with pytest.raises(ManifestError, match="Invalid YAML"):
            load_manifest(path)

    def test_resolve_missing_file_is_empty(self, tmp_path: Path):
        assert resolve(tmp_path / "nope.yaml") == {}


class TestResolvePlugins:
    """Tests for resolve_plugins() — includes and overrides."""

    def test_root_plugins_only(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", """\
            plugins:
              - package: ./local-plugin
              - package: "@acme/remote@1.0.0"
                integrity: sha256-abc=
        """)
        plugins = resolve(path)
        assert list(plugins) == ["./local-plugin", "@acme/remote@1.0.0"]
        assert plugins["./local-plugin"].is_local
        assert plugins["./local-plugin"].disabled is False
        assert plugins["@acme/remote@1.0.0"].integrity == "sha256-abc="

    def test_includes_come_first(self, tmp_path: Path, included_yaml: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", f"""\
            includes:
              - {included_yaml.name}
            plugins:
              - package: "@acme/plugin-c@1.0.0"
        """)
        plugins = resolve(path)
        assert list(plugins) == [
            "@acme/plugin-a@1.0.0",
            "@acme/plugin-b@2.0.0",
            "@acme/plugin-c@1.0.0",
        ]

    def test_field_level_override(self, tmp_path: Path, included_yaml: Path):
        """Root entry adds integrity; fields it does not set are kept."""
        path = _write(tmp_path / "dynamic-plugins.yaml", f"""\
            includes:
              - {included_yaml.name}
            plugins:
              - package: "@acme/plugin-a@1.0.0"
                integrity: sha256-X
        """)
        plugin = resolve(path)["@acme/plugin-a@1.0.0"]
        assert plugin.disabled is False
        assert plugin.plugin_config == {"a": 1}
        assert plugin.integrity == "sha256-X"

    def test_override_replaces_fields(self, tmp_path: Path, included_yaml: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", f"""\
            includes:
              - {included_yaml.name}
            plugins:
              - package: "@acme/plugin-b@2.0.0"
                disabled: false
                pluginConfig:
                  b: 2
        """)
        plugin = resolve(path)["@acme/plugin-b@2.0.0"]
        assert plugin.disabled is False
        assert plugin.plugin_config == {"b": 2}
        assert plugin.integrity == "sha512-bbbb"

    def test_override_keeps_include_position(self, tmp_path: Path, included_yaml: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", f"""\
            includes:
              - {included_yaml.name}
            plugins:
              - package: "@acme/plugin-new@1.0.0"
              - package: "@acme/plugin-a@1.0.0"
                disabled: true
        """)
        assert list(resolve(path)) == [
            "@acme/plugin-a@1.0.0",
            "@acme/plugin-b@2.0.0",
            "@acme/plugin-new@1.0.0",
        ]

    def test_later_include_replaces_wholesale(self, tmp_path: Path, included_yaml: Path):
        second = _write(tmp_path / "second.yaml", """\
            plugins:
              - package: "@acme/plugin-a@1.0.0"
                integrity: sha256-second
        """)
        path = _write(tmp_path / "dynamic-plugins.yaml", f"""\
            includes:
              - {included_yaml.name}
              - {second.name}
        """)
        plugin = resolve(path)["@acme/plugin-a@1.0.0"]
        assert plugin.integrity == "sha256-second"
        assert plugin.plugin_config is None

    def test_extra_keys_survive_override(self, tmp_path: Path):
        include = _write(tmp_path / "inc.yaml", """\
            plugins:
              - package: pkg
                notes: keep me
        """)
        path = _write(tmp_path / "dynamic-plugins.yaml", f"""\
            includes: [{include.name}]
            plugins:
              - package: pkg
                disabled: true
        """)
        data = resolve(path)["pkg"].to_dict()
        assert data == {"package": "pkg", "disabled": True, "notes": "keep me"}

    def test_resolved_definitions_are_frozen(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "plugins:\n  - package: pkg\n")
        plugin = resolve(path)["pkg"]
        with pytest.raises(ValidationError):
            plugin.disabled = True

    def test_manifest_without_plugins_is_empty(self, tmp_path: Path):
        assert resolve_plugins({"includes": []}, tmp_path / "dynamic-plugins.yaml") == {}

    @pytest.mark.parametrize("content", ["includes: []\nplugins:\n", "includes:\nplugins: []\n"])
    def test_null_root_keys_are_empty(self, tmp_path: Path, content: str):
        path = _write(tmp_path / "dynamic-plugins.yaml", content)
        assert resolve(path) == {}

    def test_null_includes_keep_root_plugins(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "includes:\nplugins:\n  - package: pkg\n")
        assert list(resolve(path)) == ["pkg"]


class TestManifestErrors:
    """Shape errors are ManifestErrors."""

    def test_missing_include(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "includes:\n  - missing.yaml\n")
        with pytest.raises(ManifestError, match="does not exist"):
            resolve(path)

    def test_includes_not_a_list(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "includes: other.yaml\n")
        with pytest.raises(ManifestError, match="'includes' field must be a list"):
            resolve(path)

    def test_include_not_a_string(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "includes:\n  - {a: 1}\n")
        with pytest.raises(ManifestError, match="list of strings"):
            resolve(path)

    def test_include_plugins_not_a_list(self, tmp_path: Path):
        _write(tmp_path / "inc.yaml", "plugins: nope\n")
        path = _write(tmp_path / "dynamic-plugins.yaml", "includes: [inc.yaml]\n")
        with pytest.raises(ManifestError, match="'plugins' field must be a list"):
            resolve(path)

    def test_include_plugins_null(self, tmp_path: Path):
        _write(tmp_path / "inc.yaml", "plugins:\n")
        path = _write(tmp_path / "dynamic-plugins.yaml", "includes: [inc.yaml]\n")
        with pytest.raises(ManifestError, match="'plugins' field must be a list"):
            resolve(path)

    def test_include_not_a_mapping(self, tmp_path: Path):
        _write(tmp_path / "inc.yaml", "- package: a\n")
        path = _write(tmp_path / "dynamic-plugins.yaml", "includes: [inc.yaml]\n")
        with pytest.raises(ManifestError, match="must be a YAML object"):
            resolve(path)

    def test_plugins_not_a_list(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "plugins:\n  package: a\n")
        with pytest.raises(ManifestError, match="'plugins' field must be a list"):
            resolve(path)

    def test_package_not_a_string(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "plugins:\n  - package: 42\n")
        with pytest.raises(ManifestError, match="'plugins.package' field must be a string"):
            resolve(path)

    def test_package_missing(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", "plugins:\n  - disabled: true\n")
        with pytest.raises(ManifestError, match="'plugins.package'"):
            resolve(path)

    def test_include_entry_without_package(self, tmp_path: Path):
        _write(tmp_path / "inc.yaml", "plugins:\n  - integrity: sha256-abc\n")
        path = _write(tmp_path / "dynamic-plugins.yaml", "includes: [inc.yaml]\n")
        with pytest.raises(ManifestError, match="'plugins.package'"):
            resolve(path)

    def test_disabled_must_be_boolean(self, tmp_path: Path):
        path = _write(tmp_path / "dynamic-plugins.yaml", """\
            plugins:
              - package: pkg
                disabled: "yes"
        """)
        with pytest.raises(ManifestError, match="Invalid definition for plugin pkg"):
            resolve(path)
