"""
Manifest resolver — reads dynamic-plugins.yaml and its includes.

Resolution order is part of the contract: included plugins first (in
includes order, then file order), then new plugins from the root
manifest. Everything downstream (install order, which error is reported
first) follows this order.

Override semantics:
    - Two includes listing the same package: the later entry replaces
      the earlier one wholesale.
    - The root manifest listing an already-included package: every key
      it sets except ``package`` replaces the included value; keys it
      does not set are kept.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dynamic_plugins.core.errors import ManifestError
from dynamic_plugins.core.models.plugin import PluginDefinition

logger = logging.getLogger(__name__)

# package -> definition, in first-seen order
ResolvedPlugins = OrderedDict[str, PluginDefinition]


def _read_yaml(path: Path) -> Any:
    """Parse a YAML file, mapping every failure to ManifestError."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e

    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path}: {e}") from e


def _require_list(value: Any, field: str, source: Path) -> list[Any]:
    if not isinstance(value, list):
        raise ManifestError(f"content of the '{field}' field must be a list in {source}")
    return value


def _optional(manifest: dict[str, Any], field: str) -> Any:
    # An absent key and a bare `key:` (null) both mean an empty list.
    value = manifest.get(field)
    return [] if value is None else value


def _require_package(entry: Any, source: Path) -> str:
    if not isinstance(entry, dict) or not isinstance(entry.get("package"), str):
        raise ManifestError(
            f"content of the 'plugins.package' field must be a string in {source}"
        )
    return entry["package"]


def _load_include(path: Path) -> list[dict[str, Any]]:
    """Load the ``plugins`` list of one included manifest."""
    if not path.is_file():
        raise ManifestError(f"File {path} does not exist")

    data = _read_yaml(path)
    if not isinstance(data, dict):
        raise ManifestError(f"{path} content must be a YAML object")

    entries = _require_list(data.get("plugins"), "plugins", path)
    for entry in entries:
        _require_package(entry, path)
    return entries


def load_manifest(path: Path) -> dict[str, Any] | None:
    """Read the root manifest.

    Returns:
        The manifest mapping, or None when the file is absent or blank
        (there is nothing to install in that case).

    Raises:
        ManifestError: If the file exists but is not a YAML mapping.
    """
    if not path.is_file():
        logger.info("No %s file found. Skipping dynamic plugins installation.", path)
        return None

    data = _read_yaml(path)
    if data is None or data == "":
        logger.info("%s file is empty. Skipping dynamic plugins installation.", path)
        return None

    if not isinstance(data, dict):
        raise ManifestError(f"{path} content must be a YAML object")
    return data


def resolve_plugins(manifest: dict[str, Any], manifest_path: Path) -> ResolvedPlugins:
    """Apply includes and overrides to a loaded root manifest.

    Include paths are relative to the directory holding the root manifest.

    Args:
        manifest: Parsed root manifest mapping.
        manifest_path: Where it was read from (for paths and messages).

    Returns:
        Ordered mapping of package reference to frozen definition.
    """
    base_dir = manifest_path.parent
    merged: OrderedDict[str, dict[str, Any]] = OrderedDict()

    includes = _require_list(_optional(manifest, "includes"), "includes", manifest_path)
    for include in includes:
        if not isinstance(include, str):
            raise ManifestError(
                f"content of the 'includes' field must be a list of strings in {manifest_path}"
            )
        logger.info("======= Including dynamic plugins from %s", include)
        for entry in _load_include(base_dir / include):
            merged[entry["package"]] = dict(entry)

    plugins = _require_list(_optional(manifest, "plugins"), "plugins", manifest_path)
    for entry in plugins:
        package = _require_package(entry, manifest_path)
        if package not in merged:
            merged[package] = dict(entry)
            continue

        logger.info("======= Overriding dynamic plugin configuration %s", package)
        for key, value in entry.items():
            if key != "package":
                merged[package][key] = value

    resolved: ResolvedPlugins = OrderedDict()
    for package, entry in merged.items():
        try:
            resolved[package] = PluginDefinition.model_validate(entry)
        except ValidationError as e:
            raise ManifestError(f"Invalid definition for plugin {package}: {e}") from e

    logger.debug("Resolved %d dynamic plugins from %s", len(resolved), manifest_path)
    return resolved


def resolve(manifest_path: Path) -> ResolvedPlugins:
    """Load and resolve a root manifest in one step.

    An absent or blank manifest resolves to an empty mapping.
    """
    manifest = load_manifest(manifest_path)
    if manifest is None:
        return OrderedDict()
    return resolve_plugins(manifest, manifest_path)
