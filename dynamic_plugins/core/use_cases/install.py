"""
Install use case — drive the whole dynamic plugins pipeline.

For each resolved plugin, in manifest order:

    disabled?  → skip
    fetch      → fetcher.pack()             (FetchError)
    verify     → integrity check            (IntegrityError, skippable)
    extract    → into <archive without .tgz> (ArchiveSecurityError)
    cleanup    → delete the archive
    configure  → merge pluginConfig          (ConfigConflictError)

The first error stops the run. Work already done for earlier plugins is
kept: there is no rollback, and the output document is still written
with the configuration merged before the failure. This is the only
place where an InstallError is caught; callers get an InstallResult
instead.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from dynamic_plugins.adapters.base import PackageFetcher
from dynamic_plugins.core.config.manifest import load_manifest, resolve_plugins
from dynamic_plugins.core.config.settings import InstallerSettings
from dynamic_plugins.core.errors import FetchError, InstallError
from dynamic_plugins.core.models.global_config import GlobalConfig
from dynamic_plugins.core.models.plugin import PluginDefinition
from dynamic_plugins.core.services.archive import extract, plugin_directory_for
from dynamic_plugins.core.services.config_merge import merge_config
from dynamic_plugins.core.services.integrity import ensure_integrity_declared, verify_archive

logger = logging.getLogger(__name__)


@dataclass
class PluginOutcome:
    """What happened to one plugin."""

    package: str
    status: Literal["installed", "skipped", "planned"]
    directory: str | None = None
    verified: bool = False

    def to_dict(self) -> dict:
        return {
            "package": self.package,
            "status": self.status,
            "directory": self.directory,
            "verified": self.verified,
        }


@dataclass
class InstallResult:
    """Result of an install run."""

    install_root: Path | None = None
    config_path: Path | None = None
    manifest_found: bool = False
    dry_run: bool = False
    outcomes: list[PluginOutcome] = field(default_factory=list)
    global_config: GlobalConfig | None = None
    error: str | None = None
    error_kind: str | None = None
    failed_package: str | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def installed(self) -> list[str]:
        return [o.package for o in self.outcomes if o.status == "installed"]

    @property
    def skipped(self) -> list[str]:
        return [o.package for o in self.outcomes if o.status == "skipped"]

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "install_root": str(self.install_root) if self.install_root else None,
            "config_path": str(self.config_path) if self.config_path else None,
            "manifest_found": self.manifest_found,
            "dry_run": self.dry_run,
            "plugins": [o.to_dict() for o in self.outcomes],
            "error": self.error,
            "error_kind": self.error_kind,
            "failed_package": self.failed_package,
            "duration_ms": self.duration_ms,
        }


def install_plugins(
    install_root: Path,
    settings: InstallerSettings | None = None,
    fetcher: PackageFetcher | None = None,
    dry_run: bool = False,
) -> InstallResult:
    """Install every enabled plugin declared by the manifest.

    Args:
        install_root: Directory receiving plugin directories and the
            consolidated app-config document.
        settings: Installer settings (default: read from the environment).
        fetcher: Package packer (default: ``npm pack``).
        dry_run: Resolve, check and merge in memory only; no fetch, no
            extraction, no file written.

    Returns:
        InstallResult; ``result.ok`` is False when the run was aborted.
    """
    start = time.monotonic()
    result = InstallResult(install_root=install_root, dry_run=dry_run)

    try:
        if settings is None:
            settings = InstallerSettings.from_env()
        if fetcher is None:
            from dynamic_plugins.adapters.npm import NpmPackAdapter

            fetcher = NpmPackAdapter()
        _run(install_root, settings, fetcher, dry_run, result)
    except InstallError as e:
        result.error = str(e)
        result.error_kind = e.kind
        logger.debug("Install aborted (%s): %s", e.kind, e)

    result.duration_ms = int((time.monotonic() - start) * 1000)
    return result


def _run(
    install_root: Path,
    settings: InstallerSettings,
    fetcher: PackageFetcher,
    dry_run: bool,
    result: InstallResult,
) -> None:
    output = settings.output_path(install_root)
    if not dry_run:
        install_root.mkdir(parents=True, exist_ok=True)

    manifest = load_manifest(settings.manifest_file)
    if manifest is None:
        if not dry_run:
            output.write_text("", encoding="utf-8")
            result.config_path = output
        return

    result.manifest_found = True
    plugins = resolve_plugins(manifest, settings.manifest_file)
    config = GlobalConfig.initial(settings.root_directory)
    result.global_config = config

    try:
        for plugin in plugins.values():
            result.failed_package = plugin.package
            result.outcomes.append(
                _install_plugin(plugin, install_root, settings, fetcher, config, dry_run)
            )
        result.failed_package = None
    finally:
        # On abort this is the configuration of the plugins merged so far.
        if not dry_run:
            output.write_text(config.to_yaml(), encoding="utf-8")
            result.config_path = output
            logger.info("Wrote %s", output)


def _install_plugin(
    plugin: PluginDefinition,
    install_root: Path,
    settings: InstallerSettings,
    fetcher: PackageFetcher,
    config: GlobalConfig,
    dry_run: bool,
) -> PluginOutcome:
    package = plugin.package

    if plugin.disabled:
        logger.info("======= Skipping disabled dynamic plugin %s", package)
        return PluginOutcome(package=package, status="skipped")

    logger.info("======= %s dynamic plugin %s", "Planning" if dry_run else "Installing", package)
    must_verify = ensure_integrity_declared(plugin, settings.skip_integrity_check)

    if dry_run:
        _merge_plugin_config(plugin, config)
        return PluginOutcome(package=package, status="planned", verified=must_verify)

    reference = str(Path.cwd() / plugin.local_path) if plugin.is_local else package
    logger.info("\t==> Grabbing package archive through `%s pack`", fetcher.name)
    receipt = fetcher.pack(reference, install_root)
    if receipt.failed or not receipt.archive:
        raise FetchError(
            f"Error while installing plugin {package} with '{fetcher.name} pack': "
            f"{receipt.error or 'no archive produced'}"
        )
    archive = Path(receipt.archive)

    if must_verify:
        logger.info("\t==> Verifying package integrity")
        verify_archive(plugin.integrity, archive, package)

    try:
        directory = plugin_directory_for(archive)
    except ValueError as e:
        raise FetchError(f"Unexpected archive produced for plugin {package}: {e}") from e

    logger.info("\t==> Extracting package archive %s", archive)
    extract(archive, directory, settings.max_entry_size)

    logger.info("\t==> Removing package archive %s", archive)
    archive.unlink()

    _merge_plugin_config(plugin, config)

    logger.info("\t==> Successfully installed dynamic plugin %s", package)
    return PluginOutcome(
        package=package,
        status="installed",
        directory=str(directory),
        verified=must_verify,
    )


def _merge_plugin_config(plugin: PluginDefinition, config: GlobalConfig) -> None:
    if isinstance(plugin.plugin_config, Mapping):
        logger.info("\t==> Merging plugin-specific configuration")
        config.tree = merge_config(plugin.plugin_config, config.tree)
