"""
Dynamic Plugins Installer — CLI entrypoint.

Usage:
    install-dynamic-plugins /opt/app-root/src/dynamic-plugins-root
    python -m dynamic_plugins.main --dry-run ./dynamic-plugins-root
    MAX_ENTRY_SIZE=50000000 install-dynamic-plugins ./root
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from dynamic_plugins import __version__
from dynamic_plugins.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    ENV_LOG_LEVEL,
    resolve_level,
    setup_logging,
)


@click.command()
@click.version_option(version=__version__, prog_name="install-dynamic-plugins")
@click.argument("root", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--manifest",
    "-m",
    "manifest_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the plugins manifest (default: ./dynamic-plugins.yaml).",
)
@click.option(
    "--max-entry-size",
    type=int,
    default=None,
    help="Maximum size of one archive entry in bytes (default: $MAX_ENTRY_SIZE or 20000000).",
)
@click.option(
    "--skip-integrity-check",
    is_flag=True,
    help="Do not verify package integrity (default: $SKIP_INTEGRITY_CHECK).",
)
@click.option("--dry-run", is_flag=True, help="Resolve and check, but install nothing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress progress output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
def cli(
    root: Path,
    manifest_path: Path | None,
    max_entry_size: int | None,
    skip_integrity_check: bool,
    dry_run: bool,
    as_json: bool,
    quiet: bool,
    debug: bool,
) -> None:
    """Install the dynamic plugins listed in the manifest into ROOT.

    Each enabled plugin is fetched with `npm pack`, checked against its
    integrity hash, extracted into ROOT, and its pluginConfig merged into
    ROOT/app-config.dynamic-plugins.yaml.
    """
    setup_logging(
        level=resolve_level(debug, quiet or as_json, os.environ.get(ENV_LOG_LEVEL)),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
    )

    from dynamic_plugins.core.config.settings import InstallerSettings
    from dynamic_plugins.core.errors import SettingsError
    from dynamic_plugins.core.use_cases.install import install_plugins

    try:
        settings = InstallerSettings.from_env(
            manifest_file=manifest_path,
            max_entry_size=max_entry_size,
            skip_integrity_check=True if skip_integrity_check else None,
        )
    except SettingsError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    from dynamic_plugins.adapters.npm import NpmPackAdapter

    result = install_plugins(root, settings=settings, fetcher=NpmPackAdapter(), dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.ok:
        where = f" ({result.failed_package})" if result.failed_package else ""
        click.secho(f"❌ Error{where}: {result.error}", fg="red", err=True)
        sys.exit(1)

    if quiet:
        return

    click.echo()
    if not result.manifest_found:
        click.secho("⊘ No dynamic plugins to install", fg="yellow")
    else:
        mode_label = "[dry-run] " if dry_run else ""
        click.secho(f"⚡ {mode_label}Dynamic plugins — {root}", fg="cyan", bold=True)
        for outcome in result.outcomes:
            if outcome.status == "skipped":
                click.secho(f"   ⊘ {outcome.package} ", fg="yellow", nl=False)
                click.echo("(disabled)")
            else:
                marker = "✓" if outcome.status == "installed" else "•"
                check = "" if outcome.verified else "  [integrity not checked]"
                click.secho(f"   {marker} {outcome.package}", fg="green", nl=False)
                click.echo(check)
        click.echo()
        click.secho(
            f"   Result: {len(result.installed)} installed, {len(result.skipped)} skipped "
            f"({result.duration_ms}ms)",
            fg="green",
            bold=True,
        )
    if result.config_path:
        click.echo(f"   Config: {result.config_path}")
    click.echo()


if __name__ == "__main__":
    cli()
