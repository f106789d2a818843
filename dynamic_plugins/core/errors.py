"""
Error taxonomy for the installer pipeline.

Every error is fatal: it is raised where it is detected and travels
unmodified up to ``install_plugins()``, which is the only place that
turns it into an ``InstallResult`` (and from there into an exit code).
"""

from __future__ import annotations

from typing import Any


class InstallError(Exception):
    """Base class for every error that aborts an install run."""

    kind = "install"


class SettingsError(InstallError):
    """Raised when installer settings (env vars, CLI options) are invalid."""

    kind = "settings"


class ManifestError(InstallError):
    """Raised when a manifest or one of its includes is missing or malformed."""

    kind = "manifest"


class IntegrityError(InstallError):
    """Raised when a package archive cannot be authenticated."""

    kind = "integrity"


class ArchiveSecurityError(InstallError):
    """Raised when an archive entry violates the extraction rules."""

    kind = "archive"


class FetchError(InstallError):
    """Raised when the package packer fails to produce an archive."""

    kind = "fetch"


class ConfigConflictError(InstallError):
    """Raised when two plugins set the same config key to different values."""

    kind = "config-conflict"

    def __init__(self, key_path: str, existing: Any, incoming: Any):
        self.key_path = key_path
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Config key '{key_path}' defined differently for 2 dynamic plugins: "
            f"{existing!r} != {incoming!r}"
        )
