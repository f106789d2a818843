"""
Installer settings — environment-driven knobs for a single run.

Resolved in precedence order:
    CLI option  >  environment variable  >  default

    MAX_ENTRY_SIZE        per-archive-entry ceiling in bytes (20,000,000)
    SKIP_INTEGRITY_CHECK  "true" (any case) disables integrity checking
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from dynamic_plugins.core.errors import SettingsError
from dynamic_plugins.core.models.global_config import DEFAULT_ROOT_DIRECTORY

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_FILE = "dynamic-plugins.yaml"
OUTPUT_CONFIG_FILE = "app-config.dynamic-plugins.yaml"
DEFAULT_MAX_ENTRY_SIZE = 20_000_000

ENV_MAX_ENTRY_SIZE = "MAX_ENTRY_SIZE"
ENV_SKIP_INTEGRITY_CHECK = "SKIP_INTEGRITY_CHECK"


class InstallerSettings(BaseModel):
    """Everything the install pipeline needs besides the manifest itself."""

    max_entry_size: int = Field(default=DEFAULT_MAX_ENTRY_SIZE, gt=0)
    skip_integrity_check: bool = False
    manifest_file: Path = Path(DEFAULT_MANIFEST_FILE)
    output_file_name: str = OUTPUT_CONFIG_FILE
    root_directory: str = DEFAULT_ROOT_DIRECTORY

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> InstallerSettings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (default: ``os.environ``).
            **overrides: Explicit values (e.g. from CLI options). ``None``
                values are ignored so unset options fall through.

        Raises:
            SettingsError: If a variable holds an unusable value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        raw_size = env.get(ENV_MAX_ENTRY_SIZE, "").strip()
        if raw_size:
            try:
                values["max_entry_size"] = int(raw_size)
            except ValueError as e:
                raise SettingsError(
                    f"{ENV_MAX_ENTRY_SIZE} must be an integer number of bytes, got {raw_size!r}"
                ) from e

        raw_skip = env.get(ENV_SKIP_INTEGRITY_CHECK, "")
        values["skip_integrity_check"] = raw_skip.strip().lower() == "true"

        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            settings = cls.model_validate(values)
        except ValidationError as e:
            raise SettingsError(f"Invalid installer settings: {e}") from e

        logger.debug(
            "Settings: max_entry_size=%d skip_integrity_check=%s manifest=%s",
            settings.max_entry_size,
            settings.skip_integrity_check,
            settings.manifest_file,
        )
        return settings

    def output_path(self, install_root: Path) -> Path:
        """Where the consolidated app-config document is written."""
        return install_root / self.output_file_name
