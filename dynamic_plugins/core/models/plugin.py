"""
Plugin models — what a manifest declares about each dynamic plugin.

Resolved definitions are frozen: once the manifest resolver has applied
includes and overrides, nothing downstream may change them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

# A package reference starting with this prefix is a path on the local
# filesystem (relative to the working directory), not a registry package.
LOCAL_PACKAGE_PREFIX = "./"


class PluginDefinition(BaseModel):
    """One entry of a ``plugins`` list.

    Unknown keys are kept so that overrides carry them through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    package: StrictStr = Field(min_length=1)
    disabled: StrictBool = False
    integrity: StrictStr | None = None
    plugin_config: Any = Field(default=None, alias="pluginConfig")

    @property
    def is_local(self) -> bool:
        """Whether the package is referenced by local filesystem path."""
        return self.package.startswith(LOCAL_PACKAGE_PREFIX)

    @property
    def local_path(self) -> str:
        """The path part of a local reference (prefix stripped)."""
        return self.package[len(LOCAL_PACKAGE_PREFIX):]

    def to_dict(self) -> dict[str, Any]:
        """Manifest-shaped view (camelCase keys, empty fields omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)
