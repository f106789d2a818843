"""
Global config — the consolidated app-config document being built.

Starts with the install root marker and grows by one merge per
installed plugin. The tree is replaced, never edited in place, so a
failing merge leaves the previous state intact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

DEFAULT_ROOT_DIRECTORY = "dynamic-plugins-root"


@dataclass
class GlobalConfig:
    """Accumulated configuration written to app-config.dynamic-plugins.yaml."""

    tree: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def initial(cls, root_directory: str = DEFAULT_ROOT_DIRECTORY) -> GlobalConfig:
        return cls(tree={"dynamicPlugins": {"rootDirectory": root_directory}})

    @property
    def root_directory(self) -> str | None:
        section = self.tree.get("dynamicPlugins")
        if isinstance(section, dict):
            return section.get("rootDirectory")
        return None

    def to_yaml(self) -> str:
        """Serialize with keys in insertion order."""
        return yaml.safe_dump(self.tree, sort_keys=False, default_flow_style=False)
