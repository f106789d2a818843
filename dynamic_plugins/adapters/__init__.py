"""
Adapters — narrow interfaces to external tools (package packers).
"""

from dynamic_plugins.adapters.base import PackageFetcher
from dynamic_plugins.adapters.mock import MockPacker
from dynamic_plugins.adapters.npm import NpmPackAdapter

__all__ = [
    "MockPacker",
    "NpmPackAdapter",
    "PackageFetcher",
]
