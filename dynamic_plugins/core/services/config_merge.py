"""
Config merge — fold one plugin's ``pluginConfig`` into the global tree.

Mappings merge key by key, recursively. Everything else (scalars, lists,
null) is a leaf: a leaf may be declared again only with an equal value.
Two plugins may therefore repeat the same setting but never contradict
each other.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dynamic_plugins.core.errors import ConfigConflictError

_MISSING = object()


def merge_config(
    fragment: Mapping[str, Any],
    tree: Mapping[str, Any],
    prefix: str = "",
) -> dict[str, Any]:
    """Return ``tree`` with ``fragment`` merged in.

    Neither argument is modified; the result shares untouched subtrees
    with ``tree``.

    Args:
        fragment: Configuration contributed by one plugin.
        tree: Configuration accumulated so far.
        prefix: Dotted key path of ``tree`` within the root document.

    Raises:
        ConfigConflictError: If a key path already holds a different value.
    """
    result = dict(tree)
    for key, value in fragment.items():
        path = f"{prefix}{key}"
        existing = result.get(key, _MISSING)

        if isinstance(value, Mapping):
            if existing is _MISSING:
                existing = {}
            elif not isinstance(existing, Mapping):
                raise ConfigConflictError(path, existing, dict(value))
            result[key] = merge_config(value, existing, f"{path}.")
            continue

        if existing is not _MISSING and (
            isinstance(existing, Mapping) or not _same_value(existing, value)
        ):
            raise ConfigConflictError(path, existing, value)
        result[key] = value

    return result


def _same_value(a: Any, b: Any) -> bool:
    # 1 == True and 1 == 1.0 in Python; YAML keeps those distinct.
    return type(a) is type(b) and a == b
