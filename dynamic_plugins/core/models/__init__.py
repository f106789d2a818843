"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from dynamic_plugins.core.models import PluginDefinition, GlobalConfig
"""

from dynamic_plugins.core.models.global_config import DEFAULT_ROOT_DIRECTORY, GlobalConfig
from dynamic_plugins.core.models.integrity import SUPPORTED_ALGORITHMS, IntegrityDescriptor
from dynamic_plugins.core.models.plugin import LOCAL_PACKAGE_PREFIX, PluginDefinition
from dynamic_plugins.core.models.receipt import PackReceipt

__all__ = [
    "DEFAULT_ROOT_DIRECTORY",
    # global_config.py
    "GlobalConfig",
    # integrity.py
    "IntegrityDescriptor",
    "LOCAL_PACKAGE_PREFIX",
    # receipt.py
    "PackReceipt",
    # plugin.py
    "PluginDefinition",
    "SUPPORTED_ALGORITHMS",
]
