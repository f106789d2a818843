"""
Dynamic Plugins Installer — install verified plugin archives and merge
their configuration into a single app-config document.
"""

__version__ = "0.1.0"
