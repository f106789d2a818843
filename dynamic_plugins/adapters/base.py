"""
Package fetcher base — the contract between the installer and packers.

The installer never shells out directly: it asks a fetcher to turn a
package reference into an archive on disk and gets a PackReceipt back.
Fetchers NEVER raise; failures are captured in the receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from dynamic_plugins.core.models.receipt import PackReceipt


class PackageFetcher(ABC):
    """Abstract base class for package packers.

    To add a packer:
        1. Subclass PackageFetcher
        2. Implement name, is_available, pack
        3. Pass an instance to ``install_plugins(..., fetcher=...)``
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The fetcher identifier (e.g., 'npm', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying tool is installed. Never raises."""

    @abstractmethod
    def pack(self, reference: str, work_dir: Path) -> PackReceipt:
        """Produce an archive for ``reference`` inside ``work_dir``.

        Args:
            reference: Registry identifier or local filesystem path.
            work_dir: Directory the archive must be written to.

        Returns:
            Receipt with the absolute archive path on success, or the
            error and captured stderr on failure.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
