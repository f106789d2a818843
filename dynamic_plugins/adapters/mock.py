"""
Mock packer — in-memory test double for the package fetcher.

Serves pre-registered archive bytes instead of running ``npm pack``.
Unknown references fail like a registry miss would.
"""

from __future__ import annotations

from pathlib import Path

from dynamic_plugins.adapters.base import PackageFetcher
from dynamic_plugins.core.models.receipt import PackReceipt


class MockPacker(PackageFetcher):
    """Universal mock packer for testing.

    Register archives with ``add_archive``; ``pack`` writes them into the
    requested directory and records every call.
    """

    def __init__(self, available: bool = True):
        self._available = available
        self._archives: dict[str, tuple[str, bytes]] = {}
        self._failures: dict[str, str] = {}
        self._call_log: list[str] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[str]:
        """Every reference ``pack`` was asked for, in order."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def add_archive(self, reference: str, data: bytes, file_name: str | None = None) -> None:
        """Serve ``data`` as the archive of ``reference``."""
        if file_name is None:
            stem = reference.strip("./").replace("@", "").replace("/", "-") or "package"
            file_name = f"{stem}-1.0.0.tgz"
        self._archives[reference] = (file_name, data)

    def archive_bytes(self, reference: str) -> bytes:
        """The bytes served for ``reference``."""
        return self._archives[reference][1]

    def set_failure(self, reference: str, error: str = "Mock failure") -> None:
        """Make ``pack`` fail for ``reference``."""
        self._failures[reference] = error

    def reset(self) -> None:
        self._archives.clear()
        self._failures.clear()
        self._call_log.clear()

    def pack(self, reference: str, work_dir: Path) -> PackReceipt:
        self._call_log.append(reference)

        if reference in self._failures:
            error = self._failures[reference]
            return PackReceipt.failure(
                adapter=self.name, package=reference, error=error, stderr=error
            )

        if reference not in self._archives:
            error = f"404 Not Found - {reference}"
            return PackReceipt.failure(
                adapter=self.name, package=reference, error=error, stderr=error
            )

        file_name, data = self._archives[reference]
        archive = work_dir / file_name
        archive.write_bytes(data)
        return PackReceipt.success(
            adapter=self.name,
            package=reference,
            archive=str(archive.resolve()),
            metadata={"mock": True},
        )
