"""
Pack receipt — the result contract of a package packer adapter.

Adapters NEVER raise: a failed ``npm pack`` comes back as a receipt with
``status='failed'`` and the captured stderr, and the installer decides
what that means.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class PackReceipt(BaseModel):
    """Outcome of packing one package reference into an archive."""

    adapter: str
    package: str
    status: Literal["ok", "failed"] = "ok"

    archive: str | None = None      # absolute path of the produced archive
    error: str | None = None
    stderr: str = ""
    duration_ms: int = 0

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the archive was produced."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the packer failed."""
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        adapter: str,
        package: str,
        archive: str,
        **kwargs: Any,
    ) -> PackReceipt:
        """Create a success receipt."""
        return cls(
            adapter=adapter,
            package=package,
            status="ok",
            archive=archive,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        adapter: str,
        package: str,
        error: str,
        **kwargs: Any,
    ) -> PackReceipt:
        """Create a failure receipt."""
        return cls(
            adapter=adapter,
            package=package,
            status="failed",
            error=error,
            **kwargs,
        )
