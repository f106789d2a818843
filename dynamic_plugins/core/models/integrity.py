"""
Integrity descriptor — the parsed form of ``<algorithm>-<base64digest>``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

# Ordered strongest first; anything else is refused even if hashlib knows it.
SUPPORTED_ALGORITHMS: tuple[str, ...] = ("sha512", "sha384", "sha256")

HashAlgorithm = Literal["sha512", "sha384", "sha256"]


class IntegrityDescriptor(BaseModel):
    """An algorithm-tagged, base64-encoded digest."""

    model_config = ConfigDict(frozen=True)

    algorithm: HashAlgorithm
    digest: str

    def __str__(self) -> str:
        return f"{self.algorithm}-{self.digest}"
