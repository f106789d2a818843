"""
npm pack adapter — fetch a package tarball with ``npm pack``.

``npm pack <ref>`` downloads (or packs, for a local directory) the
package and writes ``<name>-<version>.tgz`` to the working directory,
printing that file name as the last line of stdout.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from dynamic_plugins.adapters.base import PackageFetcher
from dynamic_plugins.core.models.receipt import PackReceipt

logger = logging.getLogger(__name__)


class NpmPackAdapter(PackageFetcher):
    """Run ``npm pack`` and report the produced archive.

    Args:
        npm_binary: Executable to invoke (default: ``npm`` on PATH).
        timeout: Optional timeout in seconds; None waits indefinitely.
    """

    def __init__(self, npm_binary: str = "npm", timeout: int | None = None):
        self._npm = npm_binary
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "npm"

    def is_available(self) -> bool:
        return shutil.which(self._npm) is not None

    def pack(self, reference: str, work_dir: Path) -> PackReceipt:
        cmd = [self._npm, "pack", reference]
        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), work_dir)
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                cwd=work_dir,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            return PackReceipt.failure(
                adapter=self.name,
                package=reference,
                error=f"npm pack timed out after {self._timeout}s",
            )
        except OSError as e:
            return PackReceipt.failure(
                adapter=self.name,
                package=reference,
                error=f"Cannot run {self._npm}: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stderr = result.stderr.strip() if result.stderr else ""

        if result.returncode != 0:
            return PackReceipt.failure(
                adapter=self.name,
                package=reference,
                error=stderr or f"npm pack exited with code {result.returncode}",
                stderr=stderr,
                duration_ms=elapsed_ms,
                metadata={"return_code": result.returncode},
            )

        lines = [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]
        if not lines:
            return PackReceipt.failure(
                adapter=self.name,
                package=reference,
                error="npm pack did not report an archive name",
                stderr=stderr,
                duration_ms=elapsed_ms,
            )

        archive = (work_dir / lines[-1]).resolve()
        return PackReceipt.success(
            adapter=self.name,
            package=reference,
            archive=str(archive),
            stderr=stderr,
            duration_ms=elapsed_ms,
        )
