"""
Shared test fixtures and configuration.
"""

import base64
import hashlib
import io
import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def clean_installer_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's environment from leaking into installer settings."""
    for name in (
        "MAX_ENTRY_SIZE",
        "SKIP_INTEGRITY_CHECK",
        "DYNAMIC_PLUGINS_LOG_LEVEL",
        "DYNAMIC_PLUGINS_LOG_FILE",
        "DYNAMIC_PLUGINS_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an isolated working directory."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def make_archive() -> Callable[..., bytes]:
    """Build an in-memory .tgz from ``{entry name: content}``.

    Names are used verbatim, so tests control the ``package/`` prefix.
    Names ending in ``/`` become directory entries.
    """

    def _make(entries: dict[str, str | bytes], mode: int = 0o644) -> bytes:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w:gz") as tar:
            for name, content in entries.items():
                info = tarfile.TarInfo(name)
                if name.endswith("/"):
                    info.type = tarfile.DIRTYPE
                    info.mode = 0o755
                    tar.addfile(info)
                    continue
                data = content.encode() if isinstance(content, str) else content
                info.size = len(data)
                info.mode = mode
                tar.addfile(info, io.BytesIO(data))
        return buf.getvalue()

    return _make


@pytest.fixture
def integrity_for() -> Callable[..., str]:
    """Compute an ``<algorithm>-<base64>`` descriptor for some bytes."""

    def _integrity(data: bytes, algorithm: str = "sha256") -> str:
        digest = hashlib.new(algorithm, data).digest()
        return f"{algorithm}-{base64.b64encode(digest).decode()}"

    return _integrity
