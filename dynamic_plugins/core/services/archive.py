"""
Archive extraction — unpack an npm package tarball into a plugin directory.

Every entry is checked before anything is written:

    - its path must start with ``package/`` (the npm package root) and,
      once that prefix is stripped, must stay inside the target directory
    - its declared size must not exceed the configured ceiling (zip bombs)
    - it must be a regular file or a directory (no links, no devices)
    - it must not repeat an earlier file, nor sit below a file entry

Only regular files and directories are written. Bytes are copied with a
running count so the ceiling also holds for what is actually read.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path, PurePosixPath
from typing import IO

from dynamic_plugins.core.errors import ArchiveSecurityError

logger = logging.getLogger(__name__)

PACKAGE_PREFIX = "package/"
ARCHIVE_SUFFIX = ".tgz"

_CHUNK_SIZE = 65536


def plugin_directory_for(archive: Path) -> Path:
    """Extraction directory for an archive: its path without ``.tgz``."""
    if not archive.name.endswith(ARCHIVE_SUFFIX) or archive.name == ARCHIVE_SUFFIX:
        raise ValueError(f"Not a {ARCHIVE_SUFFIX} archive: {archive.name}")
    return archive.with_name(archive.name.removesuffix(ARCHIVE_SUFFIX))


def reset_directory(directory: Path) -> None:
    """Remove ``directory`` recursively (if present) and recreate it empty."""
    if directory.is_symlink() or directory.is_file():
        directory.unlink()
    elif directory.exists():
        logger.info("\t==> Removing previous plugin directory %s", directory)
        shutil.rmtree(directory)
    directory.mkdir(parents=True)


def _relative_target(member: tarfile.TarInfo) -> PurePosixPath | None:
    """Validate an entry name and return its path below the package root.

    Returns None for the package root entry itself.
    """
    # tarfile drops the trailing slash of directory names.
    name = f"{member.name}/" if member.isdir() else member.name
    if not name.startswith(PACKAGE_PREFIX):
        raise ArchiveSecurityError(
            f"NPM package archive does not start with '{PACKAGE_PREFIX}' as it should: {name}"
        )

    relative = PurePosixPath(name[len(PACKAGE_PREFIX):])
    if relative.is_absolute() or ".." in relative.parts or "\\" in name:
        raise ArchiveSecurityError(f"Archive entry escapes the package directory: {name}")
    if relative.parts in ((), (".",)):
        return None
    return relative


def _check_member(member: tarfile.TarInfo, max_entry_size: int) -> PurePosixPath | None:
    relative = _relative_target(member)

    if member.size > max_entry_size:
        raise ArchiveSecurityError(
            f"Zip bomb detected in {member.name}: declared size {member.size} "
            f"exceeds the limit of {max_entry_size} bytes"
        )

    if not (member.isfile() or member.isdir()):
        raise ArchiveSecurityError(
            f"Unsupported archive entry type for {member.name}: only files and "
            f"directories are allowed"
        )
    return relative


def _check_layout(
    relative: PurePosixPath,
    is_dir: bool,
    files: set[PurePosixPath],
    dirs: set[PurePosixPath],
    name: str,
) -> None:
    """Reject entries that would overwrite or nest under another entry."""
    parents = [p for p in relative.parents if p != PurePosixPath(".")]
    if any(parent in files for parent in parents):
        raise ArchiveSecurityError(f"Archive entry is nested under a file entry: {name}")
    if relative in files or (not is_dir and relative in dirs):
        raise ArchiveSecurityError(f"Duplicate archive entry: {name}")

    (dirs if is_dir else files).add(relative)
    dirs.update(parents)


def _copy_bounded(src: IO[bytes], dest: Path, limit: int, name: str) -> int:
    """Copy ``src`` into ``dest``, failing as soon as ``limit`` is exceeded."""
    written = 0
    with open(dest, "wb") as out:
        for chunk in iter(lambda: src.read(_CHUNK_SIZE), b""):
            written += len(chunk)
            if written > limit:
                raise ArchiveSecurityError(
                    f"Zip bomb detected in {name}: content exceeds the limit of {limit} bytes"
                )
            out.write(chunk)
    return written


def extract(archive: Path, target_dir: Path, max_entry_size: int) -> int:
    """Extract an npm package archive into ``target_dir``.

    The target directory is emptied first so no stale files from a
    previous install survive. Every entry header is validated before the
    first byte is written.

    Args:
        archive: Path to the ``.tgz`` produced by the packer.
        target_dir: Directory receiving the package contents.
        max_entry_size: Maximum size of a single entry, in bytes.

    Returns:
        Number of files written.

    Raises:
        ArchiveSecurityError: On any entry violating the rules above, or
            an archive that cannot be read at all.
    """
    reset_directory(target_dir)
    root = target_dir.resolve()

    try:
        with tarfile.open(archive, "r:*") as tar:
            accepted: list[tuple[tarfile.TarInfo, PurePosixPath]] = []
            files_seen: set[PurePosixPath] = set()
            dirs_seen: set[PurePosixPath] = set()
            for member in tar:
                relative = _check_member(member, max_entry_size)
                if relative is None:
                    continue
                destination = (root / relative).resolve()
                if not destination.is_relative_to(root):
                    raise ArchiveSecurityError(
                        f"Archive entry escapes the package directory: {member.name}"
                    )
                _check_layout(relative, member.isdir(), files_seen, dirs_seen, member.name)
                accepted.append((member, relative))

            files = 0
            for member, relative in accepted:
                destination = root / relative
                if member.isdir():
                    destination.mkdir(parents=True, exist_ok=True)
                    continue

                destination.parent.mkdir(parents=True, exist_ok=True)
                src = tar.extractfile(member)
                if src is None:
                    continue
                with src:
                    _copy_bounded(src, destination, max_entry_size, member.name)
                destination.chmod((member.mode & 0o755) | 0o644)
                files += 1
    except (tarfile.TarError, EOFError) as e:
        raise ArchiveSecurityError(f"Cannot read package archive {archive}: {e}") from e
    except OSError as e:
        raise ArchiveSecurityError(f"Cannot extract package archive {archive}: {e}") from e

    logger.debug("Extracted %d files from %s into %s", files, archive.name, target_dir)
    return files
