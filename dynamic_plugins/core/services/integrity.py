"""
Integrity verification — authenticate a package archive against the
``integrity`` descriptor declared in the manifest.

Descriptor format: ``<algorithm>-<base64 digest>`` (Subresource Integrity
style, as produced by npm). Only sha512, sha384 and sha256 are accepted.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from pathlib import Path

from dynamic_plugins.core.errors import IntegrityError
from dynamic_plugins.core.models.integrity import SUPPORTED_ALGORITHMS, IntegrityDescriptor
from dynamic_plugins.core.models.plugin import PluginDefinition

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 65536


def parse_integrity(value: object, package: str = "") -> IntegrityDescriptor:
    """Parse and validate an integrity descriptor string.

    Raises:
        IntegrityError: If the descriptor is not a string, does not have
            exactly two ``-``-separated parts, names an unsupported
            algorithm, or carries invalid base64.
    """
    label = package or "package"
    if not isinstance(value, str):
        raise IntegrityError(f"Package integrity for {label} must be a string")

    parts = value.split("-")
    if len(parts) != 2:
        raise IntegrityError(
            f"Package integrity for {label} must be a string of the form <algorithm>-<hash>"
        )

    algorithm, digest = parts
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise IntegrityError(
            f"{label}: Provided Package integrity algorithm {algorithm} is not supported, "
            f"please use one of following algorithms {', '.join(SUPPORTED_ALGORITHMS)} instead"
        )

    try:
        base64.b64decode(digest, validate=True)
    except (binascii.Error, ValueError) as e:
        raise IntegrityError(
            f"{label}: Provided Package integrity hash {digest} is not a valid base64 encoding"
        ) from e

    return IntegrityDescriptor(algorithm=algorithm, digest=digest)


def digest_bytes(algorithm: str, data: bytes) -> str:
    """Base64 digest of an in-memory payload."""
    return base64.b64encode(hashlib.new(algorithm, data).digest()).decode("ascii")


def digest_file(algorithm: str, path: Path) -> str:
    """Base64 digest of a file, read in chunks."""
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return base64.b64encode(h.digest()).decode("ascii")


def _check_digest(descriptor: IntegrityDescriptor, actual: str, package: str) -> None:
    # Exact comparison: base64 is case-sensitive.
    if not hmac.compare_digest(actual.encode("ascii"), descriptor.digest.encode("ascii")):
        raise IntegrityError(
            f"{package or 'package'}: The hash of the downloaded package {actual} does not "
            f"match the provided integrity hash {descriptor.digest} provided in the "
            f"configuration file"
        )


def verify(descriptor: object, data: bytes, package: str = "") -> IntegrityDescriptor:
    """Verify in-memory archive bytes against a descriptor string.

    Returns:
        The parsed descriptor on success.

    Raises:
        IntegrityError: On a malformed descriptor or a digest mismatch.
    """
    parsed = parse_integrity(descriptor, package)
    _check_digest(parsed, digest_bytes(parsed.algorithm, data), package)
    return parsed


def verify_archive(descriptor: object, archive: Path, package: str = "") -> IntegrityDescriptor:
    """Verify an archive on disk against a descriptor string."""
    parsed = parse_integrity(descriptor, package)
    _check_digest(parsed, digest_file(parsed.algorithm, archive), package)
    logger.debug("%s: %s digest verified", package or archive.name, parsed.algorithm)
    return parsed


def integrity_required(plugin: PluginDefinition, skip_integrity_check: bool) -> bool:
    """Whether the archive of ``plugin`` must be verified.

    Local packages and runs with integrity checking disabled bypass
    verification; the bypass is logged so it is never silent.
    """
    if skip_integrity_check:
        logger.warning(
            "\t==> Integrity check disabled (SKIP_INTEGRITY_CHECK), not verifying %s",
            plugin.package,
        )
        return False
    if plugin.is_local:
        logger.warning("\t==> Local package %s, skipping integrity check", plugin.package)
        return False
    return True


def ensure_integrity_declared(plugin: PluginDefinition, skip_integrity_check: bool) -> bool:
    """Reject a package that must be verified but declares no descriptor.

    Returns:
        Whether verification has to run after the archive is fetched.

    Raises:
        IntegrityError: If verification is required and ``integrity`` is missing.
    """
    if not integrity_required(plugin, skip_integrity_check):
        return False
    if plugin.integrity is None:
        raise IntegrityError(f"No integrity hash provided for Package {plugin.package}")
    return True
