from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Callable

from ..errors import ExtractionError, ExtractionErrorKind
from ..models.bundle import Bundle
from ._rar import open_rar
from ._sevenzip import open_7z
from ._zip import open_zip

logger = logging.getLogger(__name__)

_BACKENDS: dict[str, Callable[[bytes, str], Bundle]] = {
    ".zip": open_zip,
    ".7z": open_7z,
    ".rar": open_rar,
}

ARCHIVE_SUFFIXES = frozenset(_BACKENDS)


def is_archive_name(name: str) -> bool:
    return _suffix(name) in ARCHIVE_SUFFIXES


def open_archive(data: bytes, declared_name: str) -> Bundle:
    """Open an archive held in memory.

    Args:
        data: Raw archive bytes.
        declared_name: File name the archive was delivered under. Its extension
            selects the backend: .zip, .7z or .rar.

    Returns:
        Bundle with one entry per archive member, in archive order.

    Raises:
        ExtractionError: UNSUPPORTED_FORMAT for unknown extensions,
            PASSWORD_PROTECTED when the first file member cannot be read without
            a password, CORRUPT otherwise.
    """
    suffix = _suffix(declared_name)
    backend = _BACKENDS.get(suffix)
    if backend is None:
        raise ExtractionError(
            f"Unsupported archive format: {suffix or declared_name}",
            ExtractionErrorKind.UNSUPPORTED_FORMAT,
            name=declared_name,
        )
    bundle = backend(data, declared_name)
    _probe_first_file(bundle)
    logger.debug("Opened %s with %d entries", declared_name, len(bundle.entries))
    return bundle


def open_archive_file(path: Path) -> Bundle:
    """Read an archive from disk and open it under its own file name."""
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ExtractionError(
            f"Failed to read archive {path}: {e}", ExtractionErrorKind.CORRUPT, name=path.name
        ) from e
    return open_archive(data, path.name)


def _probe_first_file(bundle: Bundle) -> None:
    # Encryption only surfaces when a member is actually read.
    first = next((e for e in bundle.entries if not e.is_directory), None)
    if first is not None:
        first.read_bytes()


def _suffix(name: str) -> str:
    return PurePosixPath(name.replace("\\", "/").lower()).suffix
