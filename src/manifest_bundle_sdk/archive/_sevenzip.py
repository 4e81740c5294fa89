from __future__ import annotations

import io
import lzma
import tempfile
from pathlib import Path

import py7zr
from py7zr.exceptions import (
    ArchiveError,
    PasswordRequired,
    UnsupportedCompressionMethodError,
)

from ..errors import ExtractionError, ExtractionErrorKind
from ..models.bundle import ArchiveEntry, Bundle


def open_7z(data: bytes, name: str) -> Bundle:
    """Extract a 7z archive through a scratch directory.

    Every member is read into memory before the scratch directory is removed,
    and the directory is removed on failure too.
    """
    with tempfile.TemporaryDirectory(prefix="manifest-bundle-") as tmpdir:
        scratch = Path(tmpdir)
        try:
            with py7zr.SevenZipFile(io.BytesIO(data), mode="r") as archive:
                if archive.needs_password():
                    raise ExtractionError(
                        f"Archive {name} is password protected",
                        ExtractionErrorKind.PASSWORD_PROTECTED,
                        name=name,
                    )
                infos = archive.list()
                archive.extractall(path=scratch)
        except PasswordRequired as e:
            raise ExtractionError(
                f"Archive {name} is password protected",
                ExtractionErrorKind.PASSWORD_PROTECTED,
                name=name,
            ) from e
        except UnsupportedCompressionMethodError as e:
            raise ExtractionError(
                f"Unsupported compression in {name}: {e}",
                ExtractionErrorKind.UNSUPPORTED_FORMAT,
                name=name,
            ) from e
        except (ArchiveError, lzma.LZMAError, EOFError, OSError, ValueError) as e:
            raise ExtractionError(
                f"Failed to extract 7z archive {name}: {e}",
                ExtractionErrorKind.CORRUPT,
                name=name,
            ) from e
        return Bundle(entries=_materialize(scratch, infos, name))


def _materialize(scratch: Path, infos: list, name: str) -> list[ArchiveEntry]:
    entries: list[ArchiveEntry] = []
    for info in infos:
        relative = info.filename.replace("\\", "/")
        if info.is_directory:
            entries.append(ArchiveEntry(relative_name=relative, is_directory=True))
            continue
        member = scratch / relative
        try:
            content = member.read_bytes()
        except OSError as e:
            raise ExtractionError(
                f"Member {relative} missing after extracting {name}",
                ExtractionErrorKind.CORRUPT,
                name=name,
            ) from e
        entries.append(ArchiveEntry.from_bytes(relative, content))
    return entries
