from __future__ import annotations

import io
import zipfile
import zlib
from typing import Callable

from ..errors import ExtractionError, ExtractionErrorKind
from ..models.bundle import ArchiveEntry, Bundle

_PASSWORD_MARKERS = ("encrypted", "password")


def open_zip(data: bytes, name: str) -> Bundle:
    """Index a zip archive held in memory. Members are read on demand."""
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zlib.error, ValueError) as e:
        raise ExtractionError(
            f"Failed to open zip archive {name}: {e}", ExtractionErrorKind.CORRUPT, name=name
        ) from e
    entries = [
        ArchiveEntry(
            relative_name=info.filename,
            is_directory=info.is_dir(),
            size_hint=info.file_size,
            reader=_member_reader(archive, info, name),
        )
        for info in archive.infolist()
    ]
    return Bundle(entries=entries)


def _member_reader(
    archive: zipfile.ZipFile, info: zipfile.ZipInfo, name: str
) -> Callable[[], bytes]:
    def read() -> bytes:
        try:
            return archive.read(info)
        except RuntimeError as e:
            # zipfile signals encryption with a bare RuntimeError
            message = str(e).lower()
            if any(marker in message for marker in _PASSWORD_MARKERS):
                raise ExtractionError(
                    f"Archive {name} is password protected",
                    ExtractionErrorKind.PASSWORD_PROTECTED,
                    name=name,
                ) from e
            raise ExtractionError(
                f"Failed to read {info.filename} from {name}: {e}",
                ExtractionErrorKind.CORRUPT,
                name=name,
            ) from e
        except NotImplementedError as e:
            raise ExtractionError(
                f"Unsupported compression for {info.filename} in {name}: {e}",
                ExtractionErrorKind.UNSUPPORTED_FORMAT,
                name=name,
            ) from e
        except (zipfile.BadZipFile, zlib.error, EOFError, ValueError) as e:
            raise ExtractionError(
                f"Failed to read {info.filename} from {name}: {e}",
                ExtractionErrorKind.CORRUPT,
                name=name,
            ) from e

    return read
