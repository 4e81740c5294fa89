from __future__ import annotations

import io

import rarfile

from ..errors import ExtractionError, ExtractionErrorKind
from ..models.bundle import ArchiveEntry, Bundle


def _password_error(name: str) -> ExtractionError:
    return ExtractionError(
        f"Archive {name} is password protected",
        ExtractionErrorKind.PASSWORD_PROTECTED,
        name=name,
    )


def open_rar(data: bytes, name: str) -> Bundle:
    """Read every member of a rar archive into memory.

    Decompression needs an external unrar-compatible tool; its absence is
    reported as an unsupported format.
    """
    try:
        archive = rarfile.RarFile(io.BytesIO(data))
    except rarfile.PasswordRequired as e:
        raise _password_error(name) from e
    except rarfile.Error as e:
        raise ExtractionError(
            f"Failed to open rar archive {name}: {e}", ExtractionErrorKind.CORRUPT, name=name
        ) from e

    entries: list[ArchiveEntry] = []
    with archive:
        if archive.needs_password():
            raise _password_error(name)
        for info in archive.infolist():
            relative = info.filename.replace("\\", "/")
            if info.is_dir():
                entries.append(ArchiveEntry(relative_name=relative, is_directory=True))
                continue
            try:
                content = archive.read(info)
            except (rarfile.PasswordRequired, rarfile.RarWrongPassword) as e:
                raise _password_error(name) from e
            except rarfile.RarCannotExec as e:
                raise ExtractionError(
                    f"No rar extraction tool available for {name}: {e}",
                    ExtractionErrorKind.UNSUPPORTED_FORMAT,
                    name=name,
                ) from e
            except rarfile.Error as e:
                raise ExtractionError(
                    f"Failed to read {relative} from {name}: {e}",
                    ExtractionErrorKind.CORRUPT,
                    name=name,
                ) from e
            entries.append(ArchiveEntry.from_bytes(relative, content))
    return Bundle(entries=entries)
