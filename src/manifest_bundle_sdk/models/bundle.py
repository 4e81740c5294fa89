from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Callable, Literal

SCRIPT_SUFFIX = ".lua"
MANIFEST_SUFFIX = ".manifest"
KEY_SUFFIX = ".vdf"


class FileKind(str, Enum):
    SCRIPT = "script"
    MANIFEST = "manifest"
    KEY = "key"
    OTHER = "other"


def classify(file_name: str) -> FileKind:
    """Classify a file by its (case-insensitive) suffix."""
    lowered = file_name.lower()
    if lowered.endswith(SCRIPT_SUFFIX):
        return FileKind.SCRIPT
    if lowered.endswith(MANIFEST_SUFFIX):
        return FileKind.MANIFEST
    if lowered.endswith(KEY_SUFFIX):
        return FileKind.KEY
    return FileKind.OTHER


def _no_data() -> bytes:
    return b""


@dataclass(frozen=True)
class ArchiveEntry:
    """Immutable view over one member of an archive or one loose file.

    Attributes:
        relative_name: Member path inside the archive, always "/"-separated.
        is_directory: True for directory members (never read).
        size_hint: Uncompressed size if the container reports it.
        reader: Returns the member bytes; may raise ExtractionError.
    """

    relative_name: str
    is_directory: bool = False
    size_hint: int | None = None
    reader: Callable[[], bytes] = field(default=_no_data, repr=False, compare=False)

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> ArchiveEntry:
        return cls(relative_name=name, size_hint=len(data), reader=lambda: data)

    @property
    def file_name(self) -> str:
        return PurePosixPath(self.relative_name.replace("\\", "/")).name

    @property
    def kind(self) -> FileKind:
        if self.is_directory:
            return FileKind.OTHER
        return classify(self.file_name)

    def read_bytes(self) -> bytes:
        return self.reader()


@dataclass
class Bundle:
    """Ordered set of entries acquired from one source, classified by suffix."""

    entries: list[ArchiveEntry] = field(default_factory=list)

    def files(self) -> list[ArchiveEntry]:
        return [e for e in self.entries if not e.is_directory]

    def of_kind(self, kind: FileKind) -> list[ArchiveEntry]:
        return [e for e in self.files() if e.kind == kind]

    @property
    def scripts(self) -> list[ArchiveEntry]:
        return self.of_kind(FileKind.SCRIPT)

    @property
    def manifests(self) -> list[ArchiveEntry]:
        return self.of_kind(FileKind.MANIFEST)

    @property
    def keys(self) -> list[ArchiveEntry]:
        return self.of_kind(FileKind.KEY)

    @property
    def names(self) -> list[str]:
        return [e.relative_name for e in self.entries]


Strategy = Literal["direct", "repository", "archive", "folder", "upload"]


@dataclass(frozen=True)
class Provenance:
    """Where a bundle came from."""

    strategy: Strategy
    source: str
    app_id: int | None = None
