from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..models.bundle import ArchiveEntry, FileKind

SCRIPT_DIR = "config/stplug-in"
MANIFEST_DIR = "config/depotcache"


@dataclass(frozen=True)
class TargetLayout:
    """The two install subdirectories under a caller-supplied root."""

    root: Path
    script_subdir: str = SCRIPT_DIR
    manifest_subdir: str = MANIFEST_DIR

    @property
    def script_dir(self) -> Path:
        return Path(self.root) / self.script_subdir

    @property
    def manifest_dir(self) -> Path:
        return Path(self.root) / self.manifest_subdir

    def destination(self, entry: ArchiveEntry) -> Path | None:
        """Where an entry is installed; None for entries that are not installed."""
        if entry.kind in (FileKind.SCRIPT, FileKind.KEY):
            return self.script_dir / entry.file_name
        if entry.kind == FileKind.MANIFEST:
            return self.manifest_dir / entry.file_name
        return None
