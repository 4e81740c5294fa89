"""InstallCoordinator: the only code path that mutates the target layout."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import ExtractionError, ExtractionErrorKind, InstallError, InstallErrorKind
from ..models.bundle import Bundle
from ..validation import require_complete
from ._association import InstalledApp, ManifestIndex, TextualManifestIndex
from ._layout import MANIFEST_DIR, SCRIPT_DIR, TargetLayout
from ._process import ProcessController

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    relaunched: bool
    written: list[Path] = field(default_factory=list)


@dataclass
class UninstallResult:
    app_id: int
    removed: list[Path] = field(default_factory=list)
    manifest_ids: list[str] = field(default_factory=list)


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _stage(bundle: Bundle, layout: TargetLayout) -> list[tuple[Path, bytes]]:
    """Pair each installable entry with its destination and its bytes."""
    staged: list[tuple[Path, bytes]] = []
    for entry in bundle.files():
        dest = layout.destination(entry)
        if dest is None:
            continue
        try:
            data = entry.read_bytes()
        except OSError as e:
            raise ExtractionError(
                f"Failed to read {entry.relative_name}: {e}",
                ExtractionErrorKind.CORRUPT,
                name=entry.relative_name,
            ) from e
        staged.append((dest, data))
    return staged


class InstallCoordinator:
    """Writes bundles into `<root>/config/stplug-in` and `<root>/config/depotcache`.

    Callers must not run two installs or uninstalls against the same root at once.
    """

    def __init__(
        self,
        process: ProcessController,
        index: ManifestIndex | None = None,
        settle_delay: float = 2.0,
        script_subdir: str = SCRIPT_DIR,
        manifest_subdir: str = MANIFEST_DIR,
    ) -> None:
        self._process = process
        self._index = index or TextualManifestIndex()
        self._settle_delay = settle_delay
        self._script_subdir = script_subdir
        self._manifest_subdir = manifest_subdir

    def layout(self, root: Path) -> TargetLayout:
        return TargetLayout(Path(root), self._script_subdir, self._manifest_subdir)

    async def install(self, bundle: Bundle, target_root: Path) -> InstallResult:
        """Install every script, key and manifest file of a bundle.

        Every entry is read before the process is touched. The process is then
        stopped before the first write and, if it was running, relaunched after
        the last one, even when a write failed.

        Raises:
            BundleError: INCOMPLETE_BUNDLE; nothing is touched.
            ExtractionError: An entry could not be read; nothing is touched.
            InstallError: PROCESS_STOP_FAILED before any write, or WRITE_FAILED
                with earlier files left in place.
        """
        require_complete(bundle)
        layout = self.layout(target_root)
        staged = await asyncio.to_thread(_stage, bundle, layout)

        was_running = await asyncio.to_thread(self._process.is_running)
        if was_running:
            await asyncio.to_thread(self._process.stop)
            await asyncio.sleep(self._settle_delay)

        written: list[Path] = []
        try:
            await asyncio.to_thread(self._write_all, staged, layout, written)
        finally:
            relaunched = False
            if was_running:
                relaunched = await self._relaunch(layout)
        logger.info("Installed %d file(s) into %s", len(written), layout.root)
        return InstallResult(relaunched=relaunched, written=written)

    def _write_all(
        self, staged: list[tuple[Path, bytes]], layout: TargetLayout, written: list[Path]
    ) -> None:
        try:
            layout.script_dir.mkdir(parents=True, exist_ok=True)
            layout.manifest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallError(
                f"Cannot create target directories under {layout.root}: {e}",
                InstallErrorKind.WRITE_FAILED,
                path=layout.root,
            ) from e
        for dest, data in staged:
            try:
                _atomic_write_bytes(dest, data)
            except OSError as e:
                raise InstallError(
                    f"Failed to write {dest}: {e}", InstallErrorKind.WRITE_FAILED, path=dest
                ) from e
            written.append(dest)
            logger.debug("Wrote %s (%d bytes)", dest, len(data))

    async def _relaunch(self, layout: TargetLayout) -> bool:
        try:
            await asyncio.to_thread(self._process.launch, layout.root)
        except OSError as e:
            logger.error("Relaunch from %s failed: %s", layout.root, e)
            return False
        return True

    async def uninstall(self, app_id: int, target_root: Path) -> UninstallResult:
        """Delete the scripts declaring an app and the manifests and key files they name.

        Raises:
            InstallError: WRITE_FAILED if a file cannot be deleted.
        """
        layout = self.layout(target_root)
        association = await asyncio.to_thread(self._index.associate, layout, app_id)
        result = UninstallResult(app_id=app_id, manifest_ids=association.manifest_ids)
        for path in association.files:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise InstallError(
                    f"Failed to delete {path}: {e}", InstallErrorKind.WRITE_FAILED, path=path
                ) from e
            result.removed.append(path)
        logger.info("Uninstalled app %s: removed %d file(s)", app_id, len(result.removed))
        return result

    def list_installed(self, target_root: Path) -> list[InstalledApp]:
        return self._index.installed(self.layout(target_root))
