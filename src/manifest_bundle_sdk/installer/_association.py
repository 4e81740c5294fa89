"""Which installed files belong to an app, inferred from file names and script text."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from .._scripts import parse_script, references_app
from ..models.bundle import KEY_SUFFIX, MANIFEST_SUFFIX, SCRIPT_SUFFIX
from ._layout import TargetLayout

logger = logging.getLogger(__name__)


@dataclass
class Association:
    """Files associated with one app id."""

    scripts: list[Path] = field(default_factory=list)
    manifest_ids: list[str] = field(default_factory=list)
    manifests: list[Path] = field(default_factory=list)
    keys: list[Path] = field(default_factory=list)

    @property
    def files(self) -> list[Path]:
        return self.scripts + self.keys + self.manifests


@dataclass
class InstalledApp:
    app_id: int
    name: str
    script_file: str
    manifest_ids: list[str]
    manifest_files: list[str]
    name_known: bool = True


class ManifestIndex(Protocol):
    def associate(self, layout: TargetLayout, app_id: int) -> Association: ...
    def installed(self, layout: TargetLayout) -> list[InstalledApp]: ...


def _files_with_suffix(directory: Path, suffix: str) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.name.lower().endswith(suffix)
    )


def _read_script(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def _containing_any(paths: list[Path], ids: list[str]) -> list[Path]:
    return [p for p in paths if any(i in p.name for i in ids)]


class TextualManifestIndex:
    """Associates by text: a script belongs to an app if it contains `addappid(<id>)`;
    manifests and key files belong to it if their name contains one of the manifest
    ids the script sets.

    Two apps whose manifest ids are substrings of each other's file names are not
    told apart.
    """

    def associate(self, layout: TargetLayout, app_id: int) -> Association:
        result = Association()
        for script in _files_with_suffix(layout.script_dir, SCRIPT_SUFFIX):
            text = _read_script(script)
            if not references_app(text, app_id):
                continue
            result.scripts.append(script)
            for manifest_id in parse_script(text).manifest_ids:
                if manifest_id not in result.manifest_ids:
                    result.manifest_ids.append(manifest_id)
        if result.manifest_ids:
            result.manifests = _containing_any(
                _files_with_suffix(layout.manifest_dir, MANIFEST_SUFFIX), result.manifest_ids
            )
            result.keys = _containing_any(
                _files_with_suffix(layout.script_dir, KEY_SUFFIX), result.manifest_ids
            )
        return result

    def installed(self, layout: TargetLayout) -> list[InstalledApp]:
        manifests = _files_with_suffix(layout.manifest_dir, MANIFEST_SUFFIX)
        apps: list[InstalledApp] = []
        for script in _files_with_suffix(layout.script_dir, SCRIPT_SUFFIX):
            refs = parse_script(_read_script(script))
            app_id = refs.main_app_id
            if app_id is None and script.stem.isdigit():
                app_id = int(script.stem)
            if app_id is None:
                logger.debug("Skipping %s: no app declaration", script.name)
                continue
            apps.append(
                InstalledApp(
                    app_id=app_id,
                    name=refs.name or f"App {app_id}",
                    name_known=bool(refs.name),
                    script_file=script.name,
                    manifest_ids=refs.manifest_ids,
                    manifest_files=[
                        p.name for p in _containing_any(manifests, refs.manifest_ids)
                    ],
                )
            )
        return apps
