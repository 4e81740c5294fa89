from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from ._result import ValidationResult

if TYPE_CHECKING:
    from ..models.bundle import Bundle


def validate_bundle(bundle: Bundle) -> ValidationResult:
    result = ValidationResult()

    if not bundle.scripts and not bundle.keys:
        result.error("bundle has no script (.lua) or key (.vdf) file")
    if not bundle.manifests:
        result.error("bundle has no .manifest file")

    seen: dict[str, str] = {}
    for entry in bundle.scripts + bundle.keys + bundle.manifests:
        if not _is_safe_name(entry.file_name):
            result.error("unsafe file name for install", entry.relative_name)
            continue
        previous = seen.get(entry.file_name.lower())
        if previous is not None:
            result.warn(f"same file name as {previous}; the later entry wins", entry.relative_name)
        seen[entry.file_name.lower()] = entry.relative_name

    return result


def _is_safe_name(name: str) -> bool:
    return bool(name) and name not in (".", "..") and PurePosixPath(name).name == name
