from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from ..errors import LoadError
from ..models.config import InstallerSettings


def load_settings(path: Path) -> InstallerSettings:
    """Load and validate settings.json.

    Accepts either a path to the file or a directory containing settings.json.
    """
    path = Path(path)
    resolved = path / "settings.json" if path.is_dir() else path
    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise LoadError(f"Settings file not found: {resolved}", path=resolved) from e
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON in {resolved}: {e}", path=resolved) from e
    try:
        return InstallerSettings.model_validate(data)
    except ValidationError as e:
        raise LoadError(f"Invalid settings in {resolved}: {e}", path=resolved) from e


def save_settings(settings: InstallerSettings, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(settings.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    tmp.replace(path)
