"""Filesystem credential store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..models.state import StoredCredentials, StoredToken

logger = logging.getLogger(__name__)


def _atomic_write(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(data, encoding="utf-8")
    tmp.replace(path)


def _load_json(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        return None
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        logger.warning("Ignoring unreadable state file %s", path)
        return None
    return raw if isinstance(raw, dict) else None


def _unlink(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


class LocalFilesystemCredentialStore:
    """Reads/writes refresh_token.json and credentials.json in a data directory."""

    def __init__(self, data_dir: Path) -> None:
        self._dir = Path(data_dir)
        self._token_file = self._dir / "refresh_token.json"
        self._credentials_file = self._dir / "credentials.json"

    def get_token(self) -> StoredToken | None:
        raw = _load_json(self._token_file)
        if raw is None:
            return None
        try:
            token = StoredToken.model_validate(raw)
        except ValidationError:
            return None
        return token if token.refresh_token else None

    def save_token(self, token: StoredToken) -> None:
        _atomic_write(self._token_file, token.model_dump_json(by_alias=True))

    def delete_token(self) -> None:
        _unlink(self._token_file)

    def get_credentials(self) -> StoredCredentials | None:
        raw = _load_json(self._credentials_file)
        if raw is None:
            return None
        try:
            credentials = StoredCredentials.model_validate(raw)
        except ValidationError:
            return None
        if not credentials.username or not credentials.password:
            return None
        return credentials

    def save_credentials(self, credentials: StoredCredentials) -> None:
        _atomic_write(self._credentials_file, credentials.model_dump_json(by_alias=True))

    def delete_credentials(self) -> None:
        _unlink(self._credentials_file)
