"""In-memory credential store for testing (no disk I/O)."""

from __future__ import annotations

from ..models.state import StoredCredentials, StoredToken


class InMemoryCredentialStore:
    def __init__(
        self,
        token: StoredToken | None = None,
        credentials: StoredCredentials | None = None,
    ) -> None:
        self._token = token
        self._credentials = credentials

    def get_token(self) -> StoredToken | None:
        return self._token

    def save_token(self, token: StoredToken) -> None:
        self._token = token

    def delete_token(self) -> None:
        self._token = None

    def get_credentials(self) -> StoredCredentials | None:
        return self._credentials

    def save_credentials(self, credentials: StoredCredentials) -> None:
        self._credentials = credentials

    def delete_credentials(self) -> None:
        self._credentials = None
