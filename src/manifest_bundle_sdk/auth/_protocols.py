"""Protocols (ports) for the identity service and credential persistence."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..models.auth import ServiceResponse
    from ..models.state import StoredCredentials, StoredToken


class IdentityService(Protocol):
    """Remote identity service driven by AuthSession.

    Every call performs one request and returns without waiting on the user.
    poll_device_status answers a ServiceChallenge carrying the device challenge
    while the confirmation is still pending.
    """

    async def begin_password_login(self, account_name: str, password: str) -> ServiceResponse: ...
    async def begin_token_login(self, refresh_token: str) -> ServiceResponse: ...
    async def submit_code(self, code: str) -> ServiceResponse: ...
    async def poll_device_status(self) -> ServiceResponse: ...


class CredentialStore(Protocol):
    """Persists the long-lived token and the optional plaintext credentials."""

    def get_token(self) -> StoredToken | None: ...
    def save_token(self, token: StoredToken) -> None: ...
    def delete_token(self) -> None: ...
    def get_credentials(self) -> StoredCredentials | None: ...
    def save_credentials(self, credentials: StoredCredentials) -> None: ...
    def delete_credentials(self) -> None: ...
