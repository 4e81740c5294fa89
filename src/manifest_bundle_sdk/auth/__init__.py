"""Authentication against the identity service, with optional credential caching."""

from ._classify import ServiceResultCode, classify_rejection
from ._credentials import LocalFilesystemCredentialStore
from ._in_memory import InMemoryCredentialStore
from ._protocols import CredentialStore, IdentityService
from ._session import AuthSession

__all__ = [
    "AuthSession",
    "CredentialStore",
    "IdentityService",
    "InMemoryCredentialStore",
    "LocalFilesystemCredentialStore",
    "ServiceResultCode",
    "classify_rejection",
]
