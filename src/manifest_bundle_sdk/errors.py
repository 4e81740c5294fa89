from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class AuthErrorKind(str, Enum):
    INVALID_CREDENTIAL = "invalid_credential"
    ACCOUNT_NOT_FOUND = "account_not_found"
    RATE_LIMITED = "rate_limited"
    THROTTLED_LOCKOUT = "throttled_lockout"
    SESSION_EXPIRED = "session_expired"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ExtractionErrorKind(str, Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    PASSWORD_PROTECTED = "password_protected"
    CORRUPT = "corrupt"


class FetchErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    TOO_MANY_REDIRECTS = "too_many_redirects"
    NETWORK_FAILURE = "network_failure"
    PARTIAL_RESPONSE = "partial_response"


class BundleErrorKind(str, Enum):
    INCOMPLETE_BUNDLE = "incomplete_bundle"


class InstallErrorKind(str, Enum):
    PROCESS_STOP_FAILED = "process_stop_failed"
    WRITE_FAILED = "write_failed"


class LoadError(Exception):
    """Raised when loading a settings or state file fails.

    Attributes:
        path: The file or directory path that could not be loaded, if applicable.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class FetchError(Exception):
    """Raised when a remote fetch fails (network, HTTP status, redirects, short body).

    Attributes:
        kind: Classified failure.
        url: The URL or source that failed, if applicable.
    """

    def __init__(
        self,
        message: str,
        kind: FetchErrorKind = FetchErrorKind.NETWORK_FAILURE,
        url: str | None = None,
    ) -> None:
        self.kind = kind
        self.url = url
        super().__init__(message)


class ExtractionError(Exception):
    """Raised when an archive cannot be opened or one of its members cannot be read.

    Attributes:
        kind: Classified failure.
        name: Declared archive file name.
    """

    def __init__(self, message: str, kind: ExtractionErrorKind, name: str | None = None) -> None:
        self.kind = kind
        self.name = name
        super().__init__(message)


class BundleError(Exception):
    """Raised when a bundle does not have the file composition required for install."""

    def __init__(
        self, message: str, kind: BundleErrorKind = BundleErrorKind.INCOMPLETE_BUNDLE
    ) -> None:
        self.kind = kind
        super().__init__(message)


class InstallError(Exception):
    """Raised when stopping the dependent process or writing a target file fails.

    Attributes:
        kind: Classified failure.
        path: The target file that could not be written, if applicable.
    """

    def __init__(self, message: str, kind: InstallErrorKind, path: Path | None = None) -> None:
        self.kind = kind
        self.path = path
        super().__init__(message)


class NotAuthenticatedError(Exception):
    """Raised when a catalog operation is attempted without an authenticated session."""

    def __init__(self) -> None:
        super().__init__("Not logged in to the identity service")


class AuthStateError(Exception):
    """Raised when an AuthSession operation is invoked from a state that does not allow it."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is {state}")


class IdentityServiceError(Exception):
    """Raised by identity service implementations for transport-level failures.

    Attributes:
        code: Numeric result code reported by the service, if any.
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)
