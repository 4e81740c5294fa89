from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

from ..errors import (
    AuthStateError,
    BundleError,
    ExtractionError,
    FetchError,
    InstallError,
    LoadError,
    NotAuthenticatedError,
)
from ..fetchers import FetchResult
from ..installer import InstallResult

T = TypeVar("T")

# Everything the UI surface converts into a failed OperationResult.
HANDLED_ERRORS = (
    AuthStateError,
    BundleError,
    ExtractionError,
    FetchError,
    InstallError,
    LoadError,
    NotAuthenticatedError,
)


@dataclass
class OperationResult(Generic[T]):
    """Success or failure of one UI-facing command.

    Attributes:
        ok: True on success.
        value: The command's result on success.
        error_kind: Classified failure, e.g. "rate_limited" or "password_protected".
        reason: Human-readable failure reason.
    """

    ok: bool
    value: T | None = None
    error_kind: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> OperationResult[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error_kind: str, reason: str) -> OperationResult[T]:
        return cls(ok=False, error_kind=error_kind, reason=reason)

    @classmethod
    def from_error(cls, error: Exception) -> OperationResult[T]:
        kind = getattr(error, "kind", None)
        if kind is not None:
            error_kind = kind.value
        elif isinstance(error, NotAuthenticatedError):
            error_kind = "not_authenticated"
        elif isinstance(error, AuthStateError):
            error_kind = "invalid_state"
        else:
            error_kind = "load_failed"
        return cls.failure(error_kind, str(error))


@dataclass
class InstallReport:
    """What was installed, from where, and whether the application was relaunched."""

    fetch: FetchResult
    install: InstallResult

    @property
    def relaunched(self) -> bool:
        return self.install.relaunched


@dataclass
class ExportReport:
    fetch: FetchResult
    directory: Path
    files: list[Path]
