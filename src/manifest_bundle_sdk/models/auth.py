"""Login challenges, identity-service responses and login outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Union

from ..errors import AuthErrorKind

CodeMechanism = Literal["email", "authenticator"]


class AuthState(str, Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    NEEDS_CODE = "needs_code"
    NEEDS_DEVICE_CONFIRMATION = "needs_device_confirmation"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


# --- challenges ---


@dataclass(frozen=True)
class NoChallenge:
    pass


@dataclass(frozen=True)
class OneTimeCodeChallenge:
    mechanism: CodeMechanism = "authenticator"
    last_attempt_wrong: bool = False


@dataclass(frozen=True)
class DeviceConfirmationChallenge:
    poll_interval_ms: int = 5000


AuthChallenge = Union[NoChallenge, OneTimeCodeChallenge, DeviceConfirmationChallenge]


# --- identity service responses ---


@dataclass(frozen=True)
class ServiceSuccess:
    refresh_token: str
    account_name: str = ""


@dataclass(frozen=True)
class ServiceChallenge:
    challenge: AuthChallenge


@dataclass(frozen=True)
class ServiceRejected:
    """Rejection as reported by the service; classified by AuthSession."""

    code: int | None = None
    message: str = ""


ServiceResponse = Union[ServiceSuccess, ServiceChallenge, ServiceRejected]


# --- outcomes returned to callers ---


@dataclass(frozen=True)
class LoggedIn:
    account_name: str
    used_cached_token: bool = False


@dataclass(frozen=True)
class NeedsCode:
    mechanism: CodeMechanism
    last_attempt_wrong: bool = False


@dataclass(frozen=True)
class NeedsDeviceConfirmation:
    poll_interval_ms: int


@dataclass(frozen=True)
class LoginFailed:
    kind: AuthErrorKind
    reason: str


LoginOutcome = Union[LoggedIn, NeedsCode, NeedsDeviceConfirmation, LoginFailed]
