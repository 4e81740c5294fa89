from __future__ import annotations

from enum import IntEnum

from ..errors import AuthErrorKind


class ServiceResultCode(IntEnum):
    """Result codes the identity service attaches to rejections."""

    INVALID_PASSWORD = 5
    TIMEOUT = 16
    ACCOUNT_NOT_FOUND = 18
    EXPIRED = 27
    INVALID_LOGIN_AUTH_CODE = 65
    RATE_LIMIT_EXCEEDED = 84
    ACCOUNT_LOGIN_DENIED_THROTTLE = 87
    TWO_FACTOR_CODE_MISMATCH = 88


_BY_CODE: dict[int, AuthErrorKind] = {
    ServiceResultCode.INVALID_PASSWORD: AuthErrorKind.INVALID_CREDENTIAL,
    ServiceResultCode.INVALID_LOGIN_AUTH_CODE: AuthErrorKind.INVALID_CREDENTIAL,
    ServiceResultCode.TWO_FACTOR_CODE_MISMATCH: AuthErrorKind.INVALID_CREDENTIAL,
    ServiceResultCode.ACCOUNT_NOT_FOUND: AuthErrorKind.ACCOUNT_NOT_FOUND,
    ServiceResultCode.RATE_LIMIT_EXCEEDED: AuthErrorKind.RATE_LIMITED,
    ServiceResultCode.ACCOUNT_LOGIN_DENIED_THROTTLE: AuthErrorKind.THROTTLED_LOCKOUT,
    ServiceResultCode.TIMEOUT: AuthErrorKind.TIMEOUT,
    ServiceResultCode.EXPIRED: AuthErrorKind.TIMEOUT,
}

# Checked in order; the throttle marker must win over the generic rate-limit one.
_BY_MESSAGE: tuple[tuple[str, AuthErrorKind], ...] = (
    ("accountlogindeniedthrottle", AuthErrorKind.THROTTLED_LOCKOUT),
    ("ratelimitexceeded", AuthErrorKind.RATE_LIMITED),
    ("invalidpassword", AuthErrorKind.INVALID_CREDENTIAL),
    ("twofactorcodemismatch", AuthErrorKind.INVALID_CREDENTIAL),
    ("invalidloginauthcode", AuthErrorKind.INVALID_CREDENTIAL),
    ("accountnotfound", AuthErrorKind.ACCOUNT_NOT_FOUND),
    ("timed out", AuthErrorKind.TIMEOUT),
    ("timeout", AuthErrorKind.TIMEOUT),
    ("expired", AuthErrorKind.TIMEOUT),
)

_REASONS: dict[AuthErrorKind, str] = {
    AuthErrorKind.INVALID_CREDENTIAL: "Invalid username or password.",
    AuthErrorKind.ACCOUNT_NOT_FOUND: "Account not found. Check your username.",
    AuthErrorKind.RATE_LIMITED: (
        "Too many login attempts. Please wait a few minutes and try again."
    ),
    AuthErrorKind.THROTTLED_LOCKOUT: (
        "Login temporarily blocked due to too many attempts. "
        "Please wait 15-30 minutes before trying again."
    ),
    AuthErrorKind.SESSION_EXPIRED: "Session expired, please login again.",
    AuthErrorKind.TIMEOUT: "Login timed out.",
}


def classify_rejection(code: int | None, message: str = "") -> AuthErrorKind:
    """Map a service result code or message to an AuthErrorKind."""
    if code is not None and code in _BY_CODE:
        return _BY_CODE[code]
    lowered = message.lower()
    for marker, kind in _BY_MESSAGE:
        if marker in lowered:
            return kind
    return AuthErrorKind.UNKNOWN


def describe(kind: AuthErrorKind, message: str = "") -> str:
    """Human-readable reason for a classified failure."""
    if kind in _REASONS:
        return _REASONS[kind]
    return message or "Login failed."
