"""Login state machine over an IdentityService."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import AuthErrorKind, AuthStateError, IdentityServiceError
from ..models.auth import (
    AuthState,
    DeviceConfirmationChallenge,
    LoggedIn,
    LoginFailed,
    LoginOutcome,
    NeedsCode,
    NeedsDeviceConfirmation,
    OneTimeCodeChallenge,
    ServiceChallenge,
    ServiceRejected,
    ServiceResponse,
    ServiceSuccess,
)
from ..models.state import StoredCredentials, StoredToken
from ._classify import classify_rejection, describe

if TYPE_CHECKING:
    from ._protocols import CredentialStore, IdentityService

logger = logging.getLogger(__name__)

_STARTABLE = frozenset({AuthState.IDLE, AuthState.AUTHENTICATED, AuthState.FAILED})

# Rejections of a code that end the attempt instead of asking for another code.
_TERMINAL_CODE_FAILURES = frozenset(
    {
        AuthErrorKind.TIMEOUT,
        AuthErrorKind.RATE_LIMITED,
        AuthErrorKind.THROTTLED_LOCKOUT,
        AuthErrorKind.SESSION_EXPIRED,
    }
)


@dataclass
class _PendingLogin:
    account_name: str
    password: str
    persist: bool
    remember_password: bool


@dataclass(frozen=True)
class _ServiceUnreachable:
    """The service call raised something other than IdentityServiceError."""

    message: str


class AuthSession:
    """Drives login against an identity service, one awaited step at a time.

    The session is a plain value owned by the caller and handed to every
    operation that needs an authenticated identity:

        session = AuthSession(service, store)
        outcome = await session.start_login("alice", "hunter2", persist=True)
        if isinstance(outcome, NeedsCode):
            outcome = await session.submit_code(code)
        while isinstance(outcome, NeedsDeviceConfirmation):
            await asyncio.sleep(outcome.poll_interval_ms / 1000)
            outcome = await session.poll_device_confirmation()

    No step sleeps or retries internally; pacing and cancellation belong to the
    caller.
    """

    def __init__(self, service: IdentityService, store: CredentialStore | None = None) -> None:
        self._service = service
        self._store = store
        self._state = AuthState.IDLE
        self._account_name: str | None = None
        self._pending: _PendingLogin | None = None
        self._code_challenge: OneTimeCodeChallenge | None = None
        self._device_challenge: DeviceConfirmationChallenge | None = None
        self._failure: LoginFailed | None = None

    # --- introspection ---

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state == AuthState.AUTHENTICATED

    @property
    def account_name(self) -> str | None:
        return self._account_name if self.is_authenticated else None

    @property
    def failure(self) -> LoginFailed | None:
        """Classified reason of the last failed attempt while in FAILED."""
        return self._failure if self._state == AuthState.FAILED else None

    def saved_credentials(self) -> StoredCredentials | None:
        return self._store.get_credentials() if self._store is not None else None

    def has_cached_token(self) -> bool:
        return self._store is not None and self._store.get_token() is not None

    # --- state machine steps ---

    async def start_login(
        self,
        account_name: str,
        password: str = "",
        persist: bool = True,
        remember_password: bool = False,
    ) -> LoginOutcome:
        """Begin a login.

        A cached token is tried first; if the service rejects it the token is
        deleted and password login follows (or SESSION_EXPIRED is returned when
        there is no password to fall back to). A challenge in answer to the token
        keeps it. An empty password is replaced by the saved password for the
        same account, if one is stored.

        A service call that raises anything other than IdentityServiceError ends
        the attempt in FAILED with kind UNKNOWN.

        Raises:
            AuthStateError: If a login is already in progress.
        """
        if self._state not in _STARTABLE:
            raise AuthStateError("start login", self._state.value)
        self._reset()

        password = password or self._saved_password(account_name)
        pending = _PendingLogin(account_name, password, persist, remember_password)
        token = self._cached_token(account_name)

        if token is None and (not account_name or not password):
            return self._fail(
                AuthErrorKind.INVALID_CREDENTIAL, "Account name and password are required."
            )

        self._state = AuthState.AUTHENTICATING
        self._pending = pending

        if token is not None:
            logger.info("Attempting login with cached token")
            response = await self._call(self._service.begin_token_login(token.refresh_token))
            if isinstance(response, ServiceSuccess):
                if not response.account_name:
                    response = ServiceSuccess(response.refresh_token, token.account_name)
                return self._complete(response, used_cached_token=True)
            if not isinstance(response, ServiceRejected):
                # a challenge or an unreachable service says nothing about the token
                return self._handle(response)
            logger.info("Cached token rejected, discarding it")
            if self._store is not None:
                self._store.delete_token()
            if not account_name or not password:
                return self._fail(AuthErrorKind.SESSION_EXPIRED)

        logger.info("Attempting password login for %s", account_name)
        response = await self._call(self._service.begin_password_login(account_name, password))
        return self._handle(response)

    async def submit_code(self, code: str) -> LoginOutcome:
        """Submit a one-time code.

        A wrong code keeps the session in NEEDS_CODE with last_attempt_wrong set;
        there is no local attempt limit.

        Raises:
            AuthStateError: If no code is being asked for.
        """
        if self._state != AuthState.NEEDS_CODE or self._code_challenge is None:
            raise AuthStateError("submit a code", self._state.value)
        response = await self._call(self._service.submit_code(code))
        if isinstance(response, ServiceRejected):
            kind = classify_rejection(response.code, response.message)
            if kind in _TERMINAL_CODE_FAILURES:
                return self._fail(kind, response.message)
            logger.info("One-time code rejected")
            self._code_challenge = OneTimeCodeChallenge(
                mechanism=self._code_challenge.mechanism, last_attempt_wrong=True
            )
            return NeedsCode(mechanism=self._code_challenge.mechanism, last_attempt_wrong=True)
        return self._handle(response)

    async def poll_device_confirmation(self) -> LoginOutcome:
        """Check once whether the device confirmation was approved.

        Returns NeedsDeviceConfirmation while still pending.

        Raises:
            AuthStateError: If no device confirmation is pending.
        """
        if self._state != AuthState.NEEDS_DEVICE_CONFIRMATION:
            raise AuthStateError("poll device confirmation", self._state.value)
        response = await self._call(self._service.poll_device_status())
        return self._handle(response)

    def logout(self, clear_persisted: bool = False) -> None:
        """Return to IDLE from any state, optionally forgetting stored secrets."""
        if self._state == AuthState.AUTHENTICATED:
            logger.info("Logged out")
        self._reset()
        self._state = AuthState.IDLE
        if clear_persisted and self._store is not None:
            self._store.delete_token()
            self._store.delete_credentials()

    # --- internals ---

    async def _call(self, awaitable) -> ServiceResponse | _ServiceUnreachable:
        try:
            return await awaitable
        except IdentityServiceError as e:
            return ServiceRejected(code=e.code, message=str(e))
        except Exception as e:  # noqa: BLE001
            logger.warning("Identity service call failed: %s", e)
            return _ServiceUnreachable(str(e) or type(e).__name__)

    def _handle(self, response: ServiceResponse | _ServiceUnreachable) -> LoginOutcome:
        if isinstance(response, _ServiceUnreachable):
            return self._fail(AuthErrorKind.UNKNOWN, response.message)
        if isinstance(response, ServiceSuccess):
            return self._complete(response)
        if isinstance(response, ServiceRejected):
            return self._fail(classify_rejection(response.code, response.message), response.message)
        challenge = response.challenge if isinstance(response, ServiceChallenge) else None
        if isinstance(challenge, OneTimeCodeChallenge):
            self._state = AuthState.NEEDS_CODE
            self._code_challenge = challenge
            self._device_challenge = None
            logger.info("One-time code required (%s)", challenge.mechanism)
            return NeedsCode(
                mechanism=challenge.mechanism, last_attempt_wrong=challenge.last_attempt_wrong
            )
        if isinstance(challenge, DeviceConfirmationChallenge):
            if self._state != AuthState.NEEDS_DEVICE_CONFIRMATION:
                logger.info("Device confirmation required")
            self._state = AuthState.NEEDS_DEVICE_CONFIRMATION
            self._device_challenge = challenge
            self._code_challenge = None
            return NeedsDeviceConfirmation(poll_interval_ms=challenge.poll_interval_ms)
        return self._fail(AuthErrorKind.UNKNOWN, "Unknown auth method required.")

    def _complete(self, response: ServiceSuccess, used_cached_token: bool = False) -> LoginOutcome:
        pending = self._pending
        account_name = response.account_name or (pending.account_name if pending else "")
        if pending is not None and pending.persist and self._store is not None:
            self._store.save_token(
                StoredToken(account_name=account_name, refresh_token=response.refresh_token)
            )
            if pending.remember_password and pending.password:
                self._store.save_credentials(
                    StoredCredentials(username=pending.account_name, password=pending.password)
                )
        self._reset()
        self._state = AuthState.AUTHENTICATED
        self._account_name = account_name
        logger.info("Login successful")
        return LoggedIn(account_name=account_name, used_cached_token=used_cached_token)

    def _fail(self, kind: AuthErrorKind, message: str = "") -> LoginFailed:
        self._reset()
        self._state = AuthState.FAILED
        self._failure = LoginFailed(kind=kind, reason=describe(kind, message))
        logger.warning("Login failed: %s", kind.value)
        return self._failure

    def _reset(self) -> None:
        self._pending = None
        self._code_challenge = None
        self._device_challenge = None
        self._failure = None
        self._account_name = None

    def _cached_token(self, account_name: str) -> StoredToken | None:
        if self._store is None:
            return None
        token = self._store.get_token()
        if token is None:
            return None
        if account_name and token.account_name and token.account_name != account_name:
            return None
        return token

    def _saved_password(self, account_name: str) -> str:
        credentials = self.saved_credentials()
        if credentials is None or credentials.username != account_name:
            return ""
        return credentials.password
