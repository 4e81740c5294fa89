"""Tests for the AuthSession state machine and rejection classification."""

import pytest

from manifest_bundle_sdk import (
    AuthErrorKind,
    AuthSession,
    AuthState,
    AuthStateError,
    DeviceConfirmationChallenge,
    IdentityServiceError,
    InMemoryCredentialStore,
    LoggedIn,
    LoginFailed,
    NeedsCode,
    NeedsDeviceConfirmation,
    OneTimeCodeChallenge,
    ServiceChallenge,
    ServiceRejected,
    ServiceSuccess,
    classify_rejection,
)
from manifest_bundle_sdk.models.state import StoredCredentials, StoredToken


class ScriptedIdentityService:
    """Answers each call with the next queued response for that call."""

    def __init__(self, password=(), token=(), code=(), device=()):
        self.queues = {
            "password": list(password),
            "token": list(token),
            "code": list(code),
            "device": list(device),
        }
        self.calls = []

    def _next(self, name, *args):
        self.calls.append((name, *args))
        response = self.queues[name].pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def begin_password_login(self, account_name, password):
        return self._next("password", account_name, password)

    async def begin_token_login(self, refresh_token):
        return self._next("token", refresh_token)

    async def submit_code(self, code):
        return self._next("code", code)

    async def poll_device_status(self):
        return self._next("device")


def cached(account="alice", token="cached-token"):
    return InMemoryCredentialStore(token=StoredToken(account_name=account, refresh_token=token))


# --- classification ---


@pytest.mark.parametrize(
    ("code", "message", "kind"),
    [
        (5, "", AuthErrorKind.INVALID_CREDENTIAL),
        (18, "", AuthErrorKind.ACCOUNT_NOT_FOUND),
        (84, "", AuthErrorKind.RATE_LIMITED),
        (87, "", AuthErrorKind.THROTTLED_LOCKOUT),
        (88, "", AuthErrorKind.INVALID_CREDENTIAL),
        (27, "", AuthErrorKind.TIMEOUT),
        (None, "Error: InvalidPassword", AuthErrorKind.INVALID_CREDENTIAL),
        (None, "RateLimitExceeded", AuthErrorKind.RATE_LIMITED),
        (None, "AccountLoginDeniedThrottle RateLimitExceeded", AuthErrorKind.THROTTLED_LOCKOUT),
        (None, "request timed out", AuthErrorKind.TIMEOUT),
        (2, "Fail", AuthErrorKind.UNKNOWN),
    ],
)
def test_classify_rejection(code, message, kind):
    assert classify_rejection(code, message) == kind


# --- password login ---


@pytest.mark.asyncio
async def test_password_login_success_persists_token():
    store = InMemoryCredentialStore()
    service = ScriptedIdentityService(password=[ServiceSuccess("new-token", "alice")])
    session = AuthSession(service, store)

    outcome = await session.start_login("alice", "pw", persist=True)

    assert outcome == LoggedIn(account_name="alice")
    assert session.state == AuthState.AUTHENTICATED
    assert session.account_name == "alice"
    assert store.get_token().refresh_token == "new-token"
    assert store.get_credentials() is None


@pytest.mark.asyncio
async def test_remember_password_saves_credentials():
    store = InMemoryCredentialStore()
    service = ScriptedIdentityService(password=[ServiceSuccess("t", "alice")])
    session = AuthSession(service, store)

    await session.start_login("alice", "pw", remember_password=True)

    assert store.get_credentials() == StoredCredentials(username="alice", password="pw")


@pytest.mark.asyncio
async def test_persist_false_writes_nothing():
    store = InMemoryCredentialStore()
    service = ScriptedIdentityService(password=[ServiceSuccess("t", "alice")])
    session = AuthSession(service, store)

    await session.start_login("alice", "pw", persist=False)

    assert session.is_authenticated
    assert store.get_token() is None


@pytest.mark.asyncio
async def test_invalid_password_fails_without_persisting():
    store = InMemoryCredentialStore()
    service = ScriptedIdentityService(password=[ServiceRejected(code=5, message="InvalidPassword")])
    session = AuthSession(service, store)

    outcome = await session.start_login("alice", "wrong")

    assert isinstance(outcome, LoginFailed)
    assert outcome.kind == AuthErrorKind.INVALID_CREDENTIAL
    assert session.state == AuthState.FAILED
    assert session.failure == outcome
    assert store.get_token() is None


@pytest.mark.asyncio
async def test_missing_password_without_token_fails_locally():
    service = ScriptedIdentityService()
    session = AuthSession(service, InMemoryCredentialStore())

    outcome = await session.start_login("alice", "")

    assert outcome.kind == AuthErrorKind.INVALID_CREDENTIAL
    assert service.calls == []


@pytest.mark.asyncio
async def test_three_rate_limited_attempts_are_all_rate_limited():
    rejection = IdentityServiceError("RateLimitExceeded", code=84)
    service = ScriptedIdentityService(password=[rejection, rejection, rejection])
    session = AuthSession(service, InMemoryCredentialStore())

    kinds = [(await session.start_login("alice", "pw")).kind for _ in range(3)]

    assert kinds == [AuthErrorKind.RATE_LIMITED] * 3


@pytest.mark.asyncio
async def test_saved_password_used_when_password_empty():
    store = InMemoryCredentialStore(credentials=StoredCredentials(username="alice", password="pw"))
    service = ScriptedIdentityService(password=[ServiceSuccess("t", "alice")])
    session = AuthSession(service, store)

    await session.start_login("alice", "")

    assert service.calls == [("password", "alice", "pw")]


# --- cached token ---


@pytest.mark.asyncio
async def test_cached_token_logs_in_without_challenge():
    store = cached()
    service = ScriptedIdentityService(token=[ServiceSuccess("rotated")])
    session = AuthSession(service, store)

    outcome = await session.start_login("alice", "")

    assert outcome == LoggedIn(account_name="alice", used_cached_token=True)
    assert session.is_authenticated
    assert service.calls == [("token", "cached-token")]
    assert store.get_token().refresh_token == "rotated"


@pytest.mark.asyncio
async def test_rejected_token_is_deleted_then_password_used():
    store = cached()
    service = ScriptedIdentityService(
        token=[ServiceRejected(message="AccessDenied")],
        password=[ServiceSuccess("fresh", "alice")],
    )
    session = AuthSession(service, store)

    outcome = await session.start_login("alice", "pw")

    assert isinstance(outcome, LoggedIn)
    assert not outcome.used_cached_token
    assert [c[0] for c in service.calls] == ["token", "password"]
    assert store.get_token().refresh_token == "fresh"


@pytest.mark.asyncio
async def test_rejected_token_without_password_is_session_expired():
    store = cached()
    service = ScriptedIdentityService(token=[ServiceRejected(message="AccessDenied")])
    session = AuthSession(service, store)

    outcome = await session.start_login("alice", "")

    assert outcome.kind == AuthErrorKind.SESSION_EXPIRED
    assert store.get_token() is None


@pytest.mark.asyncio
async def test_token_for_other_account_is_ignored():
    store = cached(account="bob")
    service = ScriptedIdentityService(password=[ServiceSuccess("t", "alice")])
    session = AuthSession(service, store)

    await session.start_login("alice", "pw")

    assert [c[0] for c in service.calls] == ["password"]


# --- one-time codes ---


@pytest.mark.asyncio
async def test_code_challenge_then_success():
    service = ScriptedIdentityService(
        password=[ServiceChallenge(OneTimeCodeChallenge(mechanism="email"))],
        code=[ServiceSuccess("t", "alice")],
    )
    session = AuthSession(service, InMemoryCredentialStore())

    outcome = await session.start_login("alice", "pw")
    assert outcome == NeedsCode(mechanism="email")
    assert session.state == AuthState.NEEDS_CODE

    outcome = await session.submit_code("ABCDE")
    assert isinstance(outcome, LoggedIn)
    assert service.calls[-1] == ("code", "ABCDE")


@pytest.mark.asyncio
async def test_wrong_code_stays_in_needs_code():
    service = ScriptedIdentityService(
        password=[ServiceChallenge(OneTimeCodeChallenge())],
        code=[
            ServiceRejected(code=88, message="TwoFactorCodeMismatch"),
            ServiceRejected(code=88, message="TwoFactorCodeMismatch"),
            ServiceSuccess("t", "alice"),
        ],
    )
    session = AuthSession(service, InMemoryCredentialStore())
    await session.start_login("alice", "pw")

    for _ in range(2):
        outcome = await session.submit_code("00000")
        assert outcome == NeedsCode(mechanism="authenticator", last_attempt_wrong=True)
        assert session.state == AuthState.NEEDS_CODE

    assert isinstance(await session.submit_code("12345"), LoggedIn)


@pytest.mark.asyncio
async def test_expired_code_challenge_is_timeout():
    service = ScriptedIdentityService(
        password=[ServiceChallenge(OneTimeCodeChallenge())],
        code=[ServiceRejected(code=27, message="Expired")],
    )
    session = AuthSession(service, InMemoryCredentialStore())
    await session.start_login("alice", "pw")

    outcome = await session.submit_code("12345")

    assert outcome.kind == AuthErrorKind.TIMEOUT
    assert session.state == AuthState.FAILED


@pytest.mark.asyncio
async def test_submit_code_outside_needs_code_raises():
    session = AuthSession(ScriptedIdentityService(), InMemoryCredentialStore())
    with pytest.raises(AuthStateError):
        await session.submit_code("12345")


# --- device confirmation ---


@pytest.mark.asyncio
async def test_device_confirmation_polling():
    pending = ServiceChallenge(DeviceConfirmationChallenge(poll_interval_ms=1000))
    service = ScriptedIdentityService(
        password=[pending],
        device=[pending, pending, ServiceSuccess("t", "alice")],
    )
    session = AuthSession(service, InMemoryCredentialStore())

    outcome = await session.start_login("alice", "pw")
    assert outcome == NeedsDeviceConfirmation(poll_interval_ms=1000)

    polls = 0
    while isinstance(outcome, NeedsDeviceConfirmation):
        outcome = await session.poll_device_confirmation()
        polls += 1

    assert polls == 3
    assert isinstance(outcome, LoggedIn)


@pytest.mark.asyncio
async def test_poll_outside_device_confirmation_raises():
    session = AuthSession(ScriptedIdentityService(), InMemoryCredentialStore())
    with pytest.raises(AuthStateError):
        await session.poll_device_confirmation()


@pytest.mark.asyncio
async def test_start_login_while_pending_raises():
    service = ScriptedIdentityService(password=[ServiceChallenge(OneTimeCodeChallenge())])
    session = AuthSession(service, InMemoryCredentialStore())
    await session.start_login("alice", "pw")

    with pytest.raises(AuthStateError):
        await session.start_login("alice", "pw")


# --- logout ---


@pytest.mark.asyncio
async def test_logout_returns_to_idle_and_allows_new_login():
    service = ScriptedIdentityService(password=[ServiceChallenge(OneTimeCodeChallenge())])
    session = AuthSession(service, InMemoryCredentialStore())
    await session.start_login("alice", "pw")

    session.logout()

    assert session.state == AuthState.IDLE
    with pytest.raises(AuthStateError):
        await session.submit_code("12345")


def test_logout_clear_persisted_deletes_secrets():
    store = InMemoryCredentialStore(
        token=StoredToken(account_name="alice", refresh_token="t"),
        credentials=StoredCredentials(username="alice", password="pw"),
    )
    session = AuthSession(ScriptedIdentityService(), store)

    session.logout(clear_persisted=True)

    assert store.get_token() is None
    assert store.get_credentials() is None
    assert not session.has_cached_token()


# --- unreachable service ---


@pytest.mark.asyncio
async def test_service_exception_fails_instead_of_staying_authenticating():
    service = ScriptedIdentityService(
        password=[ConnectionError("connection reset"), ServiceSuccess("t", "alice")]
    )
    session = AuthSession(service, InMemoryCredentialStore())

    outcome = await session.start_login("alice", "pw")

    assert isinstance(outcome, LoginFailed)
    assert outcome.kind == AuthErrorKind.UNKNOWN
    assert session.state == AuthState.FAILED
    assert isinstance(await session.start_login("alice", "pw"), LoggedIn)


@pytest.mark.asyncio
async def test_token_kept_when_service_unreachable():
    store = cached()
    service = ScriptedIdentityService(token=[OSError("network unreachable")])
    session = AuthSession(service, store)

    outcome = await session.start_login("alice", "pw")

    assert outcome.kind == AuthErrorKind.UNKNOWN
    assert store.get_token().refresh_token == "cached-token"
    assert [c[0] for c in service.calls] == ["token"]


@pytest.mark.asyncio
async def test_token_answered_with_challenge_is_kept():
    store = cached()
    service = ScriptedIdentityService(
        token=[ServiceChallenge(OneTimeCodeChallenge(mechanism="email"))],
        code=[ServiceSuccess("rotated", "alice")],
    )
    session = AuthSession(service, store)

    outcome = await session.start_login("alice", "")

    assert outcome == NeedsCode(mechanism="email")
    assert store.get_token().refresh_token == "cached-token"
    assert isinstance(await session.submit_code("12345"), LoggedIn)
    assert store.get_token().refresh_token == "rotated"
