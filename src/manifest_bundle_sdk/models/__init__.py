from .auth import (
    AuthChallenge,
    AuthState,
    DeviceConfirmationChallenge,
    LoggedIn,
    LoginFailed,
    LoginOutcome,
    NeedsCode,
    NeedsDeviceConfirmation,
    NoChallenge,
    OneTimeCodeChallenge,
    ServiceChallenge,
    ServiceRejected,
    ServiceResponse,
    ServiceSuccess,
)
from .bundle import ArchiveEntry, Bundle, FileKind, Provenance, classify
from .config import (
    EndpointRepositorySource,
    GitHubRepositorySource,
    InstallerSettings,
)
from .content import AppDepots, ContentHandle, DepotInfo, OwnedApp
from .repository import (
    DownloadedFile,
    GitHubRateLimit,
    RateLimitWindow,
    RemoteFile,
    RepositoryHit,
)
from .state import StoredCredentials, StoredToken
from .store import DEFAULT_APP_DETAILS_URL, AppDetails, AppDetailsData

__all__ = [
    "DEFAULT_APP_DETAILS_URL",
    "AppDepots",
    "AppDetails",
    "AppDetailsData",
    "ArchiveEntry",
    "AuthChallenge",
    "AuthState",
    "Bundle",
    "ContentHandle",
    "DepotInfo",
    "DeviceConfirmationChallenge",
    "DownloadedFile",
    "EndpointRepositorySource",
    "FileKind",
    "GitHubRateLimit",
    "GitHubRepositorySource",
    "InstallerSettings",
    "LoggedIn",
    "LoginFailed",
    "LoginOutcome",
    "NeedsCode",
    "NeedsDeviceConfirmation",
    "NoChallenge",
    "OneTimeCodeChallenge",
    "OwnedApp",
    "Provenance",
    "RateLimitWindow",
    "RemoteFile",
    "RepositoryHit",
    "ServiceChallenge",
    "ServiceRejected",
    "ServiceResponse",
    "ServiceSuccess",
    "StoredCredentials",
    "StoredToken",
    "classify",
]
