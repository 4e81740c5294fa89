"""Acquire manifest bundles from a catalog, public repositories or local files, and
install them into an application's script and manifest directories."""

from .archive import open_archive, open_archive_file
from .auth import (
    AuthSession,
    CredentialStore,
    IdentityService,
    InMemoryCredentialStore,
    LocalFilesystemCredentialStore,
    classify_rejection,
)
from .catalog import CatalogTransport, RemoteCatalogClient
from .errors import (
    AuthErrorKind,
    AuthStateError,
    BundleError,
    BundleErrorKind,
    ExtractionError,
    ExtractionErrorKind,
    FetchError,
    FetchErrorKind,
    IdentityServiceError,
    InstallError,
    InstallErrorKind,
    LoadError,
    NotAuthenticatedError,
)
from .fetchers import (
    ArchiveEndpointBackend,
    FetchResult,
    GitHubBranchBackend,
    RepositoryBackend,
    SourceFetcher,
    StoreAppNameResolver,
)
from .installer import (
    InMemoryProcessController,
    InstallCoordinator,
    InstalledApp,
    InstallResult,
    PsutilProcessController,
    TextualManifestIndex,
    UninstallResult,
)
from .loaders import load_settings, save_settings
from .manager import BundleManager, OperationResult, make_bundle_manager
from .models import (
    ArchiveEntry,
    AuthState,
    Bundle,
    ContentHandle,
    DeviceConfirmationChallenge,
    EndpointRepositorySource,
    FileKind,
    GitHubRateLimit,
    GitHubRepositorySource,
    InstallerSettings,
    LoggedIn,
    LoginFailed,
    LoginOutcome,
    NeedsCode,
    NeedsDeviceConfirmation,
    NoChallenge,
    OneTimeCodeChallenge,
    Provenance,
    RepositoryHit,
    ServiceChallenge,
    ServiceRejected,
    ServiceSuccess,
)
from .validation import ValidationIssue, ValidationResult, require_complete, validate_bundle

__all__ = [
    "ArchiveEndpointBackend",
    "ArchiveEntry",
    "AuthErrorKind",
    "AuthSession",
    "AuthState",
    "AuthStateError",
    "Bundle",
    "BundleError",
    "BundleErrorKind",
    "BundleManager",
    "CatalogTransport",
    "ContentHandle",
    "CredentialStore",
    "DeviceConfirmationChallenge",
    "EndpointRepositorySource",
    "ExtractionError",
    "ExtractionErrorKind",
    "FetchError",
    "FetchErrorKind",
    "FetchResult",
    "FileKind",
    "GitHubBranchBackend",
    "GitHubRateLimit",
    "GitHubRepositorySource",
    "IdentityService",
    "IdentityServiceError",
    "InMemoryCredentialStore",
    "InMemoryProcessController",
    "InstallCoordinator",
    "InstallError",
    "InstallErrorKind",
    "InstallResult",
    "InstalledApp",
    "InstallerSettings",
    "LoadError",
    "LocalFilesystemCredentialStore",
    "LoggedIn",
    "LoginFailed",
    "LoginOutcome",
    "NeedsCode",
    "NeedsDeviceConfirmation",
    "NoChallenge",
    "NotAuthenticatedError",
    "OneTimeCodeChallenge",
    "OperationResult",
    "Provenance",
    "PsutilProcessController",
    "RemoteCatalogClient",
    "RepositoryBackend",
    "RepositoryHit",
    "ServiceChallenge",
    "ServiceRejected",
    "ServiceSuccess",
    "SourceFetcher",
    "StoreAppNameResolver",
    "TextualManifestIndex",
    "UninstallResult",
    "ValidationIssue",
    "ValidationResult",
    "classify_rejection",
    "load_settings",
    "make_bundle_manager",
    "open_archive",
    "open_archive_file",
    "require_complete",
    "save_settings",
    "validate_bundle",
]
