"""UI-facing API: login, direct and repository installs, local installs, uninstall."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..auth import AuthSession, LocalFilesystemCredentialStore
from ..catalog import RemoteCatalogClient
from ..fetchers import (
    ArchiveEndpointBackend,
    GitHubBranchBackend,
    SourceFetcher,
    StoreAppNameResolver,
)
from ..installer import InstallCoordinator, PsutilProcessController
from ..models.config import GitHubRepositorySource, InstallerSettings
from ._manager import BundleManager
from ._results import ExportReport, InstallReport, OperationResult

if TYPE_CHECKING:
    from ..auth import CredentialStore, IdentityService
    from ..catalog import CatalogTransport
    from ..fetchers import RepositoryBackend
    from ..installer import ProcessController


def build_backends(settings: InstallerSettings) -> list[RepositoryBackend]:
    backends: list[RepositoryBackend] = []
    for source in settings.repositories:
        if isinstance(source, GitHubRepositorySource):
            backends.append(GitHubBranchBackend.from_source(source, settings.max_redirects))
        else:
            backends.append(ArchiveEndpointBackend.from_source(source, settings.max_redirects))
    return backends


def make_bundle_manager(
    settings: InstallerSettings,
    identity_service: IdentityService,
    catalog_transport: CatalogTransport | None = None,
    store: CredentialStore | None = None,
    process: ProcessController | None = None,
) -> BundleManager:
    """Build a BundleManager from settings with local filesystem and psutil adapters.

    store: defaults to a LocalFilesystemCredentialStore in settings.data_dir
    process: defaults to a PsutilProcessController for settings.process_names
    catalog_transport: without one, direct dumps fail with "not_authenticated"
    settings.app_details_url: store lookup of names missing from installed scripts
    """
    session = AuthSession(
        identity_service,
        store if store is not None else LocalFilesystemCredentialStore(settings.data_dir),
    )
    catalog = (
        RemoteCatalogClient(session, catalog_transport) if catalog_transport is not None else None
    )
    fetcher = SourceFetcher(
        build_backends(settings),
        catalog,
        timeout=settings.request_timeout,
        max_redirects=settings.max_redirects,
        user_agent=settings.user_agent,
        platform=settings.platform,
    )
    coordinator = InstallCoordinator(
        process
        if process is not None
        else PsutilProcessController(settings.process_names, settings.executable),
        settle_delay=settings.settle_delay,
    )
    name_resolver = (
        StoreAppNameResolver(
            settings.app_details_url,
            timeout=settings.request_timeout,
            max_redirects=settings.max_redirects,
            user_agent=settings.user_agent,
        )
        if settings.app_details_url
        else None
    )
    return BundleManager(
        session,
        fetcher,
        coordinator,
        catalog=catalog,
        target_root=settings.target_root,
        name_resolver=name_resolver,
    )


__all__ = [
    "BundleManager",
    "ExportReport",
    "InstallReport",
    "OperationResult",
    "build_backends",
    "make_bundle_manager",
]
