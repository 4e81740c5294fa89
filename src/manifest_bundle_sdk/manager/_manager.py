"""BundleManager: the UI-facing surface over login, acquisition and install."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from ..errors import (
    FetchError,
    FetchErrorKind,
    InstallError,
    InstallErrorKind,
    LoadError,
    NotAuthenticatedError,
)
from ..models.auth import LoginFailed, LoginOutcome
from ..models.content import ContentHandle
from ._results import HANDLED_ERRORS, ExportReport, InstallReport, OperationResult

if TYPE_CHECKING:
    from ..auth import AuthSession
    from ..catalog import RemoteCatalogClient
    from ..fetchers import AppNameResolver, FetchResult, SourceFetcher
    from ..installer import InstallCoordinator, InstalledApp, UninstallResult
    from ..models.content import AppDepots, OwnedApp
    from ..models.repository import GitHubRateLimit, RepositoryHit
    from ..models.state import StoredCredentials

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def _guard(awaitable: Awaitable[T]) -> OperationResult[T]:
    try:
        return OperationResult.success(await awaitable)
    except HANDLED_ERRORS as e:
        logger.warning("Operation failed: %s", e)
        return OperationResult.from_error(e)


def _login_result(outcome: LoginOutcome) -> OperationResult[LoginOutcome]:
    if isinstance(outcome, LoginFailed):
        return OperationResult(
            ok=False, value=outcome, error_kind=outcome.kind.value, reason=outcome.reason
        )
    return OperationResult.success(outcome)


class BundleManager:
    """Every command returns an OperationResult; classified errors never escape.

    Commands that touch the target layout must not run concurrently; the caller
    serializes them.
    """

    def __init__(
        self,
        session: AuthSession,
        fetcher: SourceFetcher,
        coordinator: InstallCoordinator,
        catalog: RemoteCatalogClient | None = None,
        target_root: Path | None = None,
        name_resolver: AppNameResolver | None = None,
    ) -> None:
        self.session = session
        self._fetcher = fetcher
        self._coordinator = coordinator
        self._catalog = catalog
        self._target_root = Path(target_root) if target_root is not None else None
        self._name_resolver = name_resolver

    def _root(self, target_root: Path | None) -> Path:
        root = target_root if target_root is not None else self._target_root
        if root is None:
            raise LoadError("No target root configured")
        return Path(root)

    # Login

    async def login(
        self,
        account_name: str,
        password: str = "",
        remember_password: bool = False,
        persist: bool = True,
    ) -> OperationResult[LoginOutcome]:
        try:
            outcome = await self.session.start_login(
                account_name, password, persist=persist, remember_password=remember_password
            )
        except HANDLED_ERRORS as e:
            return OperationResult.from_error(e)
        return _login_result(outcome)

    async def submit_code(self, code: str) -> OperationResult[LoginOutcome]:
        try:
            outcome = await self.session.submit_code(code)
        except HANDLED_ERRORS as e:
            return OperationResult.from_error(e)
        return _login_result(outcome)

    async def poll_device_confirmation(self) -> OperationResult[LoginOutcome]:
        try:
            outcome = await self.session.poll_device_confirmation()
        except HANDLED_ERRORS as e:
            return OperationResult.from_error(e)
        return _login_result(outcome)

    def logout(self, clear_persisted: bool = False) -> OperationResult[None]:
        self.session.logout(clear_persisted=clear_persisted)
        return OperationResult.success()

    def saved_credentials(self) -> StoredCredentials | None:
        return self.session.saved_credentials()

    # Catalog and direct dumps

    async def owned_apps(self) -> OperationResult[list[OwnedApp]]:
        async def run() -> list[OwnedApp]:
            return await self._require_catalog().owned_apps()

        return await _guard(run())

    async def app_depots(self, app_id: int) -> OperationResult[AppDepots]:
        async def run() -> AppDepots:
            return await self._require_catalog().app_depots(app_id)

        return await _guard(run())

    def _require_catalog(self) -> RemoteCatalogClient:
        if self._catalog is None:
            raise NotAuthenticatedError()
        return self._catalog

    async def install_direct(
        self, app_id: int, depot_id: int | None = None, target_root: Path | None = None
    ) -> OperationResult[InstallReport]:
        async def run() -> InstallReport:
            root = self._root(target_root)
            fetched = await self._fetcher.fetch_direct(
                ContentHandle(app_id=app_id, depot_id=depot_id)
            )
            return await self._install(fetched, root)

        return await _guard(run())

    async def export_direct(
        self, app_id: int, export_dir: Path, depot_id: int | None = None
    ) -> OperationResult[ExportReport]:
        """Dump into `<export_dir>/<app_id>/` instead of installing."""

        async def run() -> ExportReport:
            fetched = await self._fetcher.fetch_direct(
                ContentHandle(app_id=app_id, depot_id=depot_id)
            )
            directory = Path(export_dir) / str(app_id)
            return ExportReport(fetched, directory, _export(fetched, directory))

        return await _guard(run())

    # Repositories

    async def scan_repositories(self, app_id: int) -> OperationResult[list[RepositoryHit]]:
        return await _guard(self._fetcher.probe(app_id))

    async def github_rate_limits(self) -> OperationResult[dict[str, GitHubRateLimit]]:
        """Remaining GitHub API quota, keyed by API host."""
        return await _guard(self._fetcher.rate_limits())

    async def install_from_repository(
        self,
        app_id: int,
        source: RepositoryHit | str | None = None,
        target_root: Path | None = None,
    ) -> OperationResult[InstallReport]:
        """Install from the given repository, or from the most recently updated hit."""

        async def run() -> InstallReport:
            root = self._root(target_root)
            chosen = source
            if chosen is None:
                hits = await self._fetcher.probe(app_id)
                if not hits:
                    raise FetchError(
                        f"App {app_id} not found in any repository", FetchErrorKind.NOT_FOUND
                    )
                chosen = hits[0]
            fetched = await self._fetcher.fetch_from_repository(app_id, chosen)
            return await self._install(fetched, root)

        return await _guard(run())

    # Local sources

    async def install_archive(
        self, path: Path, target_root: Path | None = None
    ) -> OperationResult[InstallReport]:
        async def run() -> InstallReport:
            root = self._root(target_root)
            return await self._install(self._fetcher.from_archive_file(path), root)

        return await _guard(run())

    async def install_folder(
        self, folder: Path, target_root: Path | None = None
    ) -> OperationResult[InstallReport]:
        async def run() -> InstallReport:
            root = self._root(target_root)
            return await self._install(self._fetcher.from_folder(folder), root)

        return await _guard(run())

    async def install_uploads(
        self, uploads: Iterable[tuple[str, bytes]], target_root: Path | None = None
    ) -> OperationResult[InstallReport]:
        async def run() -> InstallReport:
            root = self._root(target_root)
            return await self._install(self._fetcher.from_uploads(uploads), root)

        return await _guard(run())

    async def _install(self, fetched: FetchResult, root: Path) -> InstallReport:
        result = await self._coordinator.install(fetched.bundle, root)
        return InstallReport(fetch=fetched, install=result)

    # Maintenance

    async def uninstall(
        self, app_id: int, target_root: Path | None = None
    ) -> OperationResult[UninstallResult]:
        async def run() -> UninstallResult:
            return await self._coordinator.uninstall(app_id, self._root(target_root))

        return await _guard(run())

    async def list_installed(
        self, target_root: Path | None = None
    ) -> OperationResult[list[InstalledApp]]:
        """Installed apps; names no script declares are looked up with the name resolver."""

        async def run() -> list[InstalledApp]:
            root = self._root(target_root)
            try:
                apps = await asyncio.to_thread(self._coordinator.list_installed, root)
            except OSError as e:
                raise LoadError(f"Failed to list {root}: {e}", path=root) from e
            unnamed = [app.app_id for app in apps if not app.name_known]
            if self._name_resolver is None or not unnamed:
                return apps
            names = await self._name_resolver.resolve_names(unnamed)
            return [
                dataclasses.replace(app, name=names[app.app_id], name_known=True)
                if app.app_id in names
                else app
                for app in apps
            ]

        return await _guard(run())


def _export(fetched: FetchResult, directory: Path) -> list[Path]:
    written: list[Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for entry in fetched.bundle.files():
            dest = directory / entry.file_name
            tmp = dest.with_suffix(dest.suffix + ".tmp")
            tmp.write_bytes(entry.read_bytes())
            tmp.replace(dest)
            written.append(dest)
    except OSError as e:
        raise InstallError(
            f"Failed to export to {directory}: {e}", InstallErrorKind.WRITE_FAILED, path=directory
        ) from e
    return written
