"""SourceFetcher: acquire a bundle from the catalog, a repository, or local files."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import httpx

from ..archive import ARCHIVE_SUFFIXES, is_archive_name, open_archive, open_archive_file
from ..errors import FetchError, FetchErrorKind, LoadError, NotAuthenticatedError
from ..models.bundle import (
    KEY_SUFFIX,
    MANIFEST_SUFFIX,
    SCRIPT_SUFFIX,
    ArchiveEntry,
    Bundle,
    Provenance,
)
from ..models.content import ContentHandle
from ..models.repository import GitHubRateLimit, RemoteFile, RepositoryHit
from ..validation import require_complete
from ._direct import DirectFetcher
from ._http import DEFAULT_MAX_REDIRECTS, open_client
from ._repositories import GitHubBranchBackend

if TYPE_CHECKING:
    from ..catalog import RemoteCatalogClient
    from ._repositories import RepositoryBackend

logger = logging.getLogger(__name__)

RELEVANT_SUFFIXES = (SCRIPT_SUFFIX, MANIFEST_SUFFIX, KEY_SUFFIX, *ARCHIVE_SUFFIXES)


@dataclass
class FetchResult:
    """A bundle that passed composition validation, and where it came from."""

    bundle: Bundle
    provenance: Provenance
    handle: ContentHandle | None = None


def is_relevant(path: str) -> bool:
    return path.lower().endswith(RELEVANT_SUFFIXES)


class SourceFetcher:
    def __init__(
        self,
        backends: Sequence[RepositoryBackend] = (),
        catalog: RemoteCatalogClient | None = None,
        *,
        timeout: float = 30.0,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        user_agent: str = "manifest-bundle-sdk",
        platform: str = "windows",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._backends = list(backends)
        self._catalog = catalog
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._user_agent = user_agent
        self._platform = platform
        self._shared_client = client

    @property
    def backends(self) -> list[RepositoryBackend]:
        return list(self._backends)

    def backend(self, name: str) -> RepositoryBackend:
        for backend in self._backends:
            if backend.name == name:
                return backend
        raise FetchError(f"Unknown repository {name!r}", FetchErrorKind.NOT_FOUND)

    def _client(self):
        return open_client(self._timeout, self._user_agent, self._shared_client)

    async def rate_limits(self) -> dict[str, GitHubRateLimit]:
        """Quota of every distinct GitHub API host among the backends.

        A host that cannot be asked is logged and left out.
        """
        by_host: dict[str, GitHubBranchBackend] = {}
        for backend in self._backends:
            if isinstance(backend, GitHubBranchBackend):
                by_host.setdefault(backend.api_base, backend)
        limits: dict[str, GitHubRateLimit] = {}
        async with self._client() as client:
            for host, backend in by_host.items():
                try:
                    limits[host] = await backend.rate_limit(client)
                except (FetchError, httpx.HTTPError) as e:
                    logger.warning("Rate limit check against %s failed: %s", host, e)
        return limits

    # Repository strategy

    async def probe(self, app_id: int) -> list[RepositoryHit]:
        """Ask every repository for the app concurrently.

        A failing repository is logged and left out; it never affects the others.

        Returns:
            Hits sorted by last update, most recent first.
        """
        async with self._client() as client:
            results = await asyncio.gather(
                *(self._probe_one(client, backend, app_id) for backend in self._backends)
            )
        hits = [hit for hit in results if hit is not None]
        hits.sort(key=lambda hit: hit.updated_at, reverse=True)
        logger.info("App %s found in %d of %d repositories", app_id, len(hits), len(results))
        return hits

    async def _probe_one(
        self, client: httpx.AsyncClient, backend: RepositoryBackend, app_id: int
    ) -> RepositoryHit | None:
        try:
            return await backend.get_ref(client, app_id)
        except (FetchError, httpx.HTTPError) as e:
            logger.warning("Repository %s failed for app %s: %s", backend.name, app_id, e)
            return None

    async def fetch_from_repository(
        self, app_id: int, source: RepositoryHit | str
    ) -> FetchResult:
        """Download the bundle an app has in one repository.

        An archive at the ref is preferred; otherwise every script, key and manifest
        file is downloaded on its own.

        Raises:
            FetchError: On any network failure; PARTIAL_RESPONSE if a loose file failed.
            ExtractionError: If the archive cannot be read.
            BundleError: If the result lacks a manifest or a script-or-key file.
        """
        name = source.backend if isinstance(source, RepositoryHit) else source
        backend = self.backend(name)
        async with self._client() as client:
            files = [f for f in await backend.list_files(client, app_id) if is_relevant(f.path)]
            archives = [f for f in files if is_archive_name(f.path)]
            if archives:
                archive = await backend.fetch_file(client, app_id, archives[0].path)
                bundle = open_archive(archive.data, archive.name)
            else:
                bundle = await self._download_loose(client, backend, app_id, files)
        require_complete(bundle)
        return FetchResult(
            bundle=bundle,
            provenance=Provenance("repository", backend.name, app_id),
            handle=ContentHandle(app_id=app_id),
        )

    async def _download_loose(
        self,
        client: httpx.AsyncClient,
        backend: RepositoryBackend,
        app_id: int,
        files: list[RemoteFile],
    ) -> Bundle:
        results = await asyncio.gather(
            *(backend.fetch_file(client, app_id, f.path) for f in files),
            return_exceptions=True,
        )
        entries: list[ArchiveEntry] = []
        failed: list[str] = []
        for remote, result in zip(files, results):
            if isinstance(result, BaseException):
                if not isinstance(result, (FetchError, httpx.HTTPError)):
                    raise result
                logger.warning(
                    "Download of %s from %s failed: %s", remote.path, backend.name, result
                )
                failed.append(remote.path)
                continue
            entries.append(ArchiveEntry.from_bytes(result.name, result.data))
        if failed:
            raise FetchError(
                f"{len(failed)} of {len(files)} files from {backend.name} failed to download: "
                + ", ".join(failed),
                FetchErrorKind.PARTIAL_RESPONSE,
            )
        return Bundle(entries=entries)

    # Direct strategy

    async def fetch_direct(self, handle: ContentHandle) -> FetchResult:
        """Dump script, key and manifest for an app through the catalog.

        Raises:
            NotAuthenticatedError: If no catalog is configured or its session is not
                authenticated.
            FetchError: If the app or an eligible depot is not found.
        """
        if self._catalog is None:
            raise NotAuthenticatedError()
        bundle, resolved = await DirectFetcher(self._catalog, self._platform).fetch(handle)
        require_complete(bundle)
        return FetchResult(
            bundle=bundle,
            provenance=Provenance("direct", "catalog", handle.app_id),
            handle=resolved,
        )

    # Local sources

    def from_archive_file(self, path: Path) -> FetchResult:
        path = Path(path)
        bundle = open_archive_file(path)
        require_complete(bundle)
        return FetchResult(bundle, Provenance("archive", str(path), _guess_app_id(bundle)))

    def from_folder(self, folder: Path) -> FetchResult:
        """Collect every file below a folder; nested archives are not opened."""
        folder = Path(folder)
        if not folder.is_dir():
            raise LoadError(f"Not a directory: {folder}", path=folder)
        entries = [
            ArchiveEntry(
                relative_name=path.relative_to(folder).as_posix(),
                size_hint=path.stat().st_size,
                reader=path.read_bytes,
            )
            for path in sorted(folder.rglob("*"))
            if path.is_file()
        ]
        bundle = Bundle(entries=entries)
        require_complete(bundle)
        return FetchResult(bundle, Provenance("folder", str(folder), _guess_app_id(bundle)))

    def from_uploads(self, uploads: Iterable[tuple[str, bytes]]) -> FetchResult:
        """Merge uploaded files; archives are opened and contribute their entries."""
        entries: list[ArchiveEntry] = []
        names: list[str] = []
        for name, data in uploads:
            names.append(name)
            if is_archive_name(name):
                entries.extend(open_archive(data, name).entries)
            else:
                entries.append(ArchiveEntry.from_bytes(PurePosixPath(name).name, data))
        bundle = Bundle(entries=entries)
        require_complete(bundle)
        return FetchResult(bundle, Provenance("upload", ", ".join(names), _guess_app_id(bundle)))


def _guess_app_id(bundle: Bundle) -> int | None:
    for entry in bundle.scripts:
        stem = PurePosixPath(entry.file_name).stem
        if stem.isdigit():
            return int(stem)
    return None
