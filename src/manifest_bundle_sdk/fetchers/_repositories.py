"""Repository backends: read-only, unauthenticated sources keyed by app id."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Protocol
from urllib.parse import quote

from pydantic import ValidationError

from ..errors import FetchError, FetchErrorKind
from ..models.repository import (
    DownloadedFile,
    GitHubBranch,
    GitHubRateLimit,
    GitHubTree,
    RemoteFile,
    RepositoryHit,
)
from ._http import DEFAULT_MAX_REDIRECTS, filename_from_headers, get_following_redirects

if TYPE_CHECKING:
    import httpx

    from ..models.config import EndpointRepositorySource, GitHubRepositorySource

logger = logging.getLogger(__name__)

# Hits without any date sort after every dated hit.
UNDATED = datetime.min.replace(tzinfo=timezone.utc)


class RepositoryBackend(Protocol):
    """One public repository. All calls are independent GETs."""

    @property
    def name(self) -> str: ...

    async def get_ref(self, client: httpx.AsyncClient, app_id: int) -> RepositoryHit | None: ...
    async def list_files(self, client: httpx.AsyncClient, app_id: int) -> list[RemoteFile]: ...
    async def fetch_file(
        self, client: httpx.AsyncClient, app_id: int, path: str
    ) -> DownloadedFile: ...


class GitHubBranchBackend:
    """A GitHub repository with one branch per app id."""

    def __init__(
        self,
        repo: str,
        api_base: str = "https://api.github.com",
        raw_base: str = "https://raw.githubusercontent.com",
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        self.repo = repo
        self._api_base = api_base.rstrip("/")
        self._raw_base = raw_base.rstrip("/")
        self._max_redirects = max_redirects

    @classmethod
    def from_source(
        cls, source: GitHubRepositorySource, max_redirects: int = DEFAULT_MAX_REDIRECTS
    ) -> GitHubBranchBackend:
        return cls(
            source.repo,
            api_base=source.api_base,
            raw_base=source.raw_base,
            max_redirects=max_redirects,
        )

    @property
    def name(self) -> str:
        return self.repo

    @property
    def api_base(self) -> str:
        return self._api_base

    async def rate_limit(self, client: httpx.AsyncClient) -> GitHubRateLimit:
        """Current API quota of the caller; this request does not count against it."""
        url = f"{self._api_base}/rate_limit"
        response = await get_following_redirects(client, url, self._max_redirects)
        try:
            return GitHubRateLimit.model_validate(response.json())
        except ValidationError as e:
            raise FetchError(f"Invalid rate limit payload at {url}: {e}", url=url) from e

    async def get_ref(self, client: httpx.AsyncClient, app_id: int) -> RepositoryHit | None:
        url = f"{self._api_base}/repos/{self.repo}/branches/{app_id}"
        try:
            response = await get_following_redirects(client, url, self._max_redirects)
        except FetchError as e:
            if e.kind == FetchErrorKind.NOT_FOUND:
                return None
            raise
        try:
            branch = GitHubBranch.model_validate(response.json())
        except ValidationError:
            logger.debug("No branch %s in %s", app_id, self.repo)
            return None
        return RepositoryHit(
            backend=self.name, app_id=app_id, updated_at=branch.commit.commit.author.date
        )

    async def list_files(self, client: httpx.AsyncClient, app_id: int) -> list[RemoteFile]:
        url = f"{self._api_base}/repos/{self.repo}/git/trees/{app_id}"
        response = await get_following_redirects(client, url, self._max_redirects)
        try:
            tree = GitHubTree.model_validate(response.json())
        except ValidationError as e:
            raise FetchError(f"Invalid tree listing at {url}: {e}", url=url) from e
        return [
            RemoteFile(path=item.path, size=item.size) for item in tree.tree if item.type == "blob"
        ]

    async def fetch_file(self, client: httpx.AsyncClient, app_id: int, path: str) -> DownloadedFile:
        url = f"{self._raw_base}/{self.repo}/{app_id}/{quote(path)}"
        response = await get_following_redirects(client, url, self._max_redirects)
        return DownloadedFile(name=PurePosixPath(path).name, data=response.content)


class ArchiveEndpointBackend:
    """An HTTP service that answers a metadata URL and serves one archive per app id."""

    def __init__(
        self,
        name: str,
        metadata_url: str,
        download_url: str,
        headers: dict[str, str] | None = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        self._name = name
        self._metadata_url = metadata_url
        self._download_url = download_url
        self._headers = dict(headers or {})
        self._max_redirects = max_redirects

    @classmethod
    def from_source(
        cls, source: EndpointRepositorySource, max_redirects: int = DEFAULT_MAX_REDIRECTS
    ) -> ArchiveEndpointBackend:
        return cls(
            source.name,
            source.metadata_url,
            source.download_url,
            headers=source.headers,
            max_redirects=max_redirects,
        )

    @property
    def name(self) -> str:
        return self._name

    async def get_ref(self, client: httpx.AsyncClient, app_id: int) -> RepositoryHit | None:
        url = self._metadata_url.format(app_id=app_id)
        try:
            response = await get_following_redirects(
                client, url, self._max_redirects, headers=self._headers
            )
        except FetchError as e:
            if e.kind == FetchErrorKind.NOT_FOUND:
                return None
            raise
        body = response.json()
        if isinstance(body, dict) and body.get("success") is False:
            return None
        return RepositoryHit(
            backend=self.name, app_id=app_id, updated_at=_updated_at(response, body)
        )

    async def list_files(self, client: httpx.AsyncClient, app_id: int) -> list[RemoteFile]:
        return [RemoteFile(path=f"{app_id}.zip")]

    async def fetch_file(self, client: httpx.AsyncClient, app_id: int, path: str) -> DownloadedFile:
        url = self._download_url.format(app_id=app_id)
        response = await get_following_redirects(
            client, url, self._max_redirects, headers=self._headers
        )
        name = filename_from_headers(response.headers) or path
        return DownloadedFile(name=name, data=response.content)


def _updated_at(response, body: object) -> datetime:
    if isinstance(body, dict):
        for key in ("updatedAt", "updated_at", "lastModified"):
            value = body.get(key)
            if isinstance(value, str):
                try:
                    return _aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
                except ValueError:
                    continue
    header = response.headers.get("last-modified")
    if header:
        try:
            return _aware(parsedate_to_datetime(header))
        except (TypeError, ValueError):
            pass
    return UNDATED


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
