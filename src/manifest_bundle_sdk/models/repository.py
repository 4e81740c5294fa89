"""Repository probe results and the GitHub API payloads backends parse."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class RepositoryHit:
    """A backend that has content for an app id."""

    backend: str
    app_id: int
    updated_at: datetime


@dataclass(frozen=True)
class RemoteFile:
    path: str
    size: int | None = None


@dataclass(frozen=True)
class DownloadedFile:
    """Bytes of one remote file; name may come from Content-Disposition."""

    name: str
    data: bytes


class GitCommitAuthor(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    date: datetime


class GitCommitDetail(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    author: GitCommitAuthor


class GitCommit(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    sha: str | None = None
    commit: GitCommitDetail


class GitHubBranch(BaseModel):
    """Response of GET /repos/{repo}/branches/{branch}."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    name: str
    commit: GitCommit


class GitTreeItem(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    path: str
    type: str = "blob"
    size: int | None = None


class GitHubTree(BaseModel):
    """Response of GET /repos/{repo}/git/trees/{ref}."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    sha: str | None = None
    tree: list[GitTreeItem] = []
    truncated: bool = False


class RateLimitWindow(BaseModel):
    """One quota window; reset is sent as epoch seconds."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    limit: int
    remaining: int
    reset: datetime
    used: int = 0


class GitHubRateLimit(BaseModel):
    """Response of GET /rate_limit."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    resources: dict[str, RateLimitWindow] = {}
    rate: RateLimitWindow

    @property
    def core(self) -> RateLimitWindow:
        return self.resources.get("core", self.rate)
