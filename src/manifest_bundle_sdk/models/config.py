"""Settings model for settings.json."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .store import DEFAULT_APP_DETAILS_URL


def _default_data_dir() -> Path:
    return Path.home() / ".manifest-bundle"


class GitHubRepositorySource(BaseModel):
    """A GitHub repository holding one branch per app id."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    type: Literal["github"]
    repo: str  # "owner/repo" format
    api_base: str = Field("https://api.github.com", alias="apiBase")
    raw_base: str = Field("https://raw.githubusercontent.com", alias="rawBase")


class EndpointRepositorySource(BaseModel):
    """An HTTP service with a metadata URL and a download URL per app id.

    Both URLs are templates containing "{app_id}".
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    type: Literal["endpoint"]
    name: str
    metadata_url: str = Field(alias="metadataUrl")
    download_url: str = Field(alias="downloadUrl")
    headers: dict[str, str] = {}


AnyRepositorySource = Annotated[
    GitHubRepositorySource | EndpointRepositorySource,
    Field(discriminator="type"),
]


class InstallerSettings(BaseModel):
    """Root of settings.json."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    target_root: Path | None = Field(None, alias="targetRoot")
    data_dir: Path = Field(default_factory=_default_data_dir, alias="dataDir")
    repositories: list[AnyRepositorySource] = []
    request_timeout: float = Field(30.0, alias="requestTimeout", gt=0)
    max_redirects: int = Field(5, alias="maxRedirects", ge=0)
    settle_delay: float = Field(2.0, alias="settleDelay", ge=0)
    process_names: list[str] = Field(
        default_factory=lambda: ["steam.exe", "steamwebhelper.exe", "steam"],
        alias="processNames",
    )
    executable: str = "steam.exe"
    platform: str = "windows"
    user_agent: str = Field("manifest-bundle-sdk", alias="userAgent")
    # None turns store name lookups off
    app_details_url: str | None = Field(DEFAULT_APP_DETAILS_URL, alias="appDetailsUrl")
