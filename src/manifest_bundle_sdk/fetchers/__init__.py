"""Bundle acquisition: direct catalog dumps, public repositories and local files."""

from ._direct import DirectFetcher, dump_file_names
from ._http import FetchedResponse, get_following_redirects, open_client
from ._repositories import ArchiveEndpointBackend, GitHubBranchBackend, RepositoryBackend
from ._source import FetchResult, SourceFetcher, is_relevant
from ._store import DEFAULT_APP_DETAILS_URL, AppNameResolver, StoreAppNameResolver

__all__ = [
    "DEFAULT_APP_DETAILS_URL",
    "AppNameResolver",
    "ArchiveEndpointBackend",
    "DirectFetcher",
    "FetchResult",
    "FetchedResponse",
    "GitHubBranchBackend",
    "RepositoryBackend",
    "SourceFetcher",
    "StoreAppNameResolver",
    "dump_file_names",
    "get_following_redirects",
    "is_relevant",
    "open_client",
]
