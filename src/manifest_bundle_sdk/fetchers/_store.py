"""Display names for app ids from the public store app-details endpoint."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Protocol

import httpx
from pydantic import ValidationError

from ..errors import FetchError
from ..models.store import DEFAULT_APP_DETAILS_URL, AppDetails
from ._http import DEFAULT_MAX_REDIRECTS, get_following_redirects, open_client

logger = logging.getLogger(__name__)


class AppNameResolver(Protocol):
    async def resolve_names(self, app_ids: Iterable[int]) -> dict[int, str]: ...


class StoreAppNameResolver:
    """Looks names up one app at a time, concurrently, and remembers them.

    Apps the store does not know, or that cannot be asked about, are missing from
    the result; they are asked again on the next call.
    """

    def __init__(
        self,
        url: str = DEFAULT_APP_DETAILS_URL,
        *,
        timeout: float = 30.0,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        user_agent: str = "manifest-bundle-sdk",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._user_agent = user_agent
        self._shared_client = client
        self._names: dict[int, str] = {}

    async def resolve_names(self, app_ids: Iterable[int]) -> dict[int, str]:
        wanted = list(dict.fromkeys(app_ids))
        missing = [app_id for app_id in wanted if app_id not in self._names]
        if missing:
            async with open_client(self._timeout, self._user_agent, self._shared_client) as client:
                found = await asyncio.gather(*(self._lookup(client, a) for a in missing))
            for app_id, name in zip(missing, found):
                if name is not None:
                    self._names[app_id] = name
        return {app_id: self._names[app_id] for app_id in wanted if app_id in self._names}

    async def _lookup(self, client: httpx.AsyncClient, app_id: int) -> str | None:
        url = f"{self._url}?appids={app_id}"
        try:
            response = await get_following_redirects(client, url, self._max_redirects)
            body = response.json()
            details = AppDetails.model_validate(body.get(str(app_id)) or {})
        except (FetchError, ValidationError, AttributeError, httpx.HTTPError) as e:
            logger.debug("No store name for app %s: %s", app_id, e)
            return None
        if not details.success or details.data is None:
            return None
        return details.data.name
