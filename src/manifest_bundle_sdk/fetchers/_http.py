from __future__ import annotations

import json
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import FetchError, FetchErrorKind

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
DEFAULT_MAX_REDIRECTS = 5

_CONTENT_DISPOSITION_FILENAME = re.compile(
    r"filename\*?\s*=\s*(?:[\w-]+'[\w-]*')?\"?([^\";]+)\"?", re.IGNORECASE
)


@dataclass(frozen=True)
class FetchedResponse:
    """Terminal response of a redirect chain, with its body fully read."""

    url: str
    status_code: int
    headers: httpx.Headers
    content: bytes

    def json(self) -> Any:
        try:
            return json.loads(self.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FetchError(f"Invalid JSON at {self.url}: {e}", url=self.url) from e


@asynccontextmanager
async def open_client(
    timeout: float,
    user_agent: str,
    shared: httpx.AsyncClient | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the shared client if one is given, else a short-lived one.

    Redirects are never followed by the client; get_following_redirects bounds them.
    """
    if shared is not None:
        yield shared
        return
    async with httpx.AsyncClient(
        timeout=timeout, follow_redirects=False, headers={"User-Agent": user_agent}
    ) as client:
        yield client


async def get_following_redirects(
    client: httpx.AsyncClient,
    url: str,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    headers: dict[str, str] | None = None,
) -> FetchedResponse:
    """GET a URL, following at most max_redirects redirects by hand.

    The body is streamed into memory. The client must not follow redirects itself.

    Raises:
        FetchError: NOT_FOUND on 404, TOO_MANY_REDIRECTS when the chain is longer
            than max_redirects, PARTIAL_RESPONSE when the body ends early,
            NETWORK_FAILURE for other statuses, timeouts and transport errors.
    """
    current = httpx.URL(url)
    for _hop in range(max_redirects + 1):
        try:
            async with client.stream("GET", current, headers=headers) as response:
                if response.status_code in REDIRECT_STATUSES:
                    location = response.headers.get("location")
                    if not location:
                        raise FetchError(
                            f"Redirect from {current} (status {response.status_code}) "
                            "missing Location header",
                            url=url,
                        )
                    target = current.join(location)
                    logger.debug("Redirect %s -> %s", current, target)
                    current = target
                    continue
                if response.status_code == 404:
                    raise FetchError(
                        f"HTTP 404 fetching {current}", FetchErrorKind.NOT_FOUND, url=url
                    )
                if response.status_code >= 400:
                    raise FetchError(f"HTTP {response.status_code} fetching {current}", url=url)
                content = await _read_body(response, str(current))
                return FetchedResponse(
                    url=str(current),
                    status_code=response.status_code,
                    headers=response.headers,
                    content=content,
                )
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out fetching {current}", url=url) from e
        except httpx.RemoteProtocolError as e:
            raise FetchError(
                f"Incomplete response from {current}: {e}",
                FetchErrorKind.PARTIAL_RESPONSE,
                url=url,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Network error fetching {current}: {e}", url=url) from e
    raise FetchError(
        f"Too many redirects fetching {url} (limit {max_redirects})",
        FetchErrorKind.TOO_MANY_REDIRECTS,
        url=url,
    )


async def _read_body(response: httpx.Response, url: str) -> bytes:
    chunks: list[bytes] = []
    received = 0
    async for chunk in response.aiter_bytes():
        chunks.append(chunk)
        received += len(chunk)
    expected = response.headers.get("content-length")
    if expected and expected.isdigit() and "content-encoding" not in response.headers:
        if received < int(expected):
            raise FetchError(
                f"Received {received} of {expected} bytes from {url}",
                FetchErrorKind.PARTIAL_RESPONSE,
                url=url,
            )
    logger.debug("Downloaded %d bytes from %s", received, url)
    return b"".join(chunks)


def filename_from_headers(headers: httpx.Headers) -> str | None:
    disposition = headers.get("content-disposition")
    if not disposition:
        return None
    match = _CONTENT_DISPOSITION_FILENAME.search(disposition)
    return match.group(1).strip() if match else None
