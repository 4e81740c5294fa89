"""Owned content and depot metadata for an authenticated session."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar

from ..errors import FetchError, FetchErrorKind, NotAuthenticatedError
from ..models.content import AppDepots, DepotInfo, OwnedApp

if TYPE_CHECKING:
    from ..auth import AuthSession
    from ._protocols import CatalogTransport

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def _transport_call(what: str, awaitable: Awaitable[T]) -> T:
    """Await a transport call, turning any failure into a FetchError.

    LookupError from the transport means the catalog has no such item (NOT_FOUND);
    everything else is NETWORK_FAILURE.
    """
    try:
        return await awaitable
    except (FetchError, NotAuthenticatedError):
        raise
    except LookupError as e:
        raise FetchError(f"{what}: not found ({e})", FetchErrorKind.NOT_FOUND) from e
    except Exception as e:  # noqa: BLE001
        raise FetchError(f"{what} failed: {e}") from e


class RemoteCatalogClient:
    """Catalog calls on behalf of an authenticated session.

    Every call raises NotAuthenticatedError when the session is not authenticated,
    and FetchError when the transport fails.
    """

    def __init__(self, session: AuthSession, transport: CatalogTransport) -> None:
        self._session = session
        self._transport = transport

    def _require_session(self) -> None:
        if not self._session.is_authenticated:
            raise NotAuthenticatedError()

    async def owned_apps(self) -> list[OwnedApp]:
        self._require_session()
        raw = await _transport_call("Owned apps request", self._transport.get_owned_apps())
        apps: list[OwnedApp] = []
        for item in raw:
            app_id = _as_int(item.get("appid"))
            if app_id is None:
                continue
            apps.append(
                OwnedApp(
                    app_id=app_id,
                    name=item.get("name") or f"App {app_id}",
                    playtime_minutes=_as_int(item.get("playtime_forever")) or 0,
                )
            )
        return apps

    async def app_depots(self, app_id: int, platform: str = "windows") -> AppDepots:
        """List the depots of an app that can be dumped for the given platform.

        Depots are sorted by declared size, largest first; equal sizes keep the
        order the catalog listed them in.

        Raises:
            NotAuthenticatedError: If the session is not authenticated.
            FetchError: NOT_FOUND if the catalog has no info for the app.
        """
        self._require_session()
        info = await _transport_call(
            f"App info request for {app_id}", self._transport.get_product_info(app_id)
        )
        if not info:
            raise FetchError(f"App info not found for {app_id}", FetchErrorKind.NOT_FOUND)
        common = info.get("common") or {}
        app_name = common.get("name") or f"App {app_id}"
        depots = parse_depots(info.get("depots") or {}, platform)
        logger.debug("App %s has %d eligible depots", app_id, len(depots))
        return AppDepots(app_id=app_id, app_name=app_name, depots=depots)

    async def request_free_license(self, app_id: int) -> None:
        """Ask for a free license; failures are expected for paid apps and ignored."""
        self._require_session()
        try:
            await self._transport.request_free_license(app_id)
        except Exception as e:  # noqa: BLE001
            logger.debug("Free license request for %s failed: %s", app_id, e)

    async def depot_key(self, app_id: int, depot_id: int) -> bytes:
        self._require_session()
        return await _transport_call(
            f"Decryption key request for depot {depot_id}",
            self._transport.get_depot_decryption_key(app_id, depot_id),
        )

    async def raw_manifest(self, app_id: int, depot_id: int, manifest_id: str) -> bytes:
        self._require_session()
        return await _transport_call(
            f"Manifest {manifest_id} request for depot {depot_id}",
            self._transport.get_raw_manifest(app_id, depot_id, manifest_id),
        )


def parse_depots(depots: dict[str, Any], platform: str = "windows") -> list[DepotInfo]:
    result: list[DepotInfo] = []
    for key, depot in depots.items():
        depot_id = _as_int(key)
        if depot_id is None or not isinstance(depot, dict):
            continue  # "branches" and other non-depot keys
        manifests = depot.get("manifests")
        if not manifests:
            continue
        config = depot.get("config") or {}
        oslist = config.get("oslist") if isinstance(config, dict) else None
        if oslist and platform not in [os.strip() for os in str(oslist).split(",")]:
            continue
        manifest_id = _public_manifest_id(manifests.get("public"))
        if manifest_id is None:
            continue
        result.append(
            DepotInfo(
                depot_id=depot_id,
                name=depot.get("name") or f"Depot {depot_id}",
                manifest_id=manifest_id,
                max_size=_as_int(depot.get("maxsize")) or 0,
            )
        )
    result.sort(key=lambda d: d.max_size, reverse=True)
    return result


def _public_manifest_id(public: Any) -> str | None:
    if public is None or public == "":
        return None
    if isinstance(public, dict):
        if "gid" in public:
            return str(public["gid"])
        values = list(public.values())
        return str(values[0]) if values else None
    return str(public)


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
