"""Protocol (port) for the account-gated content catalog."""

from __future__ import annotations

from typing import Any, Protocol


class CatalogTransport(Protocol):
    """Raw catalog calls made on behalf of an authenticated session.

    get_owned_apps returns dicts with "appid", "name" and "playtime_forever".
    get_product_info returns the app's info tree ({"common": ..., "depots": ...})
    or None when the app is unknown.
    """

    async def get_owned_apps(self) -> list[dict[str, Any]]: ...
    async def get_product_info(self, app_id: int) -> dict[str, Any] | None: ...
    async def request_free_license(self, app_id: int) -> None: ...
    async def get_depot_decryption_key(self, app_id: int, depot_id: int) -> bytes: ...
    async def get_raw_manifest(self, app_id: int, depot_id: int, manifest_id: str) -> bytes: ...
