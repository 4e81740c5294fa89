"""Direct dump: synthesize a bundle from the catalog of an authenticated session."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from .._scripts import build_key_file, build_script
from ..errors import FetchError, FetchErrorKind
from ..models.bundle import ArchiveEntry, Bundle

if TYPE_CHECKING:
    from ..catalog import RemoteCatalogClient
    from ..models.content import ContentHandle, DepotInfo


logger = logging.getLogger(__name__)


def dump_file_names(app_id: int, depot_id: int, manifest_id: str) -> tuple[str, str, str]:
    """Script, key and manifest file names of a direct dump."""
    stem = f"{depot_id}_{manifest_id}"
    return f"{app_id}.lua", f"{stem}.vdf", f"{stem}.manifest"


class DirectFetcher:
    def __init__(self, catalog: RemoteCatalogClient, platform: str = "windows") -> None:
        self._catalog = catalog
        self._platform = platform

    async def _resolve_depot(self, handle: ContentHandle) -> DepotInfo:
        app = await self._catalog.app_depots(handle.app_id, self._platform)
        if handle.depot_id is None:
            depot = app.main_depot
        else:
            depot = next((d for d in app.depots if d.depot_id == handle.depot_id), None)
        if depot is None:
            wanted = handle.depot_id if handle.depot_id is not None else "any"
            raise FetchError(
                f"No {self._platform} depot ({wanted}) with a public manifest "
                f"for app {handle.app_id}",
                FetchErrorKind.NOT_FOUND,
            )
        return depot

    async def fetch(self, handle: ContentHandle) -> tuple[Bundle, ContentHandle]:
        """Resolve depot and manifest, then build script, key file and raw manifest.

        Returns:
            The synthesized bundle and the handle with depot, manifest and key filled in.

        Raises:
            NotAuthenticatedError: If the catalog's session is not authenticated.
            FetchError: NOT_FOUND if the app or an eligible depot does not exist.
        """
        if handle.depot_id is not None and handle.manifest_id is not None:
            depot_id, manifest_id = handle.depot_id, handle.manifest_id
        else:
            depot = await self._resolve_depot(handle)
            depot_id, manifest_id = depot.depot_id, handle.manifest_id or depot.manifest_id

        await self._catalog.request_free_license(handle.app_id)
        key = await self._catalog.depot_key(handle.app_id, depot_id)
        key_hex = key.hex().upper()
        manifest = await self._catalog.raw_manifest(handle.app_id, depot_id, manifest_id)
        logger.info(
            "Dumped app %s depot %s manifest %s (%d bytes)",
            handle.app_id,
            depot_id,
            manifest_id,
            len(manifest),
        )

        script_name, key_name, manifest_name = dump_file_names(
            handle.app_id, depot_id, manifest_id
        )
        script = build_script(handle.app_id, depot_id, key_hex, manifest_id)
        key_file = build_key_file(depot_id, key_hex)
        bundle = Bundle(
            entries=[
                ArchiveEntry.from_bytes(script_name, script.encode("utf-8")),
                ArchiveEntry.from_bytes(key_name, key_file.encode("utf-8")),
                ArchiveEntry.from_bytes(manifest_name, manifest),
            ]
        )
        resolved = replace(
            handle, depot_id=depot_id, manifest_id=manifest_id, decryption_key=key_hex
        )
        return bundle, resolved
