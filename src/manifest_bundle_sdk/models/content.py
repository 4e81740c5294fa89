from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContentHandle:
    """Identifies one acquirable bundle.

    depot_id and manifest_id may be left unset; the direct strategy resolves them
    from the catalog. decryption_key is only ever filled in by the direct strategy.
    """

    app_id: int
    depot_id: int | None = None
    manifest_id: str | None = None
    decryption_key: str | None = None  # upper-case hex


@dataclass(frozen=True)
class OwnedApp:
    app_id: int
    name: str
    playtime_minutes: int = 0


@dataclass(frozen=True)
class DepotInfo:
    depot_id: int
    name: str
    manifest_id: str
    max_size: int = 0


@dataclass(frozen=True)
class AppDepots:
    app_id: int
    app_name: str
    depots: list[DepotInfo]

    @property
    def main_depot(self) -> DepotInfo | None:
        """Largest eligible depot; depots are already sorted by size, ties in source order."""
        return self.depots[0] if self.depots else None
