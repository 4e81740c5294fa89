from ._client import RemoteCatalogClient, parse_depots
from ._protocols import CatalogTransport

__all__ = [
    "CatalogTransport",
    "RemoteCatalogClient",
    "parse_depots",
]
