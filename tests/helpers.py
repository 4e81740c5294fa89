"""Archive builders shared by the test modules."""

import io
import zipfile

from manifest_bundle_sdk import ServiceSuccess

SCRIPT = b'addappid(100)\naddappid(200,1,"AABBCC")\nsetManifestid(200,"300",0)\n'
MANIFEST = b"\x00manifest-bytes\x01"


def zip_bytes(files: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return buf.getvalue()


def mark_encrypted(data: bytes) -> bytes:
    """Set the 'encrypted' general purpose flag on every member of a zip.

    zipfile then refuses to read the members without a password, exactly as for
    a real traditional-encryption archive.
    """
    out = bytearray(data)
    for signature, flag_offset in ((b"PK\x03\x04", 6), (b"PK\x01\x02", 8)):
        start = 0
        while (pos := out.find(signature, start)) != -1:
            out[pos + flag_offset] |= 0x01
            start = pos + 4
    return bytes(out)


class AcceptingIdentityService:
    """Accepts every login."""

    async def begin_password_login(self, account_name, password):
        return ServiceSuccess("token", account_name)

    async def begin_token_login(self, refresh_token):
        return ServiceSuccess(refresh_token, "alice")

    async def submit_code(self, code):
        raise AssertionError("no code expected")

    async def poll_device_status(self):
        raise AssertionError("no device confirmation expected")


class FakeCatalogTransport:
    """Serves product info, keys and manifests from dicts and records license requests."""

    def __init__(self, product_info=None, keys=None, manifests=None, owned=None):
        self.product_info = product_info or {}
        self.keys = keys or {}
        self.manifests = manifests or {}
        self.owned = owned or []
        self.license_requests = []

    async def get_owned_apps(self):
        return self.owned

    async def get_product_info(self, app_id):
        return self.product_info.get(app_id)

    async def request_free_license(self, app_id):
        self.license_requests.append(app_id)
        raise RuntimeError("not free")

    async def get_depot_decryption_key(self, app_id, depot_id):
        return self.keys[depot_id]

    async def get_raw_manifest(self, app_id, depot_id, manifest_id):
        return self.manifests[(depot_id, manifest_id)]


def product_info(app_id=100, name="Test Game", depots=None):
    return {"appid": app_id, "common": {"name": name}, "depots": depots or {}}
