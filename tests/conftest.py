import pytest

from helpers import MANIFEST, SCRIPT, zip_bytes


@pytest.fixture
def bundle_files():
    return {"100.lua": SCRIPT, "200_300.manifest": MANIFEST}


@pytest.fixture
def bundle_zip(bundle_files):
    return zip_bytes(bundle_files)
