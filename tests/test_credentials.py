"""Tests for the filesystem and in-memory credential stores."""

import json

from manifest_bundle_sdk import InMemoryCredentialStore, LocalFilesystemCredentialStore
from manifest_bundle_sdk.models.state import StoredCredentials, StoredToken


def test_token_round_trip(tmp_path):
    store = LocalFilesystemCredentialStore(tmp_path)
    store.save_token(StoredToken(account_name="alice", refresh_token="abc"))

    data = json.loads((tmp_path / "refresh_token.json").read_text())
    assert data == {"accountName": "alice", "refreshToken": "abc"}
    assert store.get_token() == StoredToken(account_name="alice", refresh_token="abc")


def test_missing_files_return_none(tmp_path):
    store = LocalFilesystemCredentialStore(tmp_path / "not-created-yet")
    assert store.get_token() is None
    assert store.get_credentials() is None


def test_save_creates_data_dir(tmp_path):
    store = LocalFilesystemCredentialStore(tmp_path / "nested" / "data")
    store.save_credentials(StoredCredentials(username="alice", password="pw"))
    assert (tmp_path / "nested" / "data" / "credentials.json").exists()


def test_corrupt_token_file_is_ignored(tmp_path):
    (tmp_path / "refresh_token.json").write_text("{not json")
    assert LocalFilesystemCredentialStore(tmp_path).get_token() is None


def test_empty_token_is_ignored(tmp_path):
    (tmp_path / "refresh_token.json").write_text(json.dumps({"refreshToken": ""}))
    assert LocalFilesystemCredentialStore(tmp_path).get_token() is None


def test_incomplete_credentials_are_ignored(tmp_path):
    (tmp_path / "credentials.json").write_text(json.dumps({"username": "alice", "password": ""}))
    assert LocalFilesystemCredentialStore(tmp_path).get_credentials() is None


def test_delete_is_idempotent(tmp_path):
    store = LocalFilesystemCredentialStore(tmp_path)
    store.save_token(StoredToken(account_name="alice", refresh_token="abc"))
    store.delete_token()
    store.delete_token()
    store.delete_credentials()
    assert store.get_token() is None
    assert not (tmp_path / "refresh_token.json").exists()


def test_no_temp_files_left_behind(tmp_path):
    store = LocalFilesystemCredentialStore(tmp_path)
    store.save_token(StoredToken(account_name="alice", refresh_token="abc"))
    store.save_credentials(StoredCredentials(username="alice", password="pw"))
    assert sorted(p.name for p in tmp_path.iterdir()) == ["credentials.json", "refresh_token.json"]


def test_in_memory_store():
    store = InMemoryCredentialStore()
    store.save_credentials(StoredCredentials(username="alice", password="pw"))
    assert store.get_credentials().username == "alice"
    store.delete_credentials()
    assert store.get_credentials() is None
