from pathlib import Path

from manifest_bundle_sdk import ArchiveEntry, Bundle, FileKind, InstallerSettings
from manifest_bundle_sdk.models.content import AppDepots, DepotInfo
from manifest_bundle_sdk.models.repository import GitHubBranch
from manifest_bundle_sdk.models.state import StoredToken


def test_bundle_classifies_by_suffix():
    bundle = Bundle(
        entries=[
            ArchiveEntry.from_bytes("pack/100.LUA", b"s"),
            ArchiveEntry.from_bytes("pack\\200.vdf", b"k"),
            ArchiveEntry.from_bytes("1_2.manifest", b"m"),
            ArchiveEntry.from_bytes("notes.txt", b"n"),
            ArchiveEntry(relative_name="pack/", is_directory=True),
        ]
    )

    assert [e.file_name for e in bundle.scripts] == ["100.LUA"]
    assert [e.file_name for e in bundle.keys] == ["200.vdf"]
    assert [e.file_name for e in bundle.manifests] == ["1_2.manifest"]
    assert bundle.of_kind(FileKind.OTHER)[0].file_name == "notes.txt"
    assert len(bundle.files()) == 4


def test_entry_reads_lazily():
    calls = []

    def reader():
        calls.append(1)
        return b"data"

    entry = ArchiveEntry(relative_name="a.lua", reader=reader)
    assert calls == []
    assert entry.read_bytes() == b"data"
    assert calls == [1]


def test_main_depot():
    depots = AppDepots(
        app_id=1,
        app_name="x",
        depots=[DepotInfo(2, "big", "20", 9), DepotInfo(3, "small", "30", 1)],
    )
    assert depots.main_depot.depot_id == 2
    assert AppDepots(app_id=1, app_name="x", depots=[]).main_depot is None


def test_settings_defaults():
    settings = InstallerSettings()
    assert settings.target_root is None
    assert settings.max_redirects == 5
    assert settings.repositories == []
    assert settings.data_dir == Path.home() / ".manifest-bundle"
    assert settings.app_details_url == "https://store.steampowered.com/api/appdetails"
    assert InstallerSettings(appDetailsUrl=None).app_details_url is None


def test_stored_token_aliases():
    token = StoredToken.model_validate({"accountName": "alice", "refreshToken": "t"})
    assert token.model_dump(by_alias=True) == {"accountName": "alice", "refreshToken": "t"}


def test_github_branch_payload():
    branch = GitHubBranch.model_validate(
        {
            "name": "100",
            "commit": {"sha": "abc", "commit": {"author": {"date": "2024-05-01T10:00:00Z"}}},
        }
    )
    assert branch.commit.commit.author.date.year == 2024
