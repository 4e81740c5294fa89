"""Tests for InstallCoordinator, uninstall and installed listing."""

import pytest

from manifest_bundle_sdk import (
    ArchiveEntry,
    Bundle,
    BundleError,
    ExtractionError,
    ExtractionErrorKind,
    InMemoryProcessController,
    InstallCoordinator,
    InstallError,
    InstallErrorKind,
)
from manifest_bundle_sdk.installer import MANIFEST_DIR, SCRIPT_DIR

from helpers import MANIFEST, SCRIPT


def make_bundle(files: dict[str, bytes]) -> Bundle:
    return Bundle(entries=[ArchiveEntry.from_bytes(n, d) for n, d in files.items()])


def tree(root):
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


class RecordingProcess(InMemoryProcessController):
    """Also records, at stop and launch time, which target files exist."""

    def __init__(self, root, running=True):
        super().__init__(running=running)
        self.root = root
        self.files_at = {}

    def stop(self):
        self.files_at["stop"] = tree(self.root)
        super().stop()

    def launch(self, root):
        self.files_at["launch"] = tree(self.root)
        super().launch(root)


# --- install ---


@pytest.mark.asyncio
async def test_install_writes_layout(tmp_path):
    process = InMemoryProcessController(running=False)
    coordinator = InstallCoordinator(process, settle_delay=0)
    bundle = make_bundle(
        {"pack/100.lua": SCRIPT, "pack/200.vdf": b"key", "pack/200_300.manifest": MANIFEST}
    )

    result = await coordinator.install(bundle, tmp_path)

    assert not result.relaunched
    assert tree(tmp_path) == [
        f"{MANIFEST_DIR}/200_300.manifest",
        f"{SCRIPT_DIR}/100.lua",
        f"{SCRIPT_DIR}/200.vdf",
    ]
    assert (tmp_path / MANIFEST_DIR / "200_300.manifest").read_bytes() == MANIFEST
    assert process.calls == ["is_running"]


@pytest.mark.asyncio
async def test_install_stops_before_writes_and_relaunches_after(tmp_path):
    process = RecordingProcess(tmp_path, running=True)
    coordinator = InstallCoordinator(process, settle_delay=0)

    result = await coordinator.install(
        make_bundle({"100.lua": SCRIPT, "200_300.manifest": MANIFEST}), tmp_path
    )

    assert result.relaunched
    assert process.calls == ["is_running", "stop", "launch"]
    assert process.files_at["stop"] == []
    assert len(process.files_at["launch"]) == 2
    assert process.launched_from == [tmp_path]


@pytest.mark.asyncio
async def test_install_overwrites_same_name(tmp_path):
    coordinator = InstallCoordinator(InMemoryProcessController(), settle_delay=0)
    await coordinator.install(make_bundle({"100.lua": b"old", "1.manifest": b"m"}), tmp_path)
    await coordinator.install(make_bundle({"100.lua": SCRIPT, "1.manifest": b"m"}), tmp_path)
    assert (tmp_path / SCRIPT_DIR / "100.lua").read_bytes() == SCRIPT


@pytest.mark.asyncio
async def test_incomplete_bundle_leaves_target_untouched(tmp_path):
    process = InMemoryProcessController(running=True)
    coordinator = InstallCoordinator(process, settle_delay=0)

    with pytest.raises(BundleError):
        await coordinator.install(make_bundle({"100.lua": SCRIPT}), tmp_path)

    assert list(tmp_path.iterdir()) == []
    assert process.calls == []


@pytest.mark.asyncio
async def test_stop_failure_aborts_before_writes(tmp_path):
    process = InMemoryProcessController(running=True, fail_stop=True)
    coordinator = InstallCoordinator(process, settle_delay=0)

    with pytest.raises(InstallError) as exc_info:
        await coordinator.install(
            make_bundle({"100.lua": SCRIPT, "1.manifest": MANIFEST}), tmp_path
        )

    assert exc_info.value.kind == InstallErrorKind.PROCESS_STOP_FAILED
    assert tree(tmp_path) == []


def broken_reader():
    raise ExtractionError("bad member", ExtractionErrorKind.CORRUPT, name="200_300.manifest")


@pytest.mark.asyncio
async def test_unreadable_entry_aborts_before_stop(tmp_path):
    process = InMemoryProcessController(running=True)
    coordinator = InstallCoordinator(process, settle_delay=0)
    bundle = Bundle(
        entries=[
            ArchiveEntry.from_bytes("100.lua", SCRIPT),
            ArchiveEntry(relative_name="200_300.manifest", reader=broken_reader),
        ]
    )

    with pytest.raises(ExtractionError) as exc_info:
        await coordinator.install(bundle, tmp_path)

    assert exc_info.value.kind == ExtractionErrorKind.CORRUPT
    assert process.calls == []
    assert tree(tmp_path) == []


@pytest.mark.asyncio
async def test_vanished_source_file_aborts_before_stop(tmp_path):
    source = tmp_path / "source.manifest"
    source.write_bytes(MANIFEST)
    target = tmp_path / "target"
    process = InMemoryProcessController(running=True)
    coordinator = InstallCoordinator(process, settle_delay=0)
    bundle = Bundle(
        entries=[
            ArchiveEntry.from_bytes("100.lua", SCRIPT),
            ArchiveEntry(relative_name="200_300.manifest", reader=source.read_bytes),
        ]
    )
    source.unlink()

    with pytest.raises(ExtractionError):
        await coordinator.install(bundle, target)

    assert process.calls == []
    assert not target.exists()


@pytest.mark.asyncio
async def test_write_failure_still_relaunches(tmp_path):
    # a directory where the manifest should go makes the rename fail
    (tmp_path / MANIFEST_DIR / "1.manifest").mkdir(parents=True)
    process = InMemoryProcessController(running=True)
    coordinator = InstallCoordinator(process, settle_delay=0)

    with pytest.raises(InstallError) as exc_info:
        await coordinator.install(
            make_bundle({"100.lua": SCRIPT, "1.manifest": MANIFEST}), tmp_path
        )

    assert exc_info.value.kind == InstallErrorKind.WRITE_FAILED
    assert process.calls[-1] == "launch"
    # no rollback: the script written before the failure stays
    assert (tmp_path / SCRIPT_DIR / "100.lua").exists()


# --- uninstall ---


@pytest.mark.asyncio
async def test_install_then_uninstall(tmp_path):
    coordinator = InstallCoordinator(InMemoryProcessController(), settle_delay=0)
    await coordinator.install(
        make_bundle({"100.lua": SCRIPT, "200_300.vdf": b"key", "200_300.manifest": MANIFEST}),
        tmp_path,
    )
    other_script = b'addappid(555)\nsetManifestid(556,"777",0)\n'
    await coordinator.install(
        make_bundle({"555.lua": other_script, "556_777.manifest": b"other"}), tmp_path
    )

    result = await coordinator.uninstall(100, tmp_path)

    assert result.manifest_ids == ["300"]
    assert tree(tmp_path) == [f"{MANIFEST_DIR}/556_777.manifest", f"{SCRIPT_DIR}/555.lua"]


@pytest.mark.asyncio
async def test_uninstall_ignores_depot_declarations(tmp_path):
    # app 200 appears only as a depot of app 100
    coordinator = InstallCoordinator(InMemoryProcessController(), settle_delay=0)
    await coordinator.install(make_bundle({"100.lua": SCRIPT, "1.manifest": b"m"}), tmp_path)

    result = await coordinator.uninstall(200, tmp_path)

    assert result.removed == []


@pytest.mark.asyncio
async def test_uninstall_on_empty_root(tmp_path):
    coordinator = InstallCoordinator(InMemoryProcessController(), settle_delay=0)
    result = await coordinator.uninstall(100, tmp_path)
    assert result.removed == []


# --- listing ---


def test_list_installed(tmp_path):
    scripts = tmp_path / SCRIPT_DIR
    manifests = tmp_path / MANIFEST_DIR
    scripts.mkdir(parents=True)
    manifests.mkdir(parents=True)
    (scripts / "100.lua").write_bytes(SCRIPT)
    (scripts / "named.lua").write_text(
        '-- Name: Some Game\naddappid(400)\nsetManifestid(401,"999",0)\n'
    )
    (scripts / "comment.lua").write_text("addappid(500) -- Other Game\n")
    (scripts / "empty.lua").write_text("-- nothing here\n")
    (manifests / "200_300.manifest").write_bytes(MANIFEST)
    (manifests / "401_999.manifest").write_bytes(MANIFEST)

    coordinator = InstallCoordinator(InMemoryProcessController())
    apps = {a.app_id: a for a in coordinator.list_installed(tmp_path)}

    assert sorted(apps) == [100, 400, 500]
    assert apps[100].name == "App 100"
    assert not apps[100].name_known
    assert apps[100].manifest_files == ["200_300.manifest"]
    assert apps[400].name == "Some Game"
    assert apps[400].name_known
    assert apps[400].manifest_ids == ["999"]
    assert apps[500].name == "Other Game"
    assert apps[500].script_file == "comment.lua"
