import pytest

from traxit.core.errors import ConfigurationError
from traxit.services.workspace import TempWorkspace


def test_same_title_gets_separate_namespaces(temp_root):
    first = TempWorkspace.allocate(temp_root, "Same Title")
    second = TempWorkspace.allocate(temp_root, "Same Title")

    assert first.directory != second.directory
    assert first.audio_output_path != second.audio_output_path
    assert first.audio_output_path.name == second.audio_output_path.name == "Same Title.mp3"
    assert first.directory.is_dir() and second.directory.is_dir()


def test_paths_live_inside_the_namespace(temp_root):
    workspace = TempWorkspace.allocate(temp_root, "../../etc/passwd")

    for path in (workspace.raw_media_path, workspace.audio_output_path, workspace.probe_base):
        assert path.parent == workspace.directory


def test_release_is_idempotent(temp_root):
    workspace = TempWorkspace.allocate(temp_root, "title")
    workspace.audio_output_path.write_bytes(b"data")

    workspace.release()
    workspace.release()

    assert workspace.released
    assert not workspace.directory.exists()


def test_probe_order_and_empty_files(temp_root):
    workspace = TempWorkspace.allocate(temp_root, "title")
    base = str(workspace.probe_base)
    open(base + ".mp3", "wb").close()
    with open(base + ".webm", "wb") as f:
        f.write(b"webm")
    with open(base + ".m4a", "wb") as f:
        f.write(b"m4a")

    probed = workspace.probe([".mp3", ".m4a", ".webm"])
    assert probed is not None and probed.suffix == ".m4a"
    assert workspace.probe([".ogg"]) is None


def test_unwritable_root_is_configuration_error(tmp_path):
    not_a_directory = tmp_path / "file"
    not_a_directory.write_text("x")

    with pytest.raises(ConfigurationError):
        TempWorkspace.allocate(not_a_directory, "title")


@pytest.mark.asyncio
async def test_context_releases_on_error(temp_root):
    workspace = TempWorkspace.allocate(temp_root, "title")
    with pytest.raises(RuntimeError):
        async with workspace:
            workspace.raw_media_path.write_bytes(b"partial")
            raise RuntimeError("boom")

    assert not workspace.directory.exists()


@pytest.mark.asyncio
async def test_context_keeps_files_after_handoff(temp_root):
    workspace = TempWorkspace.allocate(temp_root, "title")
    async with workspace:
        workspace.audio_output_path.write_bytes(b"mp3")
        release = workspace.handoff()

    assert workspace.audio_output_path.exists()
    release()
    assert not workspace.directory.exists()
