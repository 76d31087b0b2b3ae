import threading

import pytest

from traxit.core.errors import DeliveryFailedError
from traxit.services.stream import AudioFileStream
from traxit.services.workspace import TempWorkspace


class BrokenHandle:
    """File handle whose reads fail after the first chunk"""

    def __init__(self):
        self.reads = 0
        self.closed = False

    async def read(self, size):
        self.reads += 1
        if self.reads > 1:
            raise OSError(5, "Input/output error")
        return b"first"

    async def close(self):
        self.closed = True


def _workspace_with_audio(temp_root) -> TempWorkspace:
    workspace = TempWorkspace.allocate(temp_root, "song")
    workspace.audio_output_path.write_bytes(b"ID3-audio")
    return workspace


@pytest.mark.asyncio
async def test_read_error_releases_workspace(temp_root):
    workspace = _workspace_with_audio(temp_root)
    handle = BrokenHandle()
    stream = AudioFileStream(workspace.audio_output_path, handle, 9)
    stream.response("song", workspace.handoff())

    received = []
    with pytest.raises(OSError):
        async for chunk in stream.chunks():
            received.append(chunk)

    assert received == [b"first"]
    assert handle.closed
    assert workspace.released
    assert list(temp_root.iterdir()) == []


@pytest.mark.asyncio
async def test_close_releases_once():
    released = []
    handle = BrokenHandle()
    stream = AudioFileStream(None, handle, 0)
    stream.response("song", lambda: released.append(threading.get_ident()))

    await stream.close()
    await stream.close()

    assert len(released) == 1
    # workspace removal stays off the event loop thread
    assert released[0] != threading.get_ident()


@pytest.mark.asyncio
async def test_full_stream_then_background_close(temp_root):
    workspace = _workspace_with_audio(temp_root)
    stream = await AudioFileStream.open(workspace.audio_output_path)
    response = stream.response("My Song", workspace.handoff())

    body = b"".join([chunk async for chunk in stream.chunks()])
    await response.background()

    assert body == b"ID3-audio"
    assert response.headers["content-length"] == "9"
    assert response.headers["content-type"] == "audio/mpeg"
    assert 'filename="My_Song.mp3"' in response.headers["content-disposition"]
    assert list(temp_root.iterdir()) == []


@pytest.mark.asyncio
async def test_missing_file_is_delivery_failure(temp_root):
    with pytest.raises(DeliveryFailedError):
        await AudioFileStream.open(temp_root / "nowhere.mp3")
