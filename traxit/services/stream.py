import asyncio
import logging
from pathlib import Path
from typing import AsyncIterator, Callable, Dict, Optional

import aiofiles
import aiofiles.os
from starlette.background import BackgroundTask
from fastapi.responses import StreamingResponse

from traxit.core.errors import DeliveryFailedError
from traxit.utils.filename import content_disposition

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
AUDIO_MEDIA_TYPE = "audio/mpeg"


class AudioFileStream:
    """
    Stream a finished MP3 to the client without buffering it.

    The file is opened and measured before the response starts, so a
    missing or unreadable file still becomes a JSON error. Once headers
    are out, a read error can only abort the connection.
    """

    def __init__(self, path: Path, handle, size: int):
        self.path = path
        self._handle = handle
        self.size = size
        self._release: Optional[Callable[[], None]] = None
        self._closed = False

    @classmethod
    async def open(cls, path: Path) -> "AudioFileStream":
        try:
            stat = await aiofiles.os.stat(path)
            handle = await aiofiles.open(path, "rb")
        except OSError as e:
            raise DeliveryFailedError(f"cannot open {path.name}: {e}") from e
        return cls(path, handle, stat.st_size)

    async def chunks(self) -> AsyncIterator[bytes]:
        sent = 0
        try:
            while True:
                chunk = await self._handle.read(CHUNK_SIZE)
                if not chunk:
                    break
                sent += len(chunk)
                yield chunk
            logger.info(f"File sent ({sent} bytes), cleaning up")
        except Exception as e:
            logger.error(f"Error reading audio file after {sent} bytes: {e}")
            raise
        finally:
            await self.close()

    async def close(self) -> None:
        """Close the file and release the workspace; runs at most once"""
        if self._closed:
            return
        self._closed = True
        try:
            await self._handle.close()
        finally:
            if self._release is not None:
                await asyncio.to_thread(self._release)

    def headers(self, title: str) -> Dict[str, str]:
        return {
            "Content-Disposition": content_disposition(title, "mp3"),
            "Content-Length": str(self.size),
            "Cache-Control": "no-cache",
            "X-Content-Type-Options": "nosniff",
        }

    def response(self, title: str, release: Callable[[], None]) -> StreamingResponse:
        """
        Build the streaming response. ``release`` runs when the body
        finishes, fails, or the client goes away before it starts.
        """
        self._release = release
        return StreamingResponse(
            self.chunks(),
            media_type=AUDIO_MEDIA_TYPE,
            headers=self.headers(title),
            background=BackgroundTask(self.close),
        )
