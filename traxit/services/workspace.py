"""
Per-request temp namespace.

Each request gets its own directory under the temp root, named from a
nanosecond timestamp plus a random token. Every intermediate and final
file lives inside it, so releasing the namespace is a single directory
removal no matter which branch produced which files.
"""
import asyncio
import logging
import os
import shutil
import time
import uuid
from pathlib import Path
from typing import Callable, Iterable, Optional

from traxit.core.errors import ConfigurationError
from traxit.utils.filename import sanitize_filename

logger = logging.getLogger(__name__)


def _non_empty(path: Path) -> bool:
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


class TempWorkspace:
    def __init__(self, root: Path, title: str):
        self.root = Path(root)
        self.request_id = f"{time.time_ns()}_{uuid.uuid4().hex[:8]}"
        self.safe_title = sanitize_filename(title)
        self.directory = self.root / self.request_id
        self._released = False
        self._handed_off = False

    @classmethod
    def allocate(cls, root: Path, title: str) -> "TempWorkspace":
        """Create the namespace; an unwritable root is a configuration error"""
        workspace = cls(root, title)
        try:
            workspace.root.mkdir(parents=True, exist_ok=True)
            if not os.access(workspace.root, os.W_OK):
                raise PermissionError(f"{workspace.root} is not writable")
            workspace.directory.mkdir(exist_ok=False)
        except OSError as e:
            logger.error(f"Temp directory {workspace.root} is not usable: {e}")
            raise ConfigurationError(str(e)) from e

        logger.debug(f"[{workspace.request_id}] workspace {workspace.directory}")
        return workspace

    @property
    def raw_media_path(self) -> Path:
        return self.directory / f"{self.safe_title}.mp4"

    @property
    def audio_output_path(self) -> Path:
        return self.directory / f"{self.safe_title}.mp3"

    @property
    def probe_base(self) -> Path:
        """Output base for tools that pick their own extension"""
        return self.directory / f"traxit_{self.request_id}"

    @property
    def released(self) -> bool:
        return self._released

    def has_content(self, path: Path) -> bool:
        return _non_empty(path)

    def probe(self, extensions: Iterable[str]) -> Optional[Path]:
        """First non-empty <probe_base><ext> in the given order"""
        for ext in extensions:
            candidate = Path(f"{self.probe_base}{ext}")
            if _non_empty(candidate):
                return candidate
        return None

    def discard(self, path: Path) -> None:
        path.unlink(missing_ok=True)

    def release(self) -> None:
        """Delete everything in the namespace. Safe to call more than once."""
        if self._released:
            return
        self._released = True

        shutil.rmtree(self.directory, ignore_errors=True)
        if self.directory.exists():
            logger.error(f"[{self.request_id}] could not remove {self.directory}")
        else:
            logger.debug(f"[{self.request_id}] cleaned up {self.directory}")

    def handoff(self) -> Callable[[], None]:
        """Transfer release responsibility to the caller (the response stream)"""
        self._handed_off = True
        return self.release

    async def __aenter__(self) -> "TempWorkspace":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        # An exception after handoff means the response never went out
        if exc_type is not None or not self._handed_off:
            await asyncio.to_thread(self.release)
