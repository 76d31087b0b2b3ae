"""
Extraction strategies.

``LibraryExtractor`` drives the yt-dlp Python API in a worker thread and
is always tried first. ``CommandLineExtractor`` runs the yt-dlp
executable as a subprocess; its failure modes (stale install, different
client configuration, separate process) are independent enough from
the library's that it is worth a second attempt.

Both raise ``ExtractorFailure`` and nothing else for extraction
problems, so callers can fall back without inspecting library types.
"""
import asyncio
import json
import logging
import threading
from contextlib import suppress
from pathlib import Path
from typing import Any, Dict, Optional

import yt_dlp
from yt_dlp.utils import DownloadCancelled, YoutubeDLError

from traxit.config.settings import ExtractorConfig
from traxit.core.errors import ExtractorFailure
from traxit.services.ytdlp import CompletedProcess, SubprocessExecutor, YTDLPCommandBuilder

logger = logging.getLogger(__name__)


class _YtDlpLogger:
    """Route yt-dlp's own output into logging"""

    def debug(self, msg):
        # yt-dlp sends info-level lines through debug() too
        logger.debug(msg)

    def info(self, msg):
        logger.debug(msg)

    def warning(self, msg):
        logger.warning(msg)

    def error(self, msg):
        logger.error(msg)


class LibraryExtractor:
    """Primary strategy: yt-dlp as a library"""

    name = "yt-dlp library"

    def __init__(self, config: ExtractorConfig, ffmpeg_location: Optional[str] = None):
        self.config = config
        self.ffmpeg_location = ffmpeg_location

    def _options(self, **overrides: Any) -> Dict[str, Any]:
        opts = {
            "quiet": True,
            "no_warnings": True,
            "noprogress": True,
            "noplaylist": True,
            "socket_timeout": self.config.socket_timeout,
            "retries": self.config.retries,
            "http_headers": {"User-Agent": self.config.user_agent},
            "logger": _YtDlpLogger(),
        }
        if self.ffmpeg_location:
            opts["ffmpeg_location"] = self.ffmpeg_location
        opts.update(overrides)
        return opts

    def _extract_info_sync(self, url: str) -> Dict[str, Any]:
        with yt_dlp.YoutubeDL(self._options(skip_download=True)) as ydl:
            try:
                info = ydl.extract_info(url, download=False)
            except YoutubeDLError as e:
                raise ExtractorFailure(self.name, str(e)) from e
            return ydl.sanitize_info(info)

    def _download_sync(
        self,
        url: str,
        output_path: Path,
        format_selector: str,
        cancelled: threading.Event
    ) -> Dict[str, Any]:
        def abort_if_cancelled(_status):
            if cancelled.is_set():
                raise DownloadCancelled()

        opts = self._options(
            format=format_selector,
            outtmpl={"default": str(output_path)},
            overwrites=True,
            progress_hooks=[abort_if_cancelled],
        )
        with yt_dlp.YoutubeDL(opts) as ydl:
            try:
                info = ydl.extract_info(url, download=False)
                logger.info(f"Found with {self.name}: {info.get('title')}")
                if cancelled.is_set():
                    raise DownloadCancelled()
                ydl.process_ie_result(info, download=True)
            except YoutubeDLError as e:
                raise ExtractorFailure(self.name, str(e)) from e
            return ydl.sanitize_info(info)

    async def extract_info(self, url: str) -> Dict[str, Any]:
        """Fetch the metadata document without downloading media"""
        timeout = self.config.info_timeout
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._extract_info_sync, url),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise ExtractorFailure(self.name, f"timed out after {timeout:.0f}s") from e
        except ExtractorFailure:
            raise
        except Exception as e:
            raise ExtractorFailure(self.name, f"{type(e).__name__}: {e}") from e

    async def download(self, url: str, output_path: Path, format_selector: str) -> Dict[str, Any]:
        """
        Download the selected format to output_path.

        Runs in a worker thread. On timeout or cancellation the thread is
        told to stop through a progress hook and awaited, so it cannot
        write into the workspace after cleanup.
        """
        cancelled = threading.Event()
        future = asyncio.ensure_future(
            asyncio.to_thread(self._download_sync, url, output_path, format_selector, cancelled)
        )
        timeout = self.config.download_timeout

        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout=timeout)
        except asyncio.TimeoutError as e:
            cancelled.set()
            await self._drain(future)
            raise ExtractorFailure(self.name, f"download timed out after {timeout:.0f}s") from e
        except asyncio.CancelledError:
            cancelled.set()
            await self._drain(future)
            raise
        except ExtractorFailure:
            raise
        except Exception as e:
            raise ExtractorFailure(self.name, f"{type(e).__name__}: {e}") from e

    @staticmethod
    async def _drain(future: "asyncio.Future[Any]") -> None:
        # The outcome is irrelevant once we gave up on it
        with suppress(Exception):
            await asyncio.shield(future)


class CommandLineExtractor:
    """Secondary strategy: the yt-dlp executable"""

    name = "yt-dlp cli"

    def __init__(
        self,
        config: ExtractorConfig,
        executor=SubprocessExecutor,
        ffmpeg_location: Optional[str] = None
    ):
        self.config = config
        self.executor = executor
        self.commands = YTDLPCommandBuilder(config, ffmpeg_location)

    async def _run(self, cmd, timeout: float) -> CompletedProcess:
        try:
            result = await self.executor.run(cmd, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ExtractorFailure(self.name, f"timed out after {timeout:.0f}s") from e
        except OSError as e:
            raise ExtractorFailure(self.name, f"cannot run {cmd[0]}: {e}") from e

        if result.returncode != 0:
            raise ExtractorFailure(
                self.name,
                result.stderr_tail() or f"exited with status {result.returncode}"
            )
        return result

    async def extract_info(self, url: str) -> Dict[str, Any]:
        result = await self._run(self.commands.build_info_command(url), self.config.info_timeout)
        try:
            return json.loads(result.stdout.decode(errors="replace"))
        except json.JSONDecodeError as e:
            raise ExtractorFailure(self.name, f"unparseable metadata: {e}") from e

    async def extract_audio(self, url: str, output_base: Path) -> None:
        """Ask yt-dlp for an mp3; the real extension is only known after probing"""
        await self._run(
            self.commands.build_audio_command(url, output_base),
            self.config.download_timeout
        )

    async def download_best(self, url: str, output_path: Path) -> None:
        await self._run(
            self.commands.build_best_format_command(url, output_path),
            self.config.download_timeout
        )
