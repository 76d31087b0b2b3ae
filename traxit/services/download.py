"""
Fallback download orchestrator.

    INIT -> NORMALIZE_URL -> TRY_PRIMARY -> HAVE_RAW_MEDIA ----------------> TRANSCODE -> DONE
                                  |                                            ^
                                  v                                            |
                             TRY_SECONDARY -> HAVE_RAW_MEDIA (probed file) ----+
                                  |        -> HAVE_GENERIC_MEDIA (best format) +
                                  |        -> HAVE_DIRECT_AUDIO (mp3 probed) -------------> DONE
                                  v
                                FATAL

Files are only ever written inside the request's ``TempWorkspace``; the
orchestrator never deletes the namespace itself.
"""
import asyncio
import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from traxit.config.settings import Config
from traxit.core.errors import (
    ExtractionFailedError,
    ExtractorFailure,
    TemporarilyUnavailableError,
)
from traxit.core.platform import normalize_url
from traxit.models.internal import RequestDescriptor
from traxit.services.extractor import CommandLineExtractor, LibraryExtractor
from traxit.services.format import FormatDecision
from traxit.services.transcode import Transcoder
from traxit.services.workspace import TempWorkspace
from traxit.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)

TARGET_EXTENSION = ".mp3"


class DownloadState(str, Enum):
    INIT = "init"
    NORMALIZE_URL = "normalize_url"
    TRY_PRIMARY = "try_primary"
    TRY_SECONDARY = "try_secondary"
    HAVE_RAW_MEDIA = "have_raw_media"
    HAVE_DIRECT_AUDIO = "have_direct_audio"
    HAVE_GENERIC_MEDIA = "have_generic_media"
    TRANSCODE = "transcode"
    DONE = "done"
    FATAL = "fatal"


@dataclass
class MediaSource:
    state: DownloadState
    path: Path


class AudioDownloadOrchestrator:
    """Produce an MP3 for a validated request, primary strategy first"""

    def __init__(
        self,
        config: Config,
        primary: LibraryExtractor,
        secondary: CommandLineExtractor,
        transcoder: Transcoder
    ):
        self.config = config
        self.primary = primary
        self.secondary = secondary
        self.transcoder = transcoder

    def open_workspace(self, title: str) -> TempWorkspace:
        return TempWorkspace.allocate(self.config.temp_root(), title)

    def _enter(self, workspace: TempWorkspace, state: DownloadState, note: str = "") -> None:
        suffix = f" ({note})" if note else ""
        logger.info(f"[{workspace.request_id}] {state.value}{suffix}")

    async def download(self, descriptor: RequestDescriptor, workspace: TempWorkspace) -> Path:
        """Return the path of the finished MP3 inside the workspace"""
        self._enter(workspace, DownloadState.INIT, f"title={workspace.safe_title!r}")

        url = normalize_url(descriptor.raw_url)
        self._enter(workspace, DownloadState.NORMALIZE_URL, safe_url_for_log(url))

        try:
            source = await self._try_primary(url, descriptor, workspace)
        except ExtractorFailure as primary_error:
            logger.warning(f"[{workspace.request_id}] primary failed, trying fallback: {primary_error}")
            try:
                source = await self._try_secondary(url, workspace)
            except ExtractorFailure as secondary_error:
                self._enter(workspace, DownloadState.FATAL, str(secondary_error)[:200])
                if descriptor.is_short_form:
                    raise TemporarilyUnavailableError(str(secondary_error)) from secondary_error
                raise ExtractionFailedError.from_failure(secondary_error) from secondary_error

        self._enter(workspace, source.state, source.path.name)

        if source.state != DownloadState.HAVE_DIRECT_AUDIO:
            self._enter(workspace, DownloadState.TRANSCODE)
            await self.transcoder.transcode(source.path, workspace.audio_output_path)

        self._enter(workspace, DownloadState.DONE)
        return workspace.audio_output_path

    async def _try_primary(
        self,
        url: str,
        descriptor: RequestDescriptor,
        workspace: TempWorkspace
    ) -> MediaSource:
        format_selector = FormatDecision.decide(descriptor.audio_quality)
        self._enter(workspace, DownloadState.TRY_PRIMARY, f"format={format_selector}")

        await self.primary.download(url, workspace.raw_media_path, format_selector)

        if not workspace.has_content(workspace.raw_media_path):
            raise ExtractorFailure(self.primary.name, "download produced an empty or missing file")

        return MediaSource(DownloadState.HAVE_RAW_MEDIA, workspace.raw_media_path)

    async def _try_secondary(self, url: str, workspace: TempWorkspace) -> MediaSource:
        self._enter(workspace, DownloadState.TRY_SECONDARY)
        # A partial file from the primary must not be mistaken for a result
        workspace.discard(workspace.raw_media_path)

        await self.secondary.extract_audio(url, workspace.probe_base)

        probed = workspace.probe(self.config.extractor.probe_extensions)
        if probed is not None:
            if probed.suffix == TARGET_EXTENSION:
                await asyncio.to_thread(shutil.copyfile, probed, workspace.audio_output_path)
                return MediaSource(DownloadState.HAVE_DIRECT_AUDIO, workspace.audio_output_path)
            return MediaSource(DownloadState.HAVE_RAW_MEDIA, probed)

        logger.info(f"[{workspace.request_id}] no audio file found, trying a plain download")
        await self.secondary.download_best(url, workspace.raw_media_path)

        if not workspace.has_content(workspace.raw_media_path):
            raise ExtractorFailure(self.secondary.name, "failed to download video file")

        return MediaSource(DownloadState.HAVE_GENERIC_MEDIA, workspace.raw_media_path)
