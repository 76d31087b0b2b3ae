from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from traxit.api.deps import get_orchestrator
from traxit.core.logging import log_debug, log_info, log_warning
from traxit.infra.disconnect import run_until_disconnected
from traxit.infra.rate_limit import rate_limiter
from traxit.models.request import AudioDownloadQuery
from traxit.services.download import AudioDownloadOrchestrator
from traxit.services.stream import AudioFileStream
from traxit.utils.locale import safe_url_for_log

router = APIRouter()

@router.get("/api/download/audio", dependencies=[Depends(rate_limiter)])
async def download_audio(
    request: Request,
    url: Optional[str] = Query(None, description="Video URL"),
    platform: Optional[str] = Query(None, description="Client's platform guess"),
    title: Optional[str] = Query(None, description="Desired file name"),
    audio_quality: Optional[str] = Query(None, alias="audioQuality"),
    orchestrator: AudioDownloadOrchestrator = Depends(get_orchestrator)
):
    """
    Download the audio track of a video and stream it back as MP3.

    The files live in a per-request workspace. It is removed when the
    stream finishes, or right away if anything fails before that.
    """
    descriptor = AudioDownloadQuery(
        url=url,
        platform=platform,
        title=title,
        audioQuality=audio_quality
    ).to_descriptor()

    if platform and platform.lower() != descriptor.platform.value:
        log_warning(request, f"Client said {platform!r}, detected {descriptor.platform.value}")

    quality = descriptor.audio_quality
    log_info(request, f"Audio download: {safe_url_for_log(descriptor.raw_url)} "
             f"title={descriptor.desired_title!r} quality={quality.value or quality.kind.value}")

    workspace = orchestrator.open_workspace(descriptor.desired_title)
    log_debug(request, f"Workspace {workspace.directory}")
    async with workspace:
        path = await run_until_disconnected(
            request,
            orchestrator.download(descriptor, workspace)
        )
        stream = await AudioFileStream.open(path)
        log_info(request, f"Streaming {stream.size} bytes from {workspace.request_id}")
        return stream.response(descriptor.desired_title, workspace.handoff())
