from fastapi import APIRouter, Depends, Request

from traxit.api.deps import get_metadata_fetcher
from traxit.core.errors import InvalidUrlError
from traxit.core.logging import log_info
from traxit.core.platform import coerce_url
from traxit.infra.rate_limit import rate_limiter
from traxit.models.request import ProcessRequest, resolve_platform
from traxit.models.response import ProcessResponse
from traxit.services.info import MetadataFetcher
from traxit.utils.locale import safe_url_for_log

router = APIRouter()

@router.post(
    "/api/process",
    response_model=ProcessResponse,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limiter)]
)
async def process_url(
    request: Request,
    body: ProcessRequest,
    fetcher: MetadataFetcher = Depends(get_metadata_fetcher)
):
    """Detect the platform of a URL and return its video metadata"""
    if not body.url:
        raise InvalidUrlError("missing url", message_key="error.url_required")

    url = coerce_url(body.url)
    platform = resolve_platform(url)
    log_info(request, f"Analyzing {safe_url_for_log(url)} ({platform.value})")

    video_info = await fetcher.fetch(url)
    log_info(request, f"Video info retrieved: {video_info.title!r}"
             + (" [degraded]" if video_info.degraded else ""))

    return ProcessResponse(platform=platform.value, video_info=video_info)
