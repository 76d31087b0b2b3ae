from typing import Optional
from urllib.parse import unquote

from pydantic import BaseModel, Field

from traxit.core.errors import NotYetImplementedError, UnsupportedPlatformError
from traxit.core.platform import IMPLEMENTED_PLATFORMS, Platform, coerce_url, detect
from traxit.models.internal import AudioQuality, RequestDescriptor

DEFAULT_TITLE = "audio"

def resolve_platform(url: str) -> Platform:
    """Detect the platform and reject anything this service cannot handle"""
    platform = detect(url)
    if platform == Platform.UNSUPPORTED:
        raise UnsupportedPlatformError(f"no platform for {url[:100]}")
    if platform not in IMPLEMENTED_PLATFORMS:
        raise NotYetImplementedError(
            f"{platform.value} recognized but not implemented",
            platform=platform.value.capitalize()
        )
    return platform

class ProcessRequest(BaseModel):
    """Body of POST /api/process"""
    # Optional so a missing url is answered with our own 400 instead of 422
    url: Optional[str] = Field(None, description="Video URL")

class AudioDownloadQuery(BaseModel):
    """Query string of GET /api/download/audio"""
    url: Optional[str] = None
    platform: Optional[str] = Field(None, description="Advisory only; detection always runs")
    title: Optional[str] = None
    audio_quality: Optional[str] = Field(None, alias="audioQuality")

    def to_descriptor(self) -> RequestDescriptor:
        """Validate and convert to a download descriptor"""
        url = self.url
        # Clients sometimes encode the URL twice
        if url and "%" in url:
            url = unquote(url)

        url = coerce_url(url)
        platform = resolve_platform(url)

        return RequestDescriptor(
            raw_url=url,
            platform=platform,
            desired_title=(self.title or "").strip() or DEFAULT_TITLE,
            audio_quality=AudioQuality.parse(self.audio_quality),
        )
