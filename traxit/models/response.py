from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

SHORT_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/0.jpg"


class MediaMetadata(BaseModel):
    """Video metadata returned by the analyze step"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    title: str
    duration: Optional[int] = Field(None, description="Seconds; None when unknown")
    author: Optional[str] = None
    thumbnail: Optional[str] = None
    url: str = Field(..., description="Canonical watch URL")
    is_short: bool = Field(False, alias="isShort")
    degraded: bool = Field(False, description="Best-effort placeholder; title and duration are guesses")

    @classmethod
    def from_info(cls, info: Dict[str, Any], url: str, is_short: bool = False) -> "MediaMetadata":
        """Build from a yt-dlp info dict (library or --dump-single-json)"""
        duration = info.get("duration")
        thumbnails = info.get("thumbnails") or []
        thumbnail = info.get("thumbnail") or (thumbnails[0].get("url") if thumbnails else None)

        return cls(
            id=info.get("id"),
            title=info.get("title") or "Unknown",
            duration=int(duration) if duration is not None else None,
            author=info.get("uploader") or info.get("channel"),
            thumbnail=thumbnail,
            url=url,
            is_short=is_short,
        )

    @classmethod
    def short_placeholder(cls, video_id: str, url: str) -> "MediaMetadata":
        return cls(
            id=video_id,
            title=f"YouTube Short ({video_id})",
            duration=None,
            author="YouTube Creator",
            thumbnail=SHORT_THUMBNAIL_URL.format(video_id=video_id),
            url=url,
            is_short=True,
            degraded=True,
        )


class ProcessResponse(BaseModel):
    """Response of POST /api/process"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    platform: str
    video_info: MediaMetadata = Field(..., alias="videoInfo")
