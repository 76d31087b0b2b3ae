from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from traxit.core.platform import Platform, is_short_form

HIGHEST_ALIASES = {"", "highest", "highestaudio", "best", "bestaudio"}

class QualityKind(str, Enum):
    HIGHEST = "highest"
    EXPLICIT = "explicit"

class AudioQuality(BaseModel):
    """Audio quality hint for the primary extractor"""
    model_config = ConfigDict(frozen=True)

    kind: QualityKind = QualityKind.HIGHEST
    value: Optional[str] = None

    @classmethod
    def parse(cls, raw: Optional[str]) -> "AudioQuality":
        normalized = (raw or "").strip()
        if normalized.lower() in HIGHEST_ALIASES:
            return cls(kind=QualityKind.HIGHEST)
        return cls(kind=QualityKind.EXPLICIT, value=normalized)

class RequestDescriptor(BaseModel):
    """Internal download request (separated from HTTP concerns)"""
    model_config = ConfigDict(frozen=True)

    raw_url: str
    platform: Platform
    desired_title: str
    audio_quality: AudioQuality = AudioQuality()

    @property
    def is_short_form(self) -> bool:
        return is_short_form(self.raw_url)
