from dataclasses import dataclass
from typing import Optional
from redis.asyncio import Redis

@dataclass
class RuntimeState:
    """Centralized runtime state"""
    redis: Optional[Redis] = None
    ytdlp_version: str = "unknown"
    ytdlp_cli_path: Optional[str] = None
    ffmpeg_path: Optional[str] = None

state = RuntimeState()
