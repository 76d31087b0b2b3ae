import os
import shutil

from fastapi import APIRouter

from traxit.config.settings import config
from traxit.core.state import state
from traxit.i18n import i18n

router = APIRouter()


async def _redis_status() -> str:
    if not state.redis:
        return i18n.get("response.redis_disabled")
    try:
        await state.redis.ping()
        return i18n.get("response.redis_connected")
    except Exception:
        return i18n.get("response.redis_disconnected")


@router.get("/")
async def root():
    """Root endpoint"""
    return {
        "status": i18n.get("response.status_running"),
        "service": config.api.title,
        "version": config.api.version,
        "ytdlp_version": state.ytdlp_version,
        "redis_enabled": state.redis is not None
    }


@router.get("/health")
async def health_check():
    """Lightweight health check"""
    return {
        "status": i18n.get("health.status"),
        "redis": await _redis_status()
    }


@router.get("/health/full")
async def health_check_full():
    """Detailed health check"""
    temp_root = config.temp_root()
    ffmpeg = state.ffmpeg_path or shutil.which(config.transcode.ffmpeg_binary)

    return {
        "status": i18n.get("health.status"),
        "environment": config.environment,
        "ytdlp_version": state.ytdlp_version,
        "ytdlp_cli": state.ytdlp_cli_path,
        "ffmpeg": ffmpeg,
        "ffmpeg_available": ffmpeg is not None,
        "redis_status": await _redis_status(),
        "temp_dir": str(temp_root),
        "temp_dir_writable": temp_root.is_dir() and os.access(temp_root, os.W_OK)
    }
