import hashlib
import json
import logging
from typing import Callable, Optional

from redis.asyncio import Redis

from traxit.core.errors import ExtractionFailedError, ExtractorFailure
from traxit.core.platform import CANONICAL_WATCH_URL, extract_video_id, is_short_form, normalize_url
from traxit.infra.redis import get_redis
from traxit.models.response import MediaMetadata
from traxit.services.extractor import CommandLineExtractor, LibraryExtractor

logger = logging.getLogger(__name__)

INFO_CACHE_TTL = 300

def info_cache_key(canonical_url: str) -> str:
    return "info:" + hashlib.sha256(canonical_url.encode()).hexdigest()[:16]

class MetadataFetcher:
    """Video metadata with a library-first, command-line-second fallback"""

    def __init__(
        self,
        primary: LibraryExtractor,
        secondary: CommandLineExtractor,
        redis_getter: Callable[[], Optional[Redis]] = get_redis
    ):
        self.primary = primary
        self.secondary = secondary
        self.redis_getter = redis_getter

    async def _cached(self, cache_key: str) -> Optional[MediaMetadata]:
        redis = self.redis_getter()
        if not redis:
            return None
        try:
            cached = await redis.get(cache_key)
        except Exception as e:
            logger.warning(f"Metadata cache read failed: {e}")
            return None
        return MediaMetadata(**json.loads(cached)) if cached else None

    async def _store(self, cache_key: str, metadata: MediaMetadata) -> None:
        redis = self.redis_getter()
        if not redis:
            return
        try:
            await redis.setex(cache_key, INFO_CACHE_TTL, metadata.model_dump_json())
        except Exception as e:
            logger.warning(f"Metadata cache write failed: {e}")

    async def fetch(self, url: str) -> MediaMetadata:
        """
        Fetch metadata for a validated URL.

        Short-form URLs are normalized to the watch URL first. When both
        strategies fail for a short-form URL whose id is recoverable, a
        placeholder flagged ``degraded`` is returned instead of an error.
        """
        short = is_short_form(url)
        canonical = normalize_url(url)
        video_id = extract_video_id(canonical)
        if video_id:
            canonical = CANONICAL_WATCH_URL.format(video_id=video_id)

        cache_key = info_cache_key(canonical)
        cached = await self._cached(cache_key)
        if cached:
            # watch and shorts links share one cache entry
            return cached.model_copy(update={"is_short": short})

        try:
            info = await self.primary.extract_info(canonical)
            logger.info(f"Retrieved info with {self.primary.name}")
        except ExtractorFailure as primary_error:
            logger.warning(f"{self.primary.name} failed, trying {self.secondary.name}: {primary_error}")
            try:
                info = await self.secondary.extract_info(canonical)
                logger.info(f"Retrieved info with {self.secondary.name}")
            except ExtractorFailure as secondary_error:
                logger.error(f"Both extractors failed: {secondary_error}")
                if short and video_id:
                    logger.info(f"Using placeholder info for short {video_id}")
                    return MediaMetadata.short_placeholder(video_id, canonical)
                raise ExtractionFailedError.from_failure(secondary_error) from secondary_error

        metadata = MediaMetadata.from_info(info, canonical, is_short=short)
        await self._store(cache_key, metadata)
        return metadata
