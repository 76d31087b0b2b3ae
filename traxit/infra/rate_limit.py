import logging
from typing import Callable, Optional

from fastapi import Request
from redis.asyncio import Redis

from traxit.config.settings import RateLimitConfig, config
from traxit.core.errors import RateLimitedError
from traxit.infra.redis import get_redis

logger = logging.getLogger(__name__)

# Fixed window per key. Returns {allowed, seconds until the window resets}.
FIXED_WINDOW_LUA = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[2])
end
if count > tonumber(ARGV[1]) then
    return {0, redis.call('TTL', KEYS[1])}
end
return {1, 0}
"""


class RedisRateLimiter:
    """Per-client, per-route request limit; used as a route dependency"""

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        enabled: bool = True,
        redis_getter: Optional[Callable[[], Optional[Redis]]] = None
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.enabled = enabled
        self._redis_getter = redis_getter

    @classmethod
    def from_config(cls, rate_limit_config: RateLimitConfig) -> "RedisRateLimiter":
        return cls(
            max_requests=rate_limit_config.max_requests,
            window_seconds=rate_limit_config.window_seconds,
            enabled=rate_limit_config.enabled,
        )

    def _redis(self) -> Optional[Redis]:
        return self._redis_getter() if self._redis_getter else get_redis()

    @staticmethod
    def key_for(request: Request) -> str:
        client_ip = request.client.host if request.client else "unknown"
        return f"rate:{client_ip}:{request.url.path}"

    async def __call__(self, request: Request) -> bool:
        redis = self._redis() if self.enabled else None
        if redis is None:
            return True

        try:
            allowed, ttl = await redis.eval(
                FIXED_WINDOW_LUA, 1, self.key_for(request), self.max_requests, self.window_seconds
            )
        except Exception as e:
            # fail open
            logger.warning(f"Rate limiter unavailable: {e}")
            return True

        if not allowed:
            raise RateLimitedError(max(int(ttl), 1))
        return True


rate_limiter = RedisRateLimiter.from_config(config.rate_limit)
