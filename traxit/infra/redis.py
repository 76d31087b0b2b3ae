from typing import Optional
import redis.asyncio as aioredis
from rich.console import Console
from traxit.config.settings import RedisConfig
from traxit.core.state import state

console = Console()

async def init_redis(redis_config: RedisConfig) -> Optional[aioredis.Redis]:
    """Connect to Redis; the service runs without it when unavailable"""
    if not redis_config.enabled:
        console.print("[dim]Redis disabled, metadata cache and rate limiting are off[/dim]")
        return None

    try:
        redis_client = aioredis.from_url(
            redis_config.url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=redis_config.socket_timeout
        )
        await redis_client.ping()
        console.print("[green]✓ Redis connected[/green]")
        return redis_client

    except Exception as e:
        console.print(f"[yellow]⚠ Redis connection failed: {str(e)}[/yellow]")
        return None

def get_redis() -> Optional[aioredis.Redis]:
    """Get Redis client from state"""
    return state.redis

async def close_redis() -> None:
    """Close Redis connection"""
    if state.redis:
        await state.redis.aclose()
        state.redis = None
        console.print("[dim]✓ Redis connection closed[/dim]")
