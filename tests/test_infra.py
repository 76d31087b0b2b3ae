import asyncio

import pytest

from traxit.core.errors import ClientDisconnectedError, RateLimitedError
from traxit.infra.disconnect import run_until_disconnected
from traxit.infra.rate_limit import RedisRateLimiter


class FakeRequest:
    def __init__(self, disconnected=False, path="/api/process"):
        self.disconnected = disconnected
        self.client = type("Client", (), {"host": "203.0.113.5"})()
        self.url = type("URL", (), {"path": path})()

    async def is_disconnected(self):
        return self.disconnected


class FakeRedis:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def eval(self, script, numkeys, *args):
        self.calls.append(args)
        if self.error:
            raise self.error
        return self.reply


@pytest.mark.asyncio
async def test_work_result_is_returned():
    async def work():
        return 42

    assert await run_until_disconnected(FakeRequest(), work(), poll_interval=0.01) == 42


@pytest.mark.asyncio
async def test_disconnect_cancels_work():
    cancelled = asyncio.Event()

    async def work():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    with pytest.raises(ClientDisconnectedError):
        await run_until_disconnected(FakeRequest(disconnected=True), work(), poll_interval=0.01)
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_work_errors_propagate():
    async def work():
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await run_until_disconnected(FakeRequest(), work(), poll_interval=0.01)


@pytest.mark.asyncio
async def test_rate_limiter_allows(monkeypatch):
    redis = FakeRedis(reply=[1, 0])
    monkeypatch.setattr("traxit.infra.rate_limit.get_redis", lambda: redis)

    assert await RedisRateLimiter(max_requests=2, window_seconds=60)(FakeRequest())
    assert redis.calls == [("rate:203.0.113.5:/api/process", 2, 60)]


@pytest.mark.asyncio
async def test_rate_limiter_blocks(monkeypatch):
    monkeypatch.setattr("traxit.infra.rate_limit.get_redis", lambda: FakeRedis(reply=[0, 17]))

    with pytest.raises(RateLimitedError) as exc_info:
        await RedisRateLimiter(max_requests=2, window_seconds=60)(FakeRequest())
    assert exc_info.value.retry_after == 17


@pytest.mark.asyncio
async def test_rate_limiter_fails_open(monkeypatch):
    monkeypatch.setattr("traxit.infra.rate_limit.get_redis", lambda: FakeRedis(error=ConnectionError("down")))

    assert await RedisRateLimiter(max_requests=2, window_seconds=60)(FakeRequest())


@pytest.mark.asyncio
async def test_rate_limiter_without_redis(monkeypatch):
    monkeypatch.setattr("traxit.infra.rate_limit.get_redis", lambda: None)

    assert await RedisRateLimiter(max_requests=1, window_seconds=60)(FakeRequest())
