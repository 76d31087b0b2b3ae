from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from traxit.api.deps import get_metadata_fetcher, get_orchestrator
from traxit.config.settings import config
from traxit.main import app
from traxit.services.download import AudioDownloadOrchestrator
from traxit.services.info import MetadataFetcher

from fakes import FakePrimary, FakeSecondary, FakeTranscoder


@pytest.fixture
def temp_root(tmp_path) -> Path:
    return tmp_path / "work"


@pytest.fixture
def test_config(temp_root):
    cfg = config.model_copy(deep=True)
    cfg.storage.temp_dir = str(temp_root)
    return cfg


@pytest.fixture
def make_orchestrator(test_config):
    def _make(primary=None, secondary=None, transcoder=None) -> AudioDownloadOrchestrator:
        return AudioDownloadOrchestrator(
            test_config,
            primary=primary or FakePrimary(),
            secondary=secondary or FakeSecondary(),
            transcoder=transcoder or FakeTranscoder(),
        )
    return _make


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def lenient_client():
    """Client that returns the 500 response instead of re-raising the server error"""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def use_orchestrator():
    def _use(orchestrator: AudioDownloadOrchestrator) -> None:
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return _use


@pytest.fixture
def use_fetcher():
    def _use(primary, secondary) -> MetadataFetcher:
        fetcher = MetadataFetcher(primary, secondary, redis_getter=lambda: None)
        app.dependency_overrides[get_metadata_fetcher] = lambda: fetcher
        return fetcher
    return _use
