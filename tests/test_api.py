from urllib.parse import quote

import pytest

from traxit.i18n import i18n

from fakes import VIDEO_INFO, FakePrimary, FakeSecondary, FakeTranscoder

WATCH_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
SHORT_URL = "https://www.youtube.com/shorts/abc123"


@pytest.mark.asyncio
async def test_process_missing_url(client):
    response = await client.post("/api/process", json={})
    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "InvalidUrl"
    assert body["message"] == i18n.get("error.url_required")


@pytest.mark.asyncio
async def test_process_unsupported_platform(client):
    response = await client.post("/api/process", json={"url": "https://vimeo.com/123"})
    assert response.status_code == 400
    assert response.json()["kind"] == "UnsupportedPlatform"


@pytest.mark.asyncio
async def test_process_instagram_not_implemented(client):
    response = await client.post("/api/process", json={"url": "https://www.instagram.com/reel/xyz/"})
    assert response.status_code == 501
    assert "Instagram" in response.json()["message"]


@pytest.mark.asyncio
async def test_process_returns_video_info(client, use_fetcher):
    use_fetcher(FakePrimary(), FakeSecondary())

    response = await client.post("/api/process", json={"url": "youtu.be/dQw4w9WgXcQ"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["platform"] == "youtube"
    assert body["videoInfo"]["title"] == VIDEO_INFO["title"]
    assert body["videoInfo"]["isShort"] is False
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_process_short_placeholder(client, use_fetcher):
    use_fetcher(FakePrimary(error="boom"), FakeSecondary(error="boom"))

    response = await client.post("/api/process", json={"url": SHORT_URL})

    assert response.status_code == 200
    video_info = response.json()["videoInfo"]
    assert video_info["isShort"] is True
    assert video_info["degraded"] is True


@pytest.mark.asyncio
async def test_process_extraction_failure_is_localized(client, use_fetcher):
    use_fetcher(FakePrimary(error="boom"), FakeSecondary(error="HTTP Error 410: Gone"))

    response = await client.post(
        "/api/process",
        json={"url": WATCH_URL},
        headers={"Accept-Language": "ja-JP,ja;q=0.9"}
    )

    assert response.status_code == 500
    body = response.json()
    assert body["cause"] == "gone"
    assert body["message"] == i18n.get("error.video_gone", locale="ja")
    assert "detail" not in body


@pytest.mark.asyncio
async def test_download_streams_mp3(client, make_orchestrator, use_orchestrator, temp_root):
    use_orchestrator(make_orchestrator(FakePrimary(payload=b"video-bytes"), FakeSecondary(), FakeTranscoder()))

    response = await client.get(
        "/api/download/audio",
        params={"url": WATCH_URL, "platform": "youtube", "title": "My Song"}
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == b"MP3:video-bytes"
    assert response.headers["content-length"] == str(len(b"MP3:video-bytes"))
    assert 'filename="My_Song.mp3"' in response.headers["content-disposition"]
    assert list(temp_root.iterdir()) == []


@pytest.mark.asyncio
async def test_download_accepts_encoded_url(client, make_orchestrator, use_orchestrator):
    primary = FakePrimary()
    use_orchestrator(make_orchestrator(primary))

    response = await client.get(
        "/api/download/audio",
        params={"url": quote(WATCH_URL, safe=""), "audioQuality": "highestaudio"}
    )

    assert response.status_code == 200
    assert primary.calls[0][1] == WATCH_URL
    assert primary.calls[0][3] == "bestaudio/best"


@pytest.mark.asyncio
async def test_download_without_title_uses_default_name(client, make_orchestrator, use_orchestrator):
    use_orchestrator(make_orchestrator())

    response = await client.get("/api/download/audio", params={"url": WATCH_URL})

    assert response.status_code == 200
    assert 'filename="audio.mp3"' in response.headers["content-disposition"]


@pytest.mark.asyncio
async def test_download_missing_url(client, make_orchestrator, use_orchestrator):
    use_orchestrator(make_orchestrator())

    response = await client.get("/api/download/audio")

    assert response.status_code == 400
    assert response.json()["kind"] == "InvalidUrl"


@pytest.mark.asyncio
async def test_download_short_dual_failure(client, make_orchestrator, use_orchestrator, temp_root):
    use_orchestrator(make_orchestrator(FakePrimary(error="boom"), FakeSecondary(error="boom")))

    response = await client.get("/api/download/audio", params={"url": SHORT_URL, "title": "short"})

    assert response.status_code == 503
    assert response.json()["kind"] == "TemporarilyUnavailable"
    assert list(temp_root.iterdir()) == []


@pytest.mark.asyncio
async def test_download_failure_cleans_up(client, make_orchestrator, use_orchestrator, temp_root):
    use_orchestrator(make_orchestrator(
        FakePrimary(error="boom"),
        FakeSecondary(error="ERROR: Video unavailable. This video is private")
    ))

    response = await client.get("/api/download/audio", params={"url": WATCH_URL})

    assert response.status_code == 500
    assert response.json()["cause"] == "private"
    assert list(temp_root.iterdir()) == []


@pytest.mark.asyncio
async def test_process_wrong_url_type_is_bad_request(client):
    response = await client.post("/api/process", json={"url": 123})

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "InvalidUrl"
    assert body["message"] == i18n.get("error.invalid_url")
    assert "detail" not in body


@pytest.mark.asyncio
async def test_process_malformed_json_is_bad_request(client):
    response = await client.post(
        "/api/process",
        content=b"{",
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "InvalidUrl"


class DiskFullTranscoder:
    async def transcode(self, input_path, output_path):
        raise OSError(28, "No space left on device")


@pytest.mark.asyncio
async def test_download_unexpected_error_is_structured(lenient_client, make_orchestrator, use_orchestrator, temp_root):
    use_orchestrator(make_orchestrator(transcoder=DiskFullTranscoder()))

    response = await lenient_client.get("/api/download/audio", params={"url": WATCH_URL})

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    body = response.json()
    assert body["kind"] == "InternalError"
    assert body["message"] == i18n.get("error.internal")
    assert list(temp_root.iterdir()) == []
