from __future__ import annotations

import httpx

from troq.services.media_service import OFFERS_FOLDER, MediaService, Upload


def _upload():
    return Upload(filename="a.png", content=b"data", content_type="image/png")


def test_upload_returns_secure_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = request.content
        return httpx.Response(200, json={"secure_url": "https://cdn/a.png"})

    media = MediaService("https://media.test/upload", "key", 5, transport=httpx.MockTransport(handler))
    assert media.upload(_upload(), folder=OFFERS_FOLDER) == "https://cdn/a.png"
    assert seen["auth"] == "Bearer key"
    assert b"troq_offers" in seen["body"]


def test_upload_failures_return_none():
    def server_error(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    def no_url(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    for handler in (server_error, no_url, broken):
        media = MediaService("https://media.test/upload", "", 5, transport=httpx.MockTransport(handler))
        assert media.upload(_upload(), folder=OFFERS_FOLDER) is None


def test_unconfigured_or_empty_upload_is_skipped():
    assert MediaService("", "", 5).upload(_upload(), folder=OFFERS_FOLDER) is None
    media = MediaService("https://media.test/upload", "", 5)
    assert media.upload(None, folder=OFFERS_FOLDER) is None
    assert media.upload(Upload(filename="a.png", content=b""), folder=OFFERS_FOLDER) is None
