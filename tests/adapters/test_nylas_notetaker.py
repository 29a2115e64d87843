"""
Tests for NylasNotetakerAdapter using httpx.MockTransport (no network).
"""

import json
from datetime import datetime, timezone
from typing import Callable, List

import httpx
import pytest

from adapters.nylas_notetaker import NylasNotetakerAdapter
from domain.models import CallProvider
from shared_utils.error_handler import UpstreamError


BASE = "https://nylas.test/v3"


def _adapter(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> NylasNotetakerAdapter:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    kwargs.setdefault("api_key", "key-123")
    return NylasNotetakerAdapter(api_base=BASE, http_client=client, **kwargs)


class TestInviteBot:
    def test_posts_notetaker(self) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"request_id": "r", "data": {"id": "nt-1"}})

        adapter = _adapter(handler, display_name="Notes Bot")
        starts = datetime(2026, 3, 9, 10, 0, tzinfo=timezone.utc)

        notetaker_id = adapter.invite_bot(
            CallProvider.ZOOM, "https://zoom.us/j/81234567890", title="Sync", start_time=starts
        )

        assert notetaker_id == "nt-1"
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE}/notetakers"
        assert request.headers["Authorization"] == "Bearer key-123"
        body = json.loads(request.content)
        assert body["meeting_link"] == "https://zoom.us/j/81234567890"
        assert body["display_name"] == "Notes Bot"
        assert body["join_time"] == int(starts.timestamp())

    def test_http_error_returns_none(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(500, json={"error": "boom"}))
        assert adapter.invite_bot(CallProvider.ZOOM, "https://zoom.us/j/81234567890") is None

    def test_transport_error_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert _adapter(handler).invite_bot(CallProvider.ZOOM, "https://zoom.us/j/1") is None

    def test_disabled_without_key(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        adapter = _adapter(handler, api_key=None)
        assert adapter.enabled is False
        assert adapter.invite_bot(CallProvider.ZOOM, "https://zoom.us/j/1") is None


class TestFetchTranscription:
    def test_reads_text_and_summary(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/notetakers/nt-1/transcription")
            return httpx.Response(
                200, json={"data": {"transcription_text": "hello", "summary": "short"}}
            )

        result = _adapter(handler).fetch_transcription("nt-1")

        assert result.text == "hello"
        assert result.summary == "short"

    def test_failure_returns_empty(self) -> None:
        result = _adapter(lambda request: httpx.Response(404)).fetch_transcription("nt-1")
        assert result.is_empty

    def test_invalid_json_returns_empty(self) -> None:
        result = _adapter(lambda request: httpx.Response(200, text="<html>")).fetch_transcription("nt-1")
        assert result.is_empty


class TestDownloadText:
    def test_returns_body(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(200, text="Alice: hi"))
        assert adapter.download_text("https://files.test/t.txt") == "Alice: hi"

    def test_failure_raises_upstream(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(403))
        with pytest.raises(UpstreamError, match="Transcript download"):
            adapter.download_text("https://files.test/t.txt")


class TestSetupWebhooks:
    def test_replaces_existing_webhooks(self) -> None:
        calls: List[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(f"{request.method} {request.url.path}")
            if request.method == "GET":
                return httpx.Response(200, json={"data": [{"id": "w1"}, {"id": "w2"}]})
            if request.method == "DELETE":
                return httpx.Response(200, json={})
            body = json.loads(request.content)
            assert body["webhook_url"] == "https://api.test/webhooks/nylas"
            assert "notetaker.media" in body["trigger_types"]
            return httpx.Response(200, json={"data": {"id": "w3"}})

        assert _adapter(handler).setup_webhooks("https://api.test/") is True
        assert calls == [
            "GET /v3/webhooks",
            "DELETE /v3/webhooks/w1",
            "DELETE /v3/webhooks/w2",
            "POST /v3/webhooks",
        ]

    def test_retries_then_gives_up(self) -> None:
        sleeps: List[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"data": []})
            return httpx.Response(503)

        adapter = _adapter(handler, max_attempts=3, retry_delay=2.0, sleep=sleeps.append)

        assert adapter.setup_webhooks("https://api.test") is False
        assert sleeps == [2.0, 2.0]

    def test_disabled_without_key(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(200), api_key="")
        assert adapter.setup_webhooks("https://api.test") is False
