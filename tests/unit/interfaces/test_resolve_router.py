"""Tests for the POST /api/resolve router."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from teraplay.domain.entities import (
    BrowserAutomationError,
    DownloadLinkUnavailable,
    ExtractionFailed,
    MissingShareIdentifier,
    NetworkFailure,
    NoVideoFound,
    ResolvedVideo,
    ShareNotAccessible,
    UnsupportedHost,
)
from teraplay.interfaces.api.resolve import router as router_module
from teraplay.interfaces.api.resolve.router import resolve_share, router

_URL = "https://www.terabox.com/s/1abc"


def _make_app(resolver: MagicMock) -> FastAPI:
    app = FastAPI()
    app.include_router(router, prefix="/api")
    app.state.resolver = resolver
    return app


def _make_resolver(**kwargs: Any) -> MagicMock:
    resolver = MagicMock()
    resolver.name = "api"
    resolver.resolve = AsyncMock(**kwargs)
    return resolver


class TestRequestValidation:
    def test_invalid_json(self) -> None:
        client = TestClient(_make_app(_make_resolver()))
        resp = client.post(
            "/api/resolve",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Invalid request format"}

    def test_deeply_nested_json(self) -> None:
        resolver = _make_resolver()
        client = TestClient(_make_app(resolver), raise_server_exceptions=False)
        resp = client.post(
            "/api/resolve",
            content="[" * 100_000 + "]" * 100_000,
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Invalid request format"}
        resolver.resolve.assert_not_awaited()

    def test_json_array_body(self) -> None:
        client = TestClient(_make_app(_make_resolver()))
        resp = client.post("/api/resolve", json=[_URL])
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid request format"

    @pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": None}])
    def test_url_required(self, body: dict[str, Any]) -> None:
        resolver = _make_resolver()
        client = TestClient(_make_app(resolver))
        resp = client.post("/api/resolve", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "URL is required"}
        resolver.resolve.assert_not_awaited()

    @pytest.mark.parametrize("url", [123, ["https://terabox.com/s/1a"], {"u": 1}])
    def test_url_must_be_string(self, url: Any) -> None:
        client = TestClient(_make_app(_make_resolver()))
        resp = client.post("/api/resolve", json={"url": url})
        assert resp.status_code == 400
        assert resp.json()["message"] == "URL must be a string"


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("error", "status_code", "message"),
        [
            (UnsupportedHost("x"), 400, "Invalid TeraBox URL"),
            (MissingShareIdentifier("x"), 400, "Invalid TeraBox share link format"),
            (
                NetworkFailure("x", timed_out=True),
                502,
                "Unable to access this TeraBox link. Please try again later.",
            ),
            (ShareNotAccessible("x"), 502, "This link may be private or invalid"),
            (NoVideoFound("x"), 404, "No video files found in this TeraBox link"),
            (
                DownloadLinkUnavailable("x"),
                502,
                "Unable to generate download link for this video",
            ),
            (
                ExtractionFailed("x"),
                404,
                "Could not find a playable video on this page",
            ),
            (
                BrowserAutomationError("x"),
                500,
                "An unexpected error occurred. Please try again later.",
            ),
        ],
    )
    def test_resolve_errors(
        self, error: Exception, status_code: int, message: str
    ) -> None:
        client = TestClient(_make_app(_make_resolver(side_effect=error)))
        resp = client.post("/api/resolve", json={"url": _URL})
        assert resp.status_code == status_code
        assert resp.json() == {"success": False, "message": message}

    def test_internal_detail_not_leaked(self) -> None:
        error = ShareNotAccessible("errno=-9 secret=abc")
        client = TestClient(_make_app(_make_resolver(side_effect=error)))
        resp = client.post("/api/resolve", json={"url": _URL})
        assert "secret" not in resp.text

    def test_unexpected_exception_is_500(self) -> None:
        client = TestClient(_make_app(_make_resolver(side_effect=KeyError("boom"))))
        resp = client.post("/api/resolve", json={"url": _URL})
        assert resp.status_code == 500
        assert resp.json() == {
            "success": False,
            "message": "An unexpected error occurred. Please try again later.",
        }


class TestSuccess:
    def test_payload(self, resolved_video: ResolvedVideo) -> None:
        resolver = _make_resolver(return_value=resolved_video)
        client = TestClient(_make_app(resolver))

        resp = client.post("/api/resolve", json={"url": _URL})

        assert resp.status_code == 200
        assert resp.json() == resolved_video.to_payload()
        resolver.resolve.assert_awaited_once_with(_URL)


class TestClientDisconnect:
    async def test_disconnect_cancels_resolution(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(router_module, "_DISCONNECT_POLL_SECONDS", 0.01)
        cancelled = asyncio.Event()

        async def _hang(_url: str) -> ResolvedVideo:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise
            raise AssertionError("unreachable")

        request = MagicMock()
        request.json = AsyncMock(return_value={"url": _URL})
        request.is_disconnected = AsyncMock(return_value=True)
        request.app.state.resolver = _make_resolver(side_effect=_hang)

        resp = await resolve_share(request)

        assert resp.status_code == 499
        assert cancelled.is_set()

    async def test_connected_client_waits_for_result(
        self, monkeypatch: pytest.MonkeyPatch, resolved_video: ResolvedVideo
    ) -> None:
        monkeypatch.setattr(router_module, "_DISCONNECT_POLL_SECONDS", 0.01)

        async def _slow(_url: str) -> ResolvedVideo:
            await asyncio.sleep(0.05)
            return resolved_video

        request = MagicMock()
        request.json = AsyncMock(return_value={"url": _URL})
        request.is_disconnected = AsyncMock(return_value=False)
        request.app.state.resolver = _make_resolver(side_effect=_slow)

        resp = await resolve_share(request)

        assert resp.status_code == 200
        assert request.is_disconnected.await_count >= 1
