"""End-to-end tests for the resolve endpoint.

Tests the full request-response cycle through:
    HTTP Request -> FastAPI Router -> ResolveShareUseCase -> TeraboxApiClient
    -> JSON Response

The app is built by create_app() and its lifespan wires the real resolver;
only the provider's HTTP endpoints are mocked (respx).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Callable

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from teraplay.infrastructure.config import AppConfig
from teraplay.interfaces.app import create_app

pytestmark = pytest.mark.e2e

_BASE_URL = "https://www.terabox.com"
_LIST_URL = f"{_BASE_URL}/share/list"
_DOWNLOAD_URL = f"{_BASE_URL}/share/download"
_SHARE_URL = f"{_BASE_URL}/s/1AbC_23"
_DLINK = "https://d.terabox.com/file/abc?fid=777&sign=xyz"

PayloadFactory = Callable[..., dict[str, Any]]


@pytest.fixture()
def client() -> Iterator[TestClient]:
    app = create_app(AppConfig(resolver_strategy="api"))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def provider() -> Iterator[respx.MockRouter]:
    with respx.mock(assert_all_called=False) as router:
        yield router


class TestResolveEndpoint:
    """POST /api/resolve"""

    def test_single_video_share(
        self,
        client: TestClient,
        provider: respx.MockRouter,
        make_upstream_file: PayloadFactory,
        make_share_list_payload: PayloadFactory,
        make_download_payload: PayloadFactory,
    ) -> None:
        entry = make_upstream_file(
            thumbs={"url1": "https://t/1.jpg", "url3": "https://t/3.jpg"}
        )
        provider.get(_LIST_URL).respond(200, json=make_share_list_payload([entry]))
        provider.get(_DOWNLOAD_URL).respond(200, json=make_download_payload(_DLINK))

        resp = client.post("/api/resolve", json={"url": _SHARE_URL})

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "fileName": "movie.mp4",
            "directUrl": _DLINK,
            "size": "476.84 MB",
            "thumbnail": "https://t/3.jpg",
        }

    def test_surl_link_resolves(
        self,
        client: TestClient,
        provider: respx.MockRouter,
        make_share_list_payload: PayloadFactory,
        make_download_payload: PayloadFactory,
    ) -> None:
        list_route = provider.get(_LIST_URL).respond(
            200, json=make_share_list_payload()
        )
        provider.get(_DOWNLOAD_URL).respond(200, json=make_download_payload())

        resp = client.post(
            "/api/resolve",
            json={"url": f"{_BASE_URL}/sharing/link?surl=AbC_23"},
        )

        assert resp.status_code == 200
        request = list_route.calls.last.request
        assert request.url.params["shorturl"] == "AbC_23"
        assert request.headers["Referer"] == f"{_BASE_URL}/s/1AbC_23"

    def test_nested_video_without_size(
        self,
        client: TestClient,
        provider: respx.MockRouter,
        make_upstream_file: PayloadFactory,
        make_upstream_dir: PayloadFactory,
        make_share_list_payload: PayloadFactory,
        make_download_payload: PayloadFactory,
    ) -> None:
        tree = [
            make_upstream_file(fs_id=1, name="cover.jpg", category=3),
            make_upstream_dir(
                "Season 1",
                [
                    make_upstream_dir(
                        "Disc 1", [make_upstream_file(fs_id=42, size=None)]
                    )
                ],
            ),
        ]
        provider.get(_LIST_URL).respond(200, json=make_share_list_payload(tree))
        download_route = provider.get(_DOWNLOAD_URL).respond(
            200, json=make_download_payload()
        )

        resp = client.post("/api/resolve", json={"url": _SHARE_URL})

        assert resp.status_code == 200
        body = resp.json()
        assert "size" not in body
        assert "thumbnail" not in body
        assert download_route.calls.last.request.url.params["fid_list"] == "[42]"

    def test_non_terabox_link_makes_no_call(
        self, client: TestClient, provider: respx.MockRouter
    ) -> None:
        list_route = provider.get(_LIST_URL)

        resp = client.post(
            "/api/resolve", json={"url": "https://www.example.com/s/1AbC_23"}
        )

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Invalid TeraBox URL"}
        assert not list_route.called

    def test_link_without_share_id(
        self, client: TestClient, provider: respx.MockRouter
    ) -> None:
        resp = client.post("/api/resolve", json={"url": f"{_BASE_URL}/main"})

        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid TeraBox share link format"

    def test_private_share(
        self,
        client: TestClient,
        provider: respx.MockRouter,
        make_share_list_payload: PayloadFactory,
    ) -> None:
        provider.get(_LIST_URL).respond(
            200, json=make_share_list_payload([], errno=-9)
        )
        download_route = provider.get(_DOWNLOAD_URL)

        resp = client.post("/api/resolve", json={"url": _SHARE_URL})

        assert resp.status_code == 502
        assert resp.json() == {
            "success": False,
            "message": "This link may be private or invalid",
        }
        assert not download_route.called

    def test_share_without_video(
        self,
        client: TestClient,
        provider: respx.MockRouter,
        make_upstream_file: PayloadFactory,
        make_share_list_payload: PayloadFactory,
    ) -> None:
        entries = [
            make_upstream_file(fs_id=1, name="notes.pdf", category=4),
            make_upstream_file(fs_id=2, name="song.mp3", category=2),
        ]
        provider.get(_LIST_URL).respond(200, json=make_share_list_payload(entries))
        download_route = provider.get(_DOWNLOAD_URL)

        resp = client.post("/api/resolve", json={"url": _SHARE_URL})

        assert resp.status_code == 404
        assert resp.json() == {
            "success": False,
            "message": "No video files found in this TeraBox link",
        }
        assert not download_route.called

    def test_provider_down(
        self, client: TestClient, provider: respx.MockRouter
    ) -> None:
        provider.get(_LIST_URL).mock(side_effect=httpx.ConnectError("refused"))

        resp = client.post("/api/resolve", json={"url": _SHARE_URL})

        assert resp.status_code == 502
        assert resp.json()["message"] == (
            "Unable to access this TeraBox link. Please try again later."
        )

    def test_download_link_missing(
        self,
        client: TestClient,
        provider: respx.MockRouter,
        make_share_list_payload: PayloadFactory,
    ) -> None:
        provider.get(_LIST_URL).respond(200, json=make_share_list_payload())
        provider.get(_DOWNLOAD_URL).respond(200, json={"errno": 0, "list": [{}]})

        resp = client.post("/api/resolve", json={"url": _SHARE_URL})

        assert resp.status_code == 502
        assert resp.json()["message"] == (
            "Unable to generate download link for this video"
        )

    def test_invalid_body(self, client: TestClient) -> None:
        resp = client.post(
            "/api/resolve",
            content=b"url=https://terabox.com/s/1a",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid request format"


class TestHealthEndpoint:
    def test_healthz(self, client: TestClient) -> None:
        resp = client.get("/api/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "strategy": "api"}
