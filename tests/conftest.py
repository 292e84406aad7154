"""Shared test fixtures for the TeraPlay test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from teraplay.domain.entities import (
    FileCategory,
    FileEntry,
    ResolvedVideo,
    SessionTokens,
    ShareListing,
    ThumbnailSet,
)

_DLINK = "https://d.terabox.com/file/abc?fid=777&sign=xyz"

# ---------------------------------------------------------------------------
# Upstream payload factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_upstream_file() -> Callable[..., dict[str, Any]]:
    """Factory for a loosely-typed file entry as the share list returns it."""

    def _make(
        fs_id: int = 777,
        name: str = "movie.mp4",
        *,
        category: int = 1,
        size: int | str | None = 500_000_000,
        thumbs: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        raw: dict[str, Any] = {
            "fs_id": fs_id,
            "server_filename": name,
            "path": f"/{name}",
            "isdir": "0",
            "category": category,
        }
        if size is not None:
            raw["size"] = size
        if thumbs is not None:
            raw["thumbs"] = thumbs
        return raw

    return _make


@pytest.fixture()
def make_upstream_dir() -> Callable[..., dict[str, Any]]:
    def _make(name: str, children: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "fs_id": 1,
            "server_filename": name,
            "path": f"/{name}",
            "isdir": "1",
            "category": 6,
            "children": children,
        }

    return _make


@pytest.fixture()
def make_share_list_payload(
    make_upstream_file: Callable[..., dict[str, Any]],
) -> Callable[..., dict[str, Any]]:
    """Factory for a successful share list body; keyword args override fields."""

    def _make(
        entries: list[dict[str, Any]] | None = None, **overrides: Any
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "errno": 0,
            "list": entries if entries is not None else [make_upstream_file()],
            "shareid": 4455,
            "uk": 9988,
            "sign": "s1gn",
            "timestamp": 1700000000,
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture()
def make_download_payload() -> Callable[..., dict[str, Any]]:
    def _make(dlink: str = _DLINK) -> dict[str, Any]:
        return {"errno": 0, "list": [{"fs_id": 777, "dlink": dlink}]}

    return _make


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def session_tokens() -> SessionTokens:
    return SessionTokens(
        share_id="4455",
        user_key="9988",
        signature="s1gn",
        timestamp="1700000000",
    )


@pytest.fixture()
def video_entry() -> FileEntry:
    """Single video entry with size and thumbnails."""
    return FileEntry(
        fs_id="777",
        name="movie.mp4",
        is_directory=False,
        category=FileCategory.VIDEO,
        size_bytes=500_000_000,
        thumbnails=ThumbnailSet(
            small="https://t/small.jpg",
            medium="https://t/medium.jpg",
            large="https://t/large.jpg",
        ),
    )


@pytest.fixture()
def share_listing(
    video_entry: FileEntry, session_tokens: SessionTokens
) -> ShareListing:
    return ShareListing(entries=(video_entry,), tokens=session_tokens)


@pytest.fixture()
def resolved_video() -> ResolvedVideo:
    return ResolvedVideo(
        file_name="movie.mp4",
        direct_url=_DLINK,
        size_human="476.84 MB",
        thumbnail_url="https://t/large.jpg",
    )
