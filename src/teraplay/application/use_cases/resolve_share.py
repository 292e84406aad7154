"""Share resolution use case: link → share listing → first video → direct URL."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog

from teraplay.domain.entities.share import (
    FileEntry,
    NoVideoFound,
    ResolvedVideo,
    ResolveError,
    ShareReference,
    ThumbnailSet,
    UnsupportedHost,
)
from teraplay.domain.ports.share_api import ShareApiPort

log = structlog.get_logger(__name__)

_FALLBACK_FILE_NAME = "video.mp4"

_HostCheckFn = Callable[[str], bool]
_ParseFn = Callable[[str], ShareReference]
_LocateFn = Callable[..., FileEntry | None]
_SizeFn = Callable[[int | None], str | None]
_ThumbnailFn = Callable[[ThumbnailSet | None], str | None]


class ResolveShareUseCase:
    """Resolves a share link through the provider's JSON API.

    Flow:
        1. Reject links that are not TeraBox links (no network call)
        2. Parse the share identifier from the link
        3. Fetch the share listing and session tokens
        4. Locate the first video entry (depth-first)
        5. Request the direct download link for that entry
        6. Format name, size and thumbnail

    Any step raising a ``ResolveError`` short-circuits the rest; the error is
    logged with the failing step and re-raised for the HTTP boundary to map.
    """

    def __init__(
        self,
        *,
        api: ShareApiPort,
        host_check_fn: _HostCheckFn,
        parse_fn: _ParseFn,
        locate_fn: _LocateFn,
        size_fn: _SizeFn,
        thumbnail_fn: _ThumbnailFn,
        max_tree_depth: int = 32,
    ) -> None:
        self._api = api
        self._host_check_fn = host_check_fn
        self._parse_fn = parse_fn
        self._locate_fn = locate_fn
        self._size_fn = size_fn
        self._thumbnail_fn = thumbnail_fn
        self._max_tree_depth = max_tree_depth

    @property
    def name(self) -> str:
        return "api"

    def _locate(self, entries: Iterable[FileEntry]) -> FileEntry | None:
        return self._locate_fn(entries, max_depth=self._max_tree_depth)

    async def resolve(self, url: str) -> ResolvedVideo:
        step = "validate"
        try:
            if not self._host_check_fn(url):
                raise UnsupportedHost(f"not a terabox link: {url!r}")

            step = "parse"
            share = self._parse_fn(url)

            step = "share_info"
            listing = await self._api.fetch_share_listing(share)

            step = "locate"
            video = self._locate(listing.entries)
            if video is None:
                raise NoVideoFound(
                    f"no video among {len(listing.entries)} top-level entries"
                )

            step = "download_link"
            direct_url = await self._api.fetch_download_link(
                listing.tokens, video.fs_id
            )
        except ResolveError as exc:
            log.warning(
                "resolve_failed",
                url=url,
                step=step,
                error_type=type(exc).__name__,
                detail=str(exc),
            )
            raise

        resolved = ResolvedVideo(
            file_name=video.name or _FALLBACK_FILE_NAME,
            direct_url=direct_url,
            size_human=self._size_fn(video.size_bytes),
            thumbnail_url=self._thumbnail_fn(video.thumbnails),
        )
        log.info(
            "resolve_succeeded",
            url=url,
            share_id=share.share_id,
            file_name=resolved.file_name,
            size=resolved.size_human,
        )
        return resolved
