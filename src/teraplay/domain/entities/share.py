"""Domain entities for TeraBox share resolution.

Pure value objects and domain errors: no framework dependencies, no I/O.
Every entity is request-scoped; nothing here is cached or persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class FileCategory(IntEnum):
    """Upstream ``category`` codes for share entries."""

    VIDEO = 1
    AUDIO = 2
    IMAGE = 3
    DOCUMENT = 4
    APPLICATION = 5
    OTHER = 6
    TORRENT = 7

    @classmethod
    def from_code(cls, raw: Any) -> FileCategory:
        try:
            return cls(int(raw))
        except (TypeError, ValueError):
            return cls.OTHER


@dataclass(frozen=True)
class ShareReference:
    """Share identifier extracted from an input link."""

    share_id: str
    from_query: bool = False  # came from ?surl= (short form, no leading "1")


@dataclass(frozen=True)
class ThumbnailSet:
    """Thumbnail variants of a share entry (upstream keys url1/url2/url3)."""

    small: str | None = None
    medium: str | None = None
    large: str | None = None

    @classmethod
    def from_upstream(cls, raw: Any) -> ThumbnailSet | None:
        if not isinstance(raw, dict):
            return None
        thumbs = cls(
            small=raw.get("url1") or None,
            medium=raw.get("url2") or None,
            large=raw.get("url3") or None,
        )
        if thumbs.small is None and thumbs.medium is None and thumbs.large is None:
            return None
        return thumbs


@dataclass(frozen=True)
class FileEntry:
    """A file or directory in a share listing (forms a tree)."""

    fs_id: str
    name: str
    is_directory: bool
    category: FileCategory = FileCategory.OTHER
    size_bytes: int | None = None
    thumbnails: ThumbnailSet | None = None
    children: tuple[FileEntry, ...] = ()

    @property
    def is_video(self) -> bool:
        return not self.is_directory and self.category is FileCategory.VIDEO

    @classmethod
    def from_upstream(cls, raw: dict[str, Any]) -> FileEntry:
        """Build an entry (and its subtree) from a loosely-typed upstream dict."""
        name = raw.get("server_filename") or ""
        if not name:
            path = str(raw.get("path") or "")
            name = path.rstrip("/").rsplit("/", 1)[-1]

        size = raw.get("size")
        try:
            size_bytes = int(size) if size is not None else None
        except (TypeError, ValueError):
            size_bytes = None

        children_raw = raw.get("children")
        children: tuple[FileEntry, ...] = ()
        if isinstance(children_raw, list):
            children = tuple(
                cls.from_upstream(child)
                for child in children_raw
                if isinstance(child, dict)
            )

        return cls(
            fs_id=str(raw.get("fs_id", "")),
            name=name,
            is_directory=str(raw.get("isdir", "0")) == "1",
            category=FileCategory.from_code(raw.get("category")),
            size_bytes=size_bytes,
            thumbnails=ThumbnailSet.from_upstream(raw.get("thumbs")),
            children=children,
        )


@dataclass(frozen=True)
class SessionTokens:
    """Credentials from one share-info response, required by the download call."""

    share_id: str
    user_key: str
    signature: str
    timestamp: str


@dataclass(frozen=True)
class ShareListing:
    """Normalized share-info result."""

    entries: tuple[FileEntry, ...]
    tokens: SessionTokens


@dataclass(frozen=True)
class VideoQuality:
    label: str
    url: str


@dataclass(frozen=True)
class ResolvedVideo:
    """Terminal artifact handed back to the caller."""

    file_name: str
    direct_url: str
    size_human: str | None = None
    thumbnail_url: str | None = None
    qualities: tuple[VideoQuality, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict[str, Any]:
        """Success JSON body; absent optional fields are omitted."""
        payload: dict[str, Any] = {
            "success": True,
            "fileName": self.file_name,
            "directUrl": self.direct_url,
        }
        if self.size_human:
            payload["size"] = self.size_human
        if self.thumbnail_url:
            payload["thumbnail"] = self.thumbnail_url
        if self.qualities:
            payload["qualities"] = [
                {"label": q.label, "url": q.url} for q in self.qualities
            ]
        return payload


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ResolveError(Exception):
    """Base error for share resolution.

    ``str(exc)`` carries diagnostic detail for the logs; ``user_message`` is
    the only text that reaches the client.
    """

    status_code: int = 500
    user_message: str = "An unexpected error occurred. Please try again later."


class InvalidShareLink(ResolveError):
    status_code = 400
    user_message = "Invalid TeraBox share link format"


class UnsupportedHost(InvalidShareLink):
    user_message = "Invalid TeraBox URL"


class MalformedUrl(InvalidShareLink):
    pass


class MissingShareIdentifier(InvalidShareLink):
    pass


class UpstreamUnavailable(ResolveError):
    """Non-2xx status or unusable body from the provider."""

    status_code = 502
    user_message = "Unable to access this TeraBox link. Please try again later."


class NetworkFailure(UpstreamUnavailable):
    """Timeout or connection failure talking to the provider."""

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class ShareNotAccessible(ResolveError):
    """Private, invalid or expired share (upstream does not distinguish)."""

    status_code = 502
    user_message = "This link may be private or invalid"


class NoVideoFound(ResolveError):
    status_code = 404
    user_message = "No video files found in this TeraBox link"


class DownloadLinkUnavailable(ResolveError):
    status_code = 502
    user_message = "Unable to generate download link for this video"


class ExtractionFailed(ResolveError):
    """Browser automation found no playable media on the share page."""

    status_code = 404
    user_message = "Could not find a playable video on this page"


class BrowserAutomationError(ResolveError):
    """Browser automation raised before extraction could finish."""
