from .share import (
    BrowserAutomationError,
    DownloadLinkUnavailable,
    ExtractionFailed,
    FileCategory,
    FileEntry,
    InvalidShareLink,
    MalformedUrl,
    MissingShareIdentifier,
    NetworkFailure,
    NoVideoFound,
    ResolvedVideo,
    ResolveError,
    SessionTokens,
    ShareListing,
    ShareNotAccessible,
    ShareReference,
    ThumbnailSet,
    UnsupportedHost,
    UpstreamUnavailable,
    VideoQuality,
)

__all__ = [
    "BrowserAutomationError",
    "DownloadLinkUnavailable",
    "ExtractionFailed",
    "FileCategory",
    "FileEntry",
    "InvalidShareLink",
    "MalformedUrl",
    "MissingShareIdentifier",
    "NetworkFailure",
    "NoVideoFound",
    "ResolveError",
    "ResolvedVideo",
    "SessionTokens",
    "ShareListing",
    "ShareNotAccessible",
    "ShareReference",
    "ThumbnailSet",
    "UnsupportedHost",
    "UpstreamUnavailable",
    "VideoQuality",
]
