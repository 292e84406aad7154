"""Port for the provider's share-info and download-link endpoints."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from teraplay.domain.entities.share import SessionTokens, ShareListing, ShareReference


@runtime_checkable
class ShareApiPort(Protocol):
    """Two-step share API: list the share, then request a direct link.

    Implementations raise the domain errors from
    ``teraplay.domain.entities.share`` instead of returning ``None``.
    """

    async def fetch_share_listing(self, share: ShareReference) -> ShareListing:
        """Return the file tree and session tokens for *share*."""
        ...

    async def fetch_download_link(self, tokens: SessionTokens, fs_id: str) -> str:
        """Return a direct, time-limited media URL for file *fs_id*."""
        ...
