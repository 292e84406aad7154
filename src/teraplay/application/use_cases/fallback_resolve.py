"""Primary/fallback composition of two share resolvers."""

from __future__ import annotations

import structlog

from teraplay.domain.entities.share import (
    DownloadLinkUnavailable,
    ResolvedVideo,
    ShareNotAccessible,
    UpstreamUnavailable,
)
from teraplay.domain.ports.share_resolver import ShareResolverPort

log = structlog.get_logger(__name__)

# Errors that mean "the API path was rejected", not "the input is bad".
_FALLBACK_ON: tuple[type[Exception], ...] = (
    UpstreamUnavailable,
    ShareNotAccessible,
    DownloadLinkUnavailable,
)


class FallbackResolveUseCase:
    """Try *primary*; when the provider rejects it, retry once with *fallback*.

    Input errors and ``NoVideoFound`` are surfaced from *primary* unchanged:
    the browser would see the same share and gain nothing.
    """

    def __init__(
        self, primary: ShareResolverPort, fallback: ShareResolverPort
    ) -> None:
        self._primary = primary
        self._fallback = fallback

    @property
    def name(self) -> str:
        return f"{self._primary.name}_with_fallback"

    async def resolve(self, url: str) -> ResolvedVideo:
        try:
            return await self._primary.resolve(url)
        except _FALLBACK_ON as exc:
            log.info(
                "resolve_fallback",
                url=url,
                primary=self._primary.name,
                fallback=self._fallback.name,
                reason=type(exc).__name__,
            )
        return await self._fallback.resolve(url)
