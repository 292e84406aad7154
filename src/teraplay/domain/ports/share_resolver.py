"""Port for resolving a share link to a playable video URL."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from teraplay.domain.entities.share import ResolvedVideo


@runtime_checkable
class ShareResolverPort(Protocol):
    """Resolves a public share link to a direct media URL.

    Implementations handle one strategy each (provider API, browser
    automation, ...) and raise a ``ResolveError`` subclass on failure.
    """

    @property
    def name(self) -> str:
        """Strategy name (e.g. 'api', 'browser')."""
        ...

    async def resolve(self, url: str) -> ResolvedVideo:
        """Resolve *url* or raise a ``ResolveError``."""
        ...
