"""Share-link parsing: extracts the share identifier from a TeraBox URL.

Supported shapes:
    https://www.terabox.com/s/1AbC_23
    https://www.terabox.com/sharing/link?surl=AbC_23
"""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from teraplay.domain.entities.share import (
    MalformedUrl,
    MissingShareIdentifier,
    ShareReference,
)

_SHARE_PATH_RE = re.compile(r"/s/([A-Za-z0-9_-]+)")


def is_terabox_url(raw: str) -> bool:
    """Cheap host check: the link must mention ``terabox`` (case-insensitive)."""
    if not isinstance(raw, str):
        return False
    trimmed = raw.strip()
    return bool(trimmed) and "terabox" in trimmed.lower()


def parse_share_url(raw: str) -> ShareReference:
    """Extract the share identifier from *raw*.

    Raises:
        MalformedUrl: *raw* is not an absolute URL.
        MissingShareIdentifier: neither ``/s/{id}`` nor ``?surl=`` is present.
    """
    try:
        parsed = urlparse(raw.strip())
        # Accessing .port validates the netloc ("host:abc" raises ValueError).
        parsed.port  # noqa: B018
    except (AttributeError, ValueError) as exc:
        raise MalformedUrl(f"cannot parse url: {raw!r}") from exc

    if not parsed.scheme or not parsed.netloc:
        raise MalformedUrl(f"not an absolute url: {raw!r}")

    match = _SHARE_PATH_RE.search(parsed.path)
    if match:
        return ShareReference(share_id=match.group(1))

    surl = parse_qs(parsed.query).get("surl")
    if surl and surl[0]:
        return ShareReference(share_id=surl[0], from_query=True)

    raise MissingShareIdentifier(f"no share id in url: {raw!r}")
