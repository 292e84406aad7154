"""TeraBox share API client: share listing and direct download links.

The provider exposes two undocumented JSON endpoints:
    GET {base}/share/list      → {"errno": 0, "list": [...], "shareid", "uk",
                                  "sign", "timestamp"}
    GET {base}/share/download  → {"errno": 0, "list": [{"dlink": "..."}]}

Both expect fixed app/channel parameters, a per-call ``jsToken`` and
browser-like headers. Field names are a reverse-engineered contract, so every
response is treated as untrusted and validated explicitly.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from teraplay.domain.entities.share import (
    DownloadLinkUnavailable,
    FileEntry,
    NetworkFailure,
    SessionTokens,
    ShareListing,
    ShareNotAccessible,
    ShareReference,
    UpstreamUnavailable,
)
from teraplay.infrastructure.terabox.tokens import generate_js_token

log = structlog.get_logger(__name__)

_DEFAULT_BASE_URL = "https://www.terabox.com"
_DEFAULT_APP_ID = "250528"
_DEFAULT_CHANNEL = "dubox"
_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Upstream field -> SessionTokens attribute
_TOKEN_FIELDS: dict[str, str] = {
    "shareid": "share_id",
    "uk": "user_key",
    "sign": "signature",
    "timestamp": "timestamp",
}


class TeraboxApiClient:
    """Calls the share list/download endpoints over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str = _DEFAULT_BASE_URL,
        app_id: str = _DEFAULT_APP_ID,
        channel: str = _DEFAULT_CHANNEL,
        page_size: int = 20,
        user_agent: str = _DEFAULT_USER_AGENT,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._app_id = app_id
        self._channel = channel
        self._page_size = page_size
        self._user_agent = user_agent
        self._timeout = timeout_seconds

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def share_page_url(self, share: ShareReference) -> str:
        """Canonical share page URL (the short ``surl`` form lacks the leading 1)."""
        share_id = f"1{share.share_id}" if share.from_query else share.share_id
        return f"{self._base_url}/s/{share_id}"

    def _headers(self, referer: str) -> dict[str, str]:
        return {
            "User-Agent": self._user_agent,
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": referer,
        }

    def _app_params(self) -> dict[str, str]:
        return {
            "web": "1",
            "channel": self._channel,
            "app_id": self._app_id,
            "jsToken": generate_js_token(),
        }

    # ------------------------------------------------------------------
    # Share info
    # ------------------------------------------------------------------

    async def fetch_share_listing(self, share: ShareReference) -> ShareListing:
        """List the share's root and return its entries plus session tokens.

        Raises:
            NetworkFailure: timeout or connection failure.
            UpstreamUnavailable: non-2xx status or non-JSON body.
            ShareNotAccessible: ``errno != 0`` or missing session tokens.
        """
        params = {
            "shorturl": share.share_id,
            "root": "1",
            "page": "1",
            "num": str(self._page_size),
            "order": "time",
            "desc": "1",
            **self._app_params(),
        }

        try:
            resp = await self._http.get(
                f"{self._base_url}/share/list",
                params=params,
                headers=self._headers(self.share_page_url(share)),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            log.warning("share_info_timeout", share_id=share.share_id)
            raise NetworkFailure(
                "share list request timed out", timed_out=True
            ) from exc
        except httpx.HTTPError as exc:
            log.warning(
                "share_info_request_failed",
                share_id=share.share_id,
                error=str(exc),
            )
            raise NetworkFailure(f"share list request failed: {exc}") from exc

        if not resp.is_success:
            log.warning(
                "share_info_http_error",
                share_id=share.share_id,
                status=resp.status_code,
            )
            raise UpstreamUnavailable(f"share list returned HTTP {resp.status_code}")

        data = _json_object(resp)
        if data is None:
            log.warning("share_info_invalid_json", share_id=share.share_id)
            raise UpstreamUnavailable("share list returned a non-JSON body")

        errno = data.get("errno")
        if errno != 0:
            log.info("share_info_api_error", share_id=share.share_id, errno=errno)
            raise ShareNotAccessible(f"share list errno={errno!r}")

        missing = [key for key in _TOKEN_FIELDS if data.get(key) in (None, "")]
        if missing:
            log.warning(
                "share_info_tokens_missing",
                share_id=share.share_id,
                missing=missing,
            )
            raise ShareNotAccessible(f"share list response lacks {missing}")

        tokens = SessionTokens(
            **{attr: str(data[key]) for key, attr in _TOKEN_FIELDS.items()}
        )

        raw_list = data.get("list") or []
        if not isinstance(raw_list, list):
            log.warning("share_info_list_malformed", share_id=share.share_id)
            raw_list = []
        entries = tuple(
            FileEntry.from_upstream(item) for item in raw_list if isinstance(item, dict)
        )

        log.debug(
            "share_info_fetched",
            share_id=share.share_id,
            entries=len(entries),
        )
        return ShareListing(entries=entries, tokens=tokens)

    # ------------------------------------------------------------------
    # Download link
    # ------------------------------------------------------------------

    async def fetch_download_link(self, tokens: SessionTokens, fs_id: str) -> str:
        """Request a direct media URL for *fs_id*.

        Every failure mode collapses into ``DownloadLinkUnavailable``.
        """
        params = {
            "shareid": tokens.share_id,
            "uk": tokens.user_key,
            "fid_list": f"[{fs_id}]",
            "sign": tokens.signature,
            "timestamp": tokens.timestamp,
            **self._app_params(),
        }

        try:
            resp = await self._http.get(
                f"{self._base_url}/share/download",
                params=params,
                headers=self._headers(f"{self._base_url}/"),
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            log.warning("download_link_request_failed", fs_id=fs_id, error=str(exc))
            raise DownloadLinkUnavailable(
                f"download request failed: {exc}"
            ) from exc

        if not resp.is_success:
            log.warning(
                "download_link_http_error",
                fs_id=fs_id,
                status=resp.status_code,
            )
            raise DownloadLinkUnavailable(f"download returned HTTP {resp.status_code}")

        data = _json_object(resp)
        if data is None:
            log.warning("download_link_invalid_json", fs_id=fs_id)
            raise DownloadLinkUnavailable("download returned a non-JSON body")

        errno = data.get("errno")
        items = data.get("list")
        if errno != 0 or not isinstance(items, list) or not items:
            log.warning("download_link_api_error", fs_id=fs_id, errno=errno)
            raise DownloadLinkUnavailable(f"download errno={errno!r}, no items")

        first = items[0]
        dlink = first.get("dlink") if isinstance(first, dict) else None
        if not dlink or not isinstance(dlink, str):
            log.warning("download_link_missing", fs_id=fs_id)
            raise DownloadLinkUnavailable("download response has no dlink")

        log.debug("download_link_fetched", fs_id=fs_id)
        return dlink


def _json_object(resp: httpx.Response) -> dict[str, Any] | None:
    """Decode *resp* as a JSON object, ``None`` for anything else."""
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
