"""Headless-browser share resolver: scrapes the share page instead of the API.

Used when the provider rejects direct API calls. One Chromium instance is
launched per resolution (stealth evasions applied, every request allowed
through) and torn down on every exit path.

Extraction order, first hit wins:
    1. ``src`` of a rendered ``<video>`` (or its ``<source>``)
    2. click a download control, then race a timeout against a media
       response or a redirect carrying ``Location``
    3. find a download-API URL in inline scripts, fetch it in-page and
       read ``dlink``
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import unquote, urljoin, urlparse

import structlog
from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Error as PlaywrightError,
    Page,
    Playwright,
    Response,
    Route,
    async_playwright,
)

from teraplay.domain.entities.share import (
    BrowserAutomationError,
    ExtractionFailed,
    ResolvedVideo,
    ResolveError,
    UnsupportedHost,
)
from teraplay.infrastructure.terabox.url_parser import is_terabox_url, parse_share_url

log = structlog.get_logger(__name__)

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_LAUNCH_ARGS = ["--disable-blink-features=AutomationControlled"]

_MEDIA_EXTENSIONS = (".mp4", ".m3u8", ".mkv", ".webm", ".mov", ".avi", ".flv")
_MEDIA_CONTENT_TYPES = ("video/", "application/vnd.apple.mpegurl")

_DOWNLOAD_SELECTORS: tuple[str, ...] = (
    "a[download]",
    "[class*='download' i]",
    "[id*='download' i]",
    "[title*='download' i]",
    "[aria-label*='download' i]",
    "button:has-text('Download')",
    "a:has-text('Download')",
)

_DOWNLOAD_API_RE = re.compile(
    r"""(?:https?://[^\s"'<>/]+)?"""  # optional origin
    r"""(?:/[\w.-]+)*?/(?:share|api)/download\?"""
    r"""[^\s"'<>`\\]+"""
)

_FALLBACK_FILE_NAME = "video.mp4"

_VIDEO_SRC_JS = """
() => {
    for (const video of document.querySelectorAll('video')) {
        const candidates = [video.currentSrc, video.getAttribute('src')];
        for (const source of video.querySelectorAll('source[src]')) {
            candidates.push(source.getAttribute('src'));
        }
        for (const src of candidates) {
            if (src && !src.startsWith('blob:')) {
                return new URL(src, document.baseURI).href;
            }
        }
    }
    return null;
}
"""

_INLINE_SCRIPTS_JS = """
() => Array.from(document.querySelectorAll('script:not([src])'))
    .map((s) => s.textContent || '')
    .filter((t) => t.length > 0)
"""

_FETCH_JSON_JS = """
async (url) => {
    const resp = await fetch(url, { credentials: 'include' });
    if (!resp.ok) return { _error: resp.status };
    try {
        return await resp.json();
    } catch (e) {
        return { _error: 'invalid_json' };
    }
}
"""


async def _allow_request(route: Route) -> None:
    """Let every request through (the page needs its XHRs to render)."""
    await route.continue_()


def _media_url_from_response(response: Response) -> str | None:
    """Direct media URL carried by *response*, if it looks like one."""
    headers = response.headers
    if 300 <= response.status < 400:
        location = headers.get("location")
        if location:
            return urljoin(response.url, location)
        return None

    content_type = headers.get("content-type", "").lower()
    if content_type.startswith(_MEDIA_CONTENT_TYPES):
        return response.url

    path = urlparse(response.url).path.lower()
    if path.endswith(_MEDIA_EXTENSIONS):
        return response.url
    return None


def _dlink_from_payload(data: Any) -> str | None:
    """Read ``dlink`` from a download-API payload (top level or ``list[0]``)."""
    if not isinstance(data, dict) or "_error" in data:
        return None
    dlink = data.get("dlink")
    if isinstance(dlink, str) and dlink:
        return dlink
    items = data.get("list")
    if isinstance(items, list) and items and isinstance(items[0], dict):
        dlink = items[0].get("dlink")
        if isinstance(dlink, str) and dlink:
            return dlink
    return None


def find_download_api_urls(scripts: list[str], page_url: str) -> list[str]:
    """Absolute download-API URLs mentioned in inline script bodies."""
    urls: list[str] = []
    for text in scripts:
        text = text.replace("\\/", "/").replace("\\u0026", "&")
        for match in _DOWNLOAD_API_RE.finditer(text):
            absolute = urljoin(page_url, match.group(0))
            if absolute not in urls:
                urls.append(absolute)
    return urls


def derive_file_name(title: str, media_url: str) -> str:
    """File name from the page title, else the media URL path, else a default."""
    for part in (title or "").split(" - "):
        candidate = part.strip()
        if candidate.lower().endswith(_MEDIA_EXTENSIONS):
            return candidate

    last_segment = unquote(urlparse(media_url).path.rsplit("/", 1)[-1])
    if last_segment.lower().endswith(_MEDIA_EXTENSIONS):
        return last_segment
    return _FALLBACK_FILE_NAME


class SharePageResolver:
    """Resolves share links by driving a stealth Chromium through the share page.

    Usage::

        resolver = SharePageResolver(headless=True)
        video = await resolver.resolve("https://www.terabox.com/s/1abc")
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        user_agent: str = _DEFAULT_USER_AGENT,
        timeout_ms: int = 30_000,
        settle_ms: int = 3_000,
        download_wait_ms: int = 10_000,
        stealth: bool = True,
    ) -> None:
        self._headless = headless
        self._user_agent = user_agent
        self._timeout_ms = timeout_ms
        self._settle_ms = settle_ms
        self._download_wait_ms = download_wait_ms
        self._stealth = stealth

    @property
    def name(self) -> str:
        return "browser"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _open_page(self) -> AsyncIterator[Page]:
        """Launch an isolated stealth browser and yield a fresh page.

        Page, context, browser and the Playwright driver are released on
        every exit path, including cancellation.
        """
        pw: Playwright = await async_playwright().start()
        browser: Browser | None = None
        context: BrowserContext | None = None
        try:
            browser = await pw.chromium.launch(
                headless=self._headless,
                args=_LAUNCH_ARGS,
            )
            context = await browser.new_context(
                user_agent=self._user_agent,
                viewport={"width": 1280, "height": 720},
            )
            if self._stealth:
                from playwright_stealth import Stealth

                await Stealth().apply_stealth_async(context)
            await context.route("**/*", _allow_request)

            page = await context.new_page()
            page.set_default_timeout(self._timeout_ms)
            log.debug(
                "browser_launched", headless=self._headless, stealth=self._stealth
            )
            yield page
        finally:
            await self._release(pw, browser, context)

    async def _release(
        self,
        pw: Playwright,
        browser: Browser | None,
        context: BrowserContext | None,
    ) -> None:
        if context is not None:
            try:
                await context.close()
            except Exception:  # noqa: BLE001
                log.warning("browser_context_close_error", exc_info=True)
        if browser is not None:
            try:
                await browser.close()
            except Exception:  # noqa: BLE001
                log.warning("browser_close_error", exc_info=True)
        try:
            await pw.stop()
        except Exception:  # noqa: BLE001
            log.warning("browser_pw_stop_error", exc_info=True)
        log.debug("browser_released")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, url: str) -> ResolvedVideo:
        if not is_terabox_url(url):
            log.warning("resolve_failed", url=url, step="validate")
            raise UnsupportedHost(f"not a terabox link: {url!r}")
        try:
            parse_share_url(url)
        except ResolveError as exc:
            log.warning("resolve_failed", url=url, step="parse", detail=str(exc))
            raise

        step = "launch"
        try:
            async with self._open_page() as page:
                step = "navigate"
                await self._load(page, url)

                step = "extract"
                media_url = await self._extract(page)
                if media_url is None:
                    raise ExtractionFailed(f"no media found on {url!r}")

                title = await page.title()
        except ResolveError as exc:
            log.warning(
                "resolve_failed",
                url=url,
                step=step,
                error_type=type(exc).__name__,
                detail=str(exc),
            )
            raise
        except Exception as exc:
            log.exception("browser_resolve_error", url=url, step=step)
            raise BrowserAutomationError(
                f"browser automation failed during {step}: {exc}"
            ) from exc

        resolved = ResolvedVideo(
            file_name=derive_file_name(title, media_url),
            direct_url=media_url,
        )
        log.info("resolve_succeeded", url=url, strategy=self.name)
        return resolved

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _load(self, page: Page, url: str) -> None:
        """Navigate, wait for network idle (best-effort), then let the page settle."""
        await page.goto(url, wait_until="domcontentloaded", timeout=self._timeout_ms)
        try:
            await page.wait_for_load_state("networkidle", timeout=self._timeout_ms)
        except PlaywrightError:
            log.debug("browser_networkidle_timeout", url=url)
        await asyncio.sleep(self._settle_ms / 1000)

    async def _extract(self, page: Page) -> str | None:
        media_url = await self._from_video_element(page)
        if media_url:
            log.info("browser_video_element_found")
            return media_url

        media_url = await self._from_download_control(page)
        if media_url:
            log.info("browser_download_response_captured")
            return media_url

        media_url = await self._from_inline_scripts(page)
        if media_url:
            log.info("browser_script_api_dlink_found")
            return media_url
        return None

    async def _from_video_element(self, page: Page) -> str | None:
        src = await page.evaluate(_VIDEO_SRC_JS)
        return src if isinstance(src, str) and src else None

    async def _find_download_control(self, page: Page) -> ElementHandle | None:
        for selector in _DOWNLOAD_SELECTORS:
            try:
                handle = await page.query_selector(selector)
            except Exception:  # noqa: BLE001
                continue  # selector engine rejected it
            if handle is not None and await handle.is_visible():
                return handle
        return None

    async def _from_download_control(self, page: Page) -> str | None:
        control = await self._find_download_control(page)
        if control is None:
            log.debug("browser_no_download_control")
            return None

        found: asyncio.Future[str] = asyncio.get_running_loop().create_future()

        def _on_response(response: Response) -> None:
            if found.done():
                return
            media_url = _media_url_from_response(response)
            if media_url:
                found.set_result(media_url)

        page.on("response", _on_response)
        try:
            await control.click(timeout=self._download_wait_ms)
            return await asyncio.wait_for(
                found, timeout=self._download_wait_ms / 1000
            )
        except asyncio.TimeoutError:
            log.debug("browser_download_wait_timeout")
            return None
        except PlaywrightError as exc:
            log.debug("browser_download_click_failed", error=str(exc))
            return None
        finally:
            page.remove_listener("response", _on_response)
            if not found.done():
                found.cancel()

    async def _from_inline_scripts(self, page: Page) -> str | None:
        scripts = await page.evaluate(_INLINE_SCRIPTS_JS)
        if not isinstance(scripts, list):
            return None

        for api_url in find_download_api_urls(
            [s for s in scripts if isinstance(s, str)], page.url
        ):
            try:
                data = await page.evaluate(_FETCH_JSON_JS, api_url)
            except PlaywrightError as exc:
                log.warning(
                    "browser_script_api_fetch_failed",
                    api_url=api_url[:120],
                    error=str(exc),
                )
                continue
            dlink = _dlink_from_payload(data)
            if dlink:
                return dlink
            log.debug("browser_script_api_no_dlink", api_url=api_url[:120])
        return None
