"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from teraplay.application.use_cases import FallbackResolveUseCase, ResolveShareUseCase
from teraplay.domain.ports import ShareResolverPort
from teraplay.infrastructure.browser import SharePageResolver
from teraplay.infrastructure.common.converters import format_size, pick_thumbnail
from teraplay.infrastructure.config.schema import AppConfig
from teraplay.infrastructure.terabox import (
    TeraboxApiClient,
    find_first_video,
    is_terabox_url,
    parse_share_url,
)
from teraplay.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def _build_api_resolver(
    config: AppConfig, http_client: httpx.AsyncClient
) -> ResolveShareUseCase:
    api = TeraboxApiClient(
        http_client,
        base_url=config.terabox_base_url,
        app_id=config.terabox_app_id,
        channel=config.terabox_channel,
        page_size=config.terabox_page_size,
        user_agent=config.http_user_agent,
        timeout_seconds=config.http_timeout_seconds,
    )
    return ResolveShareUseCase(
        api=api,
        host_check_fn=is_terabox_url,
        parse_fn=parse_share_url,
        locate_fn=find_first_video,
        size_fn=format_size,
        thumbnail_fn=pick_thumbnail,
        max_tree_depth=config.resolver_max_tree_depth,
    )


def _build_browser_resolver(config: AppConfig) -> SharePageResolver:
    return SharePageResolver(
        headless=config.playwright_headless,
        user_agent=config.http_user_agent,
        timeout_ms=config.playwright_timeout_ms,
        settle_ms=config.playwright_settle_ms,
        download_wait_ms=config.playwright_download_wait_ms,
        stealth=config.playwright_stealth,
    )


def build_resolver(
    config: AppConfig, http_client: httpx.AsyncClient
) -> ShareResolverPort:
    """Select the resolver deployed for ``config.resolver_strategy``."""
    strategy = config.resolver_strategy
    if strategy == "browser":
        return _build_browser_resolver(config)
    if strategy == "api_with_fallback":
        return FallbackResolveUseCase(
            primary=_build_api_resolver(config, http_client),
            fallback=_build_browser_resolver(config),
        )
    return _build_api_resolver(config, http_client)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: initialize and clean up all resources (DI Composition Root).

    Order matters:
        1. HTTP client (required by the API resolver)
        2. Resolver (strategy from config)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client; per-call timeouts are set by the API client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=True,
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    # 2) Resolver
    state.resolver = build_resolver(config, state.http_client)
    log.info("resolver_initialized", strategy=state.resolver.name)

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("app_shutdown_complete")
