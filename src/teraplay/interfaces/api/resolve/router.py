from __future__ import annotations

import asyncio
from typing import Any, cast

import structlog
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from teraplay.domain.entities import ResolveError
from teraplay.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["resolve"])

_DISCONNECT_POLL_SECONDS = 0.25
_CLIENT_CLOSED_REQUEST = 499
_UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def _failure(message: str, *, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


async def _read_url(request: Request) -> str | JSONResponse:
    """Pull ``url`` out of the JSON body, or a 400 response describing why not."""
    try:
        body: Any = await request.json()
    except (ValueError, RecursionError):
        return _failure("Invalid request format", status_code=400)
    if not isinstance(body, dict):
        return _failure("Invalid request format", status_code=400)

    url = body.get("url")
    if not url:
        return _failure("URL is required", status_code=400)
    if not isinstance(url, str):
        return _failure("URL must be a string", status_code=400)
    return url


@router.post("/resolve")
async def resolve_share(request: Request) -> Response:
    """Resolve a share link to a directly playable video URL.

    The resolution runs as its own task; if the client goes away first the
    task is cancelled so no upstream call or browser outlives the request.
    """
    state = cast(AppState, request.app.state)

    url = await _read_url(request)
    if isinstance(url, JSONResponse):
        return url

    task = asyncio.create_task(state.resolver.resolve(url))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=_DISCONNECT_POLL_SECONDS)
            if done:
                break
            if await request.is_disconnected():
                task.cancel()
                await asyncio.wait({task})
                log.info("resolve_client_disconnected", url=url)
                return Response(status_code=_CLIENT_CLOSED_REQUEST)

        video = task.result()
        return JSONResponse(status_code=200, content=video.to_payload())

    except ResolveError as e:
        log.info(
            "resolve_request_failed",
            url=url,
            status_code=e.status_code,
            error_type=type(e).__name__,
        )
        return _failure(e.user_message, status_code=e.status_code)

    except Exception:
        log.exception("resolve_unhandled_error", url=url)
        return _failure(_UNEXPECTED_ERROR_MESSAGE, status_code=500)

    finally:
        if not task.done():
            task.cancel()
