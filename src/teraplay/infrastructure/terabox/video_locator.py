"""Depth-first search for the first video entry in a share listing."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import structlog

from teraplay.domain.entities.share import FileEntry

log = structlog.get_logger(__name__)

DEFAULT_MAX_DEPTH = 32


def find_first_video(
    entries: Iterable[FileEntry], *, max_depth: int = DEFAULT_MAX_DEPTH
) -> FileEntry | None:
    """Return the first video entry in listing order, or ``None``.

    Directories are descended into before their next sibling. The walk uses
    an explicit stack of iterators; directories nested deeper than
    *max_depth* are skipped with a warning.
    """
    stack: list[Iterator[FileEntry]] = [iter(entries)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        if entry.is_video:
            return entry
        if entry.is_directory and entry.children:
            if len(stack) > max_depth:
                log.warning(
                    "video_locator_depth_exceeded",
                    directory=entry.name,
                    max_depth=max_depth,
                )
                continue
            stack.append(iter(entry.children))
    return None
