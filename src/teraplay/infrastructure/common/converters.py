"""Formatting helpers for resolved videos."""

from __future__ import annotations

from teraplay.domain.entities.share import ThumbnailSet

_MIB = 1024 * 1024


def format_size(size_bytes: int | None) -> str | None:
    """Render a byte count as ``"X.XX MB"`` or ``"X.XX GB"`` (base 1024).

    Examples:
        - None → None
        - 0 → None
        - 500_000_000 → "476.84 MB"
        - 2_000_000_000 → "1.86 GB"
    """
    if not size_bytes or size_bytes < 0:
        return None
    mb = size_bytes / _MIB
    if mb < 1024:
        return f"{mb:.2f} MB"
    return f"{mb / 1024:.2f} GB"


def pick_thumbnail(thumbnails: ThumbnailSet | None) -> str | None:
    """Largest available thumbnail variant, or ``None``."""
    if thumbnails is None:
        return None
    return thumbnails.large or thumbnails.medium or thumbnails.small or None
