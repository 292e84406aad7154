"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "teraplay",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
    },
    "terabox": {
        "base_url": "https://www.terabox.com",
        "app_id": "250528",
        "channel": "dubox",
        "page_size": 20,
    },
    "resolver": {
        "strategy": "api",
        "max_tree_depth": 32,
    },
    "playwright": {
        "headless": True,
        "stealth": True,
        "timeout_ms": 30_000,
        "settle_ms": 3_000,
        "download_wait_ms": 10_000,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
