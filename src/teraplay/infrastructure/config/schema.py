"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
ResolverStrategy = Literal["api", "browser", "api_with_fallback"]


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/terabox/resolver/playwright/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="teraplay", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-call timeout for provider API requests (seconds).",
    )
    http_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Browser-like User-Agent sent to the provider.",
    )

    # Provider API (YAML section: terabox.*)
    terabox_base_url: str = Field(
        default="https://www.terabox.com",
        validation_alias=AliasChoices(
            "terabox_base_url",
            AliasPath("terabox", "base_url"),
        ),
        description="Origin of the share list/download endpoints.",
    )
    terabox_app_id: str = Field(
        default="250528",
        validation_alias=AliasChoices(
            "terabox_app_id",
            AliasPath("terabox", "app_id"),
        ),
        description="Fixed application id expected by the provider.",
    )
    terabox_channel: str = Field(
        default="dubox",
        validation_alias=AliasChoices(
            "terabox_channel",
            AliasPath("terabox", "channel"),
        ),
        description="Fixed channel id expected by the provider.",
    )
    terabox_page_size: int = Field(
        default=20,
        validation_alias=AliasChoices(
            "terabox_page_size",
            AliasPath("terabox", "page_size"),
        ),
        description="Pagination window for the share list call.",
    )

    # Resolver selection (YAML section: resolver.*)
    resolver_strategy: ResolverStrategy = Field(
        default="api",
        validation_alias=AliasChoices(
            "resolver_strategy",
            AliasPath("resolver", "strategy"),
        ),
        description=(
            "api = provider API only, browser = headless browser only, "
            "api_with_fallback = API first, browser when the API is rejected."
        ),
    )
    resolver_max_tree_depth: int = Field(
        default=32,
        validation_alias=AliasChoices(
            "resolver_max_tree_depth",
            AliasPath("resolver", "max_tree_depth"),
        ),
        description="Deepest directory level searched for a video entry.",
    )

    # Playwright (YAML section: playwright.*)
    playwright_headless: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "playwright_headless",
            AliasPath("playwright", "headless"),
        ),
        description="Run Playwright headless.",
    )
    playwright_stealth: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "playwright_stealth",
            AliasPath("playwright", "stealth"),
        ),
        description="Apply playwright-stealth evasions to each browser context.",
    )
    playwright_timeout_ms: int = Field(
        default=30_000,
        validation_alias=AliasChoices(
            "playwright_timeout_ms",
            AliasPath("playwright", "timeout_ms"),
        ),
        description="Navigation timeout in milliseconds.",
    )
    playwright_settle_ms: int = Field(
        default=3_000,
        validation_alias=AliasChoices(
            "playwright_settle_ms",
            AliasPath("playwright", "settle_ms"),
        ),
        description="Extra wait after network idle for client-side rendering.",
    )
    playwright_download_wait_ms: int = Field(
        default=10_000,
        validation_alias=AliasChoices(
            "playwright_download_wait_ms",
            AliasPath("playwright", "download_wait_ms"),
        ),
        description="How long to wait for a media response after clicking download.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("terabox_base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("terabox_base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("terabox_page_size")
    @classmethod
    def _validate_page_size(cls, v: int) -> int:
        if not 1 <= v <= 1000:
            raise ValueError("terabox_page_size must be between 1 and 1000")
        return v

    @field_validator("resolver_max_tree_depth")
    @classmethod
    def _validate_tree_depth(cls, v: int) -> int:
        if v < 1:
            raise ValueError("resolver_max_tree_depth must be >= 1")
        return v

    @field_validator(
        "playwright_timeout_ms", "playwright_settle_ms", "playwright_download_wait_ms"
    )
    @classmethod
    def _validate_playwright_ms(cls, v: int) -> int:
        if v < 0:
            raise ValueError("playwright timings must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "terabox": {
                "base_url": self.terabox_base_url,
                "app_id": self.terabox_app_id,
                "channel": self.terabox_channel,
                "page_size": self.terabox_page_size,
            },
            "resolver": {
                "strategy": self.resolver_strategy,
                "max_tree_depth": self.resolver_max_tree_depth,
            },
            "playwright": {
                "headless": self.playwright_headless,
                "stealth": self.playwright_stealth,
                "timeout_ms": self.playwright_timeout_ms,
                "settle_ms": self.playwright_settle_ms,
                "download_wait_ms": self.playwright_download_wait_ms,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read TERAPLAY_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - TERAPLAY_HTTP_TIMEOUT_SECONDS
    - TERAPLAY_TERABOX_BASE_URL
    - TERAPLAY_RESOLVER_STRATEGY
    - TERAPLAY_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="TERAPLAY_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    terabox_base_url: Optional[str] = None
    terabox_app_id: Optional[str] = None
    terabox_channel: Optional[str] = None
    terabox_page_size: Optional[int] = None

    resolver_strategy: Optional[ResolverStrategy] = None
    resolver_max_tree_depth: Optional[int] = None

    playwright_headless: Optional[bool] = None
    playwright_stealth: Optional[bool] = None
    playwright_timeout_ms: Optional[int] = None
    playwright_settle_ms: Optional[int] = None
    playwright_download_wait_ms: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
