"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
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


def _normalize_path(value: Any) -> Path:
    """Normalize a path-like value. MUST NOT touch the filesystem."""
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class CacheConfig(BaseModel):
    """Cache backend and per-stage TTLs."""

    backend: Literal["diskcache", "redis"] = Field(
        default="diskcache",
        description="Cache backend: 'diskcache' (SQLite) or 'redis'",
    )
    directory: Path = Field(
        default=Path("./.cache/starpulse"),
        validation_alias=AliasChoices("dir", "directory"),
        description="Diskcache SQLite DB path",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis)",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel cache ops (semaphore limit)",
    )
    schema_version: str = Field(
        default="v4",
        description=(
            "Prefix of every cache key. Changing it is the only supported "
            "global cache bust."
        ),
    )
    day_ttl_seconds: int = Field(
        default=86_400,
        description="TTL for one day's aggregated ranking.",
    )
    window_ttl_seconds: int = Field(
        default=3_600,
        description="TTL for aggregated week/month rankings.",
    )
    enrichment_ttl_seconds: dict[str, int] = Field(
        default={
            "day": 86_400,
            "week": 172_800,
            "month": 345_600,
        },
        description="TTL of cached repository metadata per window kind.",
    )
    popular_ttl_seconds: int = Field(
        default=86_400,
        description="Hard TTL backstop for the popular-repositories list.",
    )
    popular_cache_key: str = Field(
        default="popular-repositories-list",
        description="Key of the popular-repositories list.",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("day_ttl_seconds", "window_ttl_seconds", "popular_ttl_seconds")
    @classmethod
    def _validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache TTLs must be > 0")
        return v

    def enrichment_ttl(self, window_kind: str) -> int:
        return self.enrichment_ttl_seconds.get(window_kind, 3_600)


class UpstreamConfig(BaseModel):
    """Outbound endpoints (URL templates are ``str.format`` patterns)."""

    activity_url_template: str = Field(
        default="https://activity.forgithub.com/top100-starred-in-{date}.json",
        description="Daily activity document; '{date}' is YYYY-MM-DD.",
    )
    metadata_url_template: str = Field(
        default="https://cache.forgithub.com/{repo}/details",
        description="Repository metadata; '{repo}' is owner/repo.",
    )
    popular_url: str = Field(
        default="https://popular.forgithub.com/index.json",
        description="Coarse popular-repositories list.",
    )

    @field_validator("activity_url_template")
    @classmethod
    def _needs_date(cls, v: str) -> str:
        if "{date}" not in v:
            raise ValueError("activity_url_template must contain '{date}'")
        return v

    @field_validator("metadata_url_template")
    @classmethod
    def _needs_repo(cls, v: str) -> str:
        if "{repo}" not in v:
            raise ValueError("metadata_url_template must contain '{repo}'")
        return v


class DispatchConfig(BaseModel):
    """Fan-out dispatcher ceilings.

    Without ``endpoint`` requests are executed in-process; with it, the
    batch is posted to a remote worker pool authenticated by ``api_key``.
    """

    endpoint: str | None = Field(
        default=None,
        description="Remote fan-out endpoint (POST, event-stream response).",
    )
    api_key: str | None = Field(
        default=None,
        description="Bearer token for the remote endpoint.",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max requests in flight (K).",
    )
    requests_per_second: float = Field(
        default=20.0,
        description="System-wide request rate (R). 0 = unlimited.",
    )
    max_items: int = Field(default=500, description="Max items per batch.")
    max_item_bytes: int = Field(
        default=64 * 1024,
        description="Max serialized size of a single request descriptor.",
    )
    max_batch_bytes: int = Field(
        default=4 * 1024 * 1024,
        description="Max serialized size of a whole batch.",
    )
    max_result_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Max body size of a single response.",
    )
    max_total_result_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Max accumulated body size of one batch.",
    )
    retry_max_attempts: int = Field(default=3)
    retry_initial_delay: float = Field(default=1.0)
    retry_backoff_factor: float = Field(default=2.0)

    @field_validator("max_concurrent", "max_items", "retry_max_attempts")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v


class RefreshConfig(BaseModel):
    refresh_hour: int = Field(
        default=1,
        description="UTC hour at which the upstream regenerates its lists.",
    )
    refresh_buffer_minutes: int = Field(
        default=30,
        description="Minutes past refresh_hour before fetching fresh data.",
    )


class WindowConfig(BaseModel):
    week_days: int = Field(default=7, description="Days in a rolling week.")
    month_days: int = Field(default=30, description="Days in a rolling month.")
    max_parallel_days: int = Field(
        default=10,
        description="Max concurrent day fetches per window.",
    )


class AppConfig(BaseModel):
    """Canonical application configuration (validated, final).

    Note:
    - YAML is sectioned (http/logging/cache/upstream/dispatch/refresh/windows).
    - Environment variables come through EnvOverrides so that load.py
      controls precedence (defaults < YAML < ENV < CLI).
    """

    app_name: str = Field(default="starpulse", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout for outbound HTTP requests.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
    )
    http_user_agent: str = Field(
        default="starpulse/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description="console/json. Derived from environment when unset.",
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    refresh: RefreshConfig = Field(default_factory=RefreshConfig)
    windows: WindowConfig = Field(default_factory=WindowConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Dump configuration in the sectioned shape used by config.yaml."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": self.cache.model_dump(mode="json", by_alias=False),
            "upstream": self.upstream.model_dump(),
            "dispatch": self.dispatch.model_dump(exclude={"api_key"}),
            "refresh": self.refresh.model_dump(),
            "windows": self.windows.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """Environment-variable overrides (all optional).

    Supported env vars (flat, explicit):
    - STARPULSE_ENVIRONMENT, STARPULSE_LOG_LEVEL, STARPULSE_LOG_FORMAT
    - STARPULSE_HTTP_TIMEOUT_SECONDS, STARPULSE_HTTP_USER_AGENT
    - STARPULSE_CACHE_BACKEND, STARPULSE_CACHE_DIR, STARPULSE_REDIS_URL
    - STARPULSE_DISPATCH_ENDPOINT, STARPULSE_DISPATCH_API_KEY
    """

    model_config = SettingsConfigDict(
        env_prefix="STARPULSE_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[Literal["diskcache", "redis"]] = None
    cache_dir: Optional[Path] = None
    redis_url: Optional[str] = None
    cache_schema_version: Optional[str] = None

    dispatch_endpoint: Optional[str] = None
    dispatch_api_key: Optional[str] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """Only the values that were actually provided, for merging."""
        return self.model_dump(exclude_none=True)
