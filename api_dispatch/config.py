"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden by an API_DISPATCH_-prefixed environment variable
    - get_settings() is cached (lru_cache) — single instance per process
    - Settings are read-only while requests are dispatching

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - exception_messages parsed from JSON (e.g. '{"1001": "Service busy"}')
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="API_DISPATCH_", case_sensitive=False,
        extra="ignore",
    )

    # Environment
    app_env: str = "prod"
    debug: bool = False

    # API
    api_prefix: str = "/api"
    allow_cors: bool = False
    allow_cors_in_dev: bool = False
    include_time: bool = False

    # Error handling
    mask_exceptions: bool = False
    exception_messages: dict[int, str] = {}
    log_handled: bool = True
    log_unhandled: bool = True
    trace_exceptions: bool = False
    error_status: int = 500

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"
    log_category: str = "api"

    @field_validator("app_env", mode="before")
    @classmethod
    def normalize_env(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("api_prefix", mode="before")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """'api/' and '/api' both become '/api'; '' and '/' become ''."""
        if isinstance(v, str):
            v = v.strip("/")
            return f"/{v}" if v else ""
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
