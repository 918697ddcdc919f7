"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Missing secrets do not prevent startup; the calls that need them fail with
      a configuration error code instead

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Service
    service_name: str = "rainbowkidz-api"
    service_version: str = "3.1.0"

    # Data store (REST query surface + object storage)
    data_store_url: str = ""
    data_store_service_key: str = ""
    data_store_timeout_seconds: float = 10.0
    storage_bucket: str = "rainbowkidz"

    @field_validator("data_store_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # Administrator shared secret (X-Admin-Key header)
    admin_key: str = ""

    # Text generation
    anthropic_api_key: str = ""
    generation_model: str = "claude-haiku-4-5"
    generation_timeout_seconds: float = 60.0

    # Boards
    free_board_slug: str = "classroom"
    board_cache_ttl_seconds: float = 3600.0

    # Gates
    rate_limit_max_entries: int = 10_000
    client_ip_header: str = "cf-connecting-ip"
    nickname_cooldown_days: int = 7

    # Guest session cookie
    session_cookie_name: str = "bbs_gid"
    session_cookie_max_age_days: int = 365

    # API
    cors_origins: list[str] = [
        "https://irunaru.github.io",
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def session_cookie_max_age_seconds(self) -> int:
        return self.session_cookie_max_age_days * 86_400


@lru_cache
def get_settings() -> Settings:
    return Settings()
