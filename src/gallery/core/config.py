from functools import lru_cache
from urllib.parse import urlparse

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Hackathon Gallery"
    app_env: str = "development"  # development, testing, production
    debug: bool = False

    # Privacy
    log_session_ids: bool = False  # Only a digest prefix is logged unless enabled

    # Document store
    store_backend: str = "memory"  # memory, redis
    store_namespace: str = "gallery"  # Key prefix for the Redis backend

    # Redis (optional - falls back to the in-memory store without it)
    redis_url: str | None = None  # e.g., "redis://localhost:6379/0"
    redis_pool_size: int = 10
    redis_connect_timeout_seconds: float = 2.0

    # Argon2 password hashing for resource PINs
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536  # KiB
    argon2_parallelism: int = 1

    # Password verification throttling (sliding window per session)
    rate_limit_max_attempts: int = 5
    rate_limit_window_seconds: int = 60

    # Gallery
    default_generation: int = 3
    deployment_page_size: int = 5
    recompute_latest_version_on_delete: bool = False

    # Link preview (image pre-fill for the registration form)
    link_preview_api_url: str = "https://api.microlink.io"
    link_preview_timeout_seconds: float = 5.0

    # Device-local preferences (session id, theme, sort order)
    local_storage_path: str = ".gallery_state.json"

    # Profanity filter
    extra_profanity_words: list[str] = []

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("memory", "redis"):
            raise ValueError("STORE_BACKEND must be 'memory' or 'redis'")
        return v

    @field_validator("rate_limit_max_attempts", "rate_limit_window_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Rate limit budget and window must be positive")
        return v

    @field_validator("link_preview_api_url")
    @classmethod
    def validate_link_preview_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"LINK_PREVIEW_API_URL must be an http(s) URL, got '{v}'")
        return v.rstrip("/")

    @property
    def rate_limit_window_ms(self) -> int:
        return self.rate_limit_window_seconds * 1000


@lru_cache
def get_settings() -> Settings:
    return Settings()
