# authdb/core/config.py
"""
Store configuration using pydantic-settings.

The in-memory store has no connection to open, but it accepts the same
configuration object a durable backend would, so that callers can swap
backends without touching their wiring.
"""
from functools import lru_cache
from typing import Any, Mapping, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Strictly typed store settings.

    Priority for loading:
    1. Environment variables (highest priority)
    2. .env file (via pydantic-settings)
    3. Default values
    """

    # ─────────────────────────────────────────────────────────────
    # Metadata
    # ─────────────────────────────────────────────────────────────
    PROJECT_NAME: str = "authdb"
    PROJECT_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    # ─────────────────────────────────────────────────────────────
    # Logging
    # LOG_FORMAT is handed to logging.basicConfig as-is
    # ─────────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # ─────────────────────────────────────────────────────────────
    # Backend selection
    # Only the in-memory backend ships with this package
    # ─────────────────────────────────────────────────────────────
    STORE_BACKEND: str = "memory"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Optional[str]) -> str:
        if v is None:
            return "INFO"
        return str(v).strip().upper()

    @field_validator("STORE_BACKEND", mode="before")
    @classmethod
    def validate_backend(cls, v: Optional[str]) -> str:
        """
        Only "memory" is a valid backend here.

        A durable backend name reaching this package means the caller
        wired the wrong store, which should fail loudly at startup.
        """
        backend = (v or "memory").strip().lower()
        if backend != "memory":
            raise ValueError(f"Unsupported store backend: {backend!r}")
        return backend

    model_config = SettingsConfigDict(
        env_prefix="AUTHDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance.

    Settings are loaded once so every store built without explicit
    options sees the same configuration.
    """
    return Settings()


def resolve_settings(options: Union[Settings, Mapping[str, Any], None] = None) -> Settings:
    """
    Turn the options passed to ``connect`` into a Settings object.

    Accepts an existing Settings, a plain mapping of overrides, or None
    for the cached defaults.
    """
    if options is None:
        return get_settings()
    if isinstance(options, Settings):
        return options
    return Settings(**dict(options))


settings = get_settings()
