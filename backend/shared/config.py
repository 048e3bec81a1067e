"""
Centralized configuration for the Xelma backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SESSION_*, CHALLENGE_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Xelma Auth API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Rate limiting (per client IP, fixed window)
    rate_limit_window: int = 15 * 60  # seconds
    rate_limit_challenge_requests: int = 10
    rate_limit_connect_requests: int = 5

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""
    supabase_timeout_seconds: int = 10

    # Session tokens
    session_jwt_secret: str = ""
    session_jwt_algorithm: str = "HS256"
    session_token_lifetime_seconds: int = 24 * 60 * 60

    # Wallet challenges
    challenge_prefix: str = "xelma_auth"
    challenge_expiry_seconds: int = 5 * 60
    challenge_retention_seconds: int = 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
