"""
Configuration settings for the rate-limit retry layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Rate Limit Layer"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Remote API ===
    API_BASE_URL: str = "https://example.okta.com"
    API_TOKEN: Optional[str] = None  # Sent as "SSWS <token>" when set
    USER_AGENT: str = "ratelimit-layer/0.1.0"
    CONNECTION_TIMEOUT: int = 30  # seconds, per transport call

    # === Connection Pool ===
    MAX_CONNECTIONS: int = 10
    MAX_KEEPALIVE_CONNECTIONS: int = 5
    KEEPALIVE_EXPIRY: float = 30.0

    # === Retry & Backoff ===
    MAX_RETRIES: int = 2
    REQUEST_TIMEOUT: int = 0  # seconds across all attempts, <= 0 means no limit
    BACKOFF_SECONDS_DELTA: int = 1  # Added to the server-computed wait for clock skew
    RETRYABLE_STATUS_CODES: list[int] = [429]


# Global settings instance
settings = Settings()
