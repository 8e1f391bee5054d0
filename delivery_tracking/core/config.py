"""
Tracking subsystem configuration settings.
"""

from functools import lru_cache
from typing import Optional
from urllib.parse import urlsplit

from pydantic_settings import BaseSettings

from delivery_tracking.core.exceptions import ConfigurationException


class Settings(BaseSettings):
    """Tracking settings loaded from environment variables."""

    # Logging
    DEBUG: bool = False  # human-readable log lines instead of JSON
    LOG_LEVEL: str = "INFO"

    # Backend API
    API_URL: str = "http://localhost:5000/api/v1"
    HTTP_TIMEOUT_SECONDS: float = 30.0
    HTTP_CONNECT_TIMEOUT_SECONDS: float = 10.0

    # Real-time transport (socket.io)
    SOCKET_URL: Optional[str] = None  # Defaults to the API_URL origin
    SOCKET_PATH: str = "socket.io"
    SOCKET_RECONNECTION_ATTEMPTS: int = 0  # 0 = retry forever
    SOCKET_RECONNECTION_DELAY: float = 1.0  # seconds
    SOCKET_RECONNECTION_DELAY_MAX: float = 5.0  # seconds

    # Distance matrix
    DISTANCE_MATRIX_BATCH_SIZE: int = 25  # provider limit per request
    DISTANCE_MATRIX_MAX_CONCURRENT: int = 4
    DISTANCE_MATRIX_CACHE_URL: Optional[str] = None  # redis://... enables caching
    DISTANCE_MATRIX_CACHE_TTL: int = 900  # 15 min

    # Observability
    METRICS_ENABLED: bool = True

    @property
    def socket_url(self) -> str:
        """Effective socket.io endpoint (API origin unless overridden)."""
        if self.SOCKET_URL:
            return self.SOCKET_URL.rstrip("/")
        parts = urlsplit(self.API_URL)
        return f"{parts.scheme}://{parts.netloc}"

    def validate_settings(self) -> None:
        """
        Reject settings the tracking services cannot work with.

        Raises:
            ConfigurationException: On the first invalid value
        """
        if urlsplit(self.API_URL).scheme not in ("http", "https"):
            raise ConfigurationException(f"API_URL must be an http(s) URL, got {self.API_URL!r}")
        if not 1 <= self.DISTANCE_MATRIX_BATCH_SIZE <= 25:
            raise ConfigurationException(
                "DISTANCE_MATRIX_BATCH_SIZE must be between 1 and 25, "
                f"got {self.DISTANCE_MATRIX_BATCH_SIZE}"
            )
        if self.DISTANCE_MATRIX_MAX_CONCURRENT < 1:
            raise ConfigurationException("DISTANCE_MATRIX_MAX_CONCURRENT must be at least 1")
        if self.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationException(f"Unknown LOG_LEVEL {self.LOG_LEVEL!r}")

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
