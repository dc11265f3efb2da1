"""
Application Configuration.

Uses Pydantic Settings for environment variable management.
Secrets (JWT, admin) are read here once and handed to the core services
through ``get_settings`` so tests can inject their own values.
"""
import json
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # =========================================================================
    # Application
    # =========================================================================
    APP_NAME: str = "Pool Rental API"
    APP_DESCRIPTION: str = "Rent a pool by the day"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    RELOAD: bool = True
    API_PREFIX: str = "/api"
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"

    # =========================================================================
    # MongoDB Configuration
    # =========================================================================
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "poolrent"

    # Connection Pool Settings
    MONGODB_MIN_POOL_SIZE: int = 1
    MONGODB_MAX_POOL_SIZE: int = 10
    MONGODB_MAX_IDLE_TIME_MS: int = 30000

    # =========================================================================
    # Security
    # =========================================================================
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Password
    PASSWORD_MIN_LENGTH: int = 6
    PASSWORD_MAX_LENGTH: int = 25
    BCRYPT_ROUNDS: int = 10

    # Admin shared secret
    ADMIN_SECRET: str = ""
    ADMIN_SECRET_HEADER: str = "X-Admin-Secret"

    # Password reset
    RESET_TOKEN_EXPIRE_MINUTES: int = 120
    FRONTEND_URL: str = "http://localhost:3000"
    RESET_PASSWORD_PATH: str = "/reset-password"

    # =========================================================================
    # Email (SMTP)
    # =========================================================================
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = ""

    # =========================================================================
    # Image storage (ImageKit)
    # =========================================================================
    IMAGEKIT_PRIVATE_KEY: str = ""
    IMAGEKIT_UPLOAD_URL: str = "https://upload.imagekit.io/api/v1/files/upload"
    IMAGEKIT_TIMEOUT_SECONDS: float = 20.0

    # =========================================================================
    # CORS
    # =========================================================================
    CORS_ORIGINS: str = '["http://localhost:3000"]'
    CORS_ALLOW_METHODS: str = '["*"]'
    CORS_ALLOW_HEADERS: str = "*"
    CORS_ALLOW_CREDENTIALS: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from JSON string."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return ["*"]

    @property
    def cors_methods_list(self) -> List[str]:
        """Parse CORS methods from JSON string."""
        try:
            return json.loads(self.CORS_ALLOW_METHODS)
        except json.JSONDecodeError:
            return ["*"]

    # =========================================================================
    # API Documentation
    # =========================================================================
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"
    OPENAPI_URL: str = "/openapi.json"

    @property
    def reset_password_url(self) -> str:
        return self.FRONTEND_URL.rstrip("/") + self.RESET_PASSWORD_PATH


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
