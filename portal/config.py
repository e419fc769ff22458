"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    app_url: str = "http://localhost:3000"

    # ==========================================================================
    # Authentication
    # ==========================================================================

    # "custom" (in-memory, local dev), "auth0" or "google"
    auth_provider: str = "custom"

    jwt_secret_key: str = "dev-jwt-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 24 * 60
    jwt_refresh_token_expire_days: int = 7

    auth0_domain: str = ""
    auth0_client_id: str = ""
    auth0_client_secret: str = ""

    google_oauth_client_id: str = ""
    google_oauth_client_secret: str = ""

    # ==========================================================================
    # Database
    # ==========================================================================

    # "memory", "firestore" ("postgres" and "mysql" are reserved)
    db_provider: str = "memory"
    firestore_project_id: str = ""
    google_application_credentials: str = ""

    # ==========================================================================
    # Tenant lifecycle
    # ==========================================================================

    invitation_expiry_days: int = 7
    trial_days: int = 30
    default_max_users: int = 20

    # ==========================================================================
    # AWS (invitation / password reset email)
    # ==========================================================================

    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_ses_from_email: str = ""

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_aws(self) -> bool:
        """Whether AWS services should be used."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logger format for the API and CLI; quiets chatty HTTP clients."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    for name in ("httpx", "httpcore", "botocore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
