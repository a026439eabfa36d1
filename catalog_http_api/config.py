# catalog_http_api/config.py

"""
Configuration for the Product Catalog HTTP API.

All tunables live on a single ``Settings`` object, read from environment
variables (and an optional ``.env`` file) and validated by Pydantic.

Typical usage
=============

    from catalog_http_api.config import get_settings

    settings = get_settings()
    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

Tests build their own ``Settings`` and hand it to ``create_app`` (or
install it globally with ``set_settings``) instead of touching the
environment.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "change-me-this-development-secret-is-long-enough-for-hs256"


class AppEnv(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Central configuration registry.
    """

    # --- Application Meta ---
    APP_NAME: str = "product-catalog-api"
    APP_ENV: AppEnv = AppEnv.DEVELOPMENT
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    DOCS_ENABLED: bool = True

    # --- Persistence ---
    DATABASE_URL: str = "sqlite:///./catalog.db"

    # --- Security ---
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_SECONDS: int = 86400
    BCRYPT_ROUNDS: int = 12

    # --- Query limits ---
    PAGE_SIZE_MAX: int = 2000

    # --- CORS ---
    CORS_ALLOWED_ORIGINS: str = "http://localhost:3000"
    CORS_ALLOWED_METHODS: str = "GET,POST,PUT,DELETE,OPTIONS"
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_MAX_AGE: int = 3600

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    # --- Demo data ---
    SEED_DEMO_DATA: bool = False
    SEED_ADMIN_EMAIL: str = "admin@example.com"
    SEED_ADMIN_PASSWORD: str = "admin123"
    SEED_USER_EMAIL: str = "user@example.com"
    SEED_USER_PASSWORD: str = "user123"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def api_root(self) -> str:
        """
        Normalized API prefix: "" or "/something" without a trailing slash.
        """
        prefix = (self.API_PREFIX or "").strip()
        if not prefix or prefix == "/":
            return ""
        if not prefix.startswith("/"):
            prefix = "/" + prefix
        return prefix.rstrip("/")

    @property
    def cors_origins(self) -> List[str]:
        raw = (self.CORS_ALLOWED_ORIGINS or "").strip()
        if not raw or raw == "*":
            return ["*"]
        return [p.strip() for p in raw.split(",") if p.strip()]

    @property
    def cors_methods(self) -> List[str]:
        return [p.strip().upper() for p in self.CORS_ALLOWED_METHODS.split(",") if p.strip()]

    @property
    def uses_default_secret(self) -> bool:
        return self.JWT_SECRET == DEFAULT_JWT_SECRET


# Singleton configuration instance
_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Return the global Settings instance, creating it from environment
    variables on first use.
    """
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings()
    return _SETTINGS


def set_settings(settings: Optional[Settings]) -> None:
    """
    Replace the global Settings instance (``None`` resets it).

    Mainly useful for tests, where you may want to override configuration
    without touching environment variables.
    """
    global _SETTINGS
    _SETTINGS = settings


__all__ = ["AppEnv", "DEFAULT_JWT_SECRET", "Settings", "get_settings", "set_settings"]
