"""
Client Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports two modes:
    - DEVELOPMENT: Uses the in-memory development backend (no network needed)
    - PRODUCTION: Talks to the real Emojisushi API

The EMOJISUSHI_ENV_MODE variable controls which transport the client is
wired to. It defaults to production; the in-memory backend is used only
when development mode is set explicitly.

Usage:
    from emojisushi.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use the development backend
    else:
        # Use the real API

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Client environment modes.

    Attributes:
        DEVELOPMENT: Local testing against the in-memory backend
        PRODUCTION: Live Emojisushi API
        STAGING: Pre-production API
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables.

    All settings can be overridden via EMOJISUSHI_* environment variables
    or a .env file. Sensitive values (API keys) should NEVER be committed
    to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging

        # API Configuration
        base_url: Root URL of the Emojisushi API
        lang: Locale sent as the `lang` query parameter on every request
        timeout_seconds: Default request timeout (None = no timeout)
        verify_ssl: Verify TLS certificates
        raise_for_status: Treat non-2xx responses as transport errors
        api_key: Optional bearer token sent as a static header

        # Catalogue
        menu_category_slug: Category slug used by product/variant lookups
    """

    model_config = SettingsConfigDict(
        env_prefix="EMOJISUSHI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.PRODUCTION,
        description="Client environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # API
    # ==========================================================================

    base_url: str = Field(
        default="https://api.emojisushi.com.ua/api/",
        description="Emojisushi API base URL"
    )
    lang: str = Field(
        default="uk",
        description="Locale code appended to every request"
    )
    timeout_seconds: Optional[float] = Field(
        default=None,
        description="Default request timeout in seconds (None disables it)"
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates"
    )
    raise_for_status: bool = Field(
        default=True,
        description="Raise TransportError on non-2xx responses"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Bearer token sent in the Authorization header"
    )

    # ==========================================================================
    # CATALOGUE
    # ==========================================================================

    menu_category_slug: str = Field(
        default="menu",
        description="Category slug searched by product and variant lookups"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("lang")
    @classmethod
    def validate_lang(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("lang must not be empty")
        return v

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def is_staging(self) -> bool:
        """Check if running in staging mode."""
        return self.env_mode == EnvironmentMode.STAGING

    @property
    def use_real_services(self) -> bool:
        """Check if the real API should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services:
            if not self.base_url:
                missing.append("EMOJISUSHI_BASE_URL")
            if not self.verify_ssl and self.is_production:
                missing.append("EMOJISUSHI_VERIFY_SSL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached client settings.

    Uses LRU cache to ensure settings are loaded only once.

    Returns:
        Settings: Configured client settings

    Example:
        >>> settings = get_settings()
        >>> print(settings.lang)
        'uk'
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logging.getLogger("emojisushi")
