"""
Settings and environment management module for the Persistency Analysis backend.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for development (no variable is required)
- Singleton pattern via @lru_cache for efficient access

Environment Variables:
- APP_NAME: Title shown in OpenAPI docs and the root endpoint
- LOG_LEVEL: Root logging level (default: INFO)
- CORS_ORIGINS: JSON list of dashboard origins allowed by CORS
- MAX_UPLOAD_BYTES: Largest roster file accepted per carrier (default: 25 MiB)
- PARALLEL_CARRIERS: Fan per-carrier analysis out to worker threads (default: true)
- CARRIER_TIMEOUT_SECONDS: Optional time limit for a single carrier's analysis
- LAPSE_GRACE_PERIOD_DAYS: Grace period added to a paid-to date (default: 31)

Usage:
    from persistency.core.config import get_settings

    settings = get_settings()
    grace_days = settings.lapse_grace_period_days
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The class inherits from pydantic-settings BaseSettings which provides:
    - Automatic loading from environment variables (case-insensitive)
    - Support for .env file loading
    - Type validation and coercion

    Attributes:
        app_name: Application title.
        log_level: Root logging level name.
        cors_origins: Origins allowed to call the API from a browser.
        max_upload_bytes: Upper bound on a single uploaded roster.
        parallel_carriers: Whether carriers are analyzed concurrently.
        carrier_timeout_seconds: Optional per-carrier time limit.
        lapse_grace_period_days: Days after the paid-to date before a policy lapses.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Service
    # =========================================================================

    app_name: str = 'Persistency Analysis API'

    log_level: str = 'INFO'

    # Next.js dashboard dev servers
    cors_origins: List[str] = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]

    # =========================================================================
    # Analysis
    # =========================================================================

    # Uploads above this size fail only the carrier they belong to
    max_upload_bytes: int = 25 * 1024 * 1024

    # Carriers share no state, so each one may run on its own worker thread
    parallel_carriers: bool = True

    # None disables the limit; applies to one carrier's whole unit of work
    carrier_timeout_seconds: Optional[float] = None

    # Carriers that expose a paid-to date lapse this many days after it
    lapse_grace_period_days: int = 31


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The application settings instance with all configuration values.

    Raises:
        pydantic.ValidationError: If an environment variable has an invalid value.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
