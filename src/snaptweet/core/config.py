"""Configuration management for SnapTweet.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the SNAPTWEET_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (SNAPTWEET_* prefix)
2. .env file in the project root
3. Default values defined in SnaptweetConfig

The OpenAI credential is also accepted under its conventional unprefixed name,
``OPENAI_API_KEY``, so existing deployments keep working.

Example .env file:
    OPENAI_API_KEY=sk-...
    SNAPTWEET_DATABASE_PATH=data/snaptweet.db
    SNAPTWEET_ENVIRONMENT=production
    SNAPTWEET_PUBLIC_BASE_URL=https://snaptweet.example.com

Global Configuration Instance
------------------------------
A global ``config`` instance is created automatically at module import time.
It holds *settings only*.  The model client and the share store are built from
it once, in the application lifespan, and handed to the components that need
them; they are never module-level globals.

Usage Example
-------------
    from snaptweet.core.config import config

    print(config.model_id)
    print(config.database_path)
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SnaptweetConfig(BaseSettings):
    """Main configuration for SnapTweet.

    Attributes
    ----------
    Model Settings:
        openai_api_key : SecretStr | None
            Credential for the OpenAI API.  ``None`` means generation requests
            fail with an API-key error without reaching the model.
        model_id : str
            Fixed chat model identifier used for every generation.
        max_output_tokens : int
            Upper bound on tokens the model may produce per request.
        request_timeout : float | None
            Transport timeout in seconds (``None`` keeps the SDK default).

    Storage:
        database_path : Path
            SQLite file holding shared tweet records.

    Web:
        environment : str
            Runtime environment flag, reported by ``GET /api/health``.
        public_base_url : str | None
            Absolute base URL for share links and preview meta tags.  When
            unset, the base URL of the incoming request is used.
        app_url : str
            Main application URL that shared pages redirect to.
        server_host / server_port:
            uvicorn bind address.
        log_level:
            Root logging level used by ``main()``.

    Image Reduction Defaults:
        image_max_width / image_max_height : int
            Bounding box an uploaded photo is scaled into.
        image_quality : float
            Initial lossy quality in (0, 1].
        image_max_file_size : int
            Byte budget for each encoded photo.

    Result Cache:
        result_cache_ttl : float
            Seconds a cached generation result stays available.
        result_cache_max_entry_bytes : int
            Largest cached entry accepted, approximating a browser's
            per-session storage quota.

    Examples
    --------
        >>> custom_config = SnaptweetConfig(
        ...     database_path="/tmp/snaptweet.db",
        ...     environment="test",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SNAPTWEET_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Model settings
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "openai_api_key", "SNAPTWEET_OPENAI_API_KEY", "OPENAI_API_KEY"
        ),
        description="OpenAI API key",
    )
    model_id: str = Field(
        default="gpt-4o",
        description="Chat model used for tweet generation",
    )
    max_output_tokens: int = Field(
        default=1000,
        description="Maximum number of output tokens per generation",
        ge=1,
        le=16384,
    )
    request_timeout: float | None = Field(
        default=None,
        description="Model request timeout in seconds (None = SDK default)",
        gt=0,
    )

    # Storage
    database_path: Path = Field(
        default=Path("data/snaptweet.db"),
        description="SQLite database file for shared tweets",
    )

    # Web settings
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Runtime environment flag",
    )
    public_base_url: str | None = Field(
        default=None,
        description="Absolute base URL for share links (None = derive from request)",
    )
    app_url: str = Field(
        default="/",
        description="Main application URL shared pages redirect to",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=8000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level",
    )

    # Image reduction defaults
    image_max_width: int = Field(default=1200, ge=1)
    image_max_height: int = Field(default=1200, ge=1)
    image_quality: float = Field(default=0.8, gt=0.0, le=1.0)
    image_max_file_size: int = Field(default=2 * 1024 * 1024, ge=1)

    # Result cache
    result_cache_ttl: float = Field(
        default=1800.0,
        description="Seconds a cached generation result survives",
        gt=0,
    )
    result_cache_max_entry_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Largest cached generation result in bytes",
        ge=1,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the database directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.database_path.parent.mkdir(parents=True, exist_ok=True)


# Global configuration instance
# Loaded from environment variables (SNAPTWEET_* prefix) and the .env file.
config = SnaptweetConfig()
