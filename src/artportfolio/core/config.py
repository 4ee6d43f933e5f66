"""Configuration management for the Art Portfolio API.

This module provides centralized configuration management using Pydantic Settings.
Configuration is loaded from environment variables with the ARTPORTFOLIO_ prefix,
allowing deployments to relocate the data file and upload directory without
code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Keyword arguments passed to ``PortfolioConfig(...)``
2. Environment variables (ARTPORTFOLIO_* prefix)
3. .env file in the working directory
4. Default values defined in PortfolioConfig

Two settings also honour the short, unprefixed names used by common hosting
platforms:

- ``PORT`` for :attr:`PortfolioConfig.server_port`
- ``ALLOWED_ORIGINS`` for :attr:`PortfolioConfig.allowed_origins`

Example .env file:
    ARTPORTFOLIO_DATA_FILE=data/data.json
    ARTPORTFOLIO_UPLOADS_DIR=uploads
    ARTPORTFOLIO_MAX_UPLOAD_BYTES=5242880
    PORT=3000
    ALLOWED_ORIGINS=https://example.org,https://admin.example.org

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Unlike the directories themselves, which are created lazily by the store and
the asset manager, the settings object is cheap to build and has no side
effects on the file system.

Usage Example
-------------
    from artportfolio.core.config import config

    print(config.data_file)
    print(config.cors_origins)
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR: Path = Path(__file__).resolve().parent.parent


class PortfolioConfig(BaseSettings):
    """Main configuration for the Art Portfolio API.

    Attributes
    ----------
    Storage:
        data_file : Path
            JSON document holding the whole artwork collection
        uploads_dir : Path
            Directory where uploaded images are written and served from
        templates_dir : Path
            Directory containing the ``index.html`` documentation page

    Uploads:
        max_upload_bytes : int | None
            Maximum accepted image size in bytes (``None`` disables the limit)

    Listing:
        default_page_limit : int
            Page size used when ``GET /artworks`` receives no usable ``limit``

    Server:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Listening port (``PORT`` is accepted as an alias)
        allowed_origins : str
            Comma-separated CORS allow-list, ``*`` for any origin
        log_level : str
            Root logging level used by :func:`artportfolio.api.main.main`

    Examples
    --------
    Create a custom configuration:

        >>> custom_config = PortfolioConfig(
        ...     data_file="/tmp/art/data.json",
        ...     uploads_dir="/tmp/art/uploads",
        ...     max_upload_bytes=None,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ARTPORTFOLIO_",
        env_parse_none_str="none",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Storage
    data_file: Path = Field(
        default=Path("data") / "data.json",
        description="JSON document holding the artwork collection",
    )
    uploads_dir: Path = Field(
        default=Path("uploads"),
        description="Directory for uploaded artwork images",
    )
    templates_dir: Path = Field(
        default=PACKAGE_DIR / "templates",
        description="Directory containing the documentation page",
    )

    # Uploads
    max_upload_bytes: int | None = Field(
        default=5 * 1024 * 1024,
        description="Maximum image size in bytes (None for unlimited)",
        gt=0,
    )

    # Listing
    default_page_limit: int = Field(
        default=10,
        description="Default page size for GET /artworks",
        ge=1,
    )

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=3000,
        description="Server port",
        ge=1,
        le=65535,
        validation_alias=AliasChoices("ARTPORTFOLIO_SERVER_PORT", "PORT"),
    )
    allowed_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
        validation_alias=AliasChoices("ARTPORTFOLIO_ALLOWED_ORIGINS", "ALLOWED_ORIGINS"),
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Split ``allowed_origins`` into the list CORSMiddleware expects.

        Blank entries are dropped; an empty allow-list falls back to ``["*"]``.
        """
        origins = [origin.strip() for origin in self.allowed_origins.split(",")]
        origins = [origin for origin in origins if origin]
        return origins or ["*"]


# Global configuration instance
config = PortfolioConfig()
