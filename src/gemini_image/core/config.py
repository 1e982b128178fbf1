"""Configuration management for the Gemini Image Generator.

This module provides centralized configuration management using Pydantic Settings.
Configuration is loaded from environment variables with the GEMINI_IMAGE_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (GEMINI_IMAGE_* prefix)
2. .env file in the working directory
3. Default values defined in GeminiImageConfig

The Google API key is the one exception to the prefix rule: it is read from
``GOOGLE_API_KEY`` (the variable Google's own tooling uses) or from
``GEMINI_IMAGE_GOOGLE_API_KEY``.

Example .env file:
    GOOGLE_API_KEY=your-key-here
    GEMINI_IMAGE_MODEL=gemini-2.5-flash-image-preview
    GEMINI_IMAGE_LOG_LEVEL=DEBUG

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time and
is used by the entry points (CLI, MCP server, HTTP server). Business logic
never reads it directly: the entry points hand it to
:func:`gemini_image.core.service_factory.create_services`, which is the only
place the API key is consumed.

Usage Example
-------------
    from gemini_image.core.config import config
    from gemini_image.core.service_factory import create_services

    services = create_services(config)

See Also
--------
- GeminiImageConfig: Full configuration class documentation
- gemini_image.core.service_factory: Where the API key is validated
"""

import logging
import sys
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AspectRatio = Literal["1:1", "16:9", "9:16", "4:3", "3:4"]
WatermarkPosition = Literal["top-left", "top-right", "bottom-left", "bottom-right"]

DEFAULT_MODEL = "gemini-2.5-flash-image-preview"


class GeminiImageConfig(BaseSettings):
    """Main configuration for the Gemini Image Generator.

    Attributes
    ----------
    Remote Model Settings:
        google_api_key : str | None
            API key for the Gemini API. Read from GOOGLE_API_KEY.
        model : str
            Gemini model used for generation and editing

    Generation Defaults:
        default_aspect_ratio : AspectRatio
            Aspect ratio requested when the caller does not supply one
        default_watermark_position : WatermarkPosition
            Corner used when a watermark is given without a position

    HTTP Server Settings:
        server_host : str
            Bind address for ``gemini-image-server``
        server_port : int
            Port for ``gemini-image-server`` (1024-65535)

    Logging:
        log_level : str
            Root log level configured by the entry points

    Notes
    -----
    - A missing API key is not a validation error here; it is reported by the
      service factory so that commands such as ``--help`` work without a key.
    - Configuration is immutable after initialization.

    Examples
    --------
        >>> custom_config = GeminiImageConfig(
        ...     google_api_key="test-key",
        ...     model="gemini-2.5-flash-image",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GEMINI_IMAGE_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Remote model settings
    google_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_API_KEY", "GEMINI_IMAGE_GOOGLE_API_KEY"),
        description="API key for the Gemini API",
    )
    model: str = Field(
        default=DEFAULT_MODEL,
        description="Gemini model used for image generation and editing",
    )

    # Generation defaults
    default_aspect_ratio: AspectRatio = Field(
        default="1:1",
        description="Aspect ratio used when none is requested",
    )
    default_watermark_position: WatermarkPosition = Field(
        default="bottom-right",
        description="Watermark corner used when none is requested",
    )

    # HTTP server settings
    server_host: str = Field(
        default="127.0.0.1",
        description="Server bind address",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level for the entry points (logs go to stderr)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


# Global configuration instance, loaded from GEMINI_IMAGE_* variables and .env.
config = GeminiImageConfig()


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout belongs to the MCP protocol and CLI output."""
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
