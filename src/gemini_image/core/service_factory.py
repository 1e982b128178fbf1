"""Construction of the Gemini and image services from configuration.

This is the only place the API key is read, and it is read from the
:class:`GeminiImageConfig` value passed in rather than from the process
environment.  Entry points call :func:`create_services` once at startup;
tests construct :class:`GeminiService` directly with a fake client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from google import genai

from gemini_image.core.config import GeminiImageConfig
from gemini_image.core.errors import MissingConfigurationError
from gemini_image.core.gemini import GeminiService
from gemini_image.core.image_service import ImageService

logger = logging.getLogger(__name__)

API_KEY_VARIABLE = "GOOGLE_API_KEY"


@dataclass
class GeminiImageServices:
    gemini_service: GeminiService
    image_service: ImageService


def create_services(config: GeminiImageConfig) -> GeminiImageServices:
    """Build the services used by every surface.

    Args:
        config: Application configuration.

    Returns:
        A :class:`GeminiImageServices` bundle.

    Raises:
        MissingConfigurationError: If no API key is configured.
    """
    if not config.google_api_key:
        raise MissingConfigurationError(API_KEY_VARIABLE)

    client = genai.Client(api_key=config.google_api_key)
    logger.info(f"Gemini client initialised (model={config.model})")
    return GeminiImageServices(
        gemini_service=GeminiService(client, model=config.model),
        image_service=ImageService(),
    )
