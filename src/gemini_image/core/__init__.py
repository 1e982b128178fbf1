"""Core functionality for image generation and persistence.

- **GeminiImageConfig / config**: Configuration using Pydantic Settings
- **ImageService**: Saves generated images (naming, paths, watermark)
- **GeminiService**: Sends generation and edit requests to Gemini
- **create_services**: Builds both services from a config value
- **ImageToolError / ErrorKind**: The single error type used throughout

Architecture Overview
---------------------
1. **Configuration Layer** (config.py): GEMINI_IMAGE_* environment variables
   and .env, plus GOOGLE_API_KEY.
2. **Persistence Layer** (naming.py, paths.py, watermark.py,
   image_service.py): filename derivation, output path resolution, watermark
   compositing and the save pipeline that combines them.
3. **Dispatch Layer** (gemini.py, service_factory.py): prompt construction,
   context images, the Gemini call and response extraction.

Usage Example
-------------
    from gemini_image.core import config, create_services

    services = create_services(config)
    image = services.gemini_service.generate_image("a lighthouse at dusk")
    path = services.image_service.save_image(image)
"""

from gemini_image.core.config import GeminiImageConfig, config
from gemini_image.core.errors import ErrorKind, ImageToolError, MissingConfigurationError
from gemini_image.core.gemini import GeminiService
from gemini_image.core.image_service import ImageData, ImageService, SaveOptions
from gemini_image.core.service_factory import GeminiImageServices, create_services

__all__ = [
    "ErrorKind",
    "GeminiImageConfig",
    "GeminiImageServices",
    "GeminiService",
    "ImageData",
    "ImageService",
    "ImageToolError",
    "MissingConfigurationError",
    "SaveOptions",
    "config",
    "create_services",
]
