"""Gemini Image Generator - generate and edit images with Google Gemini and save them to disk."""

__version__ = "1.0.0"

from gemini_image.core.config import GeminiImageConfig, config
from gemini_image.core.errors import ErrorKind, ImageToolError
from gemini_image.core.image_service import ImageData, ImageService, SaveOptions

__all__ = [
    "ErrorKind",
    "GeminiImageConfig",
    "ImageData",
    "ImageService",
    "ImageToolError",
    "SaveOptions",
    "config",
]
