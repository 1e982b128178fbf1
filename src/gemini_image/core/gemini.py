"""Gemini request dispatch.

:class:`GeminiService` turns a description (plus optional style, aspect ratio
and reference images) into a single ``generate_content`` call and extracts the
first inline image from the response.  Editing is generation with the source
image attached as context.

The ``google.genai`` client is passed in by the caller rather than built from
environment variables here; see :mod:`gemini_image.core.service_factory`.
Any object exposing ``models.generate_content(model=..., contents=...,
config=...)`` works, which is how the tests substitute a fake.

Usage Example
-------------
    from google import genai

    service = GeminiService(genai.Client(api_key="..."))
    image = service.generate_image("a lighthouse at dusk", aspect_ratio="16:9")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Sequence

from google.genai import types

from gemini_image.core.config import DEFAULT_MODEL
from gemini_image.core.errors import ErrorKind, ImageToolError, not_found
from gemini_image.core.image_service import ImageData

logger = logging.getLogger(__name__)

CONTEXT_MIME_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}
DEFAULT_CONTEXT_MIME_TYPE = "image/png"

_UNFILTERED_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def build_generation_prompt(description: str, aspect_ratio: str = "1:1", style: str | None = None) -> str:
    """Compose the text prompt sent for a generation request."""
    prompt = f"Generate an image with the following description: {description}"
    prompt += f" The image should have an aspect ratio of {aspect_ratio}."
    if style:
        prompt += f" The style should be {style}."
    return prompt


def build_edit_prompt(description: str) -> str:
    """Compose the text prompt sent for an edit request."""
    return (
        "Edit the provided image according to the following instructions: "
        f"{description} Keep everything that the instructions do not mention unchanged."
    )


def mime_type_for_path(path: Path) -> str:
    return CONTEXT_MIME_TYPES.get(path.suffix.lower(), DEFAULT_CONTEXT_MIME_TYPE)


def load_image_part(image_path: str | os.PathLike[str]) -> types.Part:
    """Read an image file into an inline request part.

    Raises:
        ImageToolError: ``NOT_FOUND`` if the file does not exist,
            ``IO_FAILURE`` if it cannot be read.
    """
    path = Path(image_path).expanduser().resolve()
    if not path.is_file():
        raise not_found(f"Context image not found: {path}", path=str(path))
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageToolError(
            ErrorKind.IO_FAILURE,
            f"Could not read context image: {path}",
            {"path": str(path), "cause": str(e)},
        ) from e
    return types.Part.from_bytes(data=data, mime_type=mime_type_for_path(path))


def safety_settings() -> list[types.SafetySetting]:
    """Disable Gemini's content blocking for every adjustable harm category."""
    return [
        types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
        for category in _UNFILTERED_CATEGORIES
    ]


def extract_image(response: Any) -> ImageData:
    """Return the first inline image of the first candidate in ``response``.

    Raises:
        ImageToolError: ``UPSTREAM_FAILURE`` if the response holds no
            candidate content or no inline image.
    """
    candidates = getattr(response, "candidates", None) or []
    content = getattr(candidates[0], "content", None) if candidates else None
    parts = getattr(content, "parts", None) if content else None
    if not parts:
        finish_reason = getattr(candidates[0], "finish_reason", None) if candidates else None
        raise ImageToolError(
            ErrorKind.UPSTREAM_FAILURE,
            "Could not generate image",
            {"stage": "extract", "finish_reason": str(finish_reason)},
        )

    for part in parts:
        inline = getattr(part, "inline_data", None)
        if inline is None or not inline.data or not inline.mime_type:
            continue
        if isinstance(inline.data, str):
            return ImageData(base64=inline.data, mime_type=inline.mime_type)
        return ImageData.from_bytes(inline.data, inline.mime_type)

    raise ImageToolError(
        ErrorKind.UPSTREAM_FAILURE,
        "No image found in response",
        {"stage": "extract"},
    )


class GeminiService:
    """Sends generation and edit requests to a Gemini image model."""

    def __init__(self, client: Any, model: str = DEFAULT_MODEL) -> None:
        """Initialise the service.

        Args:
            client: A ``google.genai.Client`` (or compatible fake).
            model: Gemini model name.
        """
        self._client = client
        self.model = model

    def _request(self, contents: list[Any]) -> ImageData:
        logger.info(f"Requesting image from {self.model} ({len(contents) - 1} context image(s))")
        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(safety_settings=safety_settings()),
            )
        except Exception as e:
            raise ImageToolError(
                ErrorKind.UPSTREAM_FAILURE,
                "Gemini request failed",
                {
                    "stage": "generate_content",
                    "model": self.model,
                    "cause": str(e),
                    "cause_name": type(e).__name__,
                },
            ) from e
        return extract_image(response)

    def generate_image(
        self,
        description: str,
        aspect_ratio: str = "1:1",
        style: str | None = None,
        images: Sequence[str] | None = None,
    ) -> ImageData:
        """Generate an image, optionally guided by reference images.

        Args:
            description: What to draw.
            aspect_ratio: Requested aspect ratio, e.g. ``"16:9"``.
            style: Optional style hint.
            images: Paths of context images to attach.

        Returns:
            The first image in the response.

        Raises:
            ImageToolError: ``NOT_FOUND`` for a missing context image,
                ``UPSTREAM_FAILURE`` if the request fails or returns no image.
        """
        contents: list[Any] = [build_generation_prompt(description, aspect_ratio, style)]
        contents.extend(load_image_part(path) for path in images or ())
        return self._request(contents)

    def edit_image(self, image_path: str, description: str) -> ImageData:
        """Edit an existing image according to ``description``.

        Raises:
            ImageToolError: ``NOT_FOUND`` if ``image_path`` does not exist,
                ``UPSTREAM_FAILURE`` if the request fails or returns no image.
        """
        source = load_image_part(image_path)
        return self._request([build_edit_prompt(description), source])
