"""Generate and edit operations shared by the MCP server, CLI and HTTP API.

Each handler validates its arguments, asks :class:`GeminiService` for an
image and saves it with :class:`ImageService`, returning the absolute path of
the written file.  Failures are raised as
:class:`~gemini_image.core.errors.ImageToolError`; surfaces decide how to
present them.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from gemini_image.api.models import EditImageArgs, GenerateImageArgs
from gemini_image.core.errors import ImageToolError, invalid_input
from gemini_image.core.gemini import GeminiService
from gemini_image.core.image_service import ImageService, SaveOptions

logger = logging.getLogger(__name__)

GENERATE_IMAGE_TOOL = "generate_image"
EDIT_IMAGE_TOOL = "edit_image"


def validation_failure(error: ValidationError) -> ImageToolError:
    """Convert a pydantic validation error into an ``INVALID_INPUT`` error."""
    details = {}
    for issue in error.errors():
        field = ".".join(str(part) for part in issue["loc"]) or "arguments"
        details[field] = issue["msg"]
    first_field, first_message = next(iter(details.items()), ("arguments", "invalid"))
    return invalid_input(f"Invalid {first_field}: {first_message}", **details)


def handle_generate_image(
    args: GenerateImageArgs,
    gemini_service: GeminiService,
    image_service: ImageService,
) -> str:
    """Generate an image from ``args`` and save it.

    Returns:
        Absolute path of the saved image.

    Raises:
        ImageToolError: ``INVALID_INPUT`` for a blank description, or any
            error raised by the dispatcher or the image service.
    """
    description = args.description.strip()
    if not description:
        raise invalid_input("Description is required", field="description")

    logger.info(f"generate_image: {description[:80]!r} ({len(args.images)} context image(s))")
    image_data = gemini_service.generate_image(
        description,
        aspect_ratio=args.aspect_ratio,
        style=args.style,
        images=args.images,
    )
    return image_service.save_image(
        image_data,
        SaveOptions(
            output_path=args.output_path,
            description=description,
            watermark_path=args.watermark_path,
            watermark_position=args.watermark_position,
        ),
    )


def handle_edit_image(
    args: EditImageArgs,
    gemini_service: GeminiService,
    image_service: ImageService,
) -> str:
    """Edit the image at ``args.image_path`` and save the result.

    Returns:
        Absolute path of the saved image.

    Raises:
        ImageToolError: ``INVALID_INPUT`` for a blank path or description,
            ``NOT_FOUND`` if the source image does not exist, or any error
            raised by the dispatcher or the image service.
    """
    image_path = args.image_path.strip()
    if not image_path:
        raise invalid_input("Image path is required", field="image_path")
    description = args.description.strip()
    if not description:
        raise invalid_input("Description is required", field="description")

    logger.info(f"edit_image: {image_path} <- {description[:80]!r}")
    image_data = gemini_service.edit_image(image_path, description)
    return image_service.save_image(
        image_data,
        SaveOptions(
            output_path=args.output_path,
            description=description,
            watermark_path=args.watermark_path,
            watermark_position=args.watermark_position,
        ),
    )
