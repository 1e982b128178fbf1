"""Pydantic argument models for the generate and edit operations.

These models are shared by every surface: the MCP tools, the CLI and the HTTP
API all build one of them and hand it to :mod:`gemini_image.api.tools`.
FastAPI also uses them for request validation and OpenAPI documentation.

Field names are snake_case; camelCase aliases (``outputPath``,
``watermarkPath`` ...) are accepted as well for JSON clients that send
camelCase keys.

An omitted ``aspect_ratio`` or ``watermark_position`` takes the configured
default (``GEMINI_IMAGE_DEFAULT_ASPECT_RATIO`` /
``GEMINI_IMAGE_DEFAULT_WATERMARK_POSITION``) when the model is validated.

Models
------
GenerateImageArgs
    Text-to-image request, optionally guided by context images.
EditImageArgs
    Instruction-based edit of an existing image.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from gemini_image.core.config import AspectRatio, WatermarkPosition, config


def _default_aspect_ratio() -> AspectRatio:
    return config.default_aspect_ratio


def _default_watermark_position() -> WatermarkPosition:
    return config.default_watermark_position


class _ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class GenerateImageArgs(_ToolArgs):
    """Arguments for ``generate_image``.

    Attributes:
        description: Detailed description of the image to create.
        aspect_ratio: Requested aspect ratio.  Defaults to the configured
            default aspect ratio.
        style: Optional style hint ("minimalist", "watercolor", ...).
        output_path: File or directory to save to.  Defaults to the current
            directory.
        watermark_path: Optional watermark image overlaid in a corner.
        watermark_position: Corner for the watermark.
        images: Paths of images used as visual context.
    """

    description: str = Field(
        ...,
        description=(
            "Detailed description of the image to generate. Include details about "
            "colors, style and composition for better results."
        ),
    )
    aspect_ratio: AspectRatio = Field(
        default_factory=_default_aspect_ratio,
        validation_alias=AliasChoices("aspect_ratio", "aspectRatio"),
        description="Aspect ratio of the image. Defaults to the configured default (1:1).",
    )
    style: str | None = Field(
        default=None,
        description='Additional style for the image, e.g. "minimalist", "colorful", "artistic".',
    )
    output_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("output_path", "outputPath"),
        description=(
            "Where to save the image. A folder (ending in '/') or a complete path with "
            "filename. Defaults to the current directory."
        ),
    )
    watermark_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("watermark_path", "watermarkPath"),
        description="Path to a watermark image to overlay in a corner.",
    )
    watermark_position: WatermarkPosition = Field(
        default_factory=_default_watermark_position,
        validation_alias=AliasChoices("watermark_position", "watermarkPosition"),
        description="Corner for the watermark when watermark_path is given.",
    )
    images: list[str] = Field(
        default_factory=list,
        description="Image file paths to use as visual context (absolute or relative).",
    )


class EditImageArgs(_ToolArgs):
    """Arguments for ``edit_image``.

    Attributes:
        image_path: Image to edit.
        description: Instructions describing the changes.
        output_path: File or directory to save to.
        watermark_path: Optional watermark image.
        watermark_position: Corner for the watermark.
    """

    image_path: str = Field(
        ...,
        validation_alias=AliasChoices("image_path", "imagePath"),
        description="Path to the image file to edit (absolute or relative).",
    )
    description: str = Field(
        ...,
        description=(
            "Description of the changes to make. Be specific about what to modify, "
            "add, remove or enhance."
        ),
    )
    output_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("output_path", "outputPath"),
        description="Where to save the edited image. Defaults to the current directory.",
    )
    watermark_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("watermark_path", "watermarkPath"),
        description="Path to a watermark image to overlay in a corner.",
    )
    watermark_position: WatermarkPosition = Field(
        default_factory=_default_watermark_position,
        validation_alias=AliasChoices("watermark_position", "watermarkPosition"),
        description="Corner for the watermark when watermark_path is given.",
    )
