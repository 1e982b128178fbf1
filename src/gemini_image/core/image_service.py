"""Persistence of generated images.

:class:`ImageService` is the single entry point for writing an image returned
by the Gemini API to disk.  It combines the filename, path and watermark
helpers into one pipeline:

1. Derive a filename from the description and declared MIME type.
2. Resolve the final path from the optional output hint.
3. Decode the base64 payload.
4. Apply the watermark if one was given *and* the file exists.  A missing
   watermark file is skipped silently; watermarking is optional.
5. Create the parent directory if needed.
6. Write the bytes, overwriting any existing file.
7. Return the absolute path.

Usage Example
-------------
    from gemini_image.core.image_service import ImageData, ImageService, SaveOptions

    service = ImageService()
    path = service.save_image(
        ImageData(base64=payload, mime_type="image/png"),
        SaveOptions(output_path="renders/", description="a red fox"),
    )
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from gemini_image.core.config import WatermarkPosition
from gemini_image.core.errors import ErrorKind, ImageToolError
from gemini_image.core.naming import derive_filename
from gemini_image.core.paths import ensure_parent_directory, resolve_output_path
from gemini_image.core.watermark import DEFAULT_POSITION, apply_watermark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageData:
    """An encoded image as returned by the Gemini API.

    Attributes:
        base64: Image bytes, base64-encoded.
        mime_type: Declared encoding, e.g. ``"image/png"``.
    """

    base64: str
    mime_type: str

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "ImageData":
        return cls(base64=base64.b64encode(data).decode("ascii"), mime_type=mime_type)


@dataclass
class SaveOptions:
    """Per-call options for :meth:`ImageService.save_image`.

    Attributes:
        output_path: File or directory hint.  None saves to the working
            directory.
        description: Text used to name the file.
        watermark_path: Optional watermark image.
        watermark_position: Corner for the watermark.
    """

    output_path: str | None = None
    description: str | None = None
    watermark_path: str | None = None
    watermark_position: WatermarkPosition = DEFAULT_POSITION


class ImageService:
    """Writes :class:`ImageData` to disk with optional watermarking."""

    def __init__(
        self,
        base_dir: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialise the service.

        Args:
            base_dir: Directory used for relative output paths.  None means
                the current working directory at save time.
            clock: Returns the timestamp embedded in derived filenames.
                Defaults to the current UTC time.
        """
        self._base_dir = base_dir
        self._clock = clock

    def save_image(self, image_data: ImageData, options: SaveOptions | None = None) -> str:
        """Persist an image and return the absolute path it was written to.

        Args:
            image_data: Encoded image and declared MIME type.
            options: Naming, location and watermark options.

        Returns:
            Absolute path of the written file.

        Raises:
            ImageToolError: ``DECODE_FAILURE`` for an invalid base64 payload
                or an unreadable watermark, ``IO_FAILURE`` if the directory
                cannot be created or the file cannot be written.
        """
        options = options or SaveOptions()

        now = self._clock() if self._clock else None
        filename = derive_filename(options.description, image_data.mime_type, now)
        final_path = resolve_output_path(options.output_path, filename, self._base_dir)

        try:
            # Line-wrapped payloads (MIME style) are accepted; anything else must be base64.
            buffer = base64.b64decode("".join(image_data.base64.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageToolError(
                ErrorKind.DECODE_FAILURE,
                "Image payload is not valid base64",
                {"stage": "decode", "cause": str(e)},
            ) from e

        if options.watermark_path:
            watermark_file = Path(options.watermark_path).expanduser()
            if watermark_file.exists():
                buffer = apply_watermark(buffer, watermark_file, options.watermark_position)
            else:
                logger.debug(f"Watermark not found, skipping: {watermark_file}")

        ensure_parent_directory(final_path)
        try:
            final_path.write_bytes(buffer)
        except OSError as e:
            raise ImageToolError(
                ErrorKind.IO_FAILURE,
                f"Could not write image: {final_path}",
                {"path": str(final_path), "stage": "write", "cause": str(e)},
            ) from e

        logger.info(f"Image saved to {final_path}")
        return str(final_path)
