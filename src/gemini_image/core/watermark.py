"""Watermark compositing for generated images.

The watermark is scaled to fit inside a square whose side is a quarter of the
primary image's width, never enlarged beyond its native size, and placed in
one of the four corners with padding of 3% of the primary image's width::

    1000x1000 image, 400x200 watermark, bottom-right
        box      = 250 -> watermark resized to 250x125
        padding  = 30
        offset   = (1000 - 250 - 30, 1000 - 125 - 30) = (720, 845)

The watermark is alpha-blended over the image ("source over"), so transparent
regions of the watermark leave the image untouched.  The result is encoded in
the primary image's original format.

Usage Example
-------------
    from gemini_image.core.watermark import apply_watermark

    marked = apply_watermark(png_bytes, "logo.png", position="top-left")
"""

from __future__ import annotations

import io
import logging
import math
import os
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from gemini_image.core.config import WatermarkPosition
from gemini_image.core.errors import ErrorKind, ImageToolError

logger = logging.getLogger(__name__)

WATERMARK_SCALE = 0.25
PADDING_SCALE = 0.03
FALLBACK_SIZE = (1024, 1024)
DEFAULT_POSITION: WatermarkPosition = "bottom-right"
WATERMARK_POSITIONS: tuple[WatermarkPosition, ...] = (
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
)

# Formats Pillow can write back out; anything else is re-encoded as PNG.
_OUTPUT_FORMATS = {"PNG", "JPEG", "WEBP"}


def compute_watermark_box(image_width: int) -> int:
    """Side of the square the watermark must fit inside."""
    return math.floor(image_width * WATERMARK_SCALE)


def compute_padding(image_width: int) -> int:
    """Distance between the watermark and the image edges."""
    return math.floor(image_width * PADDING_SCALE)


def compute_watermark_offset(
    image_size: tuple[int, int],
    watermark_size: tuple[int, int],
    position: WatermarkPosition = DEFAULT_POSITION,
) -> tuple[int, int]:
    """Return the ``(left, top)`` pixel offset of the watermark.

    Args:
        image_size: ``(width, height)`` of the primary image.
        watermark_size: ``(width, height)`` of the already resized watermark.
        position: Target corner.

    Raises:
        ImageToolError: ``INVALID_INPUT`` for an unknown position.
    """
    if position not in WATERMARK_POSITIONS:
        raise ImageToolError(
            ErrorKind.INVALID_INPUT,
            f"Invalid watermark position: {position}",
            {"expected": ", ".join(WATERMARK_POSITIONS)},
        )

    image_width, image_height = image_size
    mark_width, mark_height = watermark_size
    padding = compute_padding(image_width)

    vertical, horizontal = position.split("-")
    left = image_width - mark_width - padding if horizontal == "right" else padding
    top = image_height - mark_height - padding if vertical == "bottom" else padding
    return left, top


def fit_inside(watermark: Image.Image, box: int) -> Image.Image:
    """Shrink ``watermark`` to fit a ``box`` x ``box`` square, keeping its aspect ratio.

    Images already inside the box are returned at their native size.  The box
    is at least 1x1, so images narrower than four pixels still get a 1px mark.
    """
    box = max(box, 1)
    resized = watermark.copy()
    resized.thumbnail((box, box), Image.Resampling.LANCZOS)
    return resized


def _image_size(image: Image.Image) -> tuple[int, int]:
    width, height = image.size
    if not width or not height:
        logger.warning(
            f"Image dimensions unavailable ({width}x{height}), "
            f"assuming {FALLBACK_SIZE[0]}x{FALLBACK_SIZE[1]}"
        )
        return FALLBACK_SIZE
    return width, height


def _open_image(data: bytes | Path, label: str) -> Image.Image:
    source = io.BytesIO(data) if isinstance(data, bytes) else data
    try:
        image = Image.open(source)
        image.load()
    except FileNotFoundError as e:
        raise ImageToolError(
            ErrorKind.NOT_FOUND,
            f"{label.capitalize()} not found: {data}",
            {"path": str(data)},
        ) from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        data_info = {"path": str(data)} if isinstance(data, Path) else {}
        raise ImageToolError(
            ErrorKind.DECODE_FAILURE,
            f"Could not decode {label}",
            {**data_info, "stage": "watermark", "cause": str(e)},
        ) from e
    return image


def apply_watermark(
    image_bytes: bytes,
    watermark_path: str | os.PathLike[str],
    position: WatermarkPosition = DEFAULT_POSITION,
) -> bytes:
    """Composite a watermark image onto encoded image bytes.

    Args:
        image_bytes: Encoded primary image (PNG, JPEG or WebP).
        watermark_path: Path to the watermark image.  Callers are expected to
            have checked that it exists.
        position: Corner to place the watermark in.

    Returns:
        The composited image, encoded in the primary image's format.

    Raises:
        ImageToolError: ``DECODE_FAILURE`` if either image cannot be decoded,
            ``INVALID_INPUT`` for an unknown position.
    """
    watermark_file = Path(watermark_path).expanduser().resolve()

    primary = _open_image(image_bytes, "image")
    output_format = (primary.format or "PNG").upper()
    if output_format not in _OUTPUT_FORMATS:
        output_format = "PNG"

    image_width, image_height = _image_size(primary)
    box = compute_watermark_box(image_width)

    with _open_image(watermark_file, "watermark image") as raw_mark:
        mark = fit_inside(raw_mark.convert("RGBA"), box)

    left, top = compute_watermark_offset((image_width, image_height), mark.size, position)
    logger.debug(
        f"Placing {mark.width}x{mark.height} watermark at ({left}, {top}) "
        f"on {image_width}x{image_height} image ({position})"
    )

    base = primary.convert("RGBA")
    # paste() clips offsets outside the canvas and copies alpha unchanged;
    # alpha_composite() then blends the layer source-over.
    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    layer.paste(mark, (left, top))
    composited = Image.alpha_composite(base, layer)

    if output_format == "JPEG":
        composited = composited.convert("RGB")

    buffer = io.BytesIO()
    composited.save(buffer, format=output_format)
    return buffer.getvalue()
