"""Filesystem-safe filenames for generated images.

Filenames are built from the image description and the current UTC time::

    A banana astronaut on Mars!  ->  A_banana_astronaut_on_Mars_2025-01-31T14-05-09.png

The description is reduced to ASCII letters, digits and whitespace (any
Unicode whitespace, NBSP included), whitespace runs between words become
single underscores, and the result is capped at
:data:`MAX_DESCRIPTION_LENGTH` characters.  When nothing survives (no
description, or one made only of punctuation/emoji) the literal ``"image"``
is used instead.

Leading and trailing whitespace is dropped rather than turned into
underscores, so ``"  lonely tree  "`` gives ``lonely_tree``, not
``_lonely_tree_``.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

MAX_DESCRIPTION_LENGTH = 50
FALLBACK_BASENAME = "image"
DEFAULT_EXTENSION = ".png"

# Declared MIME type -> file extension.  Anything else maps to DEFAULT_EXTENSION.
MIME_EXTENSIONS: dict[str, str] = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9\s]")
_WHITESPACE_RUN = re.compile(r"\s+")
TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"


def extension_for_mime_type(mime_type: str | None) -> str:
    """Map a declared MIME type to ``.png``, ``.jpg`` or ``.webp``."""
    if not mime_type:
        return DEFAULT_EXTENSION
    return MIME_EXTENSIONS.get(mime_type.strip().lower(), DEFAULT_EXTENSION)


def sanitize_description(description: str | None) -> str:
    """Reduce a free-text description to a safe filename stem.

    Args:
        description: Arbitrary user text, or None.

    Returns:
        At most ``MAX_DESCRIPTION_LENGTH`` characters from ``[A-Za-z0-9_]``,
        or ``"image"`` when nothing usable remains.
    """
    if not description:
        return FALLBACK_BASENAME

    # Output alphabet is [A-Za-z0-9_]; \s also keeps Unicode spaces such as NBSP.
    cleaned = _UNSAFE_CHARS.sub("", description).strip()
    cleaned = _WHITESPACE_RUN.sub("_", cleaned)[:MAX_DESCRIPTION_LENGTH]
    return cleaned or FALLBACK_BASENAME


def format_timestamp(now: datetime | None = None) -> str:
    """Format ``now`` (default: current UTC time) as ``YYYY-MM-DDTHH-MM-SS``."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def derive_filename(
    description: str | None,
    mime_type: str | None,
    now: datetime | None = None,
) -> str:
    """Build ``<stem>_<timestamp><extension>`` for a generated image.

    Never fails: empty or entirely symbolic descriptions fall back to
    ``"image"`` and unknown MIME types fall back to ``.png``.

    Args:
        description: Free-text description of the image.
        mime_type: Declared encoding returned with the image bytes.
        now: Timestamp to embed.  Naive datetimes are taken as UTC.

    Returns:
        A bare filename (no directory component).
    """
    stem = sanitize_description(description)
    return f"{stem}_{format_timestamp(now)}{extension_for_mime_type(mime_type)}"
