"""Output path resolution for saved images.

Callers pass an optional output hint that may name either a directory or a
file.  :func:`resolve_output_path` decides which, using the following rules
in order:

1. No hint: save ``filename`` in the base directory (the current working
   directory unless one is given).
2. Hint ends with a path separator (``out/``): it is a directory.
3. Hint has no extension and already exists on disk as a directory: it is a
   directory.
4. Otherwise the hint is the literal target file, extension included.

Rule 4 also applies to extension-less hints that do not exist yet, so
``--output renders`` writes a file called ``renders`` rather than creating a
``renders/`` directory.  Pass ``renders/`` to get directory semantics.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from gemini_image.core.errors import ErrorKind, ImageToolError

logger = logging.getLogger(__name__)

_SEPARATORS = tuple({os.sep, os.altsep or os.sep, "/"})


def _absolute(path: Path, base_dir: Path) -> Path:
    if not path.is_absolute():
        path = base_dir / path
    return Path(os.path.normpath(path))


def is_directory_hint(output_path: str, resolved: Path) -> bool:
    """Return True if ``output_path`` should be treated as a directory."""
    if output_path.endswith(_SEPARATORS):
        return True
    return not resolved.suffix and resolved.is_dir()


def resolve_output_path(
    output_path: str | os.PathLike[str] | None,
    filename: str,
    base_dir: Path | None = None,
) -> Path:
    """Resolve the absolute path an image will be written to.

    This function does not touch the filesystem except to check whether an
    extension-less hint is an existing directory.  Parent directories are
    created later by :func:`ensure_parent_directory`.

    Args:
        output_path: Optional file or directory hint.  ``~`` is expanded and
            relative hints are resolved against ``base_dir``.
        filename: Derived filename, used when the hint is a directory or
            absent.
        base_dir: Directory for relative hints.  Defaults to the current
            working directory.

    Returns:
        Absolute, normalised path.
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()

    if output_path is None or str(output_path) == "":
        return _absolute(Path(filename), base)

    hint = os.fspath(output_path)
    resolved = _absolute(Path(hint).expanduser(), base)

    if is_directory_hint(hint, resolved):
        return resolved / filename
    return resolved


def ensure_parent_directory(path: Path) -> Path:
    """Create ``path``'s parent directory (and its parents) if missing.

    Safe to call concurrently: a directory created by another caller in the
    meantime is not an error.

    Raises:
        ImageToolError: ``IO_FAILURE`` if the directory cannot be created.
    """
    parent = path.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ImageToolError(
            ErrorKind.IO_FAILURE,
            f"Could not create output directory: {parent}",
            {"path": str(parent), "stage": "mkdir", "cause": str(e)},
        ) from e
    return parent
