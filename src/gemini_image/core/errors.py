"""Error types shared by the core pipeline and every surface.

All failures raised by the Gemini Image Generator are instances of
:class:`ImageToolError`.  Each carries an :class:`ErrorKind` so that callers
(the CLI, the MCP server, the HTTP API) can branch on the failure category
without matching on message text, plus a ``data`` mapping with diagnostic
context such as the failing path, the stage, or the underlying cause.

Kinds
-----
========================  ===================================================
Kind                      Raised when
========================  ===================================================
``INVALID_INPUT``         Required arguments are missing or empty.
``NOT_FOUND``             A referenced input image does not exist.
``IO_FAILURE``            Directory creation or a file write/read fails.
``DECODE_FAILURE``        Image bytes (base64 or pixel data) cannot be read.
``UPSTREAM_FAILURE``      The Gemini API fails or returns no image.
``INTERNAL``              Anything unexpected (wrapped by ensure_tool_error).
========================  ===================================================
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure categories for :class:`ImageToolError`."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    IO_FAILURE = "io_failure"
    DECODE_FAILURE = "decode_failure"
    UPSTREAM_FAILURE = "upstream_failure"
    INTERNAL = "internal"


class ImageToolError(Exception):
    """Structured error raised by the image pipeline.

    Attributes:
        kind: Failure category.
        message: Human-readable message, suitable for showing to a user.
        data: Diagnostic context.  ``cause`` holds the underlying error
            message when this error wraps another exception.
    """

    def __init__(self, kind: ErrorKind, message: str, data: dict[str, Any] | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.data: dict[str, Any] = dict(data or {})

    @property
    def is_client_error(self) -> bool:
        """True when the caller, not the system, is at fault."""
        return self.kind in (ErrorKind.INVALID_INPUT, ErrorKind.NOT_FOUND)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "data": self.data}

    def __repr__(self) -> str:
        return f"ImageToolError(kind={self.kind.value!r}, message={self.message!r})"


class MissingConfigurationError(Exception):
    """Raised when a required setting (such as the API key) is absent."""

    def __init__(self, variable_name: str):
        super().__init__(f"{variable_name} environment variable is required")
        self.variable_name = variable_name


def invalid_input(message: str, **data: Any) -> ImageToolError:
    return ImageToolError(ErrorKind.INVALID_INPUT, message, data)


def not_found(message: str, **data: Any) -> ImageToolError:
    return ImageToolError(ErrorKind.NOT_FOUND, message, data)


def _safe_serialize(value: Any) -> str:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return str(value)
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        return f"[unserializable:{e}]"


def ensure_tool_error(
    error: BaseException | Any,
    fallback_kind: ErrorKind,
    fallback_message: str,
    extra: dict[str, Any] | None = None,
) -> ImageToolError:
    """Normalise any raised value into an :class:`ImageToolError`.

    An existing ``ImageToolError`` is returned with ``extra`` merged into its
    data (existing keys are overwritten by ``extra``).  Anything else is
    wrapped in a new error of ``fallback_kind`` whose data records the
    original message as ``cause`` and, for exception subclasses, the class
    name as ``cause_name``.

    Args:
        error: The caught exception (or any other raised value).
        fallback_kind: Kind to use when ``error`` is not already structured.
        fallback_message: Message to use when ``error`` is not already
            structured.
        extra: Additional diagnostic context, e.g. ``{"tool": "generate_image"}``.

    Returns:
        An ``ImageToolError``.  The original error is kept as ``__cause__``.
    """
    if isinstance(error, ImageToolError):
        if not extra:
            return error
        merged = ImageToolError(error.kind, error.message, {**error.data, **extra})
        merged.__cause__ = error.__cause__
        merged.__traceback__ = error.__traceback__
        return merged

    data: dict[str, Any] = dict(extra or {})
    if isinstance(error, BaseException):
        data["cause"] = str(error)
        name = type(error).__name__
        if name != "Exception":
            data["cause_name"] = name
    else:
        data["cause"] = _safe_serialize(error)

    wrapped = ImageToolError(fallback_kind, fallback_message, data)
    if isinstance(error, BaseException):
        wrapped.__cause__ = error
    return wrapped
