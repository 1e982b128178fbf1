"""MCP stdio server exposing ``generate_image`` and ``edit_image`` tools.

The server speaks the Model Context Protocol over stdin/stdout, so all
logging goes to stderr.  Tool calls are synchronous: each runs the Gemini
request and the disk write to completion before returning the saved path.

Error reporting
---------------
Every failure is normalised with
:func:`~gemini_image.core.errors.ensure_tool_error` (tagged with the tool
name) and re-raised as an MCP ``ToolError``.  Client errors (invalid input,
missing files) are logged as warnings; anything else is logged as an error
with its traceback.

Usage
-----
CLI (installed entry point)::

    GOOGLE_API_KEY=... gemini-image-mcp

Direct invocation::

    python -m gemini_image.api.server
"""

from __future__ import annotations

import logging
import sys
from typing import Annotated, Any, Callable

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field, ValidationError

from gemini_image.api.models import EditImageArgs, GenerateImageArgs
from gemini_image.api.tools import (
    EDIT_IMAGE_TOOL,
    GENERATE_IMAGE_TOOL,
    handle_edit_image,
    handle_generate_image,
    validation_failure,
)
from gemini_image.core.config import AspectRatio, WatermarkPosition, config, configure_logging
from gemini_image.core.errors import (
    ErrorKind,
    ImageToolError,
    MissingConfigurationError,
    ensure_tool_error,
)
from gemini_image.core.service_factory import GeminiImageServices, create_services

logger = logging.getLogger(__name__)

SERVER_NAME = "gemini-image-mcp-server"

mcp = FastMCP(SERVER_NAME)

# Created on first use (or at startup by main()); tests install fakes with
# set_services().
_services: GeminiImageServices | None = None


def set_services(services: GeminiImageServices | None) -> None:
    global _services
    _services = services


def get_services() -> GeminiImageServices:
    """Return the shared services, creating them from the global config if needed.

    Raises:
        MissingConfigurationError: If no API key is configured.
    """
    global _services
    if _services is None:
        _services = create_services(config)
    return _services


def _given(**arguments: Any) -> dict[str, Any]:
    """Drop arguments the client left out so the model applies its defaults."""
    return {name: value for name, value in arguments.items() if value is not None}


def format_tool_error(error: ImageToolError) -> str:
    """Render an error as the text returned to the MCP client."""
    lines = [f"{error.kind.value}: {error.message}"]
    for key, value in error.data.items():
        lines.append(f"  {key}: {value}")
    return "\n".join(lines)


def run_tool(tool: str, call: Callable[[GeminiImageServices], str]) -> str:
    """Run a tool body, logging and normalising any failure.

    Raises:
        ToolError: Carrying the formatted :class:`ImageToolError`.
    """
    try:
        return call(get_services())
    except Exception as e:
        source = validation_failure(e) if isinstance(e, ValidationError) else e
        error = ensure_tool_error(source, ErrorKind.INTERNAL, "Tool execution failed", {"tool": tool})

        if error.is_client_error:
            logger.warning(f"[tools/call] Client error in {tool}: {error.message} {error.data}")
        else:
            logger.error(
                f"[tools/call] Internal error in {tool}: {error.message} {error.data}",
                exc_info=True,
            )
        raise ToolError(format_tool_error(error)) from e


@mcp.tool(
    name=GENERATE_IMAGE_TOOL,
    description=(
        "Create an image using Google Gemini AI from a text description, optionally "
        "providing one or more context images to guide the result. Returns the path "
        "of the saved image."
    ),
)
def generate_image(
    description: Annotated[str, Field(description=GenerateImageArgs.model_fields["description"].description)],
    aspect_ratio: Annotated[
        AspectRatio | None,
        Field(description=GenerateImageArgs.model_fields["aspect_ratio"].description),
    ] = None,
    style: Annotated[
        str | None, Field(description=GenerateImageArgs.model_fields["style"].description)
    ] = None,
    output_path: Annotated[
        str | None, Field(description=GenerateImageArgs.model_fields["output_path"].description)
    ] = None,
    watermark_path: Annotated[
        str | None, Field(description=GenerateImageArgs.model_fields["watermark_path"].description)
    ] = None,
    watermark_position: Annotated[
        WatermarkPosition | None,
        Field(description=GenerateImageArgs.model_fields["watermark_position"].description),
    ] = None,
    images: Annotated[
        list[str] | None, Field(description=GenerateImageArgs.model_fields["images"].description)
    ] = None,
) -> str:
    def call(services: GeminiImageServices) -> str:
        args = GenerateImageArgs(
            **_given(
                description=description,
                aspect_ratio=aspect_ratio,
                style=style,
                output_path=output_path,
                watermark_path=watermark_path,
                watermark_position=watermark_position,
                images=images,
            )
        )
        return handle_generate_image(args, services.gemini_service, services.image_service)

    return run_tool(GENERATE_IMAGE_TOOL, call)


@mcp.tool(
    name=EDIT_IMAGE_TOOL,
    description=(
        "Edit an existing image using Google Gemini AI based on text instructions. "
        "Returns the path of the saved image."
    ),
)
def edit_image(
    image_path: Annotated[str, Field(description=EditImageArgs.model_fields["image_path"].description)],
    description: Annotated[str, Field(description=EditImageArgs.model_fields["description"].description)],
    output_path: Annotated[
        str | None, Field(description=EditImageArgs.model_fields["output_path"].description)
    ] = None,
    watermark_path: Annotated[
        str | None, Field(description=EditImageArgs.model_fields["watermark_path"].description)
    ] = None,
    watermark_position: Annotated[
        WatermarkPosition | None,
        Field(description=EditImageArgs.model_fields["watermark_position"].description),
    ] = None,
) -> str:
    def call(services: GeminiImageServices) -> str:
        args = EditImageArgs(
            **_given(
                image_path=image_path,
                description=description,
                output_path=output_path,
                watermark_path=watermark_path,
                watermark_position=watermark_position,
            )
        )
        return handle_edit_image(args, services.gemini_service, services.image_service)

    return run_tool(EDIT_IMAGE_TOOL, call)


def main() -> None:
    """Start the MCP server on stdio.

    Exits with status 1 if the services cannot be created (for example when
    ``GOOGLE_API_KEY`` is not set).
    """
    configure_logging(config.log_level)
    try:
        get_services()
    except MissingConfigurationError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error: Failed to initialize services: {e}")
        sys.exit(1)

    logger.info(f"{SERVER_NAME} running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
