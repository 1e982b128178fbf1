"""Gemini Image Generator — FastAPI Application.

HTTP access to the same generate and edit operations that the MCP server and
the CLI expose.  Images are written to the server's filesystem and the saved
path is returned; no image bytes are sent back over HTTP.

Endpoints
---------
========  ====================  ==========================================
Method    Path                  Purpose
========  ====================  ==========================================
GET       ``/api/config``       Version, model, aspect ratios, positions
POST      ``/api/generate``     Generate an image and save it
POST      ``/api/edit``         Edit an image and save the result
========  ====================  ==========================================

Errors
------
:class:`~gemini_image.core.errors.ImageToolError` is mapped to an HTTP status
by kind (see :data:`STATUS_BY_KIND`) with a JSON body of the form
``{"kind": ..., "message": ..., "data": {...}}``.

Usage
-----
CLI (installed entry point)::

    gemini-image-server

Direct invocation::

    python -m gemini_image.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import get_args

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gemini_image import __version__
from gemini_image.api.models import EditImageArgs, GenerateImageArgs
from gemini_image.api.tools import handle_edit_image, handle_generate_image
from gemini_image.core.config import AspectRatio, config, configure_logging
from gemini_image.core.errors import ErrorKind, ImageToolError
from gemini_image.core.service_factory import GeminiImageServices, create_services
from gemini_image.core.watermark import WATERMARK_POSITIONS

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.IO_FAILURE: 500,
    ErrorKind.DECODE_FAILURE: 500,
    ErrorKind.INTERNAL: 500,
    ErrorKind.UPSTREAM_FAILURE: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the Gemini and image services on startup.

    Services already placed on ``app.state.services`` (tests do this) are
    kept as they are.  A missing API key aborts startup.
    """
    if getattr(app.state, "services", None) is None:
        app.state.services = create_services(config)
        logger.info("Services initialised.")

    yield


app = FastAPI(
    title="Gemini Image Generator",
    description="Generate and edit images with Google Gemini and save them to disk.",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(ImageToolError)
async def image_tool_error_handler(request: Request, exc: ImageToolError) -> JSONResponse:
    """Translate pipeline errors into JSON responses."""
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message} {exc.data}")
    else:
        logger.warning(f"{request.url.path} rejected: {exc.message} {exc.data}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def _services(request: Request) -> GeminiImageServices:
    return request.app.state.services


@app.get("/api/config")
async def get_config() -> dict:
    """Return static configuration for clients.

    Returns:
        Dictionary with ``version``, ``model``, ``aspect_ratios``,
        ``watermark_positions`` and the configured defaults.
    """
    return {
        "version": __version__,
        "model": config.model,
        "aspect_ratios": list(get_args(AspectRatio)),
        "watermark_positions": list(WATERMARK_POSITIONS),
        "default_aspect_ratio": config.default_aspect_ratio,
        "default_watermark_position": config.default_watermark_position,
    }


@app.post("/api/generate")
def generate_image(req: GenerateImageArgs, request: Request) -> dict:
    """Generate an image and save it on the server.

    Declared as a plain ``def`` so FastAPI runs the blocking Gemini call and
    disk write in its threadpool.

    Returns:
        ``{"success": True, "path": <absolute path>}``
    """
    services = _services(request)
    path = handle_generate_image(req, services.gemini_service, services.image_service)
    return {"success": True, "path": path}


@app.post("/api/edit")
def edit_image(req: EditImageArgs, request: Request) -> dict:
    """Edit an image and save the result on the server.

    Returns:
        ``{"success": True, "path": <absolute path>}``
    """
    services = _services(request)
    path = handle_edit_image(req, services.gemini_service, services.image_service)
    return {"success": True, "path": path}


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~gemini_image.core.config.config`
    (``GEMINI_IMAGE_SERVER_HOST`` / ``GEMINI_IMAGE_SERVER_PORT``).

    This function is registered as the ``gemini-image-server`` console
    script in ``pyproject.toml``.
    """
    import uvicorn

    configure_logging(config.log_level)
    uvicorn.run(
        "gemini_image.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
