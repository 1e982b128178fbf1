"""Shared pytest fixtures for Gemini Image Generator tests."""

from __future__ import annotations

import base64
import io
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest
from google.genai import types
from PIL import Image

from gemini_image.api import cli, main, models, server
from gemini_image.core.config import GeminiImageConfig
from gemini_image.core.gemini import GeminiService
from gemini_image.core.image_service import ImageData, ImageService
from gemini_image.core.service_factory import GeminiImageServices

FIXED_NOW = datetime(2025, 1, 31, 14, 5, 9, tzinfo=timezone.utc)
FIXED_STAMP = "2025-01-31T14-05-09"

PRIMARY_COLOR = (0, 0, 255)
WATERMARK_COLOR = (255, 0, 0, 255)


def encode_image(image: Image.Image, fmt: str = "PNG") -> bytes:
    """Encode a PIL image to bytes in the given format."""
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_response(*parts: types.Part) -> types.GenerateContentResponse:
    """Build a Gemini response whose first candidate holds ``parts``."""
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=list(parts)))]
    )


class FakeModels:
    """Stand-in for ``client.models`` that records calls."""

    def __init__(self, response: Any = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def generate_content(self, *, model: str, contents: list[Any], config: Any = None) -> Any:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response


class FakeGeminiClient:
    """Minimal ``google.genai.Client`` substitute."""

    def __init__(self, response: Any = None, error: Exception | None = None):
        self.models = FakeModels(response=response, error=error)


@pytest.fixture
def png_factory() -> Callable[..., bytes]:
    """Return a function that builds solid-colour PNG bytes.

    Returns:
        ``make(width, height, color=PRIMARY_COLOR, mode="RGB", fmt="PNG")``
    """

    def make(
        width: int,
        height: int,
        color: tuple[int, ...] = PRIMARY_COLOR,
        mode: str = "RGB",
        fmt: str = "PNG",
    ) -> bytes:
        return encode_image(Image.new(mode, (width, height), color), fmt)

    return make


@pytest.fixture
def primary_png(png_factory) -> bytes:
    """A 1000x1000 solid blue PNG."""
    return png_factory(1000, 1000)


@pytest.fixture
def watermark_file(tmp_path: Path) -> Path:
    """A 500x500 opaque red RGBA watermark on disk."""
    path = tmp_path / "assets" / "logo.png"
    path.parent.mkdir()
    Image.new("RGBA", (500, 500), WATERMARK_COLOR).save(path)
    return path


@pytest.fixture
def image_data(primary_png: bytes) -> ImageData:
    """The primary PNG wrapped as the dispatcher would return it."""
    return ImageData(base64=base64.b64encode(primary_png).decode("ascii"), mime_type="image/png")


@pytest.fixture
def image_service(tmp_path: Path) -> ImageService:
    """ImageService rooted in a temporary directory with a fixed clock."""
    return ImageService(base_dir=tmp_path, clock=lambda: FIXED_NOW)


@pytest.fixture
def fake_client(primary_png: bytes) -> FakeGeminiClient:
    """Fake Gemini client that answers with the primary PNG."""
    response = make_response(
        types.Part(text="Here is your image."),
        types.Part.from_bytes(data=primary_png, mime_type="image/png"),
    )
    return FakeGeminiClient(response=response)


@pytest.fixture
def fixed_now() -> datetime:
    """The instant returned by the image service clock in tests."""
    return FIXED_NOW


@pytest.fixture
def fixed_stamp() -> str:
    """``fixed_now`` formatted as it appears in derived filenames."""
    return FIXED_STAMP


@pytest.fixture
def primary_color() -> tuple[int, int, int]:
    """RGB colour of the ``primary_png`` image."""
    return PRIMARY_COLOR


@pytest.fixture
def watermark_color() -> tuple[int, int, int, int]:
    """RGBA colour of the ``watermark_file`` image."""
    return WATERMARK_COLOR


@pytest.fixture
def response_factory() -> Callable[..., types.GenerateContentResponse]:
    """Return :func:`make_response` for building canned Gemini responses."""
    return make_response


@pytest.fixture
def client_factory() -> type[FakeGeminiClient]:
    """Return the fake client class: ``client_factory(response=..., error=...)``."""
    return FakeGeminiClient


@pytest.fixture
def gemini_service(fake_client: FakeGeminiClient) -> GeminiService:
    """GeminiService backed by the fake client."""
    return GeminiService(fake_client, model="test-model")


@pytest.fixture
def services(gemini_service: GeminiService, image_service: ImageService) -> GeminiImageServices:
    """Service bundle wired to fakes and a temporary directory."""
    return GeminiImageServices(gemini_service=gemini_service, image_service=image_service)


@pytest.fixture
def test_config(monkeypatch) -> GeminiImageConfig:
    """Configuration isolated from the developer's environment and .env file."""
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    return GeminiImageConfig(_env_file=None, google_api_key="test-key", model="test-model")


@pytest.fixture
def configure(monkeypatch) -> Callable[..., GeminiImageConfig]:
    """Return ``configure(**env)``, which reloads the surfaces' settings from ``env``.

    The new :class:`GeminiImageConfig` is read from the given environment
    variables only (no ``.env`` file) and installed wherever the CLI, the MCP
    server, the HTTP API and the argument models look up ``config``.
    """
    def apply(**env: str) -> GeminiImageConfig:
        for name in list(os.environ):
            if name.startswith("GEMINI_IMAGE_"):
                monkeypatch.delenv(name)
        for name, value in env.items():
            monkeypatch.setenv(name, value)

        cfg = GeminiImageConfig(_env_file=None)
        for module in (cli, main, models, server):
            monkeypatch.setattr(module, "config", cfg)
        return cfg

    return apply
