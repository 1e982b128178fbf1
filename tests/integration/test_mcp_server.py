"""Integration tests for gemini_image.api.server — the MCP tools.

Tool functions are called directly with fake-backed services installed via
``set_services``.  Tests cover:

- Tool registration and schemas.
- Successful generate and edit calls.
- Conversion of failures into ``ToolError`` text.
- Defaults taken from GEMINI_IMAGE_DEFAULT_* settings.
"""

from __future__ import annotations

import asyncio
from importlib.metadata import version
from pathlib import Path

import pytest
from mcp.server.fastmcp.exceptions import ToolError
from PIL import Image

from gemini_image.api import server
from gemini_image.core.errors import ErrorKind, ImageToolError, MissingConfigurationError


@pytest.fixture(autouse=True)
def installed_services(services):
    server.set_services(services)
    yield services
    server.set_services(None)


class TestRegistration:
    def test_installed_mcp_provides_fastmcp(self):
        """The 1.x line ships ``mcp.server.fastmcp``; the dependency is capped below 2."""
        assert int(version("mcp").split(".")[0]) < 2

    def test_tools_listed(self):
        tools = {tool.name: tool for tool in asyncio.run(server.mcp.list_tools())}

        assert set(tools) == {"generate_image", "edit_image"}
        assert tools["generate_image"].inputSchema["required"] == ["description"]
        assert set(tools["edit_image"].inputSchema["required"]) == {"image_path", "description"}


class TestGenerateTool:
    def test_returns_saved_path(self, tmp_path: Path, fixed_stamp):
        path = server.generate_image("a red fox", output_path="mcp/")
        assert path == str(tmp_path / "mcp" / f"a_red_fox_{fixed_stamp}.png")

    def test_blank_description_raises_tool_error(self):
        with pytest.raises(ToolError) as exc_info:
            server.generate_image("   ")

        assert str(exc_info.value).startswith("invalid_input: Description is required")
        assert "  tool: generate_image" in str(exc_info.value)

    def test_invalid_literal_reported_as_invalid_input(self):
        with pytest.raises(ToolError) as exc_info:
            server.generate_image("x", aspect_ratio="2:1")
        assert str(exc_info.value).startswith("invalid_input: Invalid aspect_ratio")


class TestEditTool:
    def test_edit(self, tmp_path: Path):
        source = tmp_path / "city.png"
        source.write_bytes(b"city")

        path = server.edit_image(str(source), "add neon", output_path="edited.png")

        assert path == str(tmp_path / "edited.png")

    def test_missing_source_is_not_found(self, tmp_path: Path):
        with pytest.raises(ToolError) as exc_info:
            server.edit_image(str(tmp_path / "nope.png"), "x")
        assert str(exc_info.value).startswith("not_found: Context image not found")

    def test_upstream_failure(self, fake_client, tmp_path: Path):
        source = tmp_path / "city.png"
        source.write_bytes(b"city")
        fake_client.models.error = RuntimeError("quota exceeded")

        with pytest.raises(ToolError) as exc_info:
            server.edit_image(str(source), "x")

        text = str(exc_info.value)
        assert text.startswith("upstream_failure: Gemini request failed")
        assert "  cause: quota exceeded" in text


class TestServices:
    def test_missing_key_surfaces_as_internal_error(self, monkeypatch):
        def no_key(cfg):
            raise MissingConfigurationError("GOOGLE_API_KEY")

        server.set_services(None)
        monkeypatch.setattr(server, "create_services", no_key)

        with pytest.raises(ToolError) as exc_info:
            server.generate_image("x")
        assert "GOOGLE_API_KEY environment variable is required" in str(exc_info.value)

    def test_format_tool_error(self):
        error = ImageToolError(ErrorKind.IO_FAILURE, "Could not write image", {"path": "/x.png"})
        assert server.format_tool_error(error) == "io_failure: Could not write image\n  path: /x.png"


class TestConfiguredDefaults:
    """Arguments the client omits follow GEMINI_IMAGE_DEFAULT_* settings."""

    @pytest.fixture(autouse=True)
    def configured(self, configure):
        configure(
            GEMINI_IMAGE_DEFAULT_ASPECT_RATIO="4:3",
            GEMINI_IMAGE_DEFAULT_WATERMARK_POSITION="top-left",
        )

    def test_generate_uses_configured_aspect_ratio(self, fake_client):
        server.generate_image("a red fox")
        assert "aspect ratio of 4:3" in fake_client.models.calls[0]["contents"][0]

    def test_explicit_aspect_ratio_wins(self, fake_client):
        server.generate_image("a red fox", aspect_ratio="1:1")
        assert "aspect ratio of 1:1" in fake_client.models.calls[0]["contents"][0]

    def test_edit_uses_configured_watermark_position(self, tmp_path: Path, watermark_file: Path, watermark_color):
        source = tmp_path / "city.png"
        source.write_bytes(b"city")

        path = server.edit_image(str(source), "add neon", watermark_path=str(watermark_file))

        with Image.open(path) as saved:
            assert saved.convert("RGB").getpixel((30, 30)) == watermark_color[:3]
