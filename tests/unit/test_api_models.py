"""Tests for gemini_image.api.models — tool argument models.

Tests cover:
- Defaults for optional fields.
- camelCase aliases.
- Rejection of unknown fields and invalid literals.
- Defaults taken from GEMINI_IMAGE_DEFAULT_* settings.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gemini_image.api.models import EditImageArgs, GenerateImageArgs


class TestGenerateImageArgs:
    def test_defaults(self, configure):
        configure()
        args = GenerateImageArgs(description="a red fox")
        assert args.aspect_ratio == "1:1"
        assert args.style is None
        assert args.output_path is None
        assert args.watermark_path is None
        assert args.watermark_position == "bottom-right"
        assert args.images == []

    def test_description_required(self):
        with pytest.raises(ValidationError):
            GenerateImageArgs()

    def test_camel_case_aliases(self):
        args = GenerateImageArgs.model_validate(
            {
                "description": "x",
                "aspectRatio": "16:9",
                "outputPath": "out/",
                "watermarkPath": "logo.png",
                "watermarkPosition": "top-left",
            }
        )
        assert args.aspect_ratio == "16:9"
        assert args.output_path == "out/"
        assert args.watermark_path == "logo.png"
        assert args.watermark_position == "top-left"

    def test_snake_case_names(self):
        args = GenerateImageArgs.model_validate({"description": "x", "output_path": "a.png"})
        assert args.output_path == "a.png"

    def test_invalid_aspect_ratio(self):
        with pytest.raises(ValidationError):
            GenerateImageArgs(description="x", aspect_ratio="2:1")

    def test_invalid_watermark_position(self):
        with pytest.raises(ValidationError):
            GenerateImageArgs(description="x", watermark_position="center")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            GenerateImageArgs.model_validate({"description": "x", "seed": 42})


class TestEditImageArgs:
    def test_required_fields(self):
        with pytest.raises(ValidationError):
            EditImageArgs(description="x")

    def test_image_path_alias(self, configure):
        configure()
        args = EditImageArgs.model_validate({"imagePath": "city.png", "description": "neon"})
        assert args.image_path == "city.png"
        assert args.watermark_position == "bottom-right"


class TestConfiguredDefaults:
    """Omitted aspect ratio and watermark position follow the settings."""

    @pytest.fixture
    def configured(self, configure):
        configure(
            GEMINI_IMAGE_DEFAULT_ASPECT_RATIO="16:9",
            GEMINI_IMAGE_DEFAULT_WATERMARK_POSITION="top-left",
        )

    def test_generate_defaults_from_environment(self, configured):
        args = GenerateImageArgs(description="x")
        assert args.aspect_ratio == "16:9"
        assert args.watermark_position == "top-left"

    def test_edit_default_position_from_environment(self, configured):
        assert EditImageArgs(image_path="a.png", description="x").watermark_position == "top-left"

    def test_explicit_values_win(self, configured):
        args = GenerateImageArgs(description="x", aspect_ratio="1:1", watermark_position="bottom-left")
        assert args.aspect_ratio == "1:1"
        assert args.watermark_position == "bottom-left"
