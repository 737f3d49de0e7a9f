"""Tests for logging and settings helpers."""

import json
import logging

from cookbookconverter.config import Settings
from cookbookconverter.logging_config import (
    ContextualFormatter,
    LoggingContext,
    StructuredJsonFormatter,
    recipe_id_ctx,
    run_id_ctx,
)


def make_record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("cookbookconverter.test", logging.INFO, __file__, 1, message, None, None)


class TestLoggingContext:
    """Tests for the context manager and formatters."""

    def test_context_is_reset(self):
        """Test values are only set inside the block."""
        with LoggingContext(run_id="abcdef123456", recipe_id="r1"):
            assert run_id_ctx.get() == "abcdef123456"
            assert recipe_id_ctx.get() == "r1"
        assert run_id_ctx.get() is None
        assert recipe_id_ctx.get() is None

    def test_text_formatter_includes_context(self):
        """Test the human-readable line carries run and recipe."""
        with LoggingContext(run_id="abcdef123456", recipe_id="r1"):
            line = ContextualFormatter().format(make_record())
        assert "[run=abcdef12, recipe=r1]" in line
        assert line.endswith("| hello")

    def test_json_formatter(self):
        """Test JSON output keeps non-ASCII text and context."""
        with LoggingContext(recipe_id="r1"):
            data = json.loads(StructuredJsonFormatter().format(make_record("Grüße")))
        assert data["message"] == "Grüße"
        assert data["recipe_id"] == "r1"
        assert data["level"] == "INFO"


class TestSettings:
    """Tests for settings defaults."""

    def test_defaults(self):
        """Test defaults for the target format."""
        settings = Settings(_env_file=None)
        assert settings.default_step_heading == "Zubereitung"
        assert settings.placeholder_image_marker == "placeholder_recipe.jpg"
        assert settings.recipes_path == settings.input_dir / "recipes.json"
        assert settings.cookbooks_path == settings.input_dir / "cookbooks.json"

    def test_env_override(self, monkeypatch):
        """Test CONVERTER_ environment variables."""
        monkeypatch.setenv("CONVERTER_IMAGE_CONCURRENCY", "3")
        assert Settings(_env_file=None).image_concurrency == 3
