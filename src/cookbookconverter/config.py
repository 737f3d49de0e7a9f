"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Converter settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CONVERTER_",
        extra="ignore",
    )

    # Directories
    input_dir: Path = Path("var/input")
    output_dir: Path = Path("var/output")
    images_dir: Path = Path("var/images")

    # Export file names inside input_dir / output_dir
    recipes_file: str = "recipes.json"
    cookbooks_file: str = "cookbooks.json"
    bundle_suffix: str = ".crumb"

    # Image download
    image_concurrency: int = 8  # max in-flight image requests
    image_timeout: float = 30.0  # request timeout in seconds
    placeholder_image_marker: str = "placeholder_recipe.jpg"

    # Target format
    sender_name: str = "Körbchen"
    default_step_heading: str = "Zubereitung"

    # Application
    log_level: str = "INFO"

    @property
    def recipes_path(self) -> Path:
        """Path of the recipe export document."""
        return self.input_dir / self.recipes_file

    @property
    def cookbooks_path(self) -> Path:
        """Path of the cookbook export document."""
        return self.input_dir / self.cookbooks_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
