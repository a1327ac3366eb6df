"""
Runtime settings for the post generator.

All values can be overridden through environment variables prefixed with
``POSTGEN_`` (e.g. ``POSTGEN_DOWNLOAD_DELAY=1.5``) or a local ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).parent
DEFAULT_TEMPLATE_DIR = PACKAGE_DIR / "templates"


class Settings(BaseSettings):
    # Canonical output size (4:5 portrait feed post)
    canvas_width: int = 600
    canvas_height: int = 750

    template_dir: Path = DEFAULT_TEMPLATE_DIR
    font_path: Optional[str] = None  # Bold face used for headline and body text
    placeholder_color: str = "#eeeeee"

    download_dir: Path = Path.home() / "Downloads"
    download_delay: float = 0.8  # Seconds between consecutive downloads
    http_timeout: float = 30.0
    max_upload_width: int = 1080

    share_title: str = "Social Media Post"
    share_text: str = "Generated social media images"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="POSTGEN_", env_file=".env", extra="ignore")

    @property
    def canvas_size(self) -> tuple:
        return (self.canvas_width, self.canvas_height)


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()
