"""
FontProvider - Bold face used for all slide text.

Text must be measured with exactly the font it is drawn with, so the
provider resolves one face up front (``ensure_ready``) and hands out
size-specific instances of it. If no real face can be found, Pillow's
built-in scalable font is used and a warning is logged; layout still
proceeds with those metrics.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from PIL import ImageFont

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

# Bold sans faces tried in order when no font_path is configured
SYSTEM_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/roboto/unhinted/RobotoTTF/Roboto-Bold.ttf",
    "/usr/share/fonts/truetype/roboto/Roboto-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",  # macOS
    "C:\\Windows\\Fonts\\arialbd.ttf",  # Windows
]


class FontProvider:
    """Resolves the text face once and caches one instance per pixel size."""

    def __init__(self, settings: Optional[Settings] = None, candidates: Optional[List[str]] = None):
        self.settings = settings or get_settings()
        self._candidates = candidates if candidates is not None else SYSTEM_FONT_CANDIDATES
        self._path: Optional[str] = None
        self._fallback = False
        self._ready = False
        self._cache: Dict[int, ImageFont.FreeTypeFont] = {}

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def using_fallback(self) -> bool:
        return self._fallback

    @property
    def path(self) -> Optional[str]:
        return self._path

    async def ensure_ready(self) -> None:
        """Resolve and verify the font face. Safe to call repeatedly."""
        if self._ready:
            return

        for path in self._search_paths():
            if not os.path.exists(path):
                continue
            try:
                ImageFont.truetype(path, 12)
            except OSError as e:
                logger.warning(f"Failed to load font {path}: {e}")
                continue
            self._path = path
            break

        if self._path is None:
            self._fallback = True
            logger.warning("No usable bold font found, using Pillow default font metrics")
        else:
            logger.info(f"Using font {self._path}")

        self._ready = True

    def get(self, size: int) -> ImageFont.FreeTypeFont:
        """
        Get the text face at a pixel size.

        Raises:
            RuntimeError: If called before ensure_ready()
        """
        if not self._ready:
            raise RuntimeError("FontProvider.ensure_ready() must complete before measuring text")

        font = self._cache.get(size)
        if font is None:
            if self._fallback:
                font = ImageFont.load_default(size)
            else:
                font = ImageFont.truetype(self._path, size)
            self._cache[size] = font
        return font

    def _search_paths(self) -> List[str]:
        paths = []
        if self.settings.font_path:
            paths.append(str(Path(self.settings.font_path).expanduser()))
        paths.extend(self._candidates)
        return paths
