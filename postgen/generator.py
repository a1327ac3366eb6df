"""
SlideGenerator - Main entry point for rendering a post.

Combines:
- Format table: which slides a format has, in order
- Compositor: background, overlay and text per slide

Slides are rendered one after another in format order; the result list
always has exactly one RenderedAsset per slide.
"""

import logging
from typing import List, Optional

from .assets import AssetCache, AssetLoader
from .compositor import Compositor
from .config import Settings, get_settings
from .fonts import FontProvider
from .formats import resolve, template_references
from .models import RenderedAsset, RenderInput

logger = logging.getLogger(__name__)


class SlideGenerator:
    """
    Renders every slide of the requested format.

    Workflow:
    1. Resolve the format into its slide descriptors
    2. Make sure the text font is ready for measuring
    3. Render each slide through the compositor, in order
    """

    def __init__(
        self,
        compositor: Optional[Compositor] = None,
        settings: Optional[Settings] = None,
        cache: Optional[AssetCache] = None,
    ):
        """
        Initialize generator.

        Args:
            compositor: Pre-built compositor. Built from settings/cache if None.
            settings: Runtime settings
            cache: Template cache shared across requests (process lifetime)
        """
        self.settings = settings or get_settings()
        if compositor is None:
            loader = AssetLoader(cache=cache, settings=self.settings)
            compositor = Compositor(
                loader=loader,
                fonts=FontProvider(settings=self.settings),
                settings=self.settings,
            )
        self.compositor = compositor

    async def generate(self, render_input: RenderInput) -> List[RenderedAsset]:
        """
        Render all slides for a request.

        Args:
            render_input: User settings snapshot

        Returns:
            RenderedAsset list in slide order

        Raises:
            UnknownFormat: If the format is not in the format table
        """
        slides = resolve(render_input.format)
        logger.info(f"Rendering {len(slides)} slide(s) for format '{render_input.format.value}'")

        await self.compositor.fonts.ensure_ready()

        assets = []
        for slide in slides:
            asset = await self.compositor.render(slide, render_input)
            logger.debug(f"Rendered slide {slide.suffix} ({len(asset.image_data)} bytes)")
            assets.append(asset)

        logger.info("Slide rendering complete")
        return assets

    async def preload_templates(self) -> int:
        """Load every known overlay into the cache ahead of the first request."""
        return await self.compositor.loader.preload(template_references())
