"""
Compositor - Pillow-based rendering of one slide.

Layer order on a fixed-size canvas:
1. Background photo (cover fit) or neutral placeholder
2. Template overlay at full canvas size
3. Wrapped text with a soft drop shadow
4. PNG encoding

Missing images never abort a render: a slide without its overlay is still
delivered, just with the placeholder/photo showing through.
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .assets import UNAVAILABLE, AssetLoader
from .config import Settings, get_settings
from .fonts import FontProvider
from .formats import SlideDescriptor, TextPlacement, TextSource
from .layout import PlacedLine, TextLayoutEngine
from .models import RenderedAsset, RenderInput

logger = logging.getLogger(__name__)

BASE_FILL = (255, 255, 255, 255)
TEXT_COLOR = (255, 255, 255, 255)


@dataclass(frozen=True)
class ShadowStyle:
    """Drop shadow drawn under every text line."""
    color: Tuple[int, int, int, int] = (0, 0, 0, 153)  # black at 60%
    blur_radius: int = 4
    offset: Tuple[int, int] = (0, 4)


def cover_fit(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """
    Scale an image to fully cover ``size``, cropping the overflow evenly.

    Args:
        image: Source image (any aspect ratio)
        size: Target (width, height)

    Returns:
        Image exactly ``size`` pixels, aspect ratio preserved
    """
    target_w, target_h = size
    scale = max(target_w / image.width, target_h / image.height)

    # Crop box in source coordinates, so only the target size is allocated
    crop_w = target_w / scale
    crop_h = target_h / scale
    left = (image.width - crop_w) / 2
    top = (image.height - crop_h) / 2
    box = (left, top, left + crop_w, top + crop_h)
    return image.resize(size, Image.Resampling.LANCZOS, box=box)


class Compositor:
    """
    Renders slides for the generator.

    Pure with respect to its inputs: the same slide and RenderInput always
    produce the same PNG bytes.
    """

    def __init__(
        self,
        loader: Optional[AssetLoader] = None,
        fonts: Optional[FontProvider] = None,
        layout_engine: Optional[TextLayoutEngine] = None,
        settings: Optional[Settings] = None,
        shadow: Optional[ShadowStyle] = None,
    ):
        self.settings = settings or get_settings()
        self.loader = loader or AssetLoader(settings=self.settings)
        self.fonts = fonts or FontProvider(settings=self.settings)
        self.layout_engine = layout_engine or TextLayoutEngine()
        self.shadow = shadow or ShadowStyle()

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self.settings.canvas_size

    async def render(self, slide: SlideDescriptor, render_input: RenderInput) -> RenderedAsset:
        """
        Render one slide.

        Args:
            slide: Slide descriptor from the format table
            render_input: User settings snapshot

        Returns:
            RenderedAsset with PNG data at the canonical canvas size
        """
        await self.fonts.ensure_ready()

        canvas = Image.new("RGBA", self.canvas_size, BASE_FILL)
        canvas = await self._draw_background(canvas, render_input)
        canvas = await self._draw_overlay(canvas, slide.template)

        text, placement = self._resolve_text(slide, render_input)
        if text and text.strip():
            font = self.fonts.get(placement.font_size)
            lines = self.layout_engine.layout(text, font, placement)
            canvas = self.draw_lines(canvas, lines, font)

        width, height = canvas.size
        return RenderedAsset(
            image_data=self.encode(canvas),
            suffix=slide.suffix,
            width=width,
            height=height,
        )

    async def _draw_background(self, canvas: Image.Image, render_input: RenderInput) -> Image.Image:
        if render_input.background is None:
            return self._placeholder(canvas)

        photo = await self.loader.load_user_image(render_input.background)
        if photo is UNAVAILABLE:
            logger.warning("Background image unavailable, using placeholder fill")
            return self._placeholder(canvas)

        return Image.alpha_composite(canvas, cover_fit(photo, self.canvas_size))

    def _placeholder(self, canvas: Image.Image) -> Image.Image:
        fill = Image.new("RGBA", canvas.size, self.settings.placeholder_color)
        return Image.alpha_composite(canvas, fill)

    async def _draw_overlay(self, canvas: Image.Image, template: str) -> Image.Image:
        overlay = await self.loader.load(template)
        if overlay is UNAVAILABLE:
            logger.warning(f"Template overlay {template} unavailable, rendering without it")
            return canvas

        if overlay.size != canvas.size:
            overlay = overlay.resize(canvas.size, Image.Resampling.LANCZOS)
        return Image.alpha_composite(canvas, overlay)

    def _resolve_text(self, slide: SlideDescriptor, render_input: RenderInput) -> Tuple[str, TextPlacement]:
        placement = slide.placement
        if slide.text_source is TextSource.TITLE:
            if render_input.title_override is not None:
                placement = render_input.title_override.apply(placement)
            return render_input.title, placement
        if slide.text_source is TextSource.BODY:
            return render_input.body, placement
        return "", placement

    def draw_lines(self, canvas: Image.Image, lines: List[PlacedLine], font: ImageFont.FreeTypeFont) -> Image.Image:
        """
        Draw placed lines with the drop shadow beneath them.

        Args:
            canvas: RGBA canvas
            lines: PlacedLine list from the layout engine
            font: The font the lines were measured with

        Returns:
            New canvas with text composited on top
        """
        if not lines:
            return canvas

        dx, dy = self.shadow.offset
        shadow_layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        shadow_draw = ImageDraw.Draw(shadow_layer)
        for line in lines:
            shadow_draw.text((line.x + dx, line.baseline + dy), line.text, font=font,
                             fill=self.shadow.color, anchor="ls")
        if self.shadow.blur_radius:
            shadow_layer = shadow_layer.filter(ImageFilter.GaussianBlur(self.shadow.blur_radius))

        canvas = Image.alpha_composite(canvas, shadow_layer)

        text_layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        text_draw = ImageDraw.Draw(text_layer)
        for line in lines:
            text_draw.text((line.x, line.baseline), line.text, font=font, fill=TEXT_COLOR, anchor="ls")

        return Image.alpha_composite(canvas, text_layer)

    def encode(self, image: Image.Image) -> bytes:
        """Encode the finished canvas as an opaque PNG."""
        buffer = io.BytesIO()
        image.convert("RGB").save(buffer, format="PNG")
        return buffer.getvalue()
