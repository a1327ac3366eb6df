"""
Request and result models shared by the compositor and delivery pipeline.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from .formats import FormatId, TextPlacement


class PlacementOverride(BaseModel):
    """Per-request headline position tweaks. Unset fields keep the slide default."""
    model_config = ConfigDict(frozen=True)

    x: Optional[int] = None
    y: Optional[int] = None
    size: Optional[int] = None
    leading: Optional[int] = None

    def apply(self, placement: TextPlacement) -> TextPlacement:
        changes = {}
        if self.x is not None:
            changes["anchor_x"] = self.x
        if self.y is not None:
            changes["anchor_y"] = self.y
        if self.size is not None:
            changes["font_size"] = self.size
        if self.leading is not None:
            changes["line_height"] = self.leading
        return replace(placement, **changes) if changes else placement


class RenderInput(BaseModel):
    """Snapshot of the user's settings for one generate request."""
    model_config = ConfigDict(frozen=True)

    format: FormatId = FormatId.SIMPLE
    background: Optional[Union[bytes, str]] = None  # Raw image bytes or a reference
    title: str = ""
    body: str = ""
    title_override: Optional[PlacementOverride] = None


@dataclass(frozen=True)
class RenderedAsset:
    """One encoded slide, ready for delivery."""
    image_data: bytes  # PNG
    suffix: str
    width: int
    height: int
    mime_type: str = "image/png"

    def filename(self, base_name: str) -> str:
        return f"{base_name}{self.suffix}.png"
