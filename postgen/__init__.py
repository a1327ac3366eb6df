# Social post generator
# Template compositing (photo + overlay + text) and share/download delivery

from .assets import UNAVAILABLE, AssetCache, AssetLoader
from .compositor import Compositor, ShadowStyle, cover_fit
from .config import Settings, get_settings
from .delivery import (
    DeliveryMethod,
    DeliveryOutcome,
    DeliveryPipeline,
    DeliveryResult,
    PipelineState,
    sanitize_filename,
)
from .exceptions import DeliveryError, PipelineBusy, PostgenError, UnknownFormat
from .fonts import FontProvider
from .formats import (
    AnchorMode,
    FormatId,
    SlideDescriptor,
    TextPlacement,
    TextSource,
    get_format_options,
    resolve,
)
from .generator import SlideGenerator
from .layout import PlacedLine, TextLayoutEngine
from .models import PlacementOverride, RenderedAsset, RenderInput
from .targets import (
    DirectoryDownloadSink,
    DownloadSink,
    ShareCancelled,
    ShareFile,
    ShareTarget,
    UnsupportedShareTarget,
)

__all__ = [
    "UNAVAILABLE",
    "AssetCache",
    "AssetLoader",
    "Compositor",
    "ShadowStyle",
    "cover_fit",
    "Settings",
    "get_settings",
    "DeliveryMethod",
    "DeliveryOutcome",
    "DeliveryPipeline",
    "DeliveryResult",
    "PipelineState",
    "sanitize_filename",
    "DeliveryError",
    "PipelineBusy",
    "PostgenError",
    "UnknownFormat",
    "FontProvider",
    "AnchorMode",
    "FormatId",
    "SlideDescriptor",
    "TextPlacement",
    "TextSource",
    "get_format_options",
    "resolve",
    "SlideGenerator",
    "PlacedLine",
    "TextLayoutEngine",
    "PlacementOverride",
    "RenderedAsset",
    "RenderInput",
    "DirectoryDownloadSink",
    "DownloadSink",
    "ShareCancelled",
    "ShareFile",
    "ShareTarget",
    "UnsupportedShareTarget",
]
