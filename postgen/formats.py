"""
Format table for social post generation.

Each format is a fixed, ordered list of slides. A slide names its template
overlay, which user text it carries and where that text goes:

- Simple: one headline slide
- Double: headline slide followed by a body slide (carousel)
- Breaking EXN / EXD: one headline slide on a breaking-news overlay
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple, Union

from .exceptions import UnknownFormat


class FormatId(Enum):
    """Closed set of layout formats."""

    SIMPLE = "simple"
    DOUBLE = "double"
    BREAKING_EXN = "breaking_exn"
    BREAKING_EXD = "breaking_exd"


class TextSource(Enum):
    """Which render input field a slide draws."""

    TITLE = "title"
    BODY = "body"
    NONE = "none"


class AnchorMode(Enum):
    BOTTOM_UP = "bottom_up"  # last line pinned at anchor_y, block grows upward
    TOP_DOWN = "top_down"    # first line at anchor_y, block grows downward


@dataclass(frozen=True)
class TextPlacement:
    """Where and how large a text block is drawn (canvas pixels)."""
    anchor_x: int
    anchor_y: int
    max_width: int
    font_size: int
    line_height: int
    anchor_mode: AnchorMode


@dataclass(frozen=True)
class SlideDescriptor:
    """One slide of a format."""
    template: str
    text_source: TextSource
    placement: TextPlacement
    suffix: str


# Headlines sit on a fixed baseline above the template footer/logo
HEADLINE_PLACEMENT = TextPlacement(
    anchor_x=60, anchor_y=590, max_width=480,
    font_size=48, line_height=62,
    anchor_mode=AnchorMode.BOTTOM_UP,
)

# Body copy starts at the vertical centre of the 600x750 canvas
BODY_PLACEMENT = TextPlacement(
    anchor_x=60, anchor_y=375, max_width=480,
    font_size=30, line_height=42,
    anchor_mode=AnchorMode.TOP_DOWN,
)


FORMAT_SLIDES: Dict[FormatId, Tuple[SlideDescriptor, ...]] = {
    FormatId.SIMPLE: (
        SlideDescriptor("template_simple.png", TextSource.TITLE, HEADLINE_PLACEMENT, "_simple"),
    ),
    FormatId.DOUBLE: (
        SlideDescriptor("template_double_1.png", TextSource.TITLE, HEADLINE_PLACEMENT, "_pag1"),
        SlideDescriptor("template_double_2.png", TextSource.BODY, BODY_PLACEMENT, "_pag2"),
    ),
    FormatId.BREAKING_EXN: (
        SlideDescriptor("template_breaking_exn.png", TextSource.TITLE, HEADLINE_PLACEMENT, "_exn"),
    ),
    FormatId.BREAKING_EXD: (
        SlideDescriptor("template_breaking_exd.png", TextSource.TITLE, HEADLINE_PLACEMENT, "_exd"),
    ),
}

FORMAT_NAMES = {
    FormatId.SIMPLE: "Simple (1 slide)",
    FormatId.DOUBLE: "Double (2 slides)",
    FormatId.BREAKING_EXN: "Breaking News EXN",
    FormatId.BREAKING_EXD: "Breaking News EXD",
}


def resolve(format_id: Union[FormatId, str]) -> Tuple[SlideDescriptor, ...]:
    """
    Get the ordered slide list for a format.

    Args:
        format_id: FormatId member or its string value (e.g. "double")

    Returns:
        Tuple of SlideDescriptor in render/delivery order

    Raises:
        UnknownFormat: If the id is not in the format table
    """
    if not isinstance(format_id, FormatId):
        try:
            format_id = FormatId(format_id)
        except ValueError:
            raise UnknownFormat(format_id) from None

    try:
        return FORMAT_SLIDES[format_id]
    except KeyError:
        raise UnknownFormat(format_id) from None


def template_references() -> List[str]:
    """All overlay references used by any format, without duplicates."""
    seen = []
    for slides in FORMAT_SLIDES.values():
        for slide in slides:
            if slide.template not in seen:
                seen.append(slide.template)
    return seen


def get_format_options() -> list:
    """Get list of available formats for user selection."""
    return [
        {
            "id": format_id.value,
            "name": FORMAT_NAMES[format_id],
            "slides": len(slides),
        }
        for format_id, slides in FORMAT_SLIDES.items()
    ]
