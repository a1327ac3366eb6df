"""
TextLayoutEngine - Word wrapping and baseline placement for slide text.

Handles:
1. Greedy word wrap against measured font widths
2. Top-down placement (body copy)
3. Bottom-up placement (headlines grow upward from a fixed baseline so they
   never run into the template footer, however many lines they wrap to)
"""

from dataclasses import dataclass
from typing import List

from PIL import ImageFont

from .formats import AnchorMode, TextPlacement


@dataclass(frozen=True)
class PlacedLine:
    """A wrapped line and its left-baseline position on the canvas."""
    text: str
    x: int
    baseline: int
    index: int


class TextLayoutEngine:
    """
    Lays out text blocks for the compositor.

    Fonts must come from a ready FontProvider; measuring with one face and
    drawing with another produces wrong wraps.
    """

    def wrap(self, text: str, font: ImageFont.FreeTypeFont, max_width: int) -> List[str]:
        """
        Greedily wrap text into lines no wider than max_width.

        A word that is wider than max_width on its own is kept whole on its
        own line.

        Args:
            text: Text to wrap; any whitespace separates words
            font: Font used for measuring
            max_width: Maximum line width in pixels

        Returns:
            Lines in reading order (empty for blank text)
        """
        words = text.split() if text else []
        lines: List[str] = []
        current: List[str] = []

        for word in words:
            candidate = " ".join(current + [word])
            if current and font.getlength(candidate) > max_width:
                lines.append(" ".join(current))
                current = [word]
            else:
                current.append(word)

        if current:
            lines.append(" ".join(current))
        return lines

    def place(self, lines: List[str], placement: TextPlacement) -> List[PlacedLine]:
        """
        Compute the baseline of each line.

        Args:
            lines: Wrapped lines
            placement: Anchor, line height and anchor mode

        Returns:
            PlacedLine per input line, same order
        """
        count = len(lines)
        placed = []
        for i, line in enumerate(lines):
            if placement.anchor_mode is AnchorMode.BOTTOM_UP:
                baseline = placement.anchor_y - (count - 1 - i) * placement.line_height
            else:
                baseline = placement.anchor_y + i * placement.line_height
            placed.append(PlacedLine(text=line, x=placement.anchor_x, baseline=baseline, index=i))
        return placed

    def layout(self, text: str, font: ImageFont.FreeTypeFont, placement: TextPlacement) -> List[PlacedLine]:
        """Wrap and place text in one step."""
        return self.place(self.wrap(text, font, placement.max_width), placement)
