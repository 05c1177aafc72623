"""
Tooltip content and viewport-clamped placement.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class TooltipContent:
    lines: Tuple[Tuple[str, str], ...]

    def as_text(self) -> str:
        return '\n'.join(f"{label}: {text}" for label, text in self.lines)

    def get(self, label: str):
        for key, text in self.lines:
            if key == label:
                return text
        return None


@dataclass(frozen=True)
class TooltipPlacement:
    left: float
    top: float


def place_tooltip(
    pointer: Tuple[float, float],
    size: Tuple[float, float],
    viewport: Tuple[float, float],
    offset: float = 5,
) -> TooltipPlacement:
    """
    Position a tooltip next to the pointer without leaving the viewport.

    Default placement is below-right of the pointer. A box that would
    overflow the right (bottom) edge flips to the left of (above) the pointer.
    """
    x, y = pointer
    width, height = size
    viewport_width, viewport_height = viewport

    left = x + offset
    top = y + offset
    if left + width > viewport_width:
        left = x - width - offset
    if top + height > viewport_height:
        top = y - height - offset
    return TooltipPlacement(left=left, top=top)


def estimate_size(content: TooltipContent, char_width: float = 7.0, line_height: float = 16.0,
                  padding: float = 10.0) -> Tuple[float, float]:
    """Rough box size for surfaces that cannot measure rendered text."""
    longest = max((len(label) + 2 + len(text) for label, text in content.lines), default=0)
    return longest * char_width + padding, len(content.lines) * line_height + padding
