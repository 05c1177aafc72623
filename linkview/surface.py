"""
Draw Surfaces
=============

A surface receives frames, tooltips and scroll requests from the views.
The views never touch a graphics API directly.

RecordingSurface   keeps the latest frame per name (headless use, tests)
MatplotlibSurface  lays the frames out in one figure and saves it
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.patches import Circle as CirclePatch
from matplotlib.patches import Rectangle

from .render import Circle, Frame, Line, Rect, Text
from .tooltip import TooltipContent, TooltipPlacement

logger = logging.getLogger(__name__)

_ANCHOR = {'start': 'left', 'middle': 'center', 'end': 'right'}


class DrawSurface(ABC):
    """Interface every surface implements."""

    @abstractmethod
    def draw(self, frame: Frame):
        """Replace the frame of the same name."""

    @abstractmethod
    def show_tooltip(self, frame_name: str, content: TooltipContent, placement: TooltipPlacement):
        """Show one tooltip over a frame, replacing any other."""

    @abstractmethod
    def hide_tooltip(self):
        """Remove the tooltip, if any."""

    @abstractmethod
    def scroll_to(self, element_id: str):
        """Bring the element with this id into view."""


class RecordingSurface(DrawSurface):
    """Holds what was last drawn. Frames with the same name replace each other."""

    def __init__(self):
        self.frames: Dict[str, Frame] = {}
        self.draw_count = 0
        self.tooltip: Optional[Tuple[str, TooltipContent, TooltipPlacement]] = None
        self.scrolled_to: Optional[str] = None

    def draw(self, frame: Frame):
        self.frames[frame.name] = frame
        self.draw_count += 1

    def show_tooltip(self, frame_name, content, placement):
        self.tooltip = (frame_name, content, placement)

    def hide_tooltip(self):
        self.tooltip = None

    def scroll_to(self, element_id):
        self.scrolled_to = element_id

    def clear(self):
        self.frames.clear()
        self.tooltip = None


class MatplotlibSurface(RecordingSurface):
    """Rasterize the recorded frames, stacked top to bottom, into one figure."""

    def __init__(self, dpi: int = 100):
        super().__init__()
        self.dpi = dpi

    def render(self):
        frames: List[Frame] = list(self.frames.values())
        if not frames:
            raise ValueError("Nothing to render: no frames were drawn")

        total_width = max(f.width for f in frames)
        total_height = sum(f.height for f in frames)
        fig = plt.figure(figsize=(total_width / self.dpi, total_height / self.dpi), dpi=self.dpi)

        top = total_height
        for frame in frames:
            top -= frame.height
            ax = fig.add_axes([
                0.0,
                top / total_height,
                frame.width / total_width,
                frame.height / total_height,
            ])
            ax.set_xlim(0, frame.width)
            ax.set_ylim(frame.height, 0)
            ax.axis('off')
            self._draw_items(ax, frame)
            if self.tooltip is not None and self.tooltip[0] == frame.name:
                _, content, placement = self.tooltip
                ax.text(
                    placement.left, placement.top, content.as_text(),
                    ha='left', va='top', fontsize=8,
                    bbox=dict(boxstyle='round', facecolor='white', edgecolor='#cccccc'),
                )
        return fig

    def _draw_items(self, ax, frame: Frame):
        for item in frame.items:
            if isinstance(item, Rect):
                ax.add_patch(Rectangle(
                    (item.x, item.y), item.width, item.height,
                    facecolor=item.fill,
                    edgecolor=item.stroke or 'none',
                    linewidth=item.stroke_width,
                    alpha=item.alpha,
                ))
            elif isinstance(item, Line):
                xs = [p[0] for p in item.points]
                ys = [p[1] for p in item.points]
                ax.plot(xs, ys, color=item.stroke, linewidth=item.width)
            elif isinstance(item, Circle):
                ax.add_patch(CirclePatch((item.cx, item.cy), item.r, facecolor=item.fill))
            elif isinstance(item, Text):
                ax.text(
                    item.x, item.y, item.text,
                    ha=_ANCHOR.get(item.anchor, 'left'), va='center',
                    rotation=-item.rotation, fontsize=item.size * 0.8,
                    color=item.color, fontweight=item.weight,
                )

    def save(self, output_path: str):
        fig = self.render()
        fig.savefig(output_path, dpi=self.dpi)
        plt.close(fig)
        print(f"Saved: {output_path}")

    def show(self):
        self.render()
        plt.show()
