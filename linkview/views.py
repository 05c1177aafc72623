"""
Linked Views
============

Adapters between the state engine and a draw surface. Each view owns
its UI state (hover, search hit, sort flags), re-derives everything
from the current model snapshot on every change, and hands frames to
the surface.

    TimelineView         brush selector over the full time extent
    TimeSeriesPanelView  one line chart per field, scoped by the brush
    AnomalyBarChartView  zero-value / sharp-change counts per field
    MatrixView           any RelationshipMatrixModel + side lists
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .anomaly import AnomalyAggregator, AnomalyCategory, SortOrder, TimeSeriesPoint
from .brush import BrushRange
from .config import LinkViewConfig
from .matrix import MatrixCell, RelationshipMatrixModel
from .render import (
    Frame,
    bar_scales,
    matrix_scales,
    matrix_side_lines,
    render_bar_chart,
    render_dictionary_panel,
    render_matrix,
    render_series_chart,
    render_text_panel,
    render_timeline,
    timeline_scale,
)
from .search import SearchHit, resolve_index
from .surface import DrawSurface
from .tooltip import TooltipContent, estimate_size, place_tooltip

logger = logging.getLogger(__name__)


class TimelineView:
    """Timeline with a horizontal brush. Drags become BrushRange updates."""

    def __init__(
        self,
        brush: BrushRange,
        timestamps: Sequence[datetime],
        config: LinkViewConfig,
        surface: DrawSurface,
    ):
        self.brush = brush
        self.config = config
        self.surface = surface
        self.scale = timeline_scale(timestamps, config)
        self.attached = True
        self._unsubscribe = brush.subscribe(self._on_change)

    def _on_change(self, _):
        if self.attached:
            self.render()

    def render(self) -> Frame:
        frame = render_timeline(self.scale, self.brush, self.config)
        self.surface.draw(frame)
        return frame

    def drag(self, x0: float, x1: float):
        """Pointer drag across the timeline, in pixels."""
        r0, r1 = self.scale.range
        x0 = min(max(x0, r0), r1)
        x1 = min(max(x1, r0), r1)
        self.brush.update((x0, x1), self.scale.invert)

    def clear_selection(self):
        self.brush.clear()

    def detach(self):
        self._unsubscribe()


class TimeSeriesPanelView:
    """Per-field line charts of one dataset (target or system fields)."""

    def __init__(
        self,
        name: str,
        points: Sequence[TimeSeriesPoint],
        aggregator: AnomalyAggregator,
        config: LinkViewConfig,
        surface: DrawSurface,
    ):
        self.name = name
        self.aggregator = aggregator
        self.config = config
        self.surface = surface

        self._by_field: Dict[str, List[TimeSeriesPoint]] = {}
        for p in points:
            self._by_field.setdefault(p.field, []).append(p)
        self.attached = True
        aggregator.on_change(self._on_change)

    def _on_change(self, _):
        if self.attached:
            self.render()

    @property
    def fields(self) -> List[str]:
        return list(self._by_field)

    def visible_points(self, field: str) -> List[TimeSeriesPoint]:
        brush = self.aggregator.brush
        return [p for p in self._by_field.get(field, []) if brush.contains(p.timestamp)]

    def render(self) -> List[Frame]:
        frames = []
        for field in self._by_field:
            counts = self.aggregator.counts_for(field)
            frame = render_series_chart(
                field,
                self.visible_points(field),
                self.aggregator.events_for(field),
                counts[AnomalyCategory.ZERO_VALUE],
                counts[AnomalyCategory.SHARP_CHANGE],
                self.config,
            )
            frame = Frame(f"{self.name}:{field}", frame.width, frame.height, frame.items)
            self.surface.draw(frame)
            frames.append(frame)
        return frames


_BAR_TITLES = {
    AnomalyCategory.ZERO_VALUE: ('zero-bar-chart', 'Zero Value Anomalies'),
    AnomalyCategory.SHARP_CHANGE: ('sharp-bar-chart', 'Sharp Change Anomalies'),
}


class AnomalyBarChartView:
    """Two independently sortable bar charts plus the searchable field dictionary."""

    def __init__(
        self,
        aggregator: AnomalyAggregator,
        config: LinkViewConfig,
        surface: DrawSurface,
    ):
        self.aggregator = aggregator
        self.dictionary = aggregator.dictionary
        self.config = config
        self.surface = surface
        self.search_hit: Optional[SearchHit] = None
        self.attached = True
        aggregator.on_change(self._on_change)

    def _on_change(self, _):
        if self.attached:
            self.render()

    def _color(self, category: AnomalyCategory) -> str:
        if category is AnomalyCategory.ZERO_VALUE:
            return self.config.zero_value_color
        return self.config.sharp_change_color

    def render(self) -> List[Frame]:
        highlight = self.search_hit.index if self.search_hit is not None else None
        frames = [render_dictionary_panel(self.dictionary, self.search_hit, self.config)]
        for category, (name, title) in _BAR_TITLES.items():
            frames.append(render_bar_chart(
                name, title,
                self.aggregator.counts.for_category(category),
                self._color(category),
                self.config,
                highlight_index=highlight,
            ))
        for frame in frames:
            self.surface.draw(frame)
        return frames

    def sort(self, category: AnomalyCategory, order: SortOrder = SortOrder.DESCENDING):
        self.aggregator.set_sort_order(category, order)
        self.render()

    def search(self, raw) -> Optional[SearchHit]:
        hit = resolve_index(self.dictionary, raw)
        if hit is None:
            return None
        self.search_hit = hit
        self.render()
        self.surface.scroll_to(hit.element_id)
        return hit

    def hover(self, category: AnomalyCategory, px: float, py: float) -> Optional[TooltipContent]:
        """Pointer over a bar chart (frame-local pixels)."""
        counts = self.aggregator.counts.for_category(category)
        _, y = bar_scales(counts, self.config)
        pos = y.locate(py)
        m = self.config.bar_margin
        if pos is None or px < m.left or px > self.config.bar_chart_width - m.right:
            self.surface.hide_tooltip()
            return None
        fc = counts[pos]
        content = TooltipContent(lines=(
            ('Idx', str(fc.index)),
            ('Name', fc.field),
            ('Value', str(fc.count)),
        ))
        name, _ = _BAR_TITLES[category]
        viewport = (self.config.bar_chart_width, y.range[1] + m.bottom)
        placement = place_tooltip((px, py), estimate_size(content), viewport, self.config.tooltip_offset)
        self.surface.show_tooltip(name, content, placement)
        return content


@dataclass
class MatrixUiState:
    search_hit: Optional[SearchHit] = None
    hovered: Optional[MatrixCell] = None


class MatrixView:
    """Grid view of one relationship matrix with sort/reset/search controls."""

    def __init__(
        self,
        model: RelationshipMatrixModel,
        config: LinkViewConfig,
        surface: DrawSurface,
    ):
        self.model = model
        self.config = config
        self.surface = surface
        self.state = MatrixUiState()

    def render(self) -> List[Frame]:
        snapshot = self.model.snapshot()
        title, lines = matrix_side_lines(
            self.model.semantics,
            self.model.field_counts_summary(),
            self.model.ranked_entries(),
            self.model.dictionary,
        )
        frames = [
            render_dictionary_panel(self.model.dictionary, self.state.search_hit, self.config),
            render_text_panel('side-list', title, lines),
            render_matrix(snapshot, self.config),
        ]
        for frame in frames:
            self.surface.draw(frame)
        return frames

    def sort(self):
        self.model.sort_by_significance()
        self.state.hovered = None
        self.render()

    def reset(self):
        self.model.reset()
        self.state.hovered = None
        self.render()

    def search(self, raw) -> Optional[SearchHit]:
        hit = resolve_index(self.model.dictionary, raw)
        if hit is None:
            return None
        self.state.search_hit = hit
        self.render()
        self.surface.scroll_to(hit.element_id)
        return hit

    def cell_at(self, px: float, py: float) -> Optional[MatrixCell]:
        order = self.model.display_order
        x, y = matrix_scales(len(order), self.config)
        col = x.locate(px)
        row = y.locate(py)
        if col is None or row is None:
            return None
        for cell in self.model.cells():
            if cell.row == row and cell.col == col:
                return cell
        return None

    def hover(self, px: float, py: float) -> Optional[TooltipContent]:
        """Pointer over the matrix (frame-local pixels). Shows or hides the tooltip."""
        cell = self.cell_at(px, py)
        self.state.hovered = cell
        if cell is None:
            self.surface.hide_tooltip()
            return None
        content = self.model.tooltip(cell.entry)
        placement = place_tooltip(
            (px, py), estimate_size(content), self.config.matrix_size, self.config.tooltip_offset,
        )
        self.surface.show_tooltip('matrix', content, placement)
        return content

    def leave(self):
        self.state.hovered = None
        self.surface.hide_tooltip()
