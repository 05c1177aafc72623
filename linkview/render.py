"""
Render Instructions
===================

Pure functions: (model snapshot, UI state, layout config) -> Frame.

A Frame is a flat list of drawing primitives in pixel coordinates.
Nothing here knows about a graphics API; surfaces (see surface.py)
turn frames into pictures.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

from .anomaly import AnomalyCategory, AnomalyEvent, FieldCount, TimeSeriesPoint
from .brush import BrushRange
from .config import LinkViewConfig, Margin
from .fields import FieldDictionary
from .matrix import MatrixEntry, MatrixSnapshot, RelationshipCount
from .scales import BandScale, LinearScale, TimeScale
from .search import SearchHit
from .semantics import AnalysisKind, ValueSemantics

OUTLINE_COLOR = 'red'


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str
    stroke: Optional[str] = None
    stroke_width: float = 0.0
    alpha: float = 1.0


@dataclass(frozen=True)
class Line:
    points: Tuple[Tuple[float, float], ...]
    stroke: str = 'black'
    width: float = 1.0


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    fill: str


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    anchor: str = 'start'  # start | middle | end
    rotation: float = 0.0
    size: float = 10.0
    color: str = 'black'
    weight: str = 'normal'
    element_id: Optional[str] = None


Primitive = Union[Rect, Line, Circle, Text]


@dataclass(frozen=True)
class Frame:
    name: str
    width: float
    height: float
    items: Tuple[Primitive, ...] = field(default_factory=tuple)

    def of_type(self, kind) -> List[Primitive]:
        return [item for item in self.items if isinstance(item, kind)]

    def texts(self) -> List[str]:
        return [item.text for item in self.items if isinstance(item, Text)]


# ---------------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------------

def matrix_scales(n_fields: int, config: LinkViewConfig) -> Tuple[BandScale, BandScale]:
    """Column (x) and row (y) band scales over display positions."""
    width, height = config.matrix_size
    m = config.matrix_margin
    positions = list(range(n_fields))
    x = BandScale(positions, (m.left, width - m.right), config.band_padding)
    y = BandScale(positions, (m.top, height - m.bottom), config.band_padding)
    return x, y


def render_matrix(snapshot: MatrixSnapshot, config: LinkViewConfig) -> Frame:
    """Grid cells, significance outlines and dictionary-index axis labels."""
    width, height = config.matrix_size
    m = config.matrix_margin
    x, y = matrix_scales(len(snapshot.display_order), config)
    items: List[Primitive] = []

    for cell in snapshot.cells:
        items.append(Rect(
            x=x.at(cell.col),
            y=y.at(cell.row),
            width=x.bandwidth,
            height=y.bandwidth,
            fill=cell.color,
            stroke=OUTLINE_COLOR if cell.outline else None,
            stroke_width=2.0 if cell.outline else 0.0,
        ))

    # x axis (bottom, rotated labels) and y axis (left)
    axis_y = height - m.bottom
    items.append(Line(((m.left, axis_y), (width - m.right, axis_y))))
    items.append(Line(((m.left, m.top), (m.left, axis_y))))
    for pos, label in enumerate(snapshot.axis_labels):
        cx = x.at(pos) + x.bandwidth / 2
        cy = y.at(pos) + y.bandwidth / 2
        items.append(Text(cx, axis_y + 12, label, anchor='end', rotation=-45, size=8))
        items.append(Text(m.left - 4, cy, label, anchor='end', size=8))

    items.append(Text(width / 2, m.top / 2, snapshot.semantics.title, anchor='middle',
                      size=14, weight='bold'))
    return Frame('matrix', width, height, tuple(items))


def matrix_side_lines(
    semantics: ValueSemantics,
    summary: Sequence[RelationshipCount],
    ranked: Sequence[MatrixEntry],
    dictionary: FieldDictionary,
) -> Tuple[str, List[str]]:
    """Title and lines of the companion list next to a matrix."""
    if semantics.kind is AnalysisKind.DISTANCE:
        lines = []
        for i, e in enumerate(ranked):
            idx1 = dictionary.get_index(e.field1) or 0
            idx2 = dictionary.get_index(e.field2) or 0
            lines.append(f"{i + 1}: {idx1} - {idx2} (DTW: {e.value:.2f})")
        return 'Sorted Distances', lines

    label = 'Significant Relationships' if semantics.has_significance else 'Relationships'
    lines = [f"{i + 1}: {rc.field} ({label}: {rc.count})" for i, rc in enumerate(summary)]
    return f"Fields by {label}", lines


def render_text_panel(
    name: str,
    title: str,
    lines: Sequence[str],
    width: float = 300,
    line_height: float = 16,
    element_ids: Optional[Sequence[Optional[str]]] = None,
    highlight: Optional[int] = None,
    highlight_color: str = 'orange',
) -> Frame:
    """Scrollable list panel: a title followed by one text row per line."""
    items: List[Primitive] = [Text(10, 20, title, size=12, weight='bold')]
    for i, line in enumerate(lines):
        y = 40 + i * line_height
        if highlight is not None and i == highlight:
            items.append(Rect(5, y - line_height + 4, width - 10, line_height, fill=highlight_color, alpha=0.4))
        element_id = element_ids[i] if element_ids is not None else None
        items.append(Text(10, y, line, size=10, element_id=element_id))
    height = 40 + len(lines) * line_height + 10
    return Frame(name, width, height, tuple(items))


def render_dictionary_panel(
    dictionary: FieldDictionary,
    hit: Optional[SearchHit] = None,
    config: Optional[LinkViewConfig] = None,
) -> Frame:
    """Field Dictionary list; the searched entry is highlighted."""
    lines = [f"{i}: {name}" for i, name in dictionary.items()]
    ids = [f"field-{i}" for i, _ in dictionary.items()]
    highlight = hit.index - 1 if hit is not None else None
    color = config.highlight_color if config is not None else 'orange'
    return render_text_panel('dictionary', 'Field Dictionary', lines, element_ids=ids,
                             highlight=highlight, highlight_color=color)


# ---------------------------------------------------------------------------
# Timeline and brush
# ---------------------------------------------------------------------------

def timeline_scale(timestamps: Sequence[datetime], config: LinkViewConfig) -> TimeScale:
    width, _ = config.timeline_size
    m = config.timeline_margin
    return TimeScale.from_timestamps(timestamps, (m.left, width - m.right))


def render_timeline(scale: TimeScale, brush: BrushRange, config: LinkViewConfig) -> Frame:
    """Time axis with the current brush selection and its caption."""
    width, height = config.timeline_size
    m = config.timeline_margin
    axis_y = height - m.bottom
    r0, r1 = scale.range
    items: List[Primitive] = [Line(((r0, axis_y), (r1, axis_y)))]

    for tick in scale.ticks(5):
        px = scale(tick)
        items.append(Line(((px, axis_y), (px, axis_y + 6))))
        items.append(Text(px, axis_y + 18, tick.strftime('%H:%M'), anchor='middle', size=8))

    if brush.is_set:
        x0 = scale(brush.start) if brush.start is not None else r0
        x1 = scale(brush.end) if brush.end is not None else r1
        x0, x1 = max(r0, min(x0, x1)), min(r1, max(x0, x1))
        items.append(Rect(x0, 0, max(0.0, x1 - x0), axis_y, fill='#777777', stroke='white',
                          stroke_width=1.0, alpha=0.3))

    items.append(Text(width / 2, 12, f"Selected Time: {brush.describe()}", anchor='middle',
                      size=10, weight='bold'))
    return Frame('timeline', width, height, tuple(items))


# ---------------------------------------------------------------------------
# Anomaly bar charts
# ---------------------------------------------------------------------------

def bar_chart_height(n_bars: int, config: LinkViewConfig) -> float:
    m = config.bar_margin
    return m.top + m.bottom + n_bars * config.bar_row_height


def bar_scales(counts: Sequence[FieldCount], config: LinkViewConfig) -> Tuple[LinearScale, BandScale]:
    m = config.bar_margin
    height = bar_chart_height(len(counts), config)
    max_count = max((fc.count for fc in counts), default=0)
    x = LinearScale((0, max_count), (m.left, config.bar_chart_width - m.right))
    y = BandScale([str(fc.index) for fc in counts], (m.top, height - m.bottom), 0.15)
    return x, y


def render_bar_chart(
    name: str,
    title: str,
    counts: Sequence[FieldCount],
    color: str,
    config: LinkViewConfig,
    highlight_index: Optional[int] = None,
) -> Frame:
    """Horizontal bars, one per field, labeled by dictionary index."""
    m = config.bar_margin
    width = config.bar_chart_width
    height = bar_chart_height(len(counts), config)
    x, y = bar_scales(counts, config)
    items: List[Primitive] = [Text(m.left, m.top / 2, title, size=12, weight='bold')]

    for fc in counts:
        top = y(str(fc.index))
        highlighted = highlight_index is not None and fc.index == highlight_index
        bar_width = x(fc.count) - m.left if x.domain[1] > 0 else 0.0
        items.append(Rect(
            x=m.left,
            y=top,
            width=bar_width,
            height=y.bandwidth,
            fill=config.highlight_color if highlighted else color,
        ))
        items.append(Text(m.left - 4, top + y.bandwidth / 2, str(fc.index), anchor='end', size=8))

    axis_y = height - m.bottom
    items.append(Line(((m.left, axis_y), (width - m.right, axis_y))))
    items.append(Line(((m.left, m.top), (m.left, axis_y))))
    if x.domain[1] > 0:
        for tick in x.ticks(5):
            items.append(Text(x(tick), axis_y + 14, f"{tick:g}", anchor='middle', size=8))
    return Frame(name, width, height, tuple(items))


# ---------------------------------------------------------------------------
# Time-series panels
# ---------------------------------------------------------------------------

def render_series_chart(
    field_name: str,
    points: Sequence[TimeSeriesPoint],
    anomalies: Sequence[AnomalyEvent],
    zero_count: int,
    sharp_count: int,
    config: LinkViewConfig,
) -> Frame:
    """
    One field's line chart with anomaly markers and count legend.

    x spans the points passed in (already brush-filtered); y spans
    [0, max value].
    """
    width, height = config.chart_size
    m: Margin = config.chart_margin
    items: List[Primitive] = [
        Text(width / 2, m.top / 2, field_name, anchor='middle', size=12, weight='bold'),
    ]

    if points:
        x = TimeScale.from_timestamps([p.timestamp for p in points], (m.left, width - m.right))
        max_value = max(p.value for p in points)
        y = LinearScale((0, max(max_value, 0.0)), (height - m.bottom, m.top))

        axis_y = height - m.bottom
        items.append(Line(((m.left, axis_y), (width - m.right, axis_y))))
        items.append(Line(((m.left, m.top), (m.left, axis_y))))
        for tick in x.ticks(5):
            items.append(Text(x(tick), axis_y + 14, tick.strftime('%H:%M'), anchor='middle', size=8))
        for tick in y.ticks(4):
            items.append(Text(m.left - 4, y(tick), f"{tick:.3g}", anchor='end', size=8))

        ordered = sorted(points, key=lambda p: p.timestamp)
        items.append(Line(tuple((x(p.timestamp), y(p.value)) for p in ordered),
                          stroke=config.series_color, width=1.5))

        for event in anomalies:
            if event.category is AnomalyCategory.ZERO_VALUE:
                items.append(Circle(x(event.timestamp), y(event.value), 2, config.zero_value_color))
            else:
                items.append(Circle(x(event.timestamp), y(event.value), 4, config.sharp_change_color))

    legend = (f"{config.zero_value_color.title()} (Zero Value): {zero_count} | "
              f"{config.sharp_change_color.title()} (Sharp Change): {sharp_count}")
    items.append(Text(width / 2, height - 4, legend, anchor='middle', size=10))
    return Frame(f"series:{field_name}", width, height, tuple(items))
