"""
Workspace: wires one loaded dataset into linked views.

Owns the shared BrushRange, builds the FieldDictionary once, and
creates views on demand. Switching the active view mirrors the
dashboard's button bar; each view re-renders from current state.
"""

import logging
from typing import Dict, List, Optional

from .anomaly import AnomalyAggregator
from .brush import BrushRange
from .config import LinkViewConfig
from .fields import FieldDictionary
from .loader import LoadedDataset
from .matrix import RelationshipMatrixModel
from .render import Frame
from .semantics import preset_for
from .surface import DrawSurface, RecordingSurface
from .views import AnomalyBarChartView, MatrixView, TimelineView, TimeSeriesPanelView

logger = logging.getLogger(__name__)

MATRIX_VIEWS = ('correlation', 'granger', 'dtw', 'cointegration')
VIEW_NAMES = ('timeseries', 'anomalies') + MATRIX_VIEWS


class Workspace:
    """
    Coordinator for one dataset.

    Raises EmptyDictionaryError at construction when the dataset has no
    fields. Matrix views raise EmptyMatrixError when first requested
    without entries.
    """

    def __init__(
        self,
        dataset: LoadedDataset,
        config: LinkViewConfig,
        surface: Optional[DrawSurface] = None,
    ):
        self.dataset = dataset
        self.config = config
        self.surface = surface if surface is not None else RecordingSurface()

        self.dictionary = FieldDictionary.build(dataset.field_names)
        self.brush = BrushRange()
        self.aggregator = AnomalyAggregator(dataset.anomalies, self.dictionary, self.brush)

        self._timestamps = dataset.timestamps()
        self._timeline: Optional[TimelineView] = None
        self._panels: Dict[str, TimeSeriesPanelView] = {}
        self._bars: Optional[AnomalyBarChartView] = None
        self._matrices: Dict[str, MatrixView] = {}
        self.active = 'timeseries'

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def timeline(self) -> Optional[TimelineView]:
        """Brush selector; None when the dataset has no timestamps at all."""
        if self._timeline is None and self._timestamps:
            self._timeline = TimelineView(self.brush, self._timestamps, self.config, self.surface)
        return self._timeline

    def panel(self, role: str) -> TimeSeriesPanelView:
        if role not in self._panels:
            self._panels[role] = TimeSeriesPanelView(
                role, self.dataset.series.get(role, []), self.aggregator, self.config, self.surface,
            )
        return self._panels[role]

    @property
    def bar_charts(self) -> AnomalyBarChartView:
        if self._bars is None:
            self._bars = AnomalyBarChartView(self.aggregator, self.config, self.surface)
        return self._bars

    def matrix(self, name: str) -> MatrixView:
        if name not in MATRIX_VIEWS:
            raise KeyError(f"Unknown matrix view: {name!r}")
        if name not in self._matrices:
            model = RelationshipMatrixModel.from_entries(
                self.dataset.matrices.get(name, []),
                self.dictionary,
                preset_for(name, self.config),
            )
            self._matrices[name] = MatrixView(model, self.config, self.surface)
        return self._matrices[name]

    # ------------------------------------------------------------------
    # Active view
    # ------------------------------------------------------------------

    def select(self, name: str) -> List[Frame]:
        """Make a view active and render it from scratch."""
        if name not in VIEW_NAMES:
            raise KeyError(f"Unknown view: {name!r}. Choose from {', '.join(VIEW_NAMES)}")
        self.active = name
        if isinstance(self.surface, RecordingSurface):
            self.surface.clear()
        self._attach()
        return self.render()

    def _attach(self):
        """Only views on screen redraw on brush changes."""
        if self._timeline is not None:
            self._timeline.attached = self.active not in MATRIX_VIEWS
        for panel in self._panels.values():
            panel.attached = self.active == 'timeseries'
        if self._bars is not None:
            self._bars.attached = self.active == 'anomalies'

    def render(self) -> List[Frame]:
        frames: List[Frame] = []
        if self.active in MATRIX_VIEWS:
            return self.matrix(self.active).render()

        timeline = self.timeline
        if self.active == 'anomalies':
            views = [self.bar_charts]
        else:
            views = [self.panel('target'), self.panel('system')]
        self._attach()

        if timeline is not None:
            frames.append(timeline.render())
        for view in views:
            frames.extend(view.render())
        return frames

    def search(self, raw):
        """Search the active view's field dictionary; no-op on bad input."""
        if self.active in MATRIX_VIEWS:
            return self.matrix(self.active).search(raw)
        if self.active == 'anomalies':
            return self.bar_charts.search(raw)
        return None
