"""
LinkView - Linked-view state engine for time-series diagnostics

Field dictionary, brush-driven anomaly aggregation and one generic
relationship-matrix model shared by the correlation, Granger, DTW and
co-integration views.
"""

__version__ = "0.3.0"

from .errors import (
    LinkViewError,
    EmptyDictionaryError,
    UnknownFieldError,
    IndexOutOfRangeError,
    EmptyMatrixError,
    MalformedRecordError,
)
from .fields import FieldDictionary
from .brush import BrushRange
from .anomaly import (
    AnomalyAggregator,
    AnomalyCategory,
    AnomalyEvent,
    FieldCount,
    SortOrder,
    TimeSeriesPoint,
    aggregate,
)
from .matrix import MatrixEntry, RelationshipMatrixModel
from .semantics import ValueSemantics, CORRELATION, GRANGER, DTW, COINTEGRATION
from .tooltip import place_tooltip

# Lazy imports (polars / matplotlib surfaces):
# Use: from linkview.loader import DatasetLoader
# Use: from linkview.workspace import Workspace
# Use: from linkview.surface import MatplotlibSurface

__all__ = [
    '__version__',
    # Errors
    'LinkViewError',
    'EmptyDictionaryError',
    'UnknownFieldError',
    'IndexOutOfRangeError',
    'EmptyMatrixError',
    'MalformedRecordError',
    # Core
    'FieldDictionary',
    'BrushRange',
    'AnomalyAggregator',
    'AnomalyCategory',
    'AnomalyEvent',
    'FieldCount',
    'SortOrder',
    'TimeSeriesPoint',
    'aggregate',
    'MatrixEntry',
    'RelationshipMatrixModel',
    # Value semantics
    'ValueSemantics',
    'CORRELATION',
    'GRANGER',
    'DTW',
    'COINTEGRATION',
    'place_tooltip',
]
