"""
Value Semantics
===============

Describes how one pairwise analysis reads its numbers: which transform
feeds the color scale, which direction means "more related", what counts
as significant and how values are ranked and printed.

Four presets cover the dashboard analyses:

    CORRELATION    |r| in [0.65, 1], larger = stronger (Blues)
    GRANGER        log10(p), smaller = stronger (Blues)
    DTW            distance in [0, max], smaller = stronger (Greens)
    COINTEGRATION  score in [-50, 0], smaller = stronger, -inf allowed (Greens)
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

import matplotlib
from matplotlib.colors import to_hex

BAD_COLOR = '#cccccc'


class AnalysisKind(Enum):
    CORRELATION = 'correlation'
    PVALUE = 'pvalue'
    DISTANCE = 'distance'
    COINTEGRATION_SCORE = 'cointegration'


class ColorDirection(Enum):
    ASCENDING = 'ascending'    # larger transformed value = more related
    DESCENDING = 'descending'  # smaller transformed value = more related


class Transform(Enum):
    IDENTITY = 'identity'
    ABS = 'abs'
    LOG10 = 'log10'

    def apply(self, value: float) -> float:
        if math.isnan(value):
            return value
        if self is Transform.ABS:
            return abs(value)
        if self is Transform.LOG10:
            if value <= 0:
                return -math.inf
            return math.log10(value)
        return value


class Ranking(Enum):
    ABS_DESC = 'abs_desc'
    ASC = 'asc'
    DESC = 'desc'


class ValueFormat(Enum):
    FIXED = 'fixed'
    EXPONENTIAL = 'exponential'


def format_number(value: float, style: ValueFormat = ValueFormat.FIXED, digits: int = 2) -> str:
    """Print a value the way the tooltips do; infinities print as '-inf' / 'inf'."""
    if value is None:
        return '-'
    if math.isinf(value):
        return '-inf' if value < 0 else 'inf'
    if math.isnan(value):
        return 'NaN'
    if style is ValueFormat.EXPONENTIAL:
        return f"{value:.{digits}e}"
    return f"{value:.{digits}f}"


@dataclass(frozen=True)
class ValueSemantics:
    """Configuration of one relationship matrix."""
    kind: AnalysisKind
    title: str
    value_label: str
    domain: Tuple[float, Optional[float]]  # in transformed units; None = data max
    direction: ColorDirection
    transform: Transform = Transform.IDENTITY
    ranking: Ranking = Ranking.ASC
    value_format: ValueFormat = ValueFormat.FIXED
    colormap: str = 'Blues'
    significance_threshold: Optional[float] = None  # p-value threshold, inclusive

    @property
    def has_significance(self) -> bool:
        return self.significance_threshold is not None

    def is_significant(self, p_value: Optional[float]) -> bool:
        if self.significance_threshold is None or p_value is None or math.isnan(p_value):
            return False
        return p_value <= self.significance_threshold

    def resolve_domain(self, values: Sequence[float]) -> Tuple[float, float]:
        """Concrete (lo, hi) for a set of raw values."""
        lo, hi = self.domain
        if hi is None:
            finite = [self.transform.apply(v) for v in values]
            finite = [v for v in finite if math.isfinite(v)]
            hi = max(finite) if finite else lo + 1.0
        if hi == lo:
            hi = lo + 1.0
        return lo, hi

    def position(self, value: float, domain: Tuple[float, float]) -> float:
        """
        Position of a raw value on the color ramp, 0 = weakest, 1 = strongest.

        Infinite values clamp to the extreme on their side; NaN stays NaN.
        """
        x = self.transform.apply(value)
        if math.isnan(x):
            return math.nan
        lo, hi = domain
        if math.isinf(x):
            t = 0.0 if (x < 0) == (lo < hi) else 1.0
        else:
            t = (x - lo) / (hi - lo)
            t = min(1.0, max(0.0, t))
        if self.direction is ColorDirection.DESCENDING:
            t = 1.0 - t
        return t

    def color_scale(self, values: Sequence[float]) -> Callable[[float], str]:
        """Build a value -> hex color function for this data set."""
        domain = self.resolve_domain(values)
        cmap = matplotlib.colormaps[self.colormap]

        def color(value: float) -> str:
            t = self.position(value, domain)
            if math.isnan(t):
                return BAD_COLOR
            return to_hex(cmap(t))

        return color

    def format_value(self, value: float) -> str:
        return format_number(value, self.value_format)

    def with_threshold(self, threshold: Optional[float]) -> 'ValueSemantics':
        if self.significance_threshold is None:
            return self
        return replace(self, significance_threshold=threshold)


CORRELATION = ValueSemantics(
    kind=AnalysisKind.CORRELATION,
    title='Cross-correlation Analysis',
    value_label='Correlation',
    domain=(0.65, 1.0),
    direction=ColorDirection.ASCENDING,
    transform=Transform.ABS,
    ranking=Ranking.ABS_DESC,
    colormap='Blues',
)

GRANGER = ValueSemantics(
    kind=AnalysisKind.PVALUE,
    title='Granger Test Analysis',
    value_label='P-Value',
    domain=(math.log10(1e-314), 0.0),
    direction=ColorDirection.DESCENDING,
    transform=Transform.LOG10,
    ranking=Ranking.ASC,
    value_format=ValueFormat.EXPONENTIAL,
    colormap='Blues',
    significance_threshold=0.01,
)

DTW = ValueSemantics(
    kind=AnalysisKind.DISTANCE,
    title='DTW Analysis',
    value_label='DTW Distance',
    domain=(0.0, None),
    direction=ColorDirection.DESCENDING,
    ranking=Ranking.ASC,
    colormap='Greens',
)

COINTEGRATION = ValueSemantics(
    kind=AnalysisKind.COINTEGRATION_SCORE,
    title='Co-Integration Analysis',
    value_label='Score',
    domain=(-50.0, 0.0),
    direction=ColorDirection.DESCENDING,
    ranking=Ranking.ASC,
    colormap='Greens',
    significance_threshold=0.01,
)

PRESETS = {
    'correlation': CORRELATION,
    'granger': GRANGER,
    'dtw': DTW,
    'cointegration': COINTEGRATION,
}


def preset_for(name: str, config=None) -> ValueSemantics:
    """Preset by analysis name, with domains and threshold taken from config when given."""
    semantics = PRESETS[name]
    if config is None:
        return semantics
    semantics = semantics.with_threshold(config.significance_threshold)
    if name == 'correlation':
        semantics = replace(semantics, domain=tuple(config.correlation_domain))
    elif name == 'granger':
        semantics = replace(semantics, domain=tuple(config.pvalue_log_domain))
    elif name == 'cointegration':
        semantics = replace(semantics, domain=tuple(config.cointegration_domain))
    return semantics
