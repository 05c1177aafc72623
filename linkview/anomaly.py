"""
Anomaly aggregation: per-field event counts inside the brushed range.

Zero-value and sharp-change events are kept in separate lists and only
merged here. Each call recounts from scratch, so the result always
matches the range and events passed in.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .brush import BrushRange
from .fields import FieldDictionary

logger = logging.getLogger(__name__)


class AnomalyCategory(Enum):
    ZERO_VALUE = 'Zero Value'
    SHARP_CHANGE = 'Sharp Change'

    def __str__(self):
        return self.value


class SortOrder(Enum):
    ORIGINAL = 'original'
    DESCENDING = 'desc'


@dataclass(frozen=True)
class TimeSeriesPoint:
    timestamp: datetime
    field: str
    value: float


@dataclass(frozen=True)
class AnomalyEvent:
    timestamp: datetime
    field: str
    value: float
    category: AnomalyCategory


@dataclass(frozen=True)
class FieldCount:
    index: int  # dictionary index (1-based)
    field: str
    count: int


@dataclass(frozen=True)
class AnomalyCounts:
    """Independent count lists, one per category."""
    zero_value: List[FieldCount]
    sharp_change: List[FieldCount]

    def for_category(self, category: AnomalyCategory) -> List[FieldCount]:
        if category is AnomalyCategory.ZERO_VALUE:
            return self.zero_value
        return self.sharp_change

    def total(self, category: AnomalyCategory) -> int:
        return sum(fc.count for fc in self.for_category(category))


def _order(counts: List[FieldCount], sort_order: SortOrder) -> List[FieldCount]:
    if sort_order is SortOrder.DESCENDING:
        return sorted(counts, key=lambda fc: (-fc.count, fc.index))
    return counts


def count_by_field(
    events: Iterable[AnomalyEvent],
    dictionary: FieldDictionary,
    brush: BrushRange,
    category: AnomalyCategory,
    sort_order: SortOrder = SortOrder.ORIGINAL,
) -> List[FieldCount]:
    """Counts of one category for every dictionary field."""
    tally: Dict[str, int] = {name: 0 for name in dictionary}
    skipped = 0
    for event in events:
        if event.category is not category or not brush.contains(event.timestamp):
            continue
        if event.field not in tally:
            skipped += 1
            continue
        tally[event.field] += 1
    if skipped:
        logger.debug("Skipped %d %s events for fields outside the dictionary", skipped, category)

    counts = [FieldCount(index=i, field=name, count=tally[name]) for i, name in dictionary.items()]
    return _order(counts, sort_order)


def aggregate(
    events: Iterable[AnomalyEvent],
    dictionary: FieldDictionary,
    brush: BrushRange,
    sort_order: SortOrder = SortOrder.ORIGINAL,
    sharp_sort_order: Optional[SortOrder] = None,
) -> AnomalyCounts:
    """
    Count events per field and category within the brush.

    Parameters
    ----------
    events : iterable of AnomalyEvent
        Both categories; they are separated here.
    dictionary : FieldDictionary
        Defines the fields and their original order.
    brush : BrushRange
        Only events with brush.contains(timestamp) count.
    sort_order : SortOrder
        ORIGINAL keeps dictionary order; DESCENDING sorts by count with
        ties broken by dictionary index.
    sharp_sort_order : SortOrder, optional
        Separate order for the sharp-change list. Defaults to sort_order.

    Returns
    -------
    AnomalyCounts with zero_value and sharp_change lists.
    """
    events = list(events)
    if sharp_sort_order is None:
        sharp_sort_order = sort_order
    return AnomalyCounts(
        zero_value=count_by_field(events, dictionary, brush, AnomalyCategory.ZERO_VALUE, sort_order),
        sharp_change=count_by_field(events, dictionary, brush, AnomalyCategory.SHARP_CHANGE, sharp_sort_order),
    )


class AnomalyAggregator:
    """
    Brush subscriber that keeps per-field anomaly counts current.

    Sort order is held per category and survives brush changes.
    """

    def __init__(
        self,
        events: Iterable[AnomalyEvent],
        dictionary: FieldDictionary,
        brush: BrushRange,
    ):
        self.events = list(events)
        self.dictionary = dictionary
        self.brush = brush
        self.sort_orders: Dict[AnomalyCategory, SortOrder] = {
            AnomalyCategory.ZERO_VALUE: SortOrder.ORIGINAL,
            AnomalyCategory.SHARP_CHANGE: SortOrder.ORIGINAL,
        }
        self._listeners = []
        self.counts = self.recompute()
        self._unsubscribe = brush.subscribe(self._on_brush)

    def _on_brush(self, brush: BrushRange):
        self.counts = self.recompute()
        for listener in list(self._listeners):
            listener(self.counts)

    def on_change(self, listener):
        """Call listener(counts) after every recomputation."""
        self._listeners.append(listener)

    def recompute(self) -> AnomalyCounts:
        return aggregate(
            self.events,
            self.dictionary,
            self.brush,
            sort_order=self.sort_orders[AnomalyCategory.ZERO_VALUE],
            sharp_sort_order=self.sort_orders[AnomalyCategory.SHARP_CHANGE],
        )

    def set_sort_order(self, category: AnomalyCategory, order: SortOrder) -> AnomalyCounts:
        self.sort_orders[category] = order
        self.counts = self.recompute()
        return self.counts

    def counts_for(self, field: str) -> Dict[AnomalyCategory, int]:
        """Brushed counts of both categories for one field."""
        result = {AnomalyCategory.ZERO_VALUE: 0, AnomalyCategory.SHARP_CHANGE: 0}
        for category in result:
            for fc in self.counts.for_category(category):
                if fc.field == field:
                    result[category] = fc.count
                    break
        return result

    def events_for(self, field: str, category: Optional[AnomalyCategory] = None) -> List[AnomalyEvent]:
        """Brushed events of one field, optionally of one category."""
        return [
            e for e in self.events
            if e.field == field
            and (category is None or e.category is category)
            and self.brush.contains(e.timestamp)
        ]

    def detach(self):
        self._unsubscribe()
