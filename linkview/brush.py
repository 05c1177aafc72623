"""
Brush Range
===========

Time-interval selection shared by every linked view.

A drag on the timeline produces a pixel extent; the timeline's scale
turns it into (start, end). Each update notifies subscribers synchronously
and every subscriber rebuilds its view from the new range. There is no
debouncing: each intermediate drag frame is a complete, valid state.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

TIME_FORMAT = '%Y-%m-%d %H:%M:%S'

Subscriber = Callable[['BrushRange'], None]


class BrushRange:
    """Nullable (start, end) interval. None on a side means unbounded."""

    def __init__(self):
        self.start: Optional[datetime] = None
        self.end: Optional[datetime] = None
        self._subscribers: List[Subscriber] = []

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self):
        for callback in list(self._subscribers):
            callback(self)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update(
        self,
        selection_extent: Optional[Sequence[float]],
        invert: Callable[[float], datetime],
    ):
        """
        Set the range from a pixel extent.

        Parameters
        ----------
        selection_extent : (x0, x1) or None
            Pixel extent of the drag. None clears the brush.
        invert : callable
            Pixel -> timestamp conversion of the timeline scale.
        """
        if selection_extent is None:
            self.clear()
            return
        x0, x1 = selection_extent
        lo, hi = (x0, x1) if x0 <= x1 else (x1, x0)
        self.start = invert(lo)
        self.end = invert(hi)
        logger.debug("Brush updated: %s", self.describe())
        self._notify()

    def set(self, start: Optional[datetime], end: Optional[datetime]):
        """Set the range directly in time coordinates."""
        if start is not None and end is not None and start > end:
            start, end = end, start
        self.start = start
        self.end = end
        self._notify()

    def clear(self):
        self.start = None
        self.end = None
        logger.debug("Brush cleared")
        self._notify()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def contains(self, timestamp: datetime) -> bool:
        return (
            (self.start is None or timestamp >= self.start)
            and (self.end is None or timestamp <= self.end)
        )

    @property
    def is_set(self) -> bool:
        return self.start is not None or self.end is not None

    def as_tuple(self) -> Tuple[Optional[datetime], Optional[datetime]]:
        return self.start, self.end

    def describe(self) -> str:
        """Selected-time caption shown above the timeline."""
        if not self.is_set:
            return 'None'
        start = self.start.strftime(TIME_FORMAT) if self.start is not None else '...'
        end = self.end.strftime(TIME_FORMAT) if self.end is not None else '...'
        return f"{start} - {end}"

    def __repr__(self):
        return f"BrushRange({self.describe()})"
