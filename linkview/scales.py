"""
Scales: domain <-> pixel mappings used by the render functions.

BandScale   categorical keys -> equal bands (matrix rows/columns, bars)
LinearScale numbers -> pixels, invertible
TimeScale   datetimes -> pixels, invertible (timeline brush)
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np


class BandScale:
    """Evenly spaced bands with inner and outer padding, centered in the range."""

    def __init__(self, domain: Sequence[Hashable], range_: Tuple[float, float], padding: float = 0.1):
        self.domain = list(domain)
        self.range = range_
        self.padding = padding
        self._position: Dict[Hashable, int] = {key: i for i, key in enumerate(self.domain)}

        r0, r1 = range_
        n = len(self.domain)
        self.step = (r1 - r0) / max(1.0, n - padding + 2 * padding)
        self.bandwidth = self.step * (1 - padding)
        self.start = r0 + (r1 - r0 - self.step * (n - padding)) * 0.5

    def __call__(self, key: Hashable) -> Optional[float]:
        i = self._position.get(key)
        if i is None:
            return None
        return self.start + self.step * i

    def at(self, position: int) -> float:
        return self.start + self.step * position

    def locate(self, pixel: float) -> Optional[int]:
        """Position of the band containing pixel, or None in padding/outside."""
        if not self.domain or self.step <= 0:
            return None
        i = int(np.floor((pixel - self.start) / self.step))
        if i < 0 or i >= len(self.domain):
            return None
        if pixel - self.at(i) > self.bandwidth:
            return None
        return i


class LinearScale:
    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.domain = domain
        self.range = range_

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return d0
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)

    def ticks(self, count: int = 5) -> List[float]:
        d0, d1 = self.domain
        return [float(v) for v in np.linspace(d0, d1, count + 1)]


def _seconds(ts: datetime) -> float:
    if ts.tzinfo is None:
        return (ts - datetime(1970, 1, 1)).total_seconds()
    return (ts - datetime(1970, 1, 1, tzinfo=timezone.utc)).total_seconds()


class TimeScale:
    """Linear time scale; inverted pixels come back as naive or aware datetimes like the domain."""

    def __init__(self, domain: Tuple[datetime, datetime], range_: Tuple[float, float]):
        self.domain = domain
        self.range = range_
        self._aware = domain[0].tzinfo is not None
        self._linear = LinearScale((_seconds(domain[0]), _seconds(domain[1])), range_)

    @classmethod
    def from_timestamps(cls, timestamps: Sequence[datetime], range_: Tuple[float, float]) -> 'TimeScale':
        timestamps = list(timestamps)
        if not timestamps:
            raise ValueError("TimeScale needs at least one timestamp")
        return cls((min(timestamps), max(timestamps)), range_)

    def __call__(self, ts: datetime) -> float:
        return self._linear(_seconds(ts))

    def invert(self, pixel: float) -> datetime:
        seconds = self._linear.invert(pixel)
        if self._aware:
            return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=seconds)
        return datetime(1970, 1, 1) + timedelta(seconds=seconds)

    def ticks(self, count: int = 5) -> List[datetime]:
        r0, r1 = self.range
        return [self.invert(float(p)) for p in np.linspace(r0, r1, count + 1)]
