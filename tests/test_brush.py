"""Tests for the brush range and its notifications."""

from datetime import datetime, timedelta

import pytest

from linkview.brush import BrushRange


@pytest.fixture
def invert(t0):
    """One pixel per minute from t0."""
    return lambda px: t0 + timedelta(minutes=px)


class TestContains:

    def test_unset_contains_everything(self, t0):
        brush = BrushRange()
        assert not brush.is_set
        assert brush.contains(t0)
        assert brush.contains(datetime(1970, 1, 1))

    def test_bounds_inclusive(self, t0):
        brush = BrushRange()
        brush.set(t0, t0 + timedelta(minutes=5))
        assert brush.contains(t0)
        assert brush.contains(t0 + timedelta(minutes=5))
        assert not brush.contains(t0 + timedelta(minutes=5, seconds=1))
        assert not brush.contains(t0 - timedelta(seconds=1))

    def test_half_open(self, t0):
        brush = BrushRange()
        brush.set(t0, None)
        assert brush.contains(t0 + timedelta(days=365))
        assert not brush.contains(t0 - timedelta(minutes=1))

    def test_widening_is_monotonic(self, t0):
        """Moving start earlier or end later never drops a contained timestamp."""
        stamps = [t0 + timedelta(minutes=m) for m in range(-20, 21)]
        brush = BrushRange()
        brush.set(t0 - timedelta(minutes=2), t0 + timedelta(minutes=2))
        inside = {t for t in stamps if brush.contains(t)}
        for step in range(1, 10):
            brush.set(t0 - timedelta(minutes=2 + step), t0 + timedelta(minutes=2 + step))
            now_inside = {t for t in stamps if brush.contains(t)}
            assert inside <= now_inside
            inside = now_inside
        brush.set(None, t0 + timedelta(minutes=20))
        assert inside <= {t for t in stamps if brush.contains(t)}


class TestUpdate:

    def test_update_maps_pixels(self, t0, invert):
        brush = BrushRange()
        brush.update((1, 5), invert)
        assert brush.start == t0 + timedelta(minutes=1)
        assert brush.end == t0 + timedelta(minutes=5)

    def test_reversed_drag_is_ordered(self, t0, invert):
        brush = BrushRange()
        brush.update((5, 1), invert)
        assert brush.start < brush.end

    def test_every_update_notifies(self, invert):
        brush = BrushRange()
        seen = []
        brush.subscribe(lambda b: seen.append(b.as_tuple()))
        for x1 in (2, 3, 4):
            brush.update((1, x1), invert)
        assert len(seen) == 3
        assert seen[-1] == brush.as_tuple()

    def test_none_extent_clears(self, invert):
        brush = BrushRange()
        brush.update((1, 2), invert)
        brush.update(None, invert)
        assert not brush.is_set

    def test_clear_notifies(self, invert):
        brush = BrushRange()
        calls = []
        brush.subscribe(lambda b: calls.append(b.is_set))
        brush.update((1, 2), invert)
        brush.clear()
        assert calls == [True, False]
        assert brush.as_tuple() == (None, None)

    def test_unsubscribe(self, invert):
        brush = BrushRange()
        calls = []
        unsubscribe = brush.subscribe(lambda b: calls.append(1))
        brush.update((1, 2), invert)
        unsubscribe()
        brush.update((1, 3), invert)
        assert calls == [1]


class TestDescribe:

    def test_unset(self):
        assert BrushRange().describe() == 'None'

    def test_selected_time_text(self, t0):
        brush = BrushRange()
        brush.set(t0, t0 + timedelta(minutes=5))
        assert brush.describe() == '2024-01-01 10:00:00 - 2024-01-01 10:05:00'
