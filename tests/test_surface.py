"""Tests for the draw surface contract."""

import pytest

from linkview.render import Frame
from linkview.surface import DrawSurface, RecordingSurface
from linkview.tooltip import TooltipContent, TooltipPlacement


class TestDrawSurface:

    def test_cannot_instantiate_interface(self):
        with pytest.raises(TypeError):
            DrawSurface()

    def test_partial_surface_rejected(self):
        class FramesOnly(DrawSurface):
            def draw(self, frame):
                pass

        with pytest.raises(TypeError):
            FramesOnly()

    def test_recording_surface_is_a_surface(self):
        assert isinstance(RecordingSurface(), DrawSurface)


class TestRecordingSurface:

    def test_frames_replace_by_name(self):
        surface = RecordingSurface()
        surface.draw(Frame('matrix', 10, 10))
        surface.draw(Frame('matrix', 20, 20))
        assert surface.frames['matrix'].width == 20
        assert surface.draw_count == 2

    def test_tooltip_and_clear(self):
        surface = RecordingSurface()
        content = TooltipContent((('Name', 'cpu'),))
        surface.show_tooltip('matrix', content, TooltipPlacement(1, 2))
        assert surface.tooltip[0] == 'matrix'
        surface.draw(Frame('matrix', 10, 10))
        surface.clear()
        assert surface.tooltip is None
        assert not surface.frames
