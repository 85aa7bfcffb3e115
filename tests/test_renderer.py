"""Unit tests for the SVG drawing surface."""
import math

import pytest

from skymap.projection import ScreenPoint
from skymap.renderer import CLIP_ID, SvgSurface


@pytest.fixture
def svg():
    surface = SvgSurface(200, 100)
    surface.begin_frame()
    return surface


class TestShapes:
    def test_disk(self, svg):
        svg.draw_disk(ScreenPoint(10, 20), 3, "#abcdef")
        assert svg.elements == ['<circle cx="10.0" cy="20.0" r="3.00" fill="#abcdef"/>']

    @pytest.mark.parametrize("center, radius", [
        (ScreenPoint(math.nan, 0), 1),
        (ScreenPoint(0, math.inf), 1),
        (ScreenPoint(0, 0), math.inf),
        (ScreenPoint(0, 0), 0),
    ])
    def test_disk_skips_degenerate(self, svg, center, radius):
        svg.draw_disk(center, radius, "#fff")
        assert svg.elements == []

    def test_glow_adds_filter(self, svg):
        svg.draw_disk(ScreenPoint(1, 1), 1, "#fff", glow=4)
        assert 'filter="url(#glow-4)"' in svg.elements[0]
        assert '<filter id="glow-4">' in svg.to_svg()


class TestPaths:
    def test_polyline(self, svg):
        svg.begin_path()
        svg.move_to(ScreenPoint(0, 0))
        svg.line_to(ScreenPoint(10, 0))
        svg.line_to(ScreenPoint(10, 10))
        svg.stroke("#eee", 2)
        assert svg.elements == [
            '<path d="M0.0 0.0 L10.0 0.0 L10.0 10.0" fill="none" stroke="#eee" stroke-width="2.00"/>'
        ]

    def test_moves_only_draw_nothing(self, svg):
        svg.begin_path()
        svg.move_to(ScreenPoint(0, 0))
        svg.move_to(ScreenPoint(5, 5))
        svg.stroke("#eee", 1)
        assert svg.elements == []

    def test_line_without_current_point_starts_one(self, svg):
        svg.begin_path()
        svg.line_to(ScreenPoint(1, 1))
        svg.line_to(ScreenPoint(2, 2))
        svg.stroke("#eee", 1)
        assert 'd="M1.0 1.0 L2.0 2.0"' in svg.elements[0]

    def test_nan_vertices_dropped(self, svg):
        svg.begin_path()
        svg.move_to(ScreenPoint(0, 0))
        svg.line_to(ScreenPoint(math.nan, 3))
        svg.line_to(ScreenPoint(4, 4))
        svg.stroke("#eee", 1)
        assert "nan" not in svg.elements[0]


class TestText:
    def test_escaped(self, svg):
        svg.fill_text("Sun & <Moon>", 5, 6, "#fff", 12, font_family="'Georgia'")
        element = svg.elements[0]
        assert "Sun &amp; &lt;Moon&gt;" in element
        assert "font-family=\"'Georgia'\"" in element

    def test_measure(self, svg):
        assert svg.measure_text("abcd", 10) == pytest.approx(22.0)


class TestDocument:
    def test_clip_wraps_content(self, svg):
        svg.clip_circle(ScreenPoint(100, 50), 50)
        svg.fill_background("#000000")
        doc = svg.to_svg()
        assert doc.startswith('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 100"')
        assert f'<clipPath id="{CLIP_ID}">' in doc
        assert f'<g clip-path="url(#{CLIP_ID})">' in doc
        assert doc.endswith("</svg>")

    def test_begin_frame_resets(self, svg):
        svg.fill_background("#000")
        svg.begin_frame()
        assert svg.elements == []
        assert svg.frames == 2
