"""SVG drawing surface for the sky map.

The engine only hands over geometry; this module turns it into SVG
markup. One frame = begin_frame() ... to_svg().
"""
from __future__ import annotations

import math
from typing import Protocol
from xml.sax.saxutils import escape, quoteattr

from skymap.projection import ScreenPoint

# -- Text Constants --
TEXT_ADVANCE_EM = 0.55      # mean glyph advance as a fraction of font size
DEFAULT_FONT = "'Georgia', 'Times New Roman', serif"

CLIP_ID = "sky-clip"


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


class DrawingSurface(Protocol):
    width: float
    height: float

    def resize(self, width: float, height: float) -> None: ...
    def begin_frame(self) -> None: ...
    def clip_circle(self, center: ScreenPoint, radius: float) -> None: ...
    def fill_background(self, color: str) -> None: ...
    def draw_disk(self, center: ScreenPoint, radius: float, color: str, glow: float = 0) -> None: ...
    def begin_path(self) -> None: ...
    def move_to(self, point: ScreenPoint) -> None: ...
    def line_to(self, point: ScreenPoint) -> None: ...
    def stroke(self, color: str, width: float, glow: float = 0) -> None: ...
    def stroke_circle(self, center: ScreenPoint, radius: float, color: str, width: float) -> None: ...
    def measure_text(self, text: str, font_size: float) -> float: ...
    def fill_text(self, text: str, x: float, y: float, color: str, font_size: float,
                  font_family: str = DEFAULT_FONT) -> None: ...


class SvgSurface:
    """Accumulates one frame of SVG elements.

    Points or radii that are not finite (NaN azimuths, zero FOV) are
    dropped rather than written out.
    """

    def __init__(self, width: float = 800, height: float = 800) -> None:
        self.width = width
        self.height = height
        self.frames = 0
        self._clip: tuple[ScreenPoint, float] | None = None
        self._parts: list[str] = []
        self._path: list[str] = []
        self._filters: set[str] = set()

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def begin_frame(self) -> None:
        self.frames += 1
        self._clip = None
        self._parts = []
        self._path = []
        self._filters = set()

    @property
    def elements(self) -> list[str]:
        return list(self._parts)

    # -- Shapes --

    def clip_circle(self, center: ScreenPoint, radius: float) -> None:
        self._clip = (center, radius)

    def fill_background(self, color: str) -> None:
        self._parts.append(f'<rect width="100%" height="100%" fill={quoteattr(color)}/>')

    def draw_disk(self, center: ScreenPoint, radius: float, color: str, glow: float = 0) -> None:
        if not _finite(center.x, center.y, radius) or radius <= 0:
            return
        self._parts.append(
            f'<circle cx="{center.x:.1f}" cy="{center.y:.1f}" r="{radius:.2f}" '
            f'fill={quoteattr(color)}{self._glow_attr(glow)}/>'
        )

    def stroke_circle(self, center: ScreenPoint, radius: float, color: str, width: float) -> None:
        self._parts.append(
            f'<circle cx="{center.x:.1f}" cy="{center.y:.1f}" r="{radius:.1f}" '
            f'fill="none" stroke={quoteattr(color)} stroke-width="{width:.2f}"/>'
        )

    # -- Paths --

    def begin_path(self) -> None:
        self._path = []

    def move_to(self, point: ScreenPoint) -> None:
        if _finite(point.x, point.y):
            self._path.append(f"M{point.x:.1f} {point.y:.1f}")

    def line_to(self, point: ScreenPoint) -> None:
        if not _finite(point.x, point.y):
            return
        # a line with no current point starts one, as on a canvas
        cmd = "L" if self._path else "M"
        self._path.append(f"{cmd}{point.x:.1f} {point.y:.1f}")

    def stroke(self, color: str, width: float, glow: float = 0) -> None:
        if any(cmd.startswith("L") for cmd in self._path):
            self._parts.append(
                f'<path d="{" ".join(self._path)}" fill="none" stroke={quoteattr(color)} '
                f'stroke-width="{width:.2f}"{self._glow_attr(glow)}/>'
            )

    # -- Text --

    def measure_text(self, text: str, font_size: float) -> float:
        """Approximate advance width; SVG has no font metrics at build time."""
        return len(text) * font_size * TEXT_ADVANCE_EM

    def fill_text(self, text: str, x: float, y: float, color: str, font_size: float,
                  font_family: str = DEFAULT_FONT) -> None:
        if not _finite(x, y):
            return
        self._parts.append(
            f'<text x="{x:.1f}" y="{y:.1f}" fill={quoteattr(color)} '
            f'font-family={quoteattr(font_family)} font-size="{font_size:.1f}">'
            f'{escape(text)}</text>'
        )

    # -- Output --

    def _glow_attr(self, glow: float) -> str:
        if glow <= 0:
            return ""
        filter_id = f"glow-{glow:g}"
        self._filters.add(filter_id)
        return f' filter="url(#{filter_id})"'

    def to_svg(self) -> str:
        """Assemble the current frame as a complete SVG document."""
        parts: list[str] = [
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'viewBox="0 0 {self.width:g} {self.height:g}" '
            f'width="{self.width:g}" height="{self.height:g}">'
        ]

        defs: list[str] = []
        if self._clip is not None:
            center, radius = self._clip
            defs.append(f'<clipPath id="{CLIP_ID}">')
            defs.append(f'<circle cx="{center.x:.1f}" cy="{center.y:.1f}" r="{radius:.1f}"/>')
            defs.append("</clipPath>")
        for filter_id in sorted(self._filters):
            blur = filter_id.removeprefix("glow-")
            defs.append(
                f'<filter id="{filter_id}"><feGaussianBlur stdDeviation="{float(blur) / 2:g}" result="b"/>'
                f'<feMerge><feMergeNode in="b"/><feMergeNode in="SourceGraphic"/></feMerge></filter>'
            )
        if defs:
            parts.append("<defs>")
            parts.extend(defs)
            parts.append("</defs>")

        if self._clip is not None:
            parts.append(f'<g clip-path="url(#{CLIP_ID})">')
            parts.extend(self._parts)
            parts.append("</g>")
        else:
            parts.extend(self._parts)

        parts.append("</svg>")
        return "\n".join(parts)
