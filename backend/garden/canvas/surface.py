"""Stroke capture surface — pointer input rasterized at device pixel density.

The surface is addressed in logical units (DISPLAY_SIZE × DISPLAY_SIZE). The
backing buffer is DISPLAY_SIZE × device_pixel_ratio on each side, so every
drawing operation is scaled by the pixel ratio before it touches pixels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from PIL import Image, ImageDraw

logger = logging.getLogger(__name__)

# Logical edge length of the drawing area, in CSS-pixel-like units.
DISPLAY_SIZE = 224

BRUSH_SIZE = 10

# Petal, accent and stem colors offered by the drawing UI.
BRUSH_COLORS = (
    "#E74C3C",
    "#FF8C42",
    "#FFD166",
    "#FFB3C1",
    "#3C7A3B",
)

TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class BoundingRect:
    """Position of the surface inside the viewport (client coordinates)."""

    left: float = 0.0
    top: float = 0.0

    def to_local(self, point: Point) -> Point:
        return Point(point.x - self.left, point.y - self.top)


@dataclass
class Stroke:
    """The path being drawn while the pointer is down. Never kept after ``end``."""

    color: str
    width: float
    points: list[Point] = field(default_factory=list)

    @property
    def current(self) -> Point:
        return self.points[-1]


class CaptureSurface:
    """Raster drawing surface with begin/extend/end/clear semantics.

    No history is kept: strokes are burned into the buffer as they are drawn.
    Calls on a surface that has not been initialized are silently ignored.
    """

    def __init__(
        self,
        device_pixel_ratio: float = 1.0,
        rect: BoundingRect | None = None,
        color: str = BRUSH_COLORS[0],
        line_width: float = BRUSH_SIZE,
    ) -> None:
        if device_pixel_ratio <= 0:
            raise ValueError(f"device_pixel_ratio must be positive, got {device_pixel_ratio}")
        self.device_pixel_ratio = device_pixel_ratio
        self.rect = rect or BoundingRect()
        self.color = color
        self.line_width = line_width
        self.enabled = True
        self._buffer: Image.Image | None = None
        self._draw: ImageDraw.ImageDraw | None = None
        self._stroke: Stroke | None = None

    # ── Lifecycle ──

    def initialize(self) -> None:
        """Allocate the high-DPI buffer and clear it to transparent."""
        side = int(DISPLAY_SIZE * self.device_pixel_ratio)
        self._buffer = Image.new("RGBA", (side, side), TRANSPARENT)
        self._draw = ImageDraw.Draw(self._buffer)
        self._stroke = None
        self.clear()
        logger.debug("Capture surface initialized at %dx%d (ratio %.2f)", side, side, self.device_pixel_ratio)

    @property
    def initialized(self) -> bool:
        return self._buffer is not None

    @property
    def buffer(self) -> Image.Image | None:
        return self._buffer

    @property
    def is_drawing(self) -> bool:
        return self._stroke is not None

    def disable(self) -> None:
        """Block new strokes while a submission is in flight."""
        self.enabled = False
        self._stroke = None

    def enable(self) -> None:
        self.enabled = True

    # ── Drawing ──

    def begin(self, point: Point) -> None:
        if self._draw is None or not self.enabled:
            return
        local = self.rect.to_local(point)
        self._stroke = Stroke(color=self.color, width=self.line_width, points=[local])

    def extend(self, point: Point) -> None:
        if self._draw is None or self._stroke is None:
            return
        local = self.rect.to_local(point)
        stroke = self._stroke
        self._segment(self._draw, stroke.current, local, stroke.color, stroke.width)
        stroke.points.append(local)

    def end(self) -> None:
        self._stroke = None

    def clear(self) -> None:
        """Repaint the logical drawing area fully transparent."""
        if self._buffer is None:
            return
        box = self._device_box(self._buffer.size, 0, 0, DISPLAY_SIZE, DISPLAY_SIZE)
        self._buffer.paste(TRANSPARENT, box)

    # ── Internals ──

    def _scale(self, value: float) -> float:
        return value * self.device_pixel_ratio

    def _device_box(
        self, size: tuple[int, int], x: float, y: float, w: float, h: float
    ) -> tuple[int, int, int, int]:
        """Logical rectangle → device pixel box, clipped to the buffer."""
        bw, bh = size
        x0 = max(0, int(self._scale(x)))
        y0 = max(0, int(self._scale(y)))
        x1 = min(bw, int(round(self._scale(x + w))))
        y1 = min(bh, int(round(self._scale(y + h))))
        return (x0, y0, x1, y1)

    def _segment(
        self, draw: ImageDraw.ImageDraw, start: Point, end: Point, color: str, width: float
    ) -> None:
        """Draw one line segment with round caps and joins."""
        w = max(1, int(round(self._scale(width))))
        p0 = (self._scale(start.x), self._scale(start.y))
        p1 = (self._scale(end.x), self._scale(end.y))
        draw.line([p0, p1], fill=color, width=w, joint="curve")
        r = w / 2
        for cx, cy in (p0, p1):
            draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=color)
