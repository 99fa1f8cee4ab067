"""
Drawing surfaces for the location map.

DrawingSurface is the small set of primitives the renderer needs. Two
implementations are provided:
- PillowSurface rasterizes onto an RGBA Pillow image (translucent fills are
  alpha-composited) and exports numpy arrays / PNG files.
- RecordingSurface records the ordered drawing operations without
  rasterizing anything.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from constants import MAP_WIDTH, MAP_HEIGHT
from geo import SurfaceSize

logger = logging.getLogger(__name__)

Color = Union[Tuple[int, int, int], Tuple[int, int, int, int]]
Point = Tuple[float, float]
GradientStop = Tuple[float, Color]


# Font cache
_font_cache: dict = {}
_font_path: Optional[str] = None


def _get_font(size: float = 14) -> ImageFont.ImageFont:
    """Get a cached font instance."""
    global _font_path

    int_size = int(size)

    if int_size in _font_cache:
        return _font_cache[int_size]

    if _font_path is None:
        for font_name in ["DejaVuSans.ttf", "Arial.ttf", "Helvetica.ttf",
                          "/System/Library/Fonts/Helvetica.ttc"]:
            try:
                ImageFont.truetype(font_name, 12)
                _font_path = font_name
                break
            except (OSError, IOError):
                continue

    try:
        if _font_path:
            font = ImageFont.truetype(_font_path, int_size)
        else:
            font = ImageFont.load_default()
    except (OSError, IOError):
        font = ImageFont.load_default()

    _font_cache[int_size] = font
    return font


def _rgba(color: Color) -> Tuple[int, int, int, int]:
    if len(color) == 4:
        return tuple(color)
    return (color[0], color[1], color[2], 255)


class DrawingSurface(ABC):
    """
    Abstract 2D drawing target in its own pixel space.

    Origin is the top-left corner; x grows right, y grows down.
    """

    @property
    @abstractmethod
    def size(self) -> SurfaceSize:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Reset the whole surface to transparent."""

    @abstractmethod
    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        pass

    @abstractmethod
    def fill_linear_gradient(self, x: float, y: float, width: float, height: float,
                             start: Point, end: Point, stops: Sequence[GradientStop]) -> None:
        """Fill a rectangle with a gradient running from `start` to `end`.

        Stops are (offset, color) pairs with offsets in [0, 1], ascending.
        """

    @abstractmethod
    def line(self, start: Point, end: Point, color: Color, width: float = 1) -> None:
        pass

    @abstractmethod
    def circle(self, center: Point, radius: float, fill: Optional[Color] = None,
               outline: Optional[Color] = None, width: float = 1) -> None:
        """Draw a full circle, filled and/or stroked (stroke centered on the rim)."""

    @abstractmethod
    def text(self, position: Point, text: str, color: Color, font_size: float = 14) -> None:
        """Draw text with its baseline starting at `position`."""


class PillowSurface(DrawingSurface):
    """Raster surface backed by an RGBA Pillow image.

    Args:
        width: Surface width in pixels (default 800)
        height: Surface height in pixels (default 600)
    """

    def __init__(self, width: int = MAP_WIDTH, height: int = MAP_HEIGHT):
        self._size = SurfaceSize(width=width, height=height)
        self._image = Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self._image)

    @property
    def size(self) -> SurfaceSize:
        return self._size

    @property
    def image(self) -> Image.Image:
        return self._image

    def clear(self) -> None:
        self._draw.rectangle([0, 0, self._image.width, self._image.height], fill=(0, 0, 0, 0))

    def _paint(self, color: Color):
        """Return an ImageDraw for `color` and a finisher that composites it.

        Opaque colors draw straight onto the image; translucent ones go onto a
        scratch layer that is alpha-composited afterwards.
        """
        rgba = _rgba(color)
        if rgba[3] == 255:
            return self._draw, lambda: None

        layer = Image.new("RGBA", self._image.size, (0, 0, 0, 0))

        def finish():
            self._image.alpha_composite(layer)

        return ImageDraw.Draw(layer), finish

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        if width <= 0 or height <= 0:
            return
        draw, finish = self._paint(color)
        draw.rectangle([x, y, x + width - 1, y + height - 1], fill=_rgba(color))
        finish()

    def fill_linear_gradient(self, x: float, y: float, width: float, height: float,
                             start: Point, end: Point, stops: Sequence[GradientStop]) -> None:
        # Clip the rectangle to the image
        x0 = max(0, int(round(x)))
        y0 = max(0, int(round(y)))
        x1 = min(self._image.width, int(round(x + width)))
        y1 = min(self._image.height, int(round(y + height)))
        if x1 <= x0 or y1 <= y0 or not stops:
            return

        gx, gy = np.meshgrid(np.arange(x0, x1, dtype=np.float64),
                             np.arange(y0, y1, dtype=np.float64))
        dx = end[0] - start[0]
        dy = end[1] - start[1]
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            t = np.zeros_like(gx)
        else:
            # Position of each pixel along the gradient axis, 0..1
            t = np.clip(((gx - start[0]) * dx + (gy - start[1]) * dy) / length_sq, 0.0, 1.0)

        offsets = [offset for offset, _ in stops]
        colors = [_rgba(color) for _, color in stops]
        channels = [np.interp(t, offsets, [c[i] for c in colors]) for i in range(4)]
        pixels = np.rint(np.stack(channels, axis=-1)).astype(np.uint8)

        self._image.alpha_composite(Image.fromarray(pixels), dest=(x0, y0))

    def line(self, start: Point, end: Point, color: Color, width: float = 1) -> None:
        draw, finish = self._paint(color)
        draw.line([start, end], fill=_rgba(color), width=max(1, int(round(width))))
        finish()

    def circle(self, center: Point, radius: float, fill: Optional[Color] = None,
               outline: Optional[Color] = None, width: float = 1) -> None:
        cx, cy = center
        if fill is not None and radius > 0:
            draw, finish = self._paint(fill)
            draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=_rgba(fill))
            finish()
        if outline is not None:
            # Pillow strokes inside the bounding box; grow it so the stroke straddles the rim
            half = width / 2.0
            outer = radius + half
            draw, finish = self._paint(outline)
            draw.ellipse([cx - outer, cy - outer, cx + outer, cy + outer],
                         outline=_rgba(outline), width=max(1, int(round(width))))
            finish()

    def text(self, position: Point, text: str, color: Color, font_size: float = 14) -> None:
        font = _get_font(font_size)
        draw, finish = self._paint(color)
        if isinstance(font, ImageFont.FreeTypeFont):
            draw.text(position, text, fill=_rgba(color), font=font, anchor="ls")
        else:
            # Bitmap fonts only support top-left anchoring
            draw.text((position[0], position[1] - font_size), text, fill=_rgba(color), font=font)
        finish()

    def to_array(self) -> np.ndarray:
        """Return the surface as an RGB numpy array of shape (height, width, 3)."""
        return np.array(self._image.convert("RGB"))

    def save(self, path: str) -> None:
        self._image.save(path)
        logger.debug(f"Saved surface to {path}")


@dataclass
class DrawOp:
    """A recorded drawing operation."""
    kind: str
    args: Dict[str, Any] = field(default_factory=dict)


class RecordingSurface(DrawingSurface):
    """Surface that records operations in order instead of drawing.

    clear() discards earlier operations, so `ops` always describes what is
    currently on the surface.
    """

    def __init__(self, width: float = MAP_WIDTH, height: float = MAP_HEIGHT):
        self._size = SurfaceSize(width=width, height=height)
        self.ops: List[DrawOp] = []

    @property
    def size(self) -> SurfaceSize:
        return self._size

    def kinds(self) -> List[str]:
        return [op.kind for op in self.ops]

    def of_kind(self, kind: str) -> List[DrawOp]:
        return [op for op in self.ops if op.kind == kind]

    def clear(self) -> None:
        self.ops = [DrawOp("clear")]

    def fill_rect(self, x, y, width, height, color) -> None:
        self.ops.append(DrawOp("fill_rect", {"x": x, "y": y, "width": width,
                                             "height": height, "color": color}))

    def fill_linear_gradient(self, x, y, width, height, start, end, stops) -> None:
        self.ops.append(DrawOp("fill_linear_gradient", {
            "x": x, "y": y, "width": width, "height": height,
            "start": start, "end": end, "stops": list(stops),
        }))

    def line(self, start, end, color, width=1) -> None:
        self.ops.append(DrawOp("line", {"start": start, "end": end, "color": color, "width": width}))

    def circle(self, center, radius, fill=None, outline=None, width=1) -> None:
        self.ops.append(DrawOp("circle", {"center": center, "radius": radius, "fill": fill,
                                          "outline": outline, "width": width}))

    def text(self, position, text, color, font_size=14) -> None:
        self.ops.append(DrawOp("text", {"position": position, "text": text,
                                        "color": color, "font_size": font_size}))
