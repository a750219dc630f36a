"""
Text measurement providers.

The layout engine only needs ``measure(text, size) -> (width, height)``.
:class:`PillowMeasurement` measures with a real font through Pillow;
:class:`MonospaceMeasurement` is a font-free metric for tests and
headless environments.  Explicit ``\\n`` in a text value starts a new
line; no wrapping is ever applied.
"""
import logging
import math
import threading
from typing import Dict, Optional, Protocol, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


class MeasurementProvider(Protocol):
    def measure(self, text: str, size: float) -> Size:
        ...


class MonospaceMeasurement:
    """Every character advances ``size * advance``; lines are ``size * line_height`` tall."""

    def __init__(self, advance: float = 0.6, line_height: float = 1.2):
        self.advance = advance
        self.line_height = line_height

    def measure(self, text: str, size: float) -> Size:
        if size <= 0 or not text:
            return (0, 0)
        lines = text.split("\n")
        longest = max(len(line) for line in lines)
        return (
            math.ceil(longest * size * self.advance),
            math.ceil(len(lines) * size * self.line_height),
        )


class PillowMeasurement:
    """
    Measure text with Pillow's FreeType bindings.

    Fonts are loaded once per integer pixel size and measurements are cached
    per ``(text, size)``, so repeated layouts of the same deck are cheap.
    Both caches are safe to share between layout threads.
    """

    def __init__(self, font_path: Optional[str] = None, debug: bool = False):
        self.font_path = font_path
        self.debug = debug
        self._fonts: Dict[int, ImageFont.FreeTypeFont] = {}
        self._cache: Dict[Tuple[str, int], Size] = {}
        self._lock = threading.Lock()

    def _font(self, pixel_size: int):
        with self._lock:
            font = self._fonts.get(pixel_size)
            if font is None:
                if self.font_path:
                    font = ImageFont.truetype(self.font_path, pixel_size)
                else:
                    font = ImageFont.load_default(size=pixel_size)
                self._fonts[pixel_size] = font
                if self.debug:
                    logger.debug(f"Loaded font {self.font_path or '<default>'} at {pixel_size}px")
            return font

    def measure(self, text: str, size: float) -> Size:
        pixel_size = int(round(size))
        if pixel_size <= 0 or not text:
            return (0, 0)

        key = (text, pixel_size)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        font = self._font(pixel_size)
        lines = text.split("\n")
        width = max(math.ceil(font.getlength(line)) for line in lines)
        if hasattr(font, "getmetrics"):
            ascent, descent = font.getmetrics()
            line_height = ascent + descent
        else:
            left, top, right, bottom = font.getbbox("Ag")
            line_height = bottom - top
        result = (width, line_height * len(lines))

        with self._lock:
            self._cache[key] = result
        return result
