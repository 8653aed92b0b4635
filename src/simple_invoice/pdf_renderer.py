"""PDF rendering backend using ReportLab.

The layout engine works in top-down page coordinates (y grows downward from
the top edge, like a text cursor). This module converts them to ReportLab's
bottom-up coordinates and measures wrapped text so callers can read back
the vertical position reached after each draw.
"""

import io
import logging
from pathlib import Path
from typing import List, Optional, Set, Union

from reportlab.lib.colors import Color, toColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from .errors import RenderBackendError


logger = logging.getLogger(__name__)

PAGE_SIZE = A4  # 595.27 x 841.89 points

# Line advance as a multiple of the font size (ascent + descent + line gap of
# the standard Helvetica metrics)
LINE_HEIGHT_RATIO = 1.156

DEFAULT_MARGIN = 30

_FONT_ERRORS = (KeyError, pdfmetrics.FontError, pdfmetrics.FontNotFoundError)


def to_color(value: Union[str, Color]) -> Color:
    """Convert "#RRGGBB", a color name or a Color to a ReportLab Color."""
    try:
        return toColor(value)
    except ValueError as exc:
        raise RenderBackendError(f"invalid color {value!r}") from exc


class PDFBackend:
    """Single-page A4 document drawn with top-down coordinates."""

    def __init__(self, margin_right: float = DEFAULT_MARGIN, title: Optional[str] = None):
        self.page_width, self.page_height = PAGE_SIZE
        self.margin_right = margin_right
        self.y: float = 0.0  # bottom of the last text block drawn
        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=PAGE_SIZE, invariant=1)
        if title:
            self._canvas.setTitle(title)
        self._font_name = "Helvetica"
        self._font_size: float = 12
        self._registered: Set[str] = set()
        self._finished = False

    def register_font(self, name: str, path: Union[str, Path]) -> None:
        """Register a TrueType font under name. Registering a name twice is a no-op."""
        if name in self._registered:
            return
        try:
            pdfmetrics.registerFont(TTFont(name, str(path)))
        except (TTFError, OSError) as exc:
            raise RenderBackendError(f"cannot register font {name!r} from {path}: {exc}") from exc
        self._registered.add(name)
        logger.debug("Registered font %s from %s", name, path)

    def set_font(self, name: str) -> None:
        self._font_name = name

    def set_font_size(self, size: float) -> None:
        self._font_size = size

    def set_fill_color(self, color: Union[str, Color]) -> None:
        self._canvas.setFillColor(to_color(color))

    @property
    def line_height(self) -> float:
        return self._font_size * LINE_HEIGHT_RATIO

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Union[str, Color]) -> None:
        """Fill a rectangle whose top-left corner is (x, y)."""
        self._canvas.setFillColor(to_color(color))
        self._canvas.rect(x, self.page_height - y - height, width, height, fill=True, stroke=False)

    def draw_image(self, path: Union[str, Path], x: float, y: float, width: float, height: float) -> None:
        """Draw an image file scaled to width x height, top-left corner at (x, y)."""
        try:
            self._canvas.drawImage(
                str(path), x, self.page_height - y - height,
                width=width, height=height, mask="auto",
            )
        except (OSError, ValueError) as exc:
            raise RenderBackendError(f"cannot draw image {path}: {exc}") from exc

    def stroke_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: Union[str, Color],
        width: float = 1,
    ) -> None:
        self._canvas.setStrokeColor(to_color(color))
        self._canvas.setLineWidth(width)
        self._canvas.line(x1, self.page_height - y1, x2, self.page_height - y2)

    def wrap_lines(self, text: str, width: float) -> List[str]:
        """Split text into the lines it occupies when wrapped to width."""
        if text == "":
            return []
        paragraphs = text.split("\n")
        if len(paragraphs) > 1 and paragraphs[-1] == "":
            paragraphs.pop()

        lines: List[str] = []
        for paragraph in paragraphs:
            try:
                wrapped = simpleSplit(paragraph, self._font_name, self._font_size, width)
                for line in wrapped or [""]:
                    lines.extend(self._break_long_line(line, width))
            except _FONT_ERRORS as exc:
                raise RenderBackendError(f"font {self._font_name!r} is not registered") from exc
        return lines

    def _break_long_line(self, line: str, width: float) -> List[str]:
        """Split a line wider than width (a single long word) by characters."""
        if pdfmetrics.stringWidth(line, self._font_name, self._font_size) <= width:
            return [line]

        pieces: List[str] = []
        current = ""
        for char in line:
            candidate = current + char
            if current and pdfmetrics.stringWidth(candidate, self._font_name, self._font_size) > width:
                pieces.append(current)
                current = char
            else:
                current = candidate
        if current:
            pieces.append(current)
        return pieces

    def draw_text(
        self,
        value: str,
        x: float,
        y: float,
        align: str = "left",
        max_width: Optional[float] = None,
    ) -> float:
        """
        Draw text with its first line's top at (x, y).

        Lines wrap within max_width (default: up to the right margin). Returns
        the y just below the last line, which also becomes self.y.
        """
        width = max_width if max_width is not None else self.page_width - x - self.margin_right
        lines = self.wrap_lines(value, width)

        try:
            self._canvas.setFont(self._font_name, self._font_size)
            ascent = pdfmetrics.getAscent(self._font_name, self._font_size)
        except _FONT_ERRORS as exc:
            raise RenderBackendError(f"font {self._font_name!r} is not registered") from exc

        line_top = y
        for line in lines:
            baseline = self.page_height - line_top - ascent
            if align == "center":
                self._canvas.drawCentredString(x + width / 2, baseline, line)
            elif align == "right":
                self._canvas.drawRightString(x + width, baseline, line)
            else:
                self._canvas.drawString(x, baseline, line)
            line_top += self.line_height

        self.y = line_top
        return self.y

    def finish(self) -> bytes:
        """Close the page and return the finished PDF bytes."""
        if self._finished:
            raise RenderBackendError("document already finished")
        try:
            self._canvas.showPage()
            self._canvas.save()
        except (OSError, ValueError) as exc:
            raise RenderBackendError(f"cannot write PDF output: {exc}") from exc
        self._finished = True
        return self._buffer.getvalue()
