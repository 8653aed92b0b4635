import math
import sys
from pathlib import Path

import pytest

# Ensure `src` is importable when running tests from repo root.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class RecordingBackend:
    """
    Stand-in for PDFBackend that records every call.

    Text wraps at CHAR_WIDTH points per character and every line is
    LINE_HEIGHT points tall, so tests can predict cursor movement exactly.
    """

    CHAR_WIDTH = 5
    LINE_HEIGHT = 12

    def __init__(self, page_width=595.28, margin_right=30):
        self.page_width = page_width
        self.margin_right = margin_right
        self.y = 0.0
        self.calls = []
        self.registered = []
        self.font = None
        self.font_size = None
        self.fill_color = None

    def register_font(self, name, path):
        self.registered.append((name, path))
        self.calls.append(("register_font", name, path))

    def set_font(self, name):
        self.font = name

    def set_font_size(self, size):
        self.font_size = size

    def set_fill_color(self, color):
        self.fill_color = color

    def fill_rect(self, x, y, width, height, color):
        self.calls.append(("fill_rect", x, y, width, height, color))

    def draw_image(self, path, x, y, width, height):
        self.calls.append(("draw_image", path, x, y, width, height))

    def stroke_line(self, x1, y1, x2, y2, color, width=1):
        self.calls.append(("stroke_line", x1, y1, x2, y2, color, width))

    def count_lines(self, value, width):
        if value == "":
            return 0
        paragraphs = value.split("\n")
        if len(paragraphs) > 1 and paragraphs[-1] == "":
            paragraphs.pop()
        per_line = max(1, int(width // self.CHAR_WIDTH))
        return sum(max(1, math.ceil(len(p) / per_line)) for p in paragraphs)

    def draw_text(self, value, x, y, align="left", max_width=None):
        width = max_width if max_width is not None else self.page_width - x - self.margin_right
        self.calls.append(("draw_text", value, x, y, {
            "align": align,
            "max_width": max_width,
            "font": self.font,
            "size": self.font_size,
            "color": self.fill_color,
        }))
        self.y = y + self.count_lines(value, width) * self.LINE_HEIGHT
        return self.y

    def finish(self):
        self.calls.append(("finish",))
        return b"%PDF-recorded"

    def texts(self):
        return [call[1] for call in self.calls if call[0] == "draw_text"]

    def text_calls(self):
        return [call for call in self.calls if call[0] == "draw_text"]


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def make_options():
    from simple_invoice.config import InvoiceOptions

    def _make(overrides=None):
        return InvoiceOptions.from_mapping(overrides or {})

    return _make


@pytest.fixture
def make_context(backend, make_options):
    from simple_invoice.fonts import FontResolver
    from simple_invoice.layout_engine import RenderContext
    from simple_invoice.text_renderer import TextBlockRenderer

    def _make(overrides=None):
        ctx = RenderContext(options=make_options(overrides), backend=backend)
        resolver = FontResolver(ctx.style.fonts, backend, ctx.font_state)
        return ctx, TextBlockRenderer(ctx, resolver)

    return _make


@pytest.fixture
def widget_invoice():
    """One header line, one address line per party, one item and one total."""
    return {
        "data": {
            "invoice": {
                "name": "Invoice",
                "currency": "USD",
                "header": [{"label": "Invoice Number", "value": 1}],
                "customer": [{"label": "Bill To", "value": ["1 Main Street"]}],
                "seller": [{"label": "Bill From", "value": ["2 High Street"]}],
                "details": {
                    "header": [
                        {"value": "Description"},
                        {"value": "Quantity"},
                        {"value": "Subtotal"},
                    ],
                    "parts": [
                        [
                            {"value": "Widget"},
                            {"value": 1},
                            {"value": "10", "price": True},
                        ],
                    ],
                    "total": [{"label": "Total", "value": "10", "price": True}],
                },
                "legal": [{"value": "Thank you for your business", "weight": "bold"}],
            },
        },
    }
