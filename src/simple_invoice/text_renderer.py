"""Draws text blocks at the cursor and advances it by the height they take."""

from dataclasses import dataclass
from typing import Optional

from .fonts import FontResolver
from .layout_engine import SINGLE_LINE_HEIGHT, RenderContext


@dataclass(frozen=True)
class TextOptions:
    """How a single text block is drawn."""
    weight: str = "normal"  # "normal" or "bold"
    color_role: str = "primary"  # "primary" or "secondary"
    size: str = "regular"  # "regular" or "heading"
    align: str = "left"
    color: Optional[str] = None  # overrides color_role
    margin_top: float = 0
    max_width: Optional[float] = None
    hold_position: bool = False  # keep y for the next cell on the same row


class TextBlockRenderer:
    """Renders text at the context cursor."""

    def __init__(self, ctx: RenderContext, resolver: FontResolver):
        self.ctx = ctx
        self.resolver = resolver

    def draw_text(self, value: str, options: TextOptions = TextOptions()) -> None:
        ctx = self.ctx
        backend = ctx.backend
        text_style = ctx.style.text
        cursor = ctx.cursor

        cursor.y += options.margin_top

        if options.color:
            color = options.color
        elif options.color_role == "primary":
            color = text_style.primary_color
        else:
            color = text_style.secondary_color
        backend.set_fill_color(color)

        backend.set_font(self.resolver.resolve_font(options.weight, value))
        backend.set_font_size(
            text_style.heading_size if options.size == "heading" else text_style.regular_size
        )

        new_y = backend.draw_text(
            self.resolver.normalize_text(value),
            cursor.x,
            cursor.y,
            align=options.align,
            max_width=options.max_width,
        )

        delta = new_y - cursor.y
        cursor.y = new_y

        if options.hold_position:
            # A zero advance can't tell "nothing drawn" from "one line", assume one line
            if delta > 0:
                cursor.y -= delta
            else:
                cursor.y -= SINGLE_LINE_HEIGHT
