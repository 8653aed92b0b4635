"""Invoice page sections, rendered top to bottom in a fixed order."""

import logging
from typing import Sequence

from .config import Cell, LabeledLine
from .formatting import format_cell
from .layout_engine import RenderContext, compute_column_placements
from .text_renderer import TextBlockRenderer, TextOptions


logger = logging.getLogger(__name__)

# Gap between a label and each of its value lines
FONT_MARGIN = 4

# Customer/seller blocks
DETAILS_TOP_GAP = 18
DETAILS_MAX_WIDTH = 250
DETAILS_LABEL_MARGIN = 8

# Table
ROW_GAP = 17
SEPARATOR_COLOR = "#F0F0F0"
SEPARATOR_WIDTH = 1
TOTALS_OFFSET = 50
TOTAL_LABEL_MARGIN = 12

# Legal text
LEGAL_OFFSET = 60
LEGAL_LINE_MARGIN = 10
# Legal lines are centred between x and this distance from the right page edge
LEGAL_RIGHT_MARGIN = 72


def render_header(ctx: RenderContext, text: TextBlockRenderer) -> None:
    """Draw the header band, the optional logo, the title and the header lines."""
    backend = ctx.backend
    header = ctx.style.header
    document = ctx.style.document
    logger.debug("Rendering header")

    backend.fill_rect(0, 0, backend.page_width, header.height, header.background_color)

    if header.image is not None:
        backend.draw_image(
            header.image.path,
            document.margin_left,
            document.margin_top,
            header.image.width,
            header.image.height,
        )

    ctx.set_cursor(x=header.text_position, y=document.margin_top)

    text.draw_text(ctx.invoice.name, TextOptions(
        size="heading",
        weight="bold",
        color=header.regular_color,
    ))

    for line in ctx.invoice.header:
        text.draw_text(f"{line.label}:", TextOptions(
            weight="bold",
            color=header.regular_color,
            margin_top=FONT_MARGIN,
        ))
        for value in line.values:
            text.draw_text(format_cell(value), TextOptions(
                color_role="secondary",
                color=header.secondary_color,
                margin_top=FONT_MARGIN,
            ))


def render_details(ctx: RenderContext, text: TextBlockRenderer, side: str) -> None:
    """Draw the customer or seller block and record where it ends."""
    if side not in ("customer", "seller"):
        raise ValueError(f"unknown details side {side!r}")
    logger.debug("Rendering %s details", side)

    ctx.set_cursor(y=ctx.style.header.height + DETAILS_TOP_GAP)

    # Seller block sits under the header text column
    if side == "customer":
        ctx.set_cursor(x=ctx.style.document.margin_left)
    else:
        ctx.set_cursor(x=ctx.style.header.text_position)

    lines: Sequence[LabeledLine] = getattr(ctx.invoice, side)
    for line in lines:
        text.draw_text(f"{line.label}:", TextOptions(
            weight="bold",
            color_role="primary",
            margin_top=DETAILS_LABEL_MARGIN,
            max_width=DETAILS_MAX_WIDTH,
        ))
        for value in line.values:
            text.draw_text(format_cell(value), TextOptions(
                color_role="secondary",
                margin_top=FONT_MARGIN,
                max_width=DETAILS_MAX_WIDTH,
            ))

    setattr(ctx.heights, side, ctx.cursor.y)


def render_table_row(ctx: RenderContext, text: TextBlockRenderer, kind: str, cells: Sequence[Cell]) -> None:
    """
    Draw one table row with all cells starting on the same line.

    The row ends at the bottom of its tallest (most wrapped) cell. Header
    rows are bold and get a separator line underneath.
    """
    backend = ctx.backend
    placements = compute_column_placements(len(cells), ctx.style)

    ctx.set_cursor(y=backend.y + ROW_GAP)

    if kind == "header":
        weight, color_role = "bold", "primary"
    else:
        weight, color_role = "normal", "secondary"

    max_y = ctx.cursor.y
    for cell, placement in zip(cells, placements):
        ctx.set_cursor(x=placement.x)
        text.draw_text(
            format_cell(cell.value, cell.price, ctx.invoice.currency),
            TextOptions(
                weight=weight,
                color_role=color_role,
                max_width=placement.width,
                hold_position=True,
            ),
        )

        # Line returns push the row down
        if backend.y >= max_y:
            max_y = backend.y

    ctx.set_cursor(y=max_y)

    if kind == "header":
        render_separator(ctx)


def render_separator(ctx: RenderContext) -> None:
    """Draw a light horizontal rule across the page below the cursor."""
    backend = ctx.backend
    margin_right = ctx.style.document.margin_right

    ctx.cursor.y += ctx.style.text.regular_size + 2
    backend.stroke_line(
        margin_right,
        ctx.cursor.y,
        backend.page_width - margin_right,
        ctx.cursor.y,
        SEPARATOR_COLOR,
        SEPARATOR_WIDTH,
    )


def render_parts(ctx: RenderContext, text: TextBlockRenderer) -> None:
    """Draw the item table below the taller of the two detail blocks, then the totals."""
    details = ctx.invoice.details
    table = ctx.style.table
    logger.debug("Rendering table with %d rows", len(details.parts))

    ctx.set_cursor(y=ctx.heights.details_bottom)
    text.draw_text("\n")

    render_table_row(ctx, text, "header", details.header)
    for part in details.parts:
        render_table_row(ctx, text, "row", part)

    ctx.cursor.y += TOTALS_OFFSET

    for total in details.total:
        ctx.set_cursor(x=table.quantity.position)
        text.draw_text(total.label, TextOptions(
            weight="bold",
            color_role="primary",
            margin_top=TOTAL_LABEL_MARGIN,
            max_width=table.quantity.max_width,
            hold_position=True,
        ))

        ctx.set_cursor(x=table.total.position)
        text.draw_text(
            format_cell(total.value, total.price, ctx.invoice.currency),
            TextOptions(
                color_role="secondary",
                max_width=table.total.max_width,
            ),
        )


def render_legal(ctx: RenderContext, text: TextBlockRenderer) -> None:
    """Draw the centered legal lines at the bottom of the invoice."""
    logger.debug("Rendering %d legal lines", len(ctx.invoice.legal))
    ctx.cursor.y += LEGAL_OFFSET

    x = ctx.style.document.margin_left * 2
    width = ctx.backend.page_width - x - LEGAL_RIGHT_MARGIN
    for line in ctx.invoice.legal:
        ctx.set_cursor(x=x)
        text.draw_text(line.value, TextOptions(
            weight=line.weight,
            color_role=line.color,
            align="center",
            margin_top=LEGAL_LINE_MARGIN,
            max_width=width,
        ))
