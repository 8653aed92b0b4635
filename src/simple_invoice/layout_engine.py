"""Layout state and column placement for rendering an invoice page."""

from dataclasses import dataclass, field
from typing import List, Optional

from .config import InvoiceOptions, Style
from .errors import UnsupportedColumnCountError


# Horizontal gap between the shared-width description columns
COLUMN_GUTTER = 10

# Height given back when a held text block reports no vertical advance.
# Empirical: close to one regular-size line, not derived from font metrics.
SINGLE_LINE_HEIGHT = 11.5

MIN_COLUMNS = 3


@dataclass
class Cursor:
    """Current drawing position. y grows downward from the top of the page."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class SectionHeights:
    """Bottom y of the customer and seller blocks."""
    customer: float = 0.0
    seller: float = 0.0

    @property
    def details_bottom(self) -> float:
        return max(self.customer, self.seller)


@dataclass
class FontLoadState:
    """Whether the fallback font has been registered with the backend."""
    fallback_loaded: bool = False


@dataclass
class RenderContext:
    """Mutable state of one render. Created per generate_buffer call."""
    options: InvoiceOptions
    backend: object
    cursor: Cursor = field(default_factory=Cursor)
    heights: SectionHeights = field(default_factory=SectionHeights)
    font_state: FontLoadState = field(default_factory=FontLoadState)

    @property
    def style(self) -> Style:
        return self.options.style

    @property
    def invoice(self):
        return self.options.invoice

    def set_cursor(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        if x is not None:
            self.cursor.x = x
        if y is not None:
            self.cursor.y = y


@dataclass
class ColumnPlacement:
    """Describes where a table column is placed."""
    index: int
    x: float
    width: float


def compute_column_placements(num_columns: int, style: Style) -> List[ColumnPlacement]:
    """
    Compute x positions and widths for a table row.

    All columns but the last two split the space between the left margin and
    the header text column evenly. The last two columns always sit at the
    configured quantity and total positions, so they line up on every row.
    """
    if num_columns < MIN_COLUMNS:
        raise UnsupportedColumnCountError("table row", num_columns)

    document = style.document
    shared_width = (
        style.header.text_position - document.margin_left - document.margin_right
    ) / (num_columns - 2)

    placements = []
    x = document.margin_left
    for index in range(num_columns - 2):
        placements.append(ColumnPlacement(index=index, x=x, width=shared_width))
        x += shared_width + COLUMN_GUTTER

    quantity = style.table.quantity
    total = style.table.total
    placements.append(ColumnPlacement(index=num_columns - 2, x=quantity.position, width=quantity.max_width))
    placements.append(ColumnPlacement(index=num_columns - 1, x=total.position, width=total.max_width))
    return placements
