"""Price formatting for table cells and totals."""

from typing import Optional, Union


def format_price(value: Union[str, int, float], currency: Optional[str] = None) -> str:
    """
    Format a price cell.

    Numbers are fixed to two decimals; strings are kept as written so "51.6"
    stays "51.6". A configured currency code is appended as a literal suffix.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        text = f"{value:.2f}"
    else:
        text = str(value)

    if currency:
        text = f"{text} {currency}"
    return text


def format_cell(value: Union[str, int, float], price: bool = False, currency: Optional[str] = None) -> str:
    """Display text for a cell, applying price formatting when flagged."""
    if price:
        return format_price(value, currency)
    # 1.0 from YAML/JSON reads as "1", like the quantity it stands for
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
