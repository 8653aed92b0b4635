import pytest

from simple_invoice.formatting import format_cell, format_price


def test_number_with_currency():
    assert format_price(51.6, "EUR") == "51.60 EUR"


def test_string_is_not_coerced():
    assert format_price("51.6") == "51.6"
    assert format_price("10", "USD") == "10 USD"


@pytest.mark.parametrize("value, expected", [
    (10, "10.00"),
    (-10, "-10.00"),
    (8.6, "8.60"),
    (1234.5, "1234.50"),
    (0, "0.00"),
])
def test_numbers_fixed_to_two_decimals(value, expected):
    assert format_price(value) == expected


def test_empty_currency_adds_no_suffix():
    assert format_price(3, "") == "3.00"


def test_format_cell_only_formats_prices():
    assert format_cell(1) == "1"
    assert format_cell(1.0) == "1"
    assert format_cell(2.5) == "2.5"
    assert format_cell("Widget", currency="EUR") == "Widget"
    assert format_cell(2.5, price=True, currency="EUR") == "2.50 EUR"
