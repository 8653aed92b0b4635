import dataclasses
import json
from pathlib import Path

import pytest

from simple_invoice.config import (
    FALLBACK_FONT_ENV,
    InvoiceOptions,
    deep_merge,
    default_options,
    dump_options,
    load_options,
    normalize_keys,
    parse_codepoint_ranges,
)
from simple_invoice.errors import InvoiceValidationError, UnsupportedColumnCountError


def test_defaults():
    options = InvoiceOptions.from_mapping()

    assert options.style.document.margin_left == 30
    assert options.style.header.text_position == 330
    assert options.style.fonts.normal.name == "Helvetica"
    assert options.style.fonts.normal.supported == ((0x0000, 0x00FF),)
    assert options.style.fonts.fallback.supported == ((0x0000, 0x0500),)
    assert options.invoice.name == "Invoice for Acme"
    assert [c.value for c in options.invoice.details.header] == ["Description", "Quantity", "Subtotal"]
    assert options.invoice.currency is None


def test_deep_merge_merges_mappings_and_replaces_lists():
    base = {"a": {"b": 1, "c": [1, 2]}, "d": 1}
    override = {"a": {"c": [3]}, "e": 2}

    merged = deep_merge(base, override)

    assert merged == {"a": {"b": 1, "c": [3]}, "d": 1, "e": 2}
    assert base == {"a": {"b": 1, "c": [1, 2]}, "d": 1}


def test_partial_style_override_keeps_other_defaults():
    options = InvoiceOptions.from_mapping({"style": {"document": {"marginLeft": 40}}})

    assert options.style.document.margin_left == 40
    assert options.style.document.margin_right == 30


def test_user_lists_replace_defaults():
    options = InvoiceOptions.from_mapping({"data": {"invoice": {
        "header": [{"label": "Status", "value": "Paid"}, {"label": "Date", "value": "22/10/21"}],
    }}})

    assert [line.label for line in options.invoice.header] == ["Status", "Date"]


def test_normalize_keys_converts_camel_case():
    assert normalize_keys({"marginLeft": 1, "table": [{"maxWidth": 2}]}) == {
        "margin_left": 1,
        "table": [{"max_width": 2}],
    }


def test_scalar_values_become_single_lines():
    options = InvoiceOptions.from_mapping({"data": {"invoice": {
        "customer": [{"label": "Tax Identifier", "value": "352352342333"}],
    }}})

    assert options.invoice.customer[0].values == ("352352342333",)


def test_options_built_from_equal_mappings_are_equal():
    overrides = {"data": {"invoice": {"name": "Invoice 7"}}}

    assert InvoiceOptions.from_mapping(overrides) == InvoiceOptions.from_mapping(dict(overrides))
    assert [f.name for f in dataclasses.fields(InvoiceOptions)] == ["style", "invoice"]


def test_options_are_frozen():
    options = InvoiceOptions.from_mapping()

    with pytest.raises(AttributeError):
        options.style.document.margin_left = 10


def test_fallback_font_path_from_environment(monkeypatch, tmp_path):
    font = tmp_path / "fallback.ttf"
    monkeypatch.setenv(FALLBACK_FONT_ENV, str(font))

    assert default_options()["style"]["fonts"]["fallback"]["path"] == str(font)
    assert InvoiceOptions.from_mapping().style.fonts.fallback.path == str(font)


def test_parse_codepoint_ranges():
    assert parse_codepoint_ranges(["U+0000-U+00FF", [0x400, 0x4FF], "0100-017F"], "r") == (
        (0x0000, 0x00FF),
        (0x0400, 0x04FF),
        (0x0100, 0x017F),
    )


@pytest.mark.parametrize("value", [["nonsense"], [[5, 1]], [[1, 2, 3]], "U+0000-U+00FF"])
def test_parse_codepoint_ranges_rejects_bad_input(value):
    with pytest.raises(InvoiceValidationError):
        parse_codepoint_ranges(value, "style.fonts.normal.supported")


def test_two_column_table_rejected():
    with pytest.raises(UnsupportedColumnCountError) as exc_info:
        InvoiceOptions.from_mapping({"data": {"invoice": {"details": {
            "header": [{"value": "Description"}, {"value": "Total"}],
        }}}})

    assert exc_info.value.path == "data.invoice.details.header"


def test_row_column_count_must_match_header():
    with pytest.raises(InvoiceValidationError) as exc_info:
        InvoiceOptions.from_mapping({"data": {"invoice": {"details": {
            "parts": [[{"value": "Widget"}, {"value": 1}, {"value": 2}, {"value": 3}]],
        }}}})

    assert exc_info.value.path == "data.invoice.details.parts[0]"


@pytest.mark.parametrize("overrides, path", [
    ({"data": {"invoice": {"customer": "John"}}}, "data.invoice.customer"),
    ({"data": {"invoice": {"seller": [{"label": "From", "value": {"x": 1}}]}}}, "data.invoice.seller[0].value"),
    ({"data": {"invoice": {"details": {"parts": [[{"value": None}, {"value": 1}, {"value": 2}]]}}}},
     "data.invoice.details.parts[0][0].value"),
    ({"data": {"invoice": {"details": {"total": [{"label": "Total", "value": 1, "price": "yes"}]}}}},
     "data.invoice.details.total[0].price"),
    ({"data": {"invoice": {"legal": [{"value": "Terms", "color": "red"}]}}}, "data.invoice.legal[0].color"),
    ({"style": {"header": {"height": "150"}}}, "style.header.height"),
    ({"style": {"fonts": {"normal": {"supported": None}}}}, "style.fonts.normal.supported"),
])
def test_malformed_data_fails_fast(overrides, path):
    with pytest.raises(InvoiceValidationError) as exc_info:
        InvoiceOptions.from_mapping(overrides)

    assert exc_info.value.path == path
    assert path in str(exc_info.value)


def test_options_must_be_a_mapping():
    with pytest.raises(InvoiceValidationError):
        InvoiceOptions.from_mapping(["not", "a", "mapping"])


def test_load_options_yaml(tmp_path):
    path = tmp_path / "invoice.yml"
    path.write_text(
        "style:\n"
        "  header:\n"
        "    textPosition: 320\n"
        "data:\n"
        "  invoice:\n"
        "    name: Invoice 42\n"
        "    currency: EUR\n",
        encoding="utf-8",
    )

    options = InvoiceOptions.from_file(path)

    assert options.style.header.text_position == 320
    assert options.invoice.name == "Invoice 42"
    assert options.invoice.currency == "EUR"


def test_load_options_json(tmp_path):
    path = tmp_path / "invoice.json"
    path.write_text(json.dumps({"data": {"invoice": {"name": "JSON invoice"}}}), encoding="utf-8")

    assert load_options(path) == {"data": {"invoice": {"name": "JSON invoice"}}}


def test_load_options_rejects_non_mapping(tmp_path):
    path = tmp_path / "invoice.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(InvoiceValidationError):
        load_options(path)


def test_dumped_options_load_back(tmp_path):
    path = tmp_path / "dumped.yml"
    raw = {"data": {"invoice": {"name": "Faktúra", "currency": "EUR"}}}

    dump_options(raw, path)

    assert load_options(path) == raw


def test_default_fallback_font_is_bundled(monkeypatch):
    monkeypatch.delenv(FALLBACK_FONT_ENV, raising=False)

    fallback = InvoiceOptions.from_mapping().style.fonts.fallback

    assert fallback.name == "DejaVu Sans"
    assert Path(fallback.path).is_file()
