"""Invoice options: typed schema, built-in defaults, deep merge and file loading."""

import copy
import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import yaml

from .errors import InvoiceValidationError, UnsupportedColumnCountError


CellValue = Union[str, int, float]
CodepointRange = Tuple[int, int]

PACKAGE_DIR = Path(__file__).resolve().parent
FALLBACK_FONT_ENV = "SIMPLE_INVOICE_FALLBACK_FONT"
MIN_TABLE_COLUMNS = 3

# "U+0000-U+00FF" or "0000-00FF"
_RANGE_PATTERN = re.compile(r"^(?:U\+)?([0-9A-Fa-f]{1,6})\s*-\s*(?:U\+)?([0-9A-Fa-f]{1,6})$")
_CAMEL_PATTERN = re.compile(r"(?<=[a-z0-9])([A-Z])")


@dataclass(frozen=True)
class DocumentStyle:
    """Page margins, in points."""
    margin_left: float = 30
    margin_right: float = 30
    margin_top: float = 30


@dataclass(frozen=True)
class FontSpec:
    """A primary font (normal or bold)."""
    name: str
    path: Optional[str] = None  # None = reportlab built-in font
    supported: Optional[Tuple[CodepointRange, ...]] = None  # bold: None = same as normal


@dataclass(frozen=True)
class FallbackFontSpec:
    """Font used for characters the normal font cannot show."""
    name: str
    path: Optional[str]
    supported: Tuple[CodepointRange, ...]
    enabled: bool = True
    transliterate: bool = True


@dataclass(frozen=True)
class FontsStyle:
    normal: FontSpec
    bold: FontSpec
    fallback: FallbackFontSpec

    def for_weight(self, weight: str) -> FontSpec:
        """Return the font for a weight; anything but "bold" is normal."""
        return self.bold if weight == "bold" else self.normal


@dataclass(frozen=True)
class HeaderImage:
    path: str
    width: float
    height: float


@dataclass(frozen=True)
class HeaderStyle:
    """Header band geometry and colors."""
    background_color: str = "#F8F8FA"
    height: float = 150
    image: Optional[HeaderImage] = None
    text_position: float = 330  # x of the right-hand text column
    regular_color: Optional[str] = None
    secondary_color: Optional[str] = None


@dataclass(frozen=True)
class TableColumn:
    position: float
    max_width: float


@dataclass(frozen=True)
class TableStyle:
    quantity: TableColumn
    total: TableColumn


@dataclass(frozen=True)
class TextStyle:
    primary_color: str = "#000100"
    secondary_color: str = "#8F8F8F"
    heading_size: float = 15
    regular_size: float = 10


@dataclass(frozen=True)
class Style:
    document: DocumentStyle
    fonts: FontsStyle
    header: HeaderStyle
    table: TableStyle
    text: TextStyle


@dataclass(frozen=True)
class LabeledLine:
    """A "label:" line followed by one or more value lines."""
    label: str
    values: Tuple[CellValue, ...] = ()


@dataclass(frozen=True)
class Cell:
    value: CellValue
    price: bool = False


@dataclass(frozen=True)
class TotalLine:
    label: str
    value: CellValue
    price: bool = False


@dataclass(frozen=True)
class LegalLine:
    value: str
    weight: str = "normal"
    color: str = "primary"


@dataclass(frozen=True)
class InvoiceDetails:
    header: Tuple[Cell, ...]
    parts: Tuple[Tuple[Cell, ...], ...] = ()
    total: Tuple[TotalLine, ...] = ()


@dataclass(frozen=True)
class InvoiceData:
    name: str
    header: Tuple[LabeledLine, ...]
    customer: Tuple[LabeledLine, ...]
    seller: Tuple[LabeledLine, ...]
    details: InvoiceDetails
    legal: Tuple[LegalLine, ...] = ()
    currency: Optional[str] = None


@dataclass(frozen=True)
class InvoiceOptions:
    """Fully merged, validated invoice options. Never mutated after construction."""
    style: Style
    invoice: InvoiceData

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None) -> "InvoiceOptions":
        """Merge user options onto the defaults and build the typed schema."""
        if options is None:
            options = {}
        if not isinstance(options, Mapping):
            raise InvoiceValidationError("", "options must be a mapping")
        merged = deep_merge(default_options(), normalize_keys(options))
        style = _require_mapping(merged.get("style"), "style")
        data = _require_mapping(merged.get("data"), "data")
        invoice = _require_mapping(data.get("invoice"), "data.invoice")
        return cls(
            style=_parse_style(style),
            invoice=_parse_invoice(invoice),
        )

    @classmethod
    def from_file(cls, path: Path) -> "InvoiceOptions":
        """Load options from a YAML or JSON file."""
        return cls.from_mapping(load_options(path))


def default_fallback_font_path() -> str:
    """Bundled fallback font location, overridable through the environment."""
    override = os.environ.get(FALLBACK_FONT_ENV)
    if override:
        return override
    return str(PACKAGE_DIR / "res" / "fonts" / "DejaVuSans.ttf")


def default_options() -> Dict[str, Any]:
    """Return a fresh copy of the built-in options."""
    return {
        "style": {
            "document": {
                "margin_left": 30,
                "margin_right": 30,
                "margin_top": 30,
            },
            "fonts": {
                "normal": {
                    "name": "Helvetica",
                    "supported": [[0x0000, 0x00FF]],
                },
                "bold": {
                    "name": "Helvetica-Bold",
                },
                "fallback": {
                    "name": "DejaVu Sans",
                    "path": default_fallback_font_path(),
                    "enabled": True,
                    "supported": [[0x0000, 0x0500]],
                    "transliterate": True,
                },
            },
            "header": {
                "background_color": "#F8F8FA",
                "height": 150,
                "image": None,
                "text_position": 330,
            },
            "table": {
                "quantity": {"position": 330, "max_width": 140},
                "total": {"position": 490, "max_width": 80},
            },
            "text": {
                "primary_color": "#000100",
                "secondary_color": "#8F8F8F",
                "heading_size": 15,
                "regular_size": 10,
            },
        },
        "data": {
            "invoice": {
                "name": "Invoice for Acme",
                "header": [{"label": "Invoice Number", "value": 1}],
                "customer": [{"label": "Bill To", "value": []}],
                "seller": [{"label": "Bill From", "value": []}],
                "details": {
                    "header": [
                        {"value": "Description"},
                        {"value": "Quantity"},
                        {"value": "Subtotal"},
                    ],
                    "parts": [],
                    "total": [{"label": "Total", "value": 0}],
                },
                "legal": [],
            },
        },
    }


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge override onto base and return a new dict.

    Mappings present on both sides are merged key by key. Lists and scalars
    from override replace the base value entirely. Neither input is modified.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def normalize_keys(value: Any) -> Any:
    """Convert camelCase mapping keys (marginLeft, maxWidth) to snake_case."""
    if isinstance(value, Mapping):
        return {
            _CAMEL_PATTERN.sub(r"_\1", str(k)).lower(): normalize_keys(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [normalize_keys(v) for v in value]
    return value


def load_options(path: Path) -> Dict[str, Any]:
    """Read a raw options mapping from a YAML (.yml/.yaml) or JSON file."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise InvoiceValidationError("", f"cannot parse {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvoiceValidationError("", f"{path} does not contain a mapping")
    return data


def dump_options(options: Mapping[str, Any], path: Path) -> None:
    """Save a raw options mapping to a YAML file."""
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(dict(options), f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def parse_codepoint_ranges(value: Any, path: str) -> Tuple[CodepointRange, ...]:
    """Parse a list of [first, last] pairs or "U+XXXX-U+YYYY" strings."""
    items = _require_list(value, path)
    ranges: List[CodepointRange] = []
    for i, item in enumerate(items):
        item_path = f"{path}[{i}]"
        if isinstance(item, str):
            match = _RANGE_PATTERN.match(item.strip())
            if not match:
                raise InvoiceValidationError(item_path, f"invalid codepoint range {item!r}")
            first, last = int(match.group(1), 16), int(match.group(2), 16)
        elif isinstance(item, (list, tuple)) and len(item) == 2 and all(_is_int(v) for v in item):
            first, last = int(item[0]), int(item[1])
        else:
            raise InvoiceValidationError(item_path, "expected [first, last] or 'U+XXXX-U+YYYY'")
        if first > last or first < 0 or last > 0x10FFFF:
            raise InvoiceValidationError(item_path, f"invalid codepoint range {first:#x}-{last:#x}")
        ranges.append((first, last))
    return tuple(ranges)


def _parse_style(style: Mapping[str, Any]) -> Style:
    document = _require_mapping(style.get("document"), "style.document")
    header = _require_mapping(style.get("header"), "style.header")
    table = _require_mapping(style.get("table"), "style.table")
    text = _require_mapping(style.get("text"), "style.text")

    image = header.get("image")
    header_image = None
    if image is not None:
        image = _require_mapping(image, "style.header.image")
        header_image = HeaderImage(
            path=_require_str(image.get("path"), "style.header.image.path"),
            width=_require_number(image.get("width"), "style.header.image.width"),
            height=_require_number(image.get("height"), "style.header.image.height"),
        )

    return Style(
        document=DocumentStyle(
            margin_left=_require_number(document.get("margin_left"), "style.document.margin_left"),
            margin_right=_require_number(document.get("margin_right"), "style.document.margin_right"),
            margin_top=_require_number(document.get("margin_top"), "style.document.margin_top"),
        ),
        fonts=_parse_fonts(_require_mapping(style.get("fonts"), "style.fonts")),
        header=HeaderStyle(
            background_color=_require_str(header.get("background_color"), "style.header.background_color"),
            height=_require_number(header.get("height"), "style.header.height"),
            image=header_image,
            text_position=_require_number(header.get("text_position"), "style.header.text_position"),
            regular_color=_optional_str(header.get("regular_color"), "style.header.regular_color"),
            secondary_color=_optional_str(header.get("secondary_color"), "style.header.secondary_color"),
        ),
        table=TableStyle(
            quantity=_parse_column(table.get("quantity"), "style.table.quantity"),
            total=_parse_column(table.get("total"), "style.table.total"),
        ),
        text=TextStyle(
            primary_color=_require_str(text.get("primary_color"), "style.text.primary_color"),
            secondary_color=_require_str(text.get("secondary_color"), "style.text.secondary_color"),
            heading_size=_require_number(text.get("heading_size"), "style.text.heading_size"),
            regular_size=_require_number(text.get("regular_size"), "style.text.regular_size"),
        ),
    )


def _parse_fonts(fonts: Mapping[str, Any]) -> FontsStyle:
    normal = _require_mapping(fonts.get("normal"), "style.fonts.normal")
    bold = _require_mapping(fonts.get("bold"), "style.fonts.bold")
    fallback = _require_mapping(fonts.get("fallback"), "style.fonts.fallback")

    bold_supported = bold.get("supported")
    return FontsStyle(
        normal=FontSpec(
            name=_require_str(normal.get("name"), "style.fonts.normal.name"),
            path=_optional_str(normal.get("path"), "style.fonts.normal.path"),
            supported=parse_codepoint_ranges(normal.get("supported"), "style.fonts.normal.supported"),
        ),
        bold=FontSpec(
            name=_require_str(bold.get("name"), "style.fonts.bold.name"),
            path=_optional_str(bold.get("path"), "style.fonts.bold.path"),
            supported=parse_codepoint_ranges(bold_supported, "style.fonts.bold.supported")
            if bold_supported is not None else None,
        ),
        fallback=FallbackFontSpec(
            name=_require_str(fallback.get("name"), "style.fonts.fallback.name"),
            path=_optional_str(fallback.get("path"), "style.fonts.fallback.path"),
            supported=parse_codepoint_ranges(fallback.get("supported"), "style.fonts.fallback.supported"),
            enabled=_require_bool(fallback.get("enabled"), "style.fonts.fallback.enabled"),
            transliterate=_require_bool(fallback.get("transliterate"), "style.fonts.fallback.transliterate"),
        ),
    )


def _parse_column(value: Any, path: str) -> TableColumn:
    column = _require_mapping(value, path)
    return TableColumn(
        position=_require_number(column.get("position"), f"{path}.position"),
        max_width=_require_number(column.get("max_width"), f"{path}.max_width"),
    )


def _parse_invoice(invoice: Mapping[str, Any]) -> InvoiceData:
    details = _require_mapping(invoice.get("details"), "data.invoice.details")

    header_cells = tuple(
        _parse_cell(cell, f"data.invoice.details.header[{i}]")
        for i, cell in enumerate(_require_list(details.get("header"), "data.invoice.details.header"))
    )
    if len(header_cells) < MIN_TABLE_COLUMNS:
        raise UnsupportedColumnCountError("data.invoice.details.header", len(header_cells))

    parts = []
    for row_idx, row in enumerate(_require_list(details.get("parts") or [], "data.invoice.details.parts")):
        row_path = f"data.invoice.details.parts[{row_idx}]"
        cells = tuple(
            _parse_cell(cell, f"{row_path}[{i}]")
            for i, cell in enumerate(_require_list(row, row_path))
        )
        if len(cells) < MIN_TABLE_COLUMNS:
            raise UnsupportedColumnCountError(row_path, len(cells))
        if len(cells) != len(header_cells):
            raise InvoiceValidationError(
                row_path,
                f"row has {len(cells)} columns but the table header has {len(header_cells)}",
            )
        parts.append(cells)

    totals = []
    for i, total in enumerate(_require_list(details.get("total") or [], "data.invoice.details.total")):
        total_path = f"data.invoice.details.total[{i}]"
        total = _require_mapping(total, total_path)
        totals.append(TotalLine(
            label=_require_text(total.get("label"), f"{total_path}.label"),
            value=_require_cell_value(total.get("value"), f"{total_path}.value"),
            price=_require_bool(total.get("price", False), f"{total_path}.price"),
        ))

    legal = []
    for i, line in enumerate(_require_list(invoice.get("legal") or [], "data.invoice.legal")):
        line_path = f"data.invoice.legal[{i}]"
        line = _require_mapping(line, line_path)
        weight = line.get("weight") or "normal"
        color = line.get("color") or "primary"
        if weight not in ("normal", "bold"):
            raise InvoiceValidationError(f"{line_path}.weight", f"expected 'normal' or 'bold', got {weight!r}")
        if color not in ("primary", "secondary"):
            raise InvoiceValidationError(f"{line_path}.color", f"expected 'primary' or 'secondary', got {color!r}")
        legal.append(LegalLine(
            value=_require_text(line.get("value"), f"{line_path}.value"),
            weight=weight,
            color=color,
        ))

    currency = invoice.get("currency")
    return InvoiceData(
        name=_require_text(invoice.get("name"), "data.invoice.name"),
        header=_parse_labeled_lines(invoice.get("header"), "data.invoice.header"),
        customer=_parse_labeled_lines(invoice.get("customer"), "data.invoice.customer"),
        seller=_parse_labeled_lines(invoice.get("seller"), "data.invoice.seller"),
        details=InvoiceDetails(header=header_cells, parts=tuple(parts), total=tuple(totals)),
        legal=tuple(legal),
        currency=_optional_str(currency, "data.invoice.currency") or None,
    )


def _parse_labeled_lines(value: Any, path: str) -> Tuple[LabeledLine, ...]:
    lines = []
    for i, line in enumerate(_require_list(value, path)):
        line_path = f"{path}[{i}]"
        line = _require_mapping(line, line_path)
        raw_values = line.get("value")
        if isinstance(raw_values, (list, tuple)):
            values = tuple(
                _require_cell_value(v, f"{line_path}.value[{j}]") for j, v in enumerate(raw_values)
            )
        else:
            values = (_require_cell_value(raw_values, f"{line_path}.value"),)
        lines.append(LabeledLine(label=_require_text(line.get("label"), f"{line_path}.label"), values=values))
    return tuple(lines)


def _parse_cell(value: Any, path: str) -> Cell:
    cell = _require_mapping(value, path)
    return Cell(
        value=_require_cell_value(cell.get("value"), f"{path}.value"),
        price=_require_bool(cell.get("price", False), f"{path}.price"),
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvoiceValidationError(path, f"expected a mapping, got {type(value).__name__}")
    return value


def _require_list(value: Any, path: str) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        raise InvoiceValidationError(path, f"expected a list, got {type(value).__name__}")
    return list(value)


def _require_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise InvoiceValidationError(path, f"expected a string, got {type(value).__name__}")
    return value


def _optional_str(value: Any, path: str) -> Optional[str]:
    if value is None:
        return None
    return _require_str(value, path)


def _require_text(value: Any, path: str) -> str:
    """Labels may be given as numbers in YAML; render them as text."""
    if _is_number(value):
        return str(value)
    return _require_str(value, path)


def _require_number(value: Any, path: str) -> float:
    if not _is_number(value):
        raise InvoiceValidationError(path, f"expected a number, got {type(value).__name__}")
    return value


def _require_bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise InvoiceValidationError(path, f"expected true or false, got {type(value).__name__}")
    return value


def _require_cell_value(value: Any, path: str) -> CellValue:
    if isinstance(value, str) or _is_number(value):
        return value
    raise InvoiceValidationError(path, f"expected a string or number, got {type(value).__name__}")
