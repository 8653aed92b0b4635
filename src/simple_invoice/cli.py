"""Command-line interface for rendering invoices."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import InvoiceOptions, dump_options, load_options
from .errors import InvoiceError
from .invoice import SimpleInvoicePDF
from .sample import demo_options


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simple-invoice",
        description="Render an invoice PDF from a YAML or JSON options file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "config",
        type=Path,
        nargs="?",
        help="Path to a YAML or JSON options file",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("invoice.pdf"),
        help="Output PDF path",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Render the built-in demo invoice instead of a config file",
    )
    parser.add_argument(
        "--fake-parties",
        action="store_true",
        help="With --demo, generate fake customer and seller blocks",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for --fake-parties",
    )
    parser.add_argument(
        "--dump-config",
        type=Path,
        help="Also write the options used to this YAML file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.demo:
        raw_options = demo_options(fake_parties=args.fake_parties, seed=args.seed)
    elif args.config:
        raw_options = None
    else:
        parser.error("either a config file or --demo is required")

    try:
        if raw_options is None:
            raw_options = load_options(args.config)
        options = InvoiceOptions.from_mapping(raw_options)
        if args.dump_config:
            dump_options(raw_options, args.dump_config)
        path = SimpleInvoicePDF(options).generate_file(args.output)
    except (InvoiceError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Invoice written to {path}")
    print(f"  Size: {path.stat().st_size} bytes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
