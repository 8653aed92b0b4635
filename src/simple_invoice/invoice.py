"""Invoice PDF generation: merges options and runs the section renderers in order."""

import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from .config import InvoiceOptions
from .fonts import FontResolver
from .layout_engine import RenderContext
from .pdf_renderer import PDFBackend
from .sections import render_details, render_header, render_legal, render_parts
from .text_renderer import TextBlockRenderer


logger = logging.getLogger(__name__)


def default_backend_factory(options: InvoiceOptions) -> PDFBackend:
    return PDFBackend(
        margin_right=options.style.document.margin_right,
        title=options.invoice.name,
    )


class SimpleInvoicePDF:
    """
    Renders one invoice to a single-page PDF.

    Options are deep-merged onto the built-in defaults and validated once, at
    construction. Every generate_buffer call renders with fresh layout state
    and a fresh backend, so repeated calls return identical bytes.
    """

    def __init__(
        self,
        options: Optional[Union[Mapping[str, Any], InvoiceOptions]] = None,
        backend_factory: Optional[Callable[[InvoiceOptions], Any]] = None,
    ):
        if isinstance(options, InvoiceOptions):
            self.options = options
        else:
            self.options = InvoiceOptions.from_mapping(options)
        self.backend_factory = backend_factory or default_backend_factory

    def render(self, backend) -> RenderContext:
        """Issue every draw call for the invoice to backend."""
        ctx = RenderContext(options=self.options, backend=backend)
        resolver = FontResolver(self.options.style.fonts, backend, ctx.font_state)
        text = TextBlockRenderer(ctx, resolver)

        resolver.load_custom_fonts()
        render_header(ctx, text)
        render_details(ctx, text, "customer")
        render_details(ctx, text, "seller")
        render_parts(ctx, text)
        render_legal(ctx, text)
        return ctx

    def generate_buffer(self) -> bytes:
        """Render the invoice and return the PDF bytes."""
        backend = self.backend_factory(self.options)
        self.render(backend)
        buffer = backend.finish()
        logger.info("Rendered invoice %r (%d bytes)", self.options.invoice.name, len(buffer))
        return buffer

    def generate_file(self, path: Union[str, Path]) -> Path:
        """Render the invoice and write it to path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.generate_buffer())
        return path


def generate_buffer(options: Optional[Mapping[str, Any]] = None) -> bytes:
    """Render an invoice from an options mapping."""
    return SimpleInvoicePDF(options).generate_buffer()
