"""Exception types raised while building or rendering an invoice."""


class InvoiceError(Exception):
    """Base class for all simple_invoice errors."""


class InvoiceValidationError(InvoiceError, ValueError):
    """Invoice options have the wrong shape or types."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class UnsupportedColumnCountError(InvoiceValidationError):
    """A table row has fewer columns than the layout can allocate."""

    def __init__(self, path: str, count: int):
        self.count = count
        super().__init__(
            path,
            f"unsupported column count {count}; table rows need at least 3 columns",
        )


class RenderBackendError(InvoiceError):
    """The document backend failed (font, image or output)."""
