"""
Exceptions raised by the quote tool.

Bad input values are never raised; they are clamped and reported as
session warnings. Only programming errors (unknown field names) and
export collaborator failures surface as exceptions.
"""


class KitchenQuoteError(Exception):
    """Base class for quote tool errors."""
    code: str = "KITCHEN_QUOTE_ERROR"


class UnknownFieldError(KitchenQuoteError, KeyError):
    """A setter was called with a field name the model does not declare."""
    code = "UNKNOWN_FIELD"

    def __init__(self, name: str):
        self.field_name = name
        super().__init__(f"Unknown field: {name}")

    def __str__(self) -> str:
        return self.args[0]


class ExportError(KitchenQuoteError):
    """Writing a quote export failed. Pricing state is unaffected."""
    code = "EXPORT_FAILED"


class NoResultError(ExportError):
    """A summary or export was requested before any quote was computed."""
    code = "NO_RESULT"
