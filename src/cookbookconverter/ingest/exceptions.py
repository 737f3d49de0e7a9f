"""Exceptions raised while reading the source export.

Both are fatal: they mean the export itself is structurally broken, so the
run stops before any output is written.
"""


class ConversionError(Exception):
    """Base exception for conversion errors."""


class DecodeError(ConversionError):
    """Raised when a tagged value envelope cannot be decoded."""


class MissingRequiredFieldError(ConversionError):
    """Raised when a record lacks a field the target format cannot do without."""

    def __init__(self, message: str, record_id: str | None = None, field: str | None = None):
        super().__init__(message)
        self.record_id = record_id
        self.field = field
