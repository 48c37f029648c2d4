"""Custom exceptions for the converter."""


class ConversionError(Exception):
    """Base exception for conversion errors."""
    pass


class InvalidExportError(ConversionError):
    """Raised when a source blob is not a parseable export."""
    pass


class RootNodeNotFound(ConversionError):
    """Raised when no node carries the root marker name."""
    pass
