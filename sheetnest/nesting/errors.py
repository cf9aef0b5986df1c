"""Exceptions raised by the nesting engine."""


class NestingError(Exception):
    """Base error for nesting failures."""
    pass


class InvalidConfiguration(NestingError, ValueError):
    """Raised when a nesting configuration cannot produce a layout."""
    pass


class InvalidPart(NestingError, ValueError):
    """Raised when a submitted part or its polygon is malformed."""
    pass
