"""
Exception types for page and schema extraction.

Schema errors never escape the resolver: they are logged and the schema is
treated as absent. Only the page-level errors reach callers.
"""

from typing import Optional


class BlockJSONError(Exception):
    """Base exception for all extraction errors."""

    pass


class SchemaError(BlockJSONError):
    """A schema document could not be loaded."""

    pass


class SchemaFetchError(SchemaError):
    """
    The schema source could not be reached.

    Raised for transport problems (connection refused, DNS, timeouts, unreadable
    files). A plain "not found" is not an error and is reported as None.
    """

    pass


class SchemaFormatError(SchemaError):
    """The schema document is not valid JSON or not a valid schema node."""

    pass


class ExtractionError(BlockJSONError):
    """The page cannot be extracted at all."""

    pass


class MissingMainError(ExtractionError):
    """The document has no <main> element."""

    def __init__(self, message: str = 'No <main> element found for schema extraction'):
        super().__init__(message)


class PageFetchError(BlockJSONError):
    """The page HTML could not be fetched."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
