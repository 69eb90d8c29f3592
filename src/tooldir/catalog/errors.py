"""Catalog error taxonomy."""


class CatalogError(Exception):
    """Base exception for catalog operations."""


class SourceUnavailableError(CatalogError):
    """Raised when a catalog source cannot be read or parsed."""


class ParseFailureError(CatalogError):
    """Raised when pasted or uploaded import text is not valid JSON."""


class InvalidPayloadError(ParseFailureError):
    """Raised when an import payload is valid JSON but not an array of records."""


class InvalidFileTypeError(ParseFailureError):
    """Raised when an import file does not carry a ``.json`` extension."""


class ImportInProgressError(CatalogError):
    """Raised when an import starts while another one is still running."""


class RecordNotFoundError(CatalogError):
    """Raised when no record in the collection carries the requested id."""


class RecordRejectedError(CatalogError):
    """Raised when a record misses its name, url, or category after normalization."""
