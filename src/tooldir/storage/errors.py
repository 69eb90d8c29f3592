"""Storage errors."""


class StorageError(Exception):
    """Raised when the persisted key-value file cannot be read or written."""
