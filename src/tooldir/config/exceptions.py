"""Custom exceptions for configuration management."""


class ConfigError(Exception):
    """Raised when tooldir settings cannot be loaded, parsed, or validated."""
