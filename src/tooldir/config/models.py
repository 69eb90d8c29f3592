"""Configuration models describing tooldir settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TooldirBaseModel(BaseModel):
    """Shared configuration for tooldir settings models."""

    model_config = ConfigDict(extra="forbid")


class CatalogSettings(TooldirBaseModel):
    """Where the catalog comes from and how derived fields are built.

    Attributes:
        document_path: Static JSON document holding the published catalog.
        override_key: Storage key of the persisted override collection.
        logo_lookup: Favicon lookup address; ``{host}`` is replaced by the tool host.
    """

    document_path: str = "tools.json"
    override_key: str = "tools_override"
    logo_lookup: str = "https://www.google.com/s2/favicons?domain={host}"


class StorageSettings(TooldirBaseModel):
    """Persisted key-value store location.

    Attributes:
        path: JSON file backing the override store.
        debounce_seconds: Quiet period before `tooldir watch` re-reads the file.
    """

    path: str = "~/.tooldir/storage.json"
    debounce_seconds: float = Field(default=0.2, gt=0)


class ImportSettings(TooldirBaseModel):
    """Batch import pacing.

    Attributes:
        batch_size: Number of candidates processed between progress updates.
        preview_rows: Rows shown by `tooldir import --dry-run`.
    """

    batch_size: int = Field(default=500, ge=1)
    preview_rows: int = Field(default=10, ge=1)


class DisplaySettings(TooldirBaseModel):
    """Limits applied by the browsing and admin surfaces.

    Attributes:
        featured_limit: Maximum number of featured tools shown at once.
        manage_limit: Maximum number of rows in the admin table.
        latest_count: Number of recently added tools on the dashboard.
    """

    featured_limit: int = 24
    manage_limit: int = 1000
    latest_count: int = 5


class LoggingSettings(TooldirBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; console-only logging when unset.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 100
    backup_count: int = 5


class CLIOptions(TooldirBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class TooldirConfig(TooldirBaseModel):
    """Top-level configuration struct for tooldir.

    Attributes:
        catalog: Catalog source settings.
        storage: Override store settings.
        importing: Batch import settings.
        display: Surface limits.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    importing: ImportSettings = Field(default_factory=ImportSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "TooldirBaseModel",
    "CatalogSettings",
    "StorageSettings",
    "ImportSettings",
    "DisplaySettings",
    "LoggingSettings",
    "CLIOptions",
    "TooldirConfig",
]
