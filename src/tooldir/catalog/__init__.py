"""Catalog normalization, deduplication, filtering, and storage."""

from .errors import (
    CatalogError,
    ImportInProgressError,
    InvalidFileTypeError,
    InvalidPayloadError,
    ParseFailureError,
    RecordNotFoundError,
    RecordRejectedError,
    SourceUnavailableError,
)
from .filters import (
    BASE_CATEGORIES,
    apply_filters,
    catalog_stats,
    featured_tools,
    known_categories,
    list_sections,
    manage_filter,
    pricing_tier,
)
from .identity import DedupIndex, dedup_key, is_duplicate
from .importer import BatchImporter, ImportJob, ImportProgress, ImportResult
from .models import ALL_CATEGORIES, FilterState, PricingTier, ToolRecord
from .normalize import normalize_tool, normalize_url
from .query import filter_state_from_query, filter_state_to_query
from .sources import DEFAULT_TOOLS, StaticDocumentSource
from .store import CatalogChange, CatalogStore, StoreState
from .transfer import export_collection, parse_import_text, read_import_file, write_export

__all__ = [
    "ALL_CATEGORIES",
    "BASE_CATEGORIES",
    "DEFAULT_TOOLS",
    "BatchImporter",
    "CatalogChange",
    "CatalogError",
    "CatalogStore",
    "DedupIndex",
    "FilterState",
    "ImportInProgressError",
    "ImportJob",
    "ImportProgress",
    "ImportResult",
    "InvalidFileTypeError",
    "InvalidPayloadError",
    "ParseFailureError",
    "PricingTier",
    "RecordNotFoundError",
    "RecordRejectedError",
    "SourceUnavailableError",
    "StaticDocumentSource",
    "StoreState",
    "ToolRecord",
    "apply_filters",
    "catalog_stats",
    "dedup_key",
    "export_collection",
    "featured_tools",
    "filter_state_from_query",
    "filter_state_to_query",
    "is_duplicate",
    "known_categories",
    "list_sections",
    "manage_filter",
    "normalize_tool",
    "normalize_url",
    "parse_import_text",
    "pricing_tier",
    "read_import_file",
    "write_export",
]
