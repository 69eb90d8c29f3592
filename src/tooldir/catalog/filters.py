"""Composable filter predicates and derived views over a collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .models import ALL_CATEGORIES, FilterState, PricingTier, ToolRecord

BASE_CATEGORIES = (ALL_CATEGORIES, "AI Writing", "Image", "Video", "Coding", "Marketing")
FEATURED_LIMIT = 24
MANAGE_LIMIT = 1000
LATEST_COUNT = 5

_PAID_MARKERS = ("$", "paid", "from")


def pricing_tier(text: str) -> Optional[PricingTier]:
    """Derive the coarse pricing tier from free-form pricing text."""
    lowered = (text or "").lower()
    if not lowered:
        return None
    if "freemium" in lowered:
        return PricingTier.FREEMIUM
    if "trial" in lowered:
        return PricingTier.TRIAL
    if "free" in lowered:
        return PricingTier.FREE
    if any(marker in lowered for marker in _PAID_MARKERS):
        return PricingTier.PAID
    return None


def matches(record: ToolRecord, state: FilterState) -> bool:
    """Return whether ``record`` passes every active predicate in ``state``."""
    if state.category and state.category != ALL_CATEGORIES:
        if record.category != state.category:
            return False

    query = state.query.strip().lower()
    if query and not (
        query in record.name.lower()
        or query in record.description.lower()
        or query in record.category.lower()
    ):
        return False

    if state.verified_only and not record.verified:
        return False

    if state.pricing is not None and pricing_tier(record.pricing_text) != state.pricing:
        return False

    return True


def apply_filters(collection: Iterable[ToolRecord], state: FilterState) -> list[ToolRecord]:
    """Return the records matching ``state``, preserving input order."""
    return [record for record in collection if matches(record, state)]


def known_categories(collection: Iterable[ToolRecord]) -> list[str]:
    """Merge the built-in categories with those present in the data, first seen first."""
    seen = dict.fromkeys(BASE_CATEGORIES)
    for record in collection:
        if record.category:
            seen.setdefault(record.category)
    return list(seen)


def featured_tools(
    collection: Iterable[ToolRecord],
    state: FilterState,
    *,
    limit: int = FEATURED_LIMIT,
) -> list[ToolRecord]:
    """Return featured records that also pass ``state``, capped at ``limit``."""
    featured = [record for record in collection if record.featured]
    return apply_filters(featured, state)[: max(0, limit)]


@dataclass(slots=True)
class CategorySection:
    """One column of the category lists view."""

    category: str
    tools: list[ToolRecord]

    @property
    def count(self) -> int:
        return len(self.tools)


def list_sections(collection: Sequence[ToolRecord]) -> list[CategorySection]:
    """Group records by category; categories and tools are sorted by name."""
    grouped: dict[str, list[ToolRecord]] = {}
    for record in collection:
        if record.category:
            grouped.setdefault(record.category, []).append(record)
    return [
        CategorySection(
            category=category,
            tools=sorted(grouped[category], key=lambda record: record.name.lower()),
        )
        for category in sorted(grouped, key=str.lower)
    ]


def manage_filter(
    collection: Iterable[ToolRecord],
    *,
    name: str = "",
    category: str = "",
    section: str = "",
    limit: int = MANAGE_LIMIT,
) -> list[ToolRecord]:
    """Admin table filter: case-insensitive substrings on name, category, and section."""
    name_q, category_q, section_q = name.lower(), category.lower(), section.lower()
    rows = [
        record
        for record in collection
        if name_q in record.name.lower()
        and category_q in record.category.lower()
        and section_q in record.section.lower()
    ]
    return rows[: max(0, limit)]


@dataclass(slots=True, frozen=True)
class CatalogStats:
    """Dashboard counters for a collection."""

    total: int
    featured: int
    categories: int
    latest: tuple[str, ...]


def catalog_stats(collection: Sequence[ToolRecord], *, latest: int = LATEST_COUNT) -> CatalogStats:
    """Summarize ``collection``; the newest records sit at the front."""
    return CatalogStats(
        total=len(collection),
        featured=sum(1 for record in collection if record.featured),
        categories=len({record.category for record in collection}),
        latest=tuple(record.name for record in collection[: max(0, latest)]),
    )


__all__ = [
    "BASE_CATEGORIES",
    "CatalogStats",
    "CategorySection",
    "apply_filters",
    "catalog_stats",
    "featured_tools",
    "known_categories",
    "list_sections",
    "manage_filter",
    "matches",
    "pricing_tier",
]
