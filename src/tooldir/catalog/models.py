"""Catalog data models."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ALL_CATEGORIES = "All"


class PricingTier(str, Enum):
    """Coarse pricing tier derived from free-form pricing text."""

    FREE = "Free"
    TRIAL = "Trial"
    FREEMIUM = "Freemium"
    PAID = "Paid"


class ToolRecord(BaseModel):
    """Canonical catalog entry produced by normalization.

    Attributes:
        id: Stable identifier, unique within a collection.
        name: Display name.
        description: Display description; never empty once normalized.
        category: Free-form category label; ``"Other"`` when unknown.
        url: Normalized absolute address, or an empty string.
        logo: Absolute image address.
        upvotes: Non-negative vote count.
        featured: Whether the tool appears in the featured grid.
        top: Whether the tool carries the TOP ribbon.
        verified: Whether the tool is verified.
        pricing_text: Free-form pricing description.
        section: Optional auxiliary grouping label.
        status: Display status.
        order_index: Optional sort hint.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Union[int, str]
    name: str = ""
    description: str = ""
    category: str = "Other"
    url: str = ""
    logo: str = ""
    upvotes: int = Field(default=0, ge=0)
    featured: bool = False
    top: bool = False
    verified: bool = False
    pricing_text: str = ""
    section: str = ""
    status: str = "Active"
    order_index: int = 0


class FilterState(BaseModel):
    """Active predicate selections shared by the browsing surfaces.

    Attributes:
        category: Selected category; ``"All"`` or empty disables the predicate.
        query: Free-text query matched against name, description, and category.
        verified_only: Restrict results to verified tools.
        pricing: Selected pricing tier, if any.
    """

    category: str = ALL_CATEGORIES
    query: str = ""
    verified_only: bool = False
    pricing: Optional[PricingTier] = None


Collection = list[ToolRecord]


__all__ = ["ALL_CATEGORIES", "Collection", "FilterState", "PricingTier", "ToolRecord"]
