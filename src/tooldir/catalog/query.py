"""Mirror filter state into shareable ``category``/``q`` query parameters."""

from __future__ import annotations

from urllib.parse import parse_qs, urlencode

from .models import ALL_CATEGORIES, FilterState


def filter_state_from_query(query: str, *, base: FilterState | None = None) -> FilterState:
    """Rebuild filter state from a query string such as ``category=Coding&q=copilot``.

    Only ``category`` and ``q`` are read; other selections come from ``base``.
    """
    params = parse_qs(query.lstrip("?"), keep_blank_values=False)
    update: dict[str, str] = {}
    if params.get("category"):
        update["category"] = params["category"][0]
    if params.get("q"):
        update["query"] = params["q"][0]
    return (base or FilterState()).model_copy(update=update)


def filter_state_to_query(state: FilterState) -> str:
    """Render the shareable part of ``state``; ``All`` and blank queries are omitted."""
    params: dict[str, str] = {}
    if state.category and state.category != ALL_CATEGORIES:
        params["category"] = state.category
    if state.query.strip():
        params["q"] = state.query.strip()
    return urlencode(params)


__all__ = ["filter_state_from_query", "filter_state_to_query"]
