"""Tests for shareable filter links."""

from __future__ import annotations

from tooldir.catalog.models import FilterState, PricingTier
from tooldir.catalog.query import filter_state_from_query, filter_state_to_query


def test_default_state_renders_empty_query() -> None:
    assert filter_state_to_query(FilterState()) == ""
    assert filter_state_to_query(FilterState(query="   ")) == ""


def test_state_round_trips_through_query() -> None:
    state = FilterState(category="AI Writing", query="copy & paste")

    rendered = filter_state_to_query(state)

    assert rendered == "category=AI+Writing&q=copy+%26+paste"
    assert filter_state_from_query(rendered) == state
    assert filter_state_from_query("?" + rendered) == state


def test_unrelated_parameters_are_ignored() -> None:
    state = filter_state_from_query("utm_source=x&q=video")

    assert state == FilterState(query="video")


def test_base_state_keeps_non_shared_selections() -> None:
    base = FilterState(verified_only=True, pricing=PricingTier.FREE)

    state = filter_state_from_query("category=Coding", base=base)

    assert state.category == "Coding"
    assert state.verified_only is True
    assert state.pricing is PricingTier.FREE
