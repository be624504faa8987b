"""Tests FilterStore : setters, bascules, réinitialisation, requête de liste."""

from __future__ import annotations

import pytest

from actionculture.core.api.params import SiteFilters, SortOrder
from actionculture.core.filters import DateRange, FilterState, FilterStore, PriceRange, ViewMode


def test_defaults() -> None:
    state = FilterStore().state

    assert state == FilterState(
        search="",
        categories=(),
        wilayas=(),
        date_range=DateRange(),
        price_range=PriceRange(),
        sort_by="date_creation",
        sort_order=SortOrder.DESC,
        view=ViewMode.GRID,
    )


def test_reset_restores_defaults_whatever_the_state() -> None:
    store = FilterStore()
    store.set_filter("search", "casbah")
    store.add_category("monument")
    store.add_wilaya("16")
    store.set_date_range("2030-01-01", "2030-02-01")
    store.set_price_range(0, 500)
    store.toggle_sort_order()
    store.toggle_view()

    store.reset_filters()

    assert store.state == FilterState()


def test_toggles_are_involutions() -> None:
    store = FilterStore()
    before = store.state

    store.toggle_sort_order()
    assert store.state.sort_order is SortOrder.ASC
    store.toggle_sort_order()
    store.toggle_view()
    assert store.state.view is ViewMode.LIST
    store.toggle_view()

    assert store.state == before


def test_categories_allow_duplicates_and_remove_all_matches() -> None:
    store = FilterStore()
    store.add_category("monument")
    store.add_category("vestige")
    store.add_category("monument")

    assert store.state.categories == ("monument", "vestige", "monument")

    store.remove_category("monument")
    store.remove_wilaya("absente")

    assert store.state.categories == ("vestige",)
    assert store.state.wilayas == ()


def test_set_filter_rejects_unknown_keys() -> None:
    with pytest.raises(KeyError):
        FilterStore().set_filter("couleur", "rouge")


def test_set_filter_coerces_values() -> None:
    store = FilterStore()
    store.set_filter("sort_order", "asc")
    store.set_filter("wilayas", ["16", "31"])
    store.set_filter("view", "list")

    assert store.state.sort_order is SortOrder.ASC
    assert store.state.wilayas == ("16", "31")
    assert store.state.view is ViewMode.LIST


def test_clearing_search_with_none_keeps_query_usable() -> None:
    store = FilterStore()
    store.set_filter("search", "casbah")

    store.set_filter("search", None)

    assert store.state.search == ""
    assert "search" not in store.to_query()


def test_subscribers_receive_each_snapshot() -> None:
    store = FilterStore()
    seen: list[str] = []
    unsubscribe = store.subscribe(lambda state: seen.append(state.search))

    store.set_filter("search", "a")
    unsubscribe()
    store.set_filter("search", "b")

    assert seen == ["a"]


def test_to_query_feeds_site_filters() -> None:
    store = FilterStore()
    store.set_filter("search", "  djemila ")
    store.add_category("vestige")
    store.set_price_range(max=200)
    store.set_date_range(start="2030-03-01")

    query = store.to_query()
    filters = SiteFilters.from_mapping(query)

    assert query == {
        "search": "djemila",
        "categories": ("vestige",),
        "date_debut": "2030-03-01",
        "prix_max": 200,
        "sort_by": "date_creation",
        "sort_order": SortOrder.DESC,
    }
    assert filters.to_params()["sort_order"] == "DESC"
    assert "view" not in query
