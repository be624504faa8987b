"""Sélection de filtres d'une session UI (recherche, catégories, wilayas, dates, prix, tri, vue)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable

from actionculture.core.api.params import SortOrder

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"


@dataclass(frozen=True)
class DateRange:
    start: str | None = None
    end: str | None = None


@dataclass(frozen=True)
class PriceRange:
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class FilterState:
    """Instantané immuable ; les séquences gardent l'ordre d'ajout (doublons possibles)."""

    search: str = ""
    categories: tuple[str, ...] = ()
    wilayas: tuple[str, ...] = ()
    date_range: DateRange = DateRange()
    price_range: PriceRange = PriceRange()
    sort_by: str = "date_creation"
    sort_order: SortOrder = SortOrder.DESC
    view: ViewMode = ViewMode.GRID

    def __post_init__(self) -> None:
        object.__setattr__(self, "search", "" if self.search is None else str(self.search))
        object.__setattr__(self, "categories", tuple(self.categories))
        object.__setattr__(self, "wilayas", tuple(self.wilayas))
        if not isinstance(self.sort_order, SortOrder):
            object.__setattr__(self, "sort_order", SortOrder(str(self.sort_order).upper()))
        if not isinstance(self.view, ViewMode):
            object.__setattr__(self, "view", ViewMode(self.view))
        if isinstance(self.date_range, dict):
            object.__setattr__(self, "date_range", DateRange(**self.date_range))
        if isinstance(self.price_range, dict):
            object.__setattr__(self, "price_range", PriceRange(**self.price_range))


FILTER_KEYS = tuple(f.name for f in fields(FilterState))

StateListener = Callable[[FilterState], None]


class FilterStore:
    """
    Propriétaire unique d'un `FilterState`.

    Aucune instance globale : le store est créé par la portée qui en a besoin
    et passé explicitement. Toutes les écritures passent par les setters
    ci-dessous ; chaque écriture remplace l'instantané et notifie les abonnés.
    """

    def __init__(self, initial: FilterState | None = None) -> None:
        self._state = initial or FilterState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> FilterState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _commit(self, state: FilterState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def set_filter(self, key: str, value: Any) -> None:
        if key not in FILTER_KEYS:
            raise KeyError(f"Filtre inconnu: {key}")
        self._commit(replace(self._state, **{key: value}))

    def add_category(self, category: str) -> None:
        self._commit(replace(self._state, categories=(*self._state.categories, category)))

    def remove_category(self, category: str) -> None:
        kept = tuple(c for c in self._state.categories if c != category)
        self._commit(replace(self._state, categories=kept))

    def add_wilaya(self, wilaya: str) -> None:
        self._commit(replace(self._state, wilayas=(*self._state.wilayas, wilaya)))

    def remove_wilaya(self, wilaya: str) -> None:
        kept = tuple(w for w in self._state.wilayas if w != wilaya)
        self._commit(replace(self._state, wilayas=kept))

    def set_date_range(self, start: str | None = None, end: str | None = None) -> None:
        self._commit(replace(self._state, date_range=DateRange(start, end)))

    def set_price_range(self, min: float | None = None, max: float | None = None) -> None:
        self._commit(replace(self._state, price_range=PriceRange(min, max)))

    def toggle_sort_order(self) -> None:
        order = SortOrder.DESC if self._state.sort_order is SortOrder.ASC else SortOrder.ASC
        self._commit(replace(self._state, sort_order=order))

    def toggle_view(self) -> None:
        view = ViewMode.LIST if self._state.view is ViewMode.GRID else ViewMode.GRID
        self._commit(replace(self._state, view=view))

    def reset_filters(self) -> None:
        logger.debug("Réinitialisation des filtres")
        self._commit(FilterState())

    def to_query(self) -> dict[str, Any]:
        """Clés acceptées par `SiteFilters.from_mapping` ; les valeurs vides sont omises."""
        state = self._state
        query: dict[str, Any] = {
            "search": state.search.strip() or None,
            "categories": state.categories,
            "wilayas": state.wilayas,
            "date_debut": state.date_range.start,
            "date_fin": state.date_range.end,
            "prix_min": state.price_range.min,
            "prix_max": state.price_range.max,
            "sort_by": state.sort_by or None,
            "sort_order": state.sort_order,
        }
        return {k: v for k, v in query.items() if v is not None and v != () and v != ""}
