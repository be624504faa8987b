"""Normalisation des réponses liste : le serveur n'emploie pas toujours la même forme."""

from __future__ import annotations

import math
from typing import Any, Mapping, Sequence

from actionculture.core.models import Pagination

_META_KEYS = ("pagination", "meta")
DEFAULT_ARRAY_KEYS = ("items", "data", "results")


def _first_int(meta: Mapping[str, Any], keys: Sequence[str]) -> int | None:
    for key in keys:
        value = meta.get(key)
        if value in (None, ""):
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return None


def _pagination_from(meta: Mapping[str, Any], item_count: int, default_limit: int) -> Pagination:
    page = _first_int(meta, ("page", "currentPage")) or 1
    limit = _first_int(meta, ("limit", "perPage")) or item_count or default_limit
    total = _first_int(meta, ("total", "totalItems"))
    if total is None:
        total = item_count
    total_pages = _first_int(meta, ("totalPages", "pages"))
    if total_pages is None:
        total_pages = math.ceil(total / limit) if limit else 0
    return Pagination(page=page, limit=limit, total=total, total_pages=total_pages)


def normalize_list_response(
    response: Any,
    *,
    default_limit: int = 12,
) -> tuple[list[Any], Pagination]:
    """
    Ramène une réponse liste à (items, pagination).

    Formes acceptées :
    - `{items, page, limit, total, totalPages}` (enveloppe paginée)
    - `{data: {items, ...}}` ou `{data: {items, pagination}}`
    - `{<clé>: [...], pagination|meta: {...}}`
    - liste nue (une seule page)
    """
    if isinstance(response, list):
        count = len(response)
        return list(response), Pagination(page=1, limit=count or default_limit, total=count, total_pages=1 if count else 0)
    if not isinstance(response, Mapping):
        return [], Pagination(page=1, limit=default_limit, total=0, total_pages=0)

    inner = response.get("data")
    if isinstance(inner, Mapping) and isinstance(inner.get("items"), list):
        return normalize_list_response(inner, default_limit=default_limit)

    if isinstance(response.get("items"), list):
        items = list(response["items"])
        meta = response.get("pagination")
        if not isinstance(meta, Mapping):
            meta = response
        return items, _pagination_from(meta, len(items), default_limit)

    for key, value in response.items():
        if key in _META_KEYS or not isinstance(value, list):
            continue
        meta = response.get("pagination") or response.get("meta") or {}
        if not isinstance(meta, Mapping):
            meta = {}
        return list(value), _pagination_from(meta, len(value), default_limit)

    return [], Pagination(page=1, limit=default_limit, total=0, total_pages=0)


def extract_array(response: Any, keys: Sequence[str] = ()) -> list[Any]:
    """Extrait un tableau d'une réponse en essayant `keys` puis les clés usuelles."""
    if isinstance(response, list):
        return list(response)
    if not isinstance(response, Mapping):
        return []
    inner = response.get("data")
    if isinstance(inner, Mapping) and isinstance(inner.get("items"), list):
        return list(inner["items"])
    for key in (*keys, *DEFAULT_ARRAY_KEYS):
        value = response.get(key)
        if isinstance(value, list):
            return list(value)
    return []
