"""Façade CRUD des événements culturels (mêmes politiques de cache que les sites)."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from actionculture.core.api.evenements import EvenementService
from actionculture.core.api.params import EventFilters
from actionculture.core.models import Event
from actionculture.core.resources.base import ResourceState


def _event_filters(filters: EventFilters | Mapping[str, Any] | None) -> EventFilters:
    if filters is None:
        return EventFilters()
    if isinstance(filters, EventFilters):
        return filters
    return EventFilters.from_mapping(filters)


class EventResource(ResourceState[Event]):
    """
    Événements vus par une UI.

    Inscription et désinscription retournent un succès booléen sans toucher
    aux items ; `my_events` et `my_inscriptions` les remplacent.
    """

    def __init__(self, service: EvenementService, *, page_size: int | None = None) -> None:
        super().__init__(page_size=page_size or service.client.config.default_page_size)
        self._service = service

    async def fetch_page(
        self,
        filters: EventFilters | Mapping[str, Any] | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> bool:
        base = _event_filters(filters)
        query = replace(
            base,
            page=page or base.page or 1,
            limit=limit or base.limit or self._pagination.limit,
        )
        return await self._fetch_into(
            lambda: self._service.list_events(query),
            "Erreur lors du chargement des événements",
        )

    async def get_one(self, event_id: int) -> Event | None:
        _, event = await self._run(
            lambda: self._service.get_event(event_id),
            "Erreur lors du chargement de l'événement",
        )
        return event

    async def create(self, data: Mapping[str, Any]) -> Event | None:
        return await self._create_item(
            lambda: self._service.create_event(data),
            "Erreur lors de la création de l'événement",
        )

    async def update(self, event_id: int, data: Mapping[str, Any]) -> Event | None:
        return await self._update_item(
            event_id,
            lambda: self._service.update_event(event_id, data),
            "Erreur lors de la mise à jour de l'événement",
        )

    async def delete(self, event_id: int) -> bool:
        return await self._delete_item(
            event_id,
            lambda: self._service.delete_event(event_id),
            "Erreur lors de la suppression de l'événement",
        )

    async def search(
        self,
        query: str,
        filters: EventFilters | Mapping[str, Any] | None = None,
    ) -> bool:
        params = _event_filters(filters)
        return await self._replace_from(lambda: self._service.search(query, params), "Erreur lors de la recherche")

    async def upcoming(self, limit: int = 10, id_wilaya: int | None = None) -> bool:
        return await self._replace_from(
            lambda: self._service.upcoming(limit, id_wilaya),
            "Erreur lors du chargement des événements à venir",
        )

    async def my_events(self, filters: EventFilters | Mapping[str, Any] | None = None) -> bool:
        params = _event_filters(filters)
        return await self._replace_from(
            lambda: self._service.my_events(params),
            "Erreur lors du chargement de vos événements",
        )

    async def my_inscriptions(self, filters: EventFilters | Mapping[str, Any] | None = None) -> bool:
        params = _event_filters(filters)
        return await self._replace_from(
            lambda: self._service.my_inscriptions(params),
            "Erreur lors du chargement de vos inscriptions",
        )

    async def register(self, event_id: int, data: Mapping[str, Any] | None = None) -> bool:
        ok, _ = await self._run(lambda: self._service.register(event_id, data), "Erreur lors de l'inscription")
        return ok

    async def unregister(self, event_id: int) -> bool:
        ok, _ = await self._run(lambda: self._service.unregister(event_id), "Erreur lors de la désinscription")
        return ok

    async def participants(self, event_id: int) -> list[dict[str, Any]]:
        """Participants de l'événement ; liste vide en cas d'échec (l'erreur reste dans `error`)."""
        _, rows = await self._run(
            lambda: self._service.participants(event_id),
            "Erreur lors du chargement des participants",
        )
        return rows or []
