"""Service événements (endpoints /evenements)."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from actionculture.core.api.client import ApiClient, ApiError, ApiErrorKind
from actionculture.core.api.params import EventFilters
from actionculture.core.api.responses import extract_array, normalize_list_response
from actionculture.core.models import Event, Page

logger = logging.getLogger(__name__)

BASE = "/evenements"
SEARCH = f"{BASE}/search"
UPCOMING = f"{BASE}/upcoming"
MY_EVENTS = f"{BASE}/my-events"
MY_INSCRIPTIONS = f"{BASE}/my-inscriptions"
STATISTICS = f"{BASE}/statistics"
SUGGESTIONS = f"{BASE}/suggestions"
EVENT_ARRAY_KEYS = ("evenements", "events")


def event_path(event_id: int) -> str:
    return f"{BASE}/{event_id}"


def inscription_path(event_id: int) -> str:
    return f"{event_path(event_id)}/inscription"


def participants_path(event_id: int) -> str:
    return f"{event_path(event_id)}/participants"


def _to_event(payload: Any) -> Event:
    data = payload
    if isinstance(data, Mapping) and "id_evenement" not in data and "id" not in data:
        for key in ("evenement", "event", "data"):
            if isinstance(data.get(key), Mapping):
                data = data[key]
                break
    if not isinstance(data, Mapping):
        raise ApiError("Réponse événement invalide", kind=ApiErrorKind.INVALID_RESPONSE)
    try:
        return Event.from_api(data)
    except (TypeError, ValueError) as exc:
        raise ApiError(f"Réponse événement invalide: {exc}", kind=ApiErrorKind.INVALID_RESPONSE) from exc


def _to_events(rows: Iterable[Any]) -> list[Event]:
    return [_to_event(row) for row in rows]


class EvenementService:
    """Accès aux événements culturels ; lève `ApiError` en cas d'échec."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    @property
    def client(self) -> ApiClient:
        return self._client

    async def list_events(self, filters: EventFilters | None = None) -> Page[Event]:
        params = (filters or EventFilters()).to_params()
        response = await self._client.get(BASE, params)
        rows, pagination = normalize_list_response(
            response,
            default_limit=params.get("limit") or self._client.config.default_page_size,
        )
        events = _to_events(rows)
        logger.info("%d événements récupérés", len(events))
        return Page(items=events, pagination=pagination)

    async def get_event(self, event_id: int) -> Event:
        return _to_event(await self._client.get(event_path(event_id)))

    async def create_event(self, data: Mapping[str, Any]) -> Event:
        event = _to_event(await self._client.post(BASE, dict(data)))
        self._client.clear_cache()
        logger.info("Événement '%s' créé avec l'ID %s", event.nom, event.id)
        return event

    async def update_event(self, event_id: int, data: Mapping[str, Any]) -> Event:
        event = _to_event(await self._client.put(event_path(event_id), dict(data)))
        self._client.clear_cache()
        return event

    async def delete_event(self, event_id: int) -> None:
        await self._client.delete(event_path(event_id))
        self._client.clear_cache()
        logger.info("Événement %s supprimé", event_id)

    async def search(self, query: str, filters: EventFilters | None = None) -> list[Event]:
        params = {"q": query, **(filters or EventFilters()).to_params()}
        response = await self._client.get(SEARCH, params)
        return _to_events(extract_array(response, EVENT_ARRAY_KEYS))

    async def upcoming(self, limit: int = 10, id_wilaya: int | None = None) -> list[Event]:
        response = await self._client.get(UPCOMING, {"limit": limit, "wilaya": id_wilaya})
        return _to_events(extract_array(response, EVENT_ARRAY_KEYS))

    async def my_events(self, filters: EventFilters | None = None) -> list[Event]:
        """Événements organisés par l'utilisateur connecté."""
        response = await self._client.get(MY_EVENTS, (filters or EventFilters()).to_params())
        return _to_events(extract_array(response, EVENT_ARRAY_KEYS))

    async def my_inscriptions(self, filters: EventFilters | None = None) -> list[Event]:
        """Événements auxquels l'utilisateur connecté est inscrit."""
        response = await self._client.get(MY_INSCRIPTIONS, (filters or EventFilters()).to_params(), cache=False)
        return _to_events(extract_array(response, ("inscriptions", *EVENT_ARRAY_KEYS)))

    async def register(self, event_id: int, data: Mapping[str, Any] | None = None) -> None:
        await self._client.post(inscription_path(event_id), dict(data or {}))
        self._client.clear_cache()
        logger.info("Inscription à l'événement %s réussie", event_id)

    async def unregister(self, event_id: int) -> None:
        await self._client.delete(inscription_path(event_id))
        self._client.clear_cache()
        logger.info("Désinscription de l'événement %s réussie", event_id)

    async def participants(self, event_id: int) -> list[dict[str, Any]]:
        response = await self._client.get(participants_path(event_id), cache=False)
        rows = extract_array(response, ("participants", "users"))
        return [dict(row) for row in rows if isinstance(row, Mapping)]

    async def statistics(self) -> dict[str, Any]:
        response = await self._client.get(STATISTICS)
        return dict(response) if isinstance(response, Mapping) else {}

    async def suggestions(self, query: str, limit: int = 5) -> list[Event]:
        if len(query.strip()) < 2:
            return []
        response = await self._client.get(SUGGESTIONS, {"q": query.strip(), "limit": limit})
        return _to_events(extract_array(response, ("suggestions", *EVENT_ARRAY_KEYS)))
