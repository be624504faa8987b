"""Façade CRUD des sites patrimoniaux, avec état local (items, chargement, erreur, pagination)."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from actionculture.core.api.params import MediaMetadata, ProximityQuery, SiteFilters
from actionculture.core.api.patrimoine import PatrimoineService
from actionculture.core.models import Site, TypePatrimoine
from actionculture.core.resources.base import ResourceState


def _site_filters(filters: SiteFilters | Mapping[str, Any] | None) -> SiteFilters:
    if filters is None:
        return SiteFilters()
    if isinstance(filters, SiteFilters):
        return filters
    return SiteFilters.from_mapping(filters)


class SiteResource(ResourceState[Site]):
    """
    Sites patrimoniaux vus par une UI.

    Politique de cache : `create` ajoute le nouveau site en tête sans recharger
    (l'ordre et la pagination peuvent alors diverger du serveur), `fetch_page`
    remplace tout par la page serveur. `search`, `nearby`, `popular` et
    `by_category` remplacent les items sans toucher la pagination.
    """

    def __init__(self, service: PatrimoineService, *, page_size: int | None = None) -> None:
        super().__init__(page_size=page_size or service.client.config.default_page_size)
        self._service = service

    async def fetch_page(
        self,
        filters: SiteFilters | Mapping[str, Any] | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> bool:
        base = _site_filters(filters)
        query = replace(
            base,
            page=page or base.page or 1,
            limit=limit or base.limit or self._pagination.limit,
        )
        return await self._fetch_into(lambda: self._service.list_sites(query), "Erreur lors du chargement des sites")

    async def get_one(self, site_id: int) -> Site | None:
        _, site = await self._run(
            lambda: self._service.get_site(site_id),
            "Erreur lors du chargement du site",
        )
        return site

    async def create(self, data: Mapping[str, Any]) -> Site | None:
        return await self._create_item(lambda: self._service.create_site(data), "Erreur lors de la création du site")

    async def update(self, site_id: int, data: Mapping[str, Any]) -> Site | None:
        return await self._update_item(
            site_id,
            lambda: self._service.update_site(site_id, data),
            "Erreur lors de la mise à jour du site",
        )

    async def delete(self, site_id: int) -> bool:
        return await self._delete_item(
            site_id,
            lambda: self._service.delete_site(site_id),
            "Erreur lors de la suppression du site",
        )

    async def search(
        self,
        query: str,
        filters: SiteFilters | Mapping[str, Any] | None = None,
    ) -> bool:
        params = _site_filters(filters)
        return await self._replace_from(lambda: self._service.search(query, params), "Erreur lors de la recherche")

    async def nearby(self, query: ProximityQuery | Mapping[str, Any]) -> bool:
        params = query if isinstance(query, ProximityQuery) else ProximityQuery.from_mapping(query)
        return await self._replace_from(
            lambda: self._service.nearby(params),
            "Erreur lors de la recherche de sites proches",
        )

    async def popular(self, limit: int = 10) -> bool:
        return await self._replace_from(
            lambda: self._service.popular(limit),
            "Erreur lors du chargement des sites populaires",
        )

    async def by_category(
        self,
        type_patrimoine: TypePatrimoine | str,
        filters: SiteFilters | Mapping[str, Any] | None = None,
    ) -> bool:
        kind = TypePatrimoine(type_patrimoine)
        params = _site_filters(filters)
        return await self._replace_from(
            lambda: self._service.by_category(kind, params),
            f"Erreur lors du chargement des {kind.value}s",
        )

    async def attach_media(
        self,
        site_id: int,
        *,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        metadata: MediaMetadata | Mapping[str, Any] | None = None,
    ) -> bool:
        """Ajoute un média ; le site en cache n'est pas rafraîchi."""
        meta = metadata if isinstance(metadata, MediaMetadata) or metadata is None else MediaMetadata.from_mapping(metadata)
        ok, _ = await self._run(
            lambda: self._service.add_media(
                site_id,
                filename=filename,
                content=content,
                content_type=content_type,
                metadata=meta,
            ),
            "Erreur lors de l'ajout du média",
        )
        return ok
