"""Service patrimoine : sites, monuments, vestiges, médias (endpoints /patrimoine)."""

from __future__ import annotations

import logging
import math
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence

from actionculture.core.api.client import ApiClient, ApiError, ApiErrorKind
from actionculture.core.api.params import MediaMetadata, ProximityQuery, SiteFilters
from actionculture.core.api.responses import extract_array, normalize_list_response
from actionculture.core.models import Page, Site, TypePatrimoine

logger = logging.getLogger(__name__)

BASE = "/patrimoine"
SITES = f"{BASE}/sites"
RECHERCHE = f"{BASE}/recherche"
STATISTIQUES = f"{BASE}/statistiques"
PROXIMITE_PATHS = (f"{BASE}/proximite", f"{BASE}/proximity", f"{BASE}/nearby")
POPULAIRES_PATHS = (f"{BASE}/populaires", f"{BASE}/popular", f"{SITES}/popular")
CATEGORY_PATHS = {
    TypePatrimoine.MONUMENT: f"{BASE}/monuments",
    TypePatrimoine.VESTIGE: f"{BASE}/vestiges",
}
SITE_ARRAY_KEYS = ("sites", "lieux", "patrimoine")
EARTH_RADIUS_KM = 6371.0


def site_paths(site_id: int) -> tuple[str, str]:
    return (f"{SITES}/{site_id}", f"{BASE}/{site_id}")


def media_path(site_id: int) -> str:
    return f"{SITES}/{site_id}/medias"


async def first_available(
    call: Callable[[str], Awaitable[Any]],
    paths: Sequence[str],
) -> Any:
    """Essaie les endpoints dans l'ordre : un 404 passe au suivant, toute autre erreur remonte."""
    last_exc: ApiError | None = None
    for path in paths:
        try:
            return await call(path)
        except ApiError as exc:
            if exc.kind != ApiErrorKind.NOT_FOUND:
                raise
            logger.debug("Endpoint %s absent (404), essai suivant", path)
            last_exc = exc
    if last_exc is not None:
        raise last_exc
    raise RuntimeError("first_available appelé sans endpoint")


def _to_site(payload: Any) -> Site:
    data = payload
    if isinstance(data, Mapping) and "id_lieu" not in data and "id" not in data:
        for key in ("site", "lieu", "data"):
            if isinstance(data.get(key), Mapping):
                data = data[key]
                break
    if not isinstance(data, Mapping):
        raise ApiError("Réponse site invalide", kind=ApiErrorKind.INVALID_RESPONSE)
    try:
        return Site.from_api(data)
    except (TypeError, ValueError) as exc:
        raise ApiError(f"Réponse site invalide: {exc}", kind=ApiErrorKind.INVALID_RESPONSE) from exc


def _to_sites(rows: Iterable[Any]) -> list[Site]:
    return [_to_site(row) for row in rows]


class PatrimoineService:
    """
    Accès aux sites patrimoniaux.

    Toutes les opérations lèvent `ApiError` en cas d'échec ; c'est la couche
    ressource qui les transforme en état (`error`).
    """

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    @property
    def client(self) -> ApiClient:
        return self._client

    async def list_sites(self, filters: SiteFilters | None = None) -> Page[Site]:
        params = (filters or SiteFilters()).to_params()
        logger.debug("Récupération des sites patrimoniaux: %s", params)
        response = await first_available(
            lambda path: self._client.get(path, params),
            (SITES, BASE),
        )
        rows, pagination = normalize_list_response(
            response,
            default_limit=params.get("limit") or self._client.config.default_page_size,
        )
        sites = _to_sites(rows)
        logger.info("%d sites patrimoniaux récupérés (page %d/%d)", len(sites), pagination.page, pagination.total_pages)
        return Page(items=sites, pagination=pagination)

    async def get_site(self, site_id: int) -> Site:
        response = await first_available(self._client.get, site_paths(site_id))
        return _to_site(response)

    async def create_site(self, data: Mapping[str, Any]) -> Site:
        response = await first_available(
            lambda path: self._client.post(path, dict(data)),
            (SITES, BASE),
        )
        site = _to_site(response)
        self._client.clear_cache()
        logger.info("Site '%s' créé avec l'ID %s", site.nom, site.id)
        return site

    async def update_site(self, site_id: int, data: Mapping[str, Any]) -> Site:
        response = await first_available(
            lambda path: self._client.put(path, dict(data)),
            site_paths(site_id),
        )
        site = _to_site(response)
        self._client.clear_cache()
        logger.info("Site %s mis à jour", site_id)
        return site

    async def delete_site(self, site_id: int) -> None:
        await first_available(self._client.delete, site_paths(site_id))
        self._client.clear_cache()
        logger.info("Site %s supprimé", site_id)

    async def search(self, query: str, filters: SiteFilters | None = None) -> list[Site]:
        params = {"q": query, **(filters or SiteFilters()).to_params()}
        response = await self._client.get(RECHERCHE, params)
        sites = _to_sites(extract_array(response, (*SITE_ARRAY_KEYS, "results")))
        logger.info("Recherche '%s' : %d sites trouvés", query, len(sites))
        return sites

    async def nearby(self, query: ProximityQuery) -> list[Site]:
        params = query.to_params()
        response = await first_available(
            lambda path: self._client.get(path, params),
            PROXIMITE_PATHS,
        )
        return _to_sites(extract_array(response, (*SITE_ARRAY_KEYS, "nearby")))

    async def popular(self, limit: int = 10) -> list[Site]:
        response = await first_available(
            lambda path: self._client.get(path, {"limit": limit}),
            POPULAIRES_PATHS,
        )
        return _to_sites(extract_array(response, ("sites", "populaires", "lieux")))

    async def by_category(
        self,
        type_patrimoine: TypePatrimoine | str,
        filters: SiteFilters | None = None,
    ) -> list[Site]:
        """Sites d'une catégorie ; `site_culturel` passe par la liste filtrée."""
        kind = TypePatrimoine(type_patrimoine)
        base = filters or SiteFilters()
        if kind == TypePatrimoine.SITE_CULTUREL:
            params = SiteFilters.from_mapping({**base.to_params(), "type_patrimoine": kind})
            return (await self.list_sites(params)).items
        response = await self._client.get(CATEGORY_PATHS[kind], base.to_params())
        return _to_sites(extract_array(response, (f"{kind.value}s", *SITE_ARRAY_KEYS)))

    async def add_media(
        self,
        site_id: int,
        *,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        metadata: MediaMetadata | None = None,
    ) -> Any:
        response = await self._client.upload(
            media_path(site_id),
            filename=filename,
            content=content,
            content_type=content_type,
            fields=(metadata or MediaMetadata()).to_params(),
        )
        self._client.clear_cache()
        logger.info("Média ajouté au site %s", site_id)
        return response

    async def gallery(self, site_id: int) -> list[dict[str, Any]]:
        response = await self._client.get(media_path(site_id))
        return extract_array(response, ("medias", "galerie", "images"))

    async def statistics(self) -> dict[str, Any]:
        response = await self._client.get(STATISTIQUES)
        return dict(response) if isinstance(response, Mapping) else {}

    async def suggestions(self, query: str, limit: int = 5) -> list[Site]:
        if len(query.strip()) < 2:
            return []
        response = await self._client.get(f"{BASE}/suggestions", {"q": query.strip(), "limit": limit})
        return _to_sites(extract_array(response, (*SITE_ARRAY_KEYS, "suggestions")))

    async def check_name_exists(self, name: str, exclude_id: int | None = None) -> bool:
        response = await self._client.get(
            f"{BASE}/check-name",
            {"name": name, "exclude_id": exclude_id},
            cache=False,
        )
        return bool(response.get("exists")) if isinstance(response, Mapping) else False


def distance_km(a: Site, b: Site) -> float:
    """Distance haversine entre deux sites, arrondie à 0.1 km (0 si coordonnées manquantes)."""
    if None in (a.latitude, a.longitude, b.latitude, b.longitude):
        return 0.0
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)  # type: ignore[arg-type]
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)  # type: ignore[operator]
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return round(EARTH_RADIUS_KM * c, 1)


def format_address(site: Site) -> str:
    """Adresse complète algérienne : adresse, commune, daïra, wilaya, pays."""
    parts = [site.adresse, site.commune, site.daira, site.wilaya, "Algérie"]
    return ", ".join(p for p in parts if p)


def heritage_type(site: Site) -> TypePatrimoine:
    if site.monuments:
        return TypePatrimoine.MONUMENT
    if site.vestiges:
        return TypePatrimoine.VESTIGE
    return TypePatrimoine.SITE_CULTUREL
