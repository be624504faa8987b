"""Modèle de données : dataclasses typées pour sites patrimoniaux, événements et pagination."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Mapping, TypeVar

T = TypeVar("T")


class TypePatrimoine(str, Enum):
    """Catégorie d'un site patrimonial."""

    MONUMENT = "monument"
    VESTIGE = "vestige"
    SITE_CULTUREL = "site_culturel"


def _name_of(value: Any) -> str | None:
    """Nom d'une entité géographique imbriquée ({"nom": ...}) ou valeur brute."""
    if isinstance(value, Mapping):
        name = value.get("nom") or value.get("wilaya_name_ascii")
        return str(name) if name else None
    if value in (None, ""):
        return None
    return str(value)


def _float_or_none(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Site:
    """Site patrimonial (lieu) tel que renvoyé par le serveur."""

    id: int
    nom: str
    description: str = ""
    adresse: str = ""
    latitude: float | None = None
    longitude: float | None = None
    wilaya: str | None = None
    commune: str | None = None
    daira: str | None = None
    detail: dict[str, Any] = field(default_factory=dict)
    monuments: list[dict[str, Any]] = field(default_factory=list)
    vestiges: list[dict[str, Any]] = field(default_factory=list)
    medias: list[dict[str, Any]] = field(default_factory=list)
    services: list[dict[str, Any]] = field(default_factory=list)
    evenements: list[dict[str, Any]] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Site":
        """Construit un Site depuis la réponse serveur (clé `id_lieu` ou `id`)."""
        raw_id = data.get("id_lieu", data.get("id"))
        if raw_id is None:
            raise ValueError("Site sans identifiant (id_lieu/id) dans la réponse serveur.")
        detail = data.get("DetailLieu") or data.get("detail") or {}
        if not isinstance(detail, Mapping):
            detail = {}
        description = data.get("description") or detail.get("description") or ""
        return cls(
            id=int(raw_id),
            nom=str(data.get("nom") or ""),
            description=str(description),
            adresse=str(data.get("adresse") or ""),
            latitude=_float_or_none(data.get("latitude")),
            longitude=_float_or_none(data.get("longitude")),
            wilaya=_name_of(data.get("Wilaya") or data.get("wilaya")),
            commune=_name_of(data.get("Commune") or data.get("commune")),
            daira=_name_of(data.get("Daira") or data.get("daira")),
            detail=dict(detail),
            monuments=list(detail.get("Monuments") or data.get("monuments") or []),
            vestiges=list(detail.get("Vestiges") or data.get("vestiges") or []),
            medias=list(data.get("LieuMedias") or data.get("medias") or []),
            services=list(data.get("Services") or data.get("services") or []),
            evenements=list(data.get("Evenements") or data.get("evenements") or []),
            raw=dict(data),
        )


@dataclass
class Event:
    """Événement culturel."""

    id: int
    nom: str
    date_debut: str = ""
    date_fin: str = ""
    wilaya: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Event":
        raw_id = data.get("id_evenement", data.get("id"))
        if raw_id is None:
            raise ValueError("Événement sans identifiant (id_evenement/id) dans la réponse serveur.")
        return cls(
            id=int(raw_id),
            nom=str(data.get("nom_evenement") or data.get("nom") or ""),
            date_debut=str(data.get("date_debut") or ""),
            date_fin=str(data.get("date_fin") or ""),
            wilaya=_name_of(data.get("Wilaya") or data.get("wilaya")),
            raw=dict(data),
        )


@dataclass(frozen=True)
class Pagination:
    """État de pagination, remplacé en bloc à chaque liste réussie."""

    page: int = 1
    limit: int = 12
    total: int = 0
    total_pages: int = 0


@dataclass
class Page(Generic[T]):
    """Une page de résultats + sa pagination."""

    items: list[T] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
