"""Paramètres structurés des appels API : chaque clé reconnue est explicite, les autres sont refusées."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Mapping, TypeVar

from actionculture.core.models import TypePatrimoine

P = TypeVar("P", bound="_Params")


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class _Params:
    """Base commune : construction depuis un mapping strict, export des seules clés renseignées."""

    @classmethod
    def from_mapping(cls: type[P], mapping: Mapping[str, Any] | None) -> P:
        data = dict(mapping or {})
        allowed = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ValueError(
                f"Paramètre(s) inconnu(s) pour {cls.__name__}: {', '.join(unknown)}. "
                f"Attendus : {', '.join(sorted(allowed))}"
            )
        return cls(**data)

    def to_params(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, value in asdict(self).items():  # type: ignore[call-overload]
            if value is None or value == "" or value == ():
                continue
            out[key] = value.value if isinstance(value, Enum) else value
        return out


def _check_page(page: int | None, limit: int | None) -> None:
    if page is not None and page < 1:
        raise ValueError("page doit être >= 1")
    if limit is not None and limit < 1:
        raise ValueError("limit doit être >= 1")


@dataclass(frozen=True)
class SiteFilters(_Params):
    """Filtres de liste/recherche des sites patrimoniaux."""

    search: str | None = None
    id_wilaya: int | None = None
    id_commune: int | None = None
    type_patrimoine: TypePatrimoine | None = None
    categories: tuple[str, ...] = ()
    wilayas: tuple[str, ...] = ()
    date_debut: str | None = None
    date_fin: str | None = None
    prix_min: float | None = None
    prix_max: float | None = None
    sort_by: str | None = None
    sort_order: SortOrder | None = None
    page: int | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", tuple(self.categories))
        object.__setattr__(self, "wilayas", tuple(self.wilayas))
        if self.type_patrimoine is not None and not isinstance(self.type_patrimoine, TypePatrimoine):
            object.__setattr__(self, "type_patrimoine", TypePatrimoine(self.type_patrimoine))
        if self.sort_order is not None and not isinstance(self.sort_order, SortOrder):
            object.__setattr__(self, "sort_order", SortOrder(str(self.sort_order).upper()))
        _check_page(self.page, self.limit)


@dataclass(frozen=True)
class ProximityQuery(_Params):
    """Recherche de sites autour d'un point (rayon en km)."""

    latitude: float
    longitude: float
    rayon: float = 10.0
    limit: int | None = None

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude hors bornes: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude hors bornes: {self.longitude}")
        if self.rayon <= 0:
            raise ValueError("Le rayon doit être strictement positif.")
        _check_page(None, self.limit)


@dataclass(frozen=True)
class MediaMetadata(_Params):
    """Métadonnées accompagnant l'upload d'un média de site."""

    titre: str | None = None
    description: str | None = None
    type_media: str | None = None


@dataclass(frozen=True)
class EventFilters(_Params):
    """Filtres de liste/recherche des événements."""

    search: str | None = None
    id_wilaya: int | None = None
    id_type_evenement: int | None = None
    date_debut: str | None = None
    date_fin: str | None = None
    statut: str | None = None
    page: int | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        _check_page(self.page, self.limit)
