"""Métadonnées de référence (wilayas, types d'événements) pour les formulaires."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from actionculture.core.api.client import ApiClient

BASE = "/metadata"


@dataclass
class MetadataBundle:
    wilayas: list[dict[str, Any]] = field(default_factory=list)
    types_evenements: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Any) -> "MetadataBundle":
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            wilayas=[w for w in data.get("wilayas") or [] if isinstance(w, Mapping)],
            types_evenements=[t for t in data.get("types_evenements") or [] if isinstance(t, Mapping)],
        )


class MetadataService:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def get_all(self) -> MetadataBundle:
        return MetadataBundle.from_api(await self._client.get(BASE))


def wilaya_options(bundle: MetadataBundle) -> list[tuple[str, str]]:
    """Options (valeur, libellé) des wilayas, libellé "NN - Nom"."""
    options: list[tuple[str, str]] = []
    for wilaya in bundle.wilayas:
        wid = wilaya.get("id_wilaya")
        if wid is None:
            continue
        code = wilaya.get("codeW")
        name = wilaya.get("wilaya_name_ascii") or wilaya.get("nom") or "Sans nom"
        prefix = f"{int(code):02d}" if code not in (None, "") else ""
        options.append((str(wid), f"{prefix} - {name}" if prefix else str(name)))
    return options


def event_type_options(bundle: MetadataBundle) -> list[tuple[str, str]]:
    return [
        (str(t["id_type_evenement"]), str(t.get("nom_type") or ""))
        for t in bundle.types_evenements
        if t.get("id_type_evenement") is not None
    ]
