"""Clients de l'API REST Action Culture."""

from actionculture.core.api.client import ApiClient, ApiError, ApiErrorKind
from actionculture.core.api.evenements import EvenementService
from actionculture.core.api.metadata import MetadataBundle, MetadataService
from actionculture.core.api.params import (
    EventFilters,
    MediaMetadata,
    ProximityQuery,
    SiteFilters,
    SortOrder,
)
from actionculture.core.api.patrimoine import PatrimoineService

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiErrorKind",
    "EvenementService",
    "EventFilters",
    "MediaMetadata",
    "MetadataBundle",
    "MetadataService",
    "PatrimoineService",
    "ProximityQuery",
    "SiteFilters",
    "SortOrder",
]
