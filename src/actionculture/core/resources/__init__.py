"""Ressources distantes avec état local (façades CRUD pour l'UI)."""

from actionculture.core.resources.base import ResourceState
from actionculture.core.resources.events import EventResource
from actionculture.core.resources.sites import SiteResource

__all__ = ["EventResource", "ResourceState", "SiteResource"]
