"""Action Culture : coeur client de la plateforme patrimoine (sites, événements, filtres, formulaires)."""

__version__ = "0.3.0"
