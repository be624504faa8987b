"""Logique client sans dépendance UI : API REST, formulaires, ressources, filtres."""
