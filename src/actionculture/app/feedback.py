"""Helpers de formatage des messages de prérequis et d'erreur."""

from __future__ import annotations

from typing import Any

from actionculture.core.api.client import ApiError, ApiErrorKind


def format_precondition(problem: str, next_step: str | None = None) -> str:
    """Formate un message de prérequis avec une prochaine étape explicite."""
    if next_step:
        return f"{problem}\n\nProchaine étape: {next_step}"
    return problem


def format_error(exc: Any, *, context: str | None = None, max_len: int = 500) -> str:
    """Convertit une exception en message court et stable."""
    try:
        base = str(exc) if exc is not None else "Erreur inconnue"
    except Exception:
        base = "Erreur inconnue"
    if context:
        base = f"{context}: {base}"
    if len(base) > max_len:
        return base[: max_len - 3] + "..."
    return base


def next_step_for(exc: ApiError) -> str | None:
    """Action suggérée selon la nature de l'erreur API (None si rien d'utile à proposer)."""
    if exc.kind in (ApiErrorKind.NETWORK, ApiErrorKind.TIMEOUT):
        return "Vérifiez que le serveur est joignable (option --config, clé base_url)."
    if exc.kind is ApiErrorKind.UNAUTHORIZED:
        return "Fournissez un jeton valide avec --token."
    return None
