"""Configuration client (TOML) : URL de l'API, timeout, cache, pagination."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from actionculture import __version__

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api"
API_TABLE = "api"


@dataclass(frozen=True)
class ApiConfig:
    """Paramètres de connexion à l'API Action Culture."""

    base_url: str = DEFAULT_BASE_URL
    """URL de base (sans slash final), ex. http://localhost:3000/api."""
    timeout_s: float = 30.0
    """Timeout des requêtes HTTP (secondes)."""
    cache_ttl_s: float = 300.0
    """Durée de vie du cache des GET (secondes, 0 = désactivé)."""
    user_agent: str = f"ActionCulture/{__version__}"
    token: str | None = None
    """Jeton bearer (JWT) ; jamais écrit sur disque."""
    default_page_size: int = 12

    def __post_init__(self) -> None:
        if not (self.base_url or "").strip():
            raise ValueError("base_url ne peut pas être vide.")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s doit être strictement positif.")
        if self.cache_ttl_s < 0:
            raise ValueError("cache_ttl_s ne peut pas être négatif.")
        if self.default_page_size <= 0:
            raise ValueError("default_page_size doit être strictement positif.")
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))


def read_toml(path: Path) -> dict[str, Any]:
    """Lit un fichier TOML (stdlib tomllib en 3.11+)."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore
    with open(path, "rb") as file_obj:
        return tomllib.load(file_obj)


def _toml_value(value: Any) -> str:
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return f'"{value!s}"'


def write_toml_table(path: Path, table: str, data: dict[str, Any]) -> None:
    """Écrit une table TOML unique (écriture manuelle pour éviter une dépendance)."""
    lines = [f"[{table}]"]
    for key, value in data.items():
        if value is None:
            continue
        lines.append(f"{key} = {_toml_value(value)}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def load_api_config(path: Path | None) -> ApiConfig:
    """Charge `[api]` depuis un fichier TOML ; fichier absent → valeurs par défaut."""
    if path is None or not Path(path).exists():
        return ApiConfig()
    data = read_toml(Path(path)).get(API_TABLE) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Section [{API_TABLE}] invalide dans {path}")
    known = {f.name for f in fields(ApiConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Clés inconnues ignorées dans %s: %s", path, ", ".join(unknown))
    kwargs = {key: value for key, value in data.items() if key in known}
    return ApiConfig(**kwargs)


def save_api_config(path: Path, config: ApiConfig) -> None:
    """Écrit la configuration dans `[api]` (le jeton n'est pas persisté)."""
    data = {
        "base_url": config.base_url,
        "timeout_s": config.timeout_s,
        "cache_ttl_s": config.cache_ttl_s,
        "user_agent": config.user_agent,
        "default_page_size": config.default_page_size,
    }
    write_toml_table(Path(path), API_TABLE, data)


def with_token(config: ApiConfig, token: str | None) -> ApiConfig:
    return replace(config, token=token)
