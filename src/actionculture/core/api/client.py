"""Client REST pour l'API Action Culture (JSON, jeton bearer, cache des GET)."""

from __future__ import annotations

import base64
import copy
import json
import logging
import time
from enum import Enum
from typing import Any, Mapping
from urllib.parse import urlencode

import httpx

from actionculture.core.config import ApiConfig

logger = logging.getLogger(__name__)


class ApiErrorKind(str, Enum):
    """Famille d'erreur distante, pour les décisions côté appelant."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER = "server"
    INVALID_RESPONSE = "invalid_response"
    HTTP = "http"


class ApiError(Exception):
    """Erreur API (réseau, statut HTTP, réponse invalide) avec message lisible."""

    def __init__(
        self,
        message: str,
        *,
        kind: ApiErrorKind = ApiErrorKind.HTTP,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code


def clean_params(params: Mapping[str, Any] | None) -> dict[str, str]:
    """Prépare des paramètres de requête : None/"" retirés, bool en minuscules, listes jointes."""
    cleaned: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple, set, frozenset)):
            if not value:
                continue
            cleaned[key] = ",".join(str(v.value if isinstance(v, Enum) else v) for v in value)
        else:
            cleaned[key] = str(value)
    return cleaned


def _flatten_messages(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw] if raw else []
    if isinstance(raw, Mapping):
        if "message" in raw and isinstance(raw["message"], str):
            return [raw["message"]]
        out: list[str] = []
        for value in raw.values():
            out.extend(_flatten_messages(value))
        return out
    if isinstance(raw, (list, tuple)):
        out = []
        for item in raw:
            out.extend(_flatten_messages(item))
        return out
    return [str(raw)]


def token_is_valid(token: str | None, *, now: float | None = None) -> bool:
    """True si le jeton est un JWT (3 segments) dont la claim `exp` est dans le futur."""
    if not token:
        return False
    parts = token.split(".")
    if len(parts) != 3:
        return False
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment.encode("ascii")))
        exp = float(payload["exp"])
    except (ValueError, KeyError, TypeError):
        return False
    current = time.time() if now is None else now
    return exp > current


class ApiClient:
    """
    Client HTTP asynchrone de l'API.

    Une requête = un `httpx.AsyncClient` éphémère (transport injectable pour les tests).
    Aucune relance automatique : les erreurs remontent en `ApiError`.
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ApiConfig()
        self._transport = transport
        self._token: str | None = self.config.token
        self._cache: dict[str, tuple[float, Any]] = {}

    # -- jeton -------------------------------------------------------------

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token.strip() or None

    def clear_token(self) -> None:
        self._token = None

    def _auth_header(self) -> dict[str, str]:
        if self._token is None:
            return {}
        if not token_is_valid(self._token):
            logger.info("Jeton expiré ou invalide : nettoyage")
            self._token = None
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def _headers(self, *, json_body: bool) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        headers.update(self._auth_header())
        return headers

    # -- cache -------------------------------------------------------------

    @staticmethod
    def cache_key(path: str, params: Mapping[str, str] | None) -> str:
        query = urlencode(sorted((params or {}).items()))
        return f"{path}?{query}" if query else path

    def _cache_get(self, key: str) -> Any | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        stored_at, data = entry
        if time.monotonic() - stored_at > self.config.cache_ttl_s:
            del self._cache[key]
            return None
        return copy.deepcopy(data)

    def _cache_set(self, key: str, data: Any) -> None:
        if self.config.cache_ttl_s <= 0:
            return
        self._cache[key] = (time.monotonic(), copy.deepcopy(data))

    def clear_cache(self) -> None:
        self._cache.clear()

    # -- réponses ----------------------------------------------------------

    def _raise_for_status(self, response: httpx.Response, method: str, path: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status == 401:
            if self._token is not None:
                self.clear_token()
                logger.info("401 reçu : jeton nettoyé")
            raise ApiError(
                "Session expirée. Veuillez vous reconnecter.",
                kind=ApiErrorKind.UNAUTHORIZED,
                status_code=status,
            )
        if status == 403:
            raise ApiError(
                "Vous n'avez pas les permissions nécessaires.",
                kind=ApiErrorKind.FORBIDDEN,
                status_code=status,
            )
        if status == 404:
            raise ApiError(
                f"Ressource introuvable: {method} {path}",
                kind=ApiErrorKind.NOT_FOUND,
                status_code=status,
            )
        body = self._json_or_none(response)
        if status == 422:
            messages: list[str] = []
            if isinstance(body, Mapping):
                messages = _flatten_messages(body.get("errors") or body.get("details"))
            message = (
                f"Erreur de validation: {', '.join(messages)}"
                if messages
                else "Erreur de validation des données"
            )
            raise ApiError(message, kind=ApiErrorKind.VALIDATION, status_code=status)
        if status == 429:
            raise ApiError(
                "Trop de requêtes. Veuillez patienter avant de réessayer.",
                kind=ApiErrorKind.RATE_LIMITED,
                status_code=status,
            )
        if status >= 500:
            raise ApiError(
                "Erreur serveur. Veuillez réessayer plus tard.",
                kind=ApiErrorKind.SERVER,
                status_code=status,
            )
        message = f"Erreur HTTP: {status}"
        if isinstance(body, Mapping):
            server_msg = body.get("error") or body.get("message") or body.get("details")
            if isinstance(server_msg, str) and server_msg:
                message = server_msg
        raise ApiError(message, kind=ApiErrorKind.HTTP, status_code=status)

    @staticmethod
    def _json_or_none(response: httpx.Response) -> Any:
        try:
            return json.loads(response.text) if response.text.strip() else None
        except ValueError:
            return None

    @staticmethod
    def _decode_body(response: httpx.Response) -> Any:
        """Décode le corps ; un Content-Type non JSON est toléré si le texte est du JSON."""
        text = response.text
        if not text.strip():
            return {}
        try:
            return json.loads(text)
        except ValueError as exc:
            content_type = response.headers.get("content-type") or "undefined"
            raise ApiError(
                f"Réponse inattendue du serveur. Content-Type: {content_type}",
                kind=ApiErrorKind.INVALID_RESPONSE,
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _unwrap(payload: Any) -> Any:
        """Retire l'enveloppe `{success, data}` quand le serveur l'utilise."""
        if isinstance(payload, dict) and "success" in payload:
            if not payload.get("success"):
                raise ApiError(
                    str(payload.get("error") or payload.get("message") or "Erreur serveur"),
                    kind=ApiErrorKind.HTTP,
                )
            return payload["data"] if "data" in payload else payload
        if payload is None:
            raise ApiError("Réponse vide du serveur", kind=ApiErrorKind.INVALID_RESPONSE)
        return payload

    # -- requêtes ----------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        files: dict[str, Any] | None = None,
        form: dict[str, str] | None = None,
    ) -> Any:
        url = f"{self.config.base_url}{path}"
        headers = self._headers(json_body=json_body is not None)
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=params or None,
                    json=json_body,
                    files=files,
                    data=form,
                    headers=headers,
                )
        except httpx.TimeoutException as exc:
            raise ApiError("Délai d'attente dépassé", kind=ApiErrorKind.TIMEOUT) from exc
        except httpx.HTTPError as exc:
            raise ApiError("Erreur de connexion au serveur", kind=ApiErrorKind.NETWORK) from exc
        logger.debug("%s %s -> %s", method, path, response.status_code)
        self._raise_for_status(response, method, path)
        return self._unwrap(self._decode_body(response))

    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        cache: bool = True,
    ) -> Any:
        query = clean_params(params)
        use_cache = cache and self.config.cache_ttl_s > 0
        key = self.cache_key(path, query)
        if use_cache:
            cached = self._cache_get(key)
            if cached is not None:
                logger.debug("Cache hit: %s", key)
                return cached
        data = await self._send("GET", path, params=query)
        if use_cache:
            self._cache_set(key, data)
        return data

    async def post(self, path: str, data: Any = None) -> Any:
        return await self._send("POST", path, json_body=data if data is not None else {})

    async def put(self, path: str, data: Any = None) -> Any:
        return await self._send("PUT", path, json_body=data if data is not None else {})

    async def patch(self, path: str, data: Any = None) -> Any:
        return await self._send("PATCH", path, json_body=data if data is not None else {})

    async def delete(self, path: str) -> Any:
        return await self._send("DELETE", path)

    async def upload(
        self,
        path: str,
        *,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        fields: Mapping[str, Any] | None = None,
    ) -> Any:
        """Envoie un fichier en multipart (champ `file`) + champs texte additionnels."""
        logger.debug("Upload %s vers %s", filename, path)
        return await self._send(
            "POST",
            path,
            files={"file": (filename, content, content_type)},
            form=clean_params(fields),
        )
