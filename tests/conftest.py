"""Fixtures pytest communes : API simulée (httpx.MockTransport) et jetons JWT."""

from __future__ import annotations

import base64
import json
import time
from typing import Any, Callable

import httpx
import pytest

from actionculture.core.api.client import ApiClient
from actionculture.core.config import ApiConfig

API_PREFIX = "/api"


class FakeApi:
    """
    Serveur simulé : (méthode, chemin) -> réponses successives.

    La dernière réponse d'une route est rejouée indéfiniment ; une route
    absente répond 404.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], list[Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json_data: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
        error: Exception | Callable[[httpx.Request], Exception] | None = None,
    ) -> "FakeApi":
        spec = {"status": status, "json": json_data, "text": text, "headers": headers, "error": error}
        self._routes.setdefault((method.upper(), API_PREFIX + path), []).append(spec)
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path == API_PREFIX + path
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": "Route inconnue"})
        spec = queue.pop(0) if len(queue) > 1 else queue[0]
        error = spec["error"]
        if error is not None:
            raise error(request) if callable(error) else error
        if spec["text"] is not None:
            return httpx.Response(spec["status"], text=spec["text"], headers=spec["headers"])
        if spec["json"] is None:
            return httpx.Response(spec["status"], headers=spec["headers"])
        return httpx.Response(spec["status"], json=spec["json"], headers=spec["headers"])

    def client(self, **config: Any) -> ApiClient:
        return ApiClient(ApiConfig(**config), transport=httpx.MockTransport(self.handler))


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


def _b64(data: dict[str, Any]) -> str:
    raw = base64.urlsafe_b64encode(json.dumps(data).encode("utf-8")).decode("ascii")
    return raw.rstrip("=")


@pytest.fixture
def make_jwt() -> Callable[..., str]:
    def _make(*, expires_in: float = 3600.0) -> str:
        header = _b64({"alg": "HS256", "typ": "JWT"})
        payload = _b64({"id_user": 1, "exp": int(time.time() + expires_in)})
        return f"{header}.{payload}.signature"

    return _make


@pytest.fixture
def site_row() -> Callable[..., dict[str, Any]]:
    def _row(site_id: int, nom: str = "Site", **extra: Any) -> dict[str, Any]:
        return {"id_lieu": site_id, "nom": nom, **extra}

    return _row
