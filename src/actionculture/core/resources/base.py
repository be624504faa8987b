"""État commun des ressources distantes : items en cache, chargement, erreur, pagination."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

from actionculture.core.api.client import ApiError
from actionculture.core.models import Page, Pagination

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Listener = Callable[[Any], None]


class ResourceState(Generic[T]):
    """
    Cache client d'une page de résultats + drapeaux `loading`/`error`.

    Chaque opération passe `loading=True, error=None` en entrée et
    `loading=False` en sortie. Seules les `ApiError` sont rattrapées (réduites
    à un message) ; les erreurs de programmation remontent. Deux appels
    concurrents ne sont pas ordonnés : la dernière réponse arrivée gagne.
    """

    def __init__(self, *, page_size: int = 12) -> None:
        self._items: list[T] = []
        self._loading = False
        self._error: str | None = None
        self._failure: ApiError | None = None
        self._pagination = Pagination(limit=page_size)
        self._listeners: list[Listener] = []
        self._closed = False

    @property
    def items(self) -> list[T]:
        return list(self._items)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def failure(self) -> ApiError | None:
        """Dernière `ApiError` rattrapée (None après une opération réussie)."""
        return self._failure

    @property
    def pagination(self) -> Pagination:
        return self._pagination

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Enregistre un listener appelé après chaque changement d'état ; retourne le désabonnement."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        """Détache la ressource : les réponses encore en vol ne modifient plus l'état."""
        self._closed = True
        self._listeners.clear()

    def clear_error(self) -> None:
        if self._error is not None:
            self._error = None
            self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    async def _run(
        self,
        call: Callable[[], Awaitable[R]],
        failure_message: str,
        apply: Callable[[R], None] | None = None,
    ) -> tuple[bool, R | None]:
        if self._closed:
            raise RuntimeError(f"{type(self).__name__} fermée : opération refusée")
        self._loading = True
        self._error = None
        self._failure = None
        self._notify()
        ok = False
        result: R | None = None
        try:
            result = await call()
            ok = True
        except ApiError as exc:
            logger.warning("%s: %s", failure_message, exc.message)
            if not self._closed:
                self._error = exc.message or failure_message
                self._failure = exc
        finally:
            if not self._closed:
                if ok and apply is not None:
                    apply(result)  # type: ignore[arg-type]
                self._loading = False
                self._notify()
        return ok, result

    def _replace_items(self, items: list[T]) -> None:
        self._items = list(items)

    async def _fetch_into(self, call: Callable[[], Awaitable[Page[T]]], failure_message: str) -> bool:
        """Remplace items et pagination par la page serveur."""

        def _apply(result: Page[T]) -> None:
            self._items = list(result.items)
            self._pagination = result.pagination

        ok, _ = await self._run(call, failure_message, _apply)
        return ok

    async def _replace_from(self, call: Callable[[], Awaitable[list[T]]], failure_message: str) -> bool:
        """Remplace les items sans toucher la pagination (recherches, listes dérivées)."""
        ok, _ = await self._run(call, failure_message, self._replace_items)
        return ok

    async def _create_item(self, call: Callable[[], Awaitable[T]], failure_message: str) -> T | None:
        def _apply(item: T) -> None:
            self._items = [item, *self._items]

        _, item = await self._run(call, failure_message, _apply)
        return item

    async def _update_item(
        self, item_id: int, call: Callable[[], Awaitable[T]], failure_message: str
    ) -> T | None:
        def _apply(updated: T) -> None:
            self._items = [updated if _item_id(i) == item_id else i for i in self._items]

        _, item = await self._run(call, failure_message, _apply)
        return item

    async def _delete_item(self, item_id: int, call: Callable[[], Awaitable[None]], failure_message: str) -> bool:
        def _apply(_: None) -> None:
            self._items = [i for i in self._items if _item_id(i) != item_id]

        ok, _ = await self._run(call, failure_message, _apply)
        return ok


def _item_id(item: Any) -> Any:
    return getattr(item, "id", None)
