"""Contrôleur d'état de formulaire : valeurs, erreurs, validation, soumission asynchrone."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, Mapping, Protocol

from actionculture.core.forms.rules import FieldSpec, check_value

logger = logging.getLogger(__name__)

SubmitAction = Callable[[Mapping[str, Any]], Awaitable[Any]]


class CrossCheck(Protocol):
    """Validation portant sur plusieurs champs, exécutée après la validation par champ."""

    fields: tuple[str, ...]

    def __call__(self, form: "FormController") -> bool:
        ...


class FormController:
    """
    Détient `values`/`errors` d'un formulaire et orchestre sa validation.

    `set_value` se fait en deux temps : la valeur est d'abord enregistrée et
    validée seule, puis les contrôles croisés concernés lisent l'état
    enregistré. Aucun différé n'est nécessaire.
    """

    def __init__(
        self,
        fields: Iterable[FieldSpec],
        on_submit: SubmitAction,
        *,
        to_payload: Callable[[Mapping[str, Any]], Mapping[str, Any]] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._specs: dict[str, FieldSpec] = {}
        for spec in fields:
            if spec.name in self._specs:
                raise ValueError(f"Champ déclaré deux fois: {spec.name}")
            self._specs[spec.name] = spec
        self._on_submit = on_submit
        self._to_payload = to_payload
        self._on_error = on_error
        self._cross_checks: list[CrossCheck] = []
        self._values: dict[str, Any] = {}
        self._errors: dict[str, str] = {}
        self._touched: set[str] = set()
        self._submitting = False
        self.last_submit_error: str | None = None
        self.reset()

    # -- lecture -----------------------------------------------------------

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    @property
    def touched(self) -> frozenset[str]:
        return frozenset(self._touched)

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def field_names(self) -> list[str]:
        return list(self._specs)

    def _spec(self, name: str) -> FieldSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise KeyError(f"Champ inconnu: {name}") from None

    # -- écriture ----------------------------------------------------------

    def add_cross_check(self, check: CrossCheck) -> None:
        for name in check.fields:
            self._spec(name)
        self._cross_checks.append(check)

    def set_value(self, name: str, value: Any) -> None:
        spec = self._spec(name)
        self._values[name] = value
        self._touched.add(name)
        self._apply(name, check_value(value, spec))
        for check in self._cross_checks:
            if name in check.fields:
                check(self)

    def set_error(self, name: str, message: str) -> None:
        self._spec(name)
        self._errors[name] = message

    def clear_error(self, name: str) -> None:
        self._spec(name)
        self._errors.pop(name, None)

    def touch(self, name: str, touched: bool = True) -> None:
        self._spec(name)
        if touched:
            self._touched.add(name)
        else:
            self._touched.discard(name)

    def _apply(self, name: str, message: str | None) -> None:
        if message is None:
            self._errors.pop(name, None)
        else:
            self._errors[name] = message

    def validate_field(self, name: str) -> bool:
        message = check_value(self._values.get(name), self._spec(name))
        self._apply(name, message)
        return message is None

    def validate_form(self) -> bool:
        """Valide tous les champs (et les marque touchés), puis les contrôles croisés."""
        for name in self._specs:
            self.validate_field(name)
            self._touched.add(name)
        for check in self._cross_checks:
            check(self)
        return not self._errors

    def reset(self) -> None:
        self._values = {name: spec.initial_value for name, spec in self._specs.items()}
        self._errors = {}
        self._touched = set()
        self._submitting = False
        self.last_submit_error = None

    # -- soumission --------------------------------------------------------

    async def submit(self) -> bool:
        """
        Valide puis appelle l'action de soumission une seule fois.

        Retourne False si une soumission est déjà en cours, si le formulaire
        est invalide, ou si l'action échoue et qu'un `on_error` est configuré
        (sinon l'exception remonte). Les valeurs saisies sont conservées.
        """
        if self._submitting:
            logger.debug("Soumission ignorée : une soumission est déjà en cours")
            return False
        if not self.validate_form():
            logger.debug("Soumission bloquée : %d champ(s) invalide(s)", len(self._errors))
            return False
        self._submitting = True
        self.last_submit_error = None
        try:
            payload = self._to_payload(self.values) if self._to_payload else self.values
            await self._on_submit(payload)
        except Exception as exc:
            self.last_submit_error = str(exc)
            if self._on_error is None:
                raise
            logger.warning("Échec de la soumission: %s", exc)
            self._on_error(exc)
            return False
        finally:
            self._submitting = False
        return True
