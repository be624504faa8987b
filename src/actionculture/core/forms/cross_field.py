"""Contrôle croisé début/fin : la date de fin doit suivre strictement la date de début."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from actionculture.core.forms.rules import parse_datetime

if TYPE_CHECKING:
    from actionculture.core.forms.controller import FormController

DATE_ORDER_MESSAGE = "La date de fin doit être après la date de début"


@dataclass(frozen=True)
class DateOrderCheck:
    """
    Relit les deux champs après chaque modification de l'un d'eux.

    Une valeur vide ou illisible n'est pas encore comparable : rien ne change.
    En cas de succès, seule l'erreur posée par ce contrôle est retirée.
    """

    start_field: str
    end_field: str
    message: str = DATE_ORDER_MESSAGE

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.start_field, self.end_field)

    def __call__(self, form: FormController) -> bool:
        values = form.values
        start = parse_datetime(values.get(self.start_field))
        end = parse_datetime(values.get(self.end_field))
        if start is None or end is None:
            return True
        if end <= start:
            form.set_error(self.end_field, self.message)
            return False
        if form.errors.get(self.end_field) == self.message:
            form.clear_error(self.end_field)
        return True
