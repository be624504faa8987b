"""Formulaires : règles par champ, contrôleur d'état, contrôles croisés."""

from actionculture.core.forms.controller import FormController
from actionculture.core.forms.cross_field import DATE_ORDER_MESSAGE, DateOrderCheck
from actionculture.core.forms.rules import REQUIRED_MESSAGE, FieldSpec, Rule, check_value

__all__ = [
    "DATE_ORDER_MESSAGE",
    "DateOrderCheck",
    "FieldSpec",
    "FormController",
    "REQUIRED_MESSAGE",
    "Rule",
    "check_value",
]
