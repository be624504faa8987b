"""Règles de validation par champ : prédicats purs, évalués dans l'ordre déclaré."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

REQUIRED_MESSAGE = "Ce champ est requis"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DZ_PHONE_RE = re.compile(r"^(\+213|0)[5-7][0-9]{8}$")


@dataclass(frozen=True)
class Rule:
    """Un prédicat sur la valeur seule + le message affiché s'il échoue."""

    test: Callable[[Any], bool]
    message: str


@dataclass(frozen=True)
class FieldSpec:
    """Configuration statique d'un champ de formulaire."""

    name: str
    initial_value: Any = ""
    required: bool = False
    rules: tuple[Rule, ...] = field(default_factory=tuple)


def is_blank(value: Any) -> bool:
    """None, "" et les chaînes d'espaces sont vides ; un nombre (même 0) ne l'est jamais."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def check_value(value: Any, spec: FieldSpec) -> str | None:
    """
    Retourne le message du premier échec, ou None si la valeur est valide.

    Le contrôle `required` passe avant les règles ; dès qu'une règle échoue,
    les suivantes ne sont pas évaluées.
    """
    if spec.required and is_blank(value):
        return REQUIRED_MESSAGE
    for rule in spec.rules:
        if not rule.test(value):
            return rule.message
    return None


# -- fabriques -------------------------------------------------------------


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        return None


def min_length(length: int, message: str) -> Rule:
    return Rule(lambda value: len(str(value or "").strip()) >= length, message)


def pattern(regex: str | re.Pattern[str], message: str, *, allow_blank: bool = False) -> Rule:
    compiled = re.compile(regex) if isinstance(regex, str) else regex

    def _test(value: Any) -> bool:
        if allow_blank and is_blank(value):
            return True
        return bool(compiled.match(str(value or "")))

    return Rule(_test, message)


def email(message: str = "Format d'email invalide") -> Rule:
    return pattern(_EMAIL_RE, message)


def algerian_phone(message: str = "Format de téléphone algérien invalide") -> Rule:
    """Mobile algérien (+213 ou 0, puis 5/6/7 et 8 chiffres) ; vide accepté, espaces ignorés."""

    def _test(value: Any) -> bool:
        if is_blank(value):
            return True
        return bool(_DZ_PHONE_RE.match(re.sub(r"\s", "", str(value))))

    return Rule(_test, message)


def _numeric(predicate: Callable[[float], bool], message: str) -> Rule:
    def _test(value: Any) -> bool:
        if is_blank(value):
            return True
        number = _as_number(value)
        return number is not None and predicate(number)

    return Rule(_test, message)


def number_at_least(minimum: float, message: str) -> Rule:
    return _numeric(lambda n: n >= minimum, message)


def number_above(minimum: float, message: str) -> Rule:
    return _numeric(lambda n: n > minimum, message)


def number_between(minimum: float, maximum: float, message: str) -> Rule:
    return _numeric(lambda n: minimum <= n <= maximum, message)


def integer(message: str) -> Rule:
    """Entier (chaîne de chiffres ou nombre sans partie décimale) ; vide accepté."""
    return _numeric(lambda n: n.is_integer(), message)


def parse_datetime(value: Any) -> datetime | None:
    """Date ou date-heure ISO ; les valeurs avec fuseau sont ramenées en UTC naïf."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def future_datetime(
    message: str,
    *,
    now: Callable[[], datetime] = datetime.now,
) -> Rule:
    """La date doit être strictement dans le futur (date illisible = échec)."""

    def _test(value: Any) -> bool:
        parsed = parse_datetime(value)
        if parsed is None:
            return False
        current = parse_datetime(now())
        return current is not None and parsed > current

    return Rule(_test, message)
