"""Formulaire de création d'événement : champs, règles, contrôle des dates, payload API."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Mapping

from actionculture.core.forms import rules as r
from actionculture.core.forms.controller import FormController, SubmitAction
from actionculture.core.forms.cross_field import DateOrderCheck
from actionculture.core.forms.rules import FieldSpec, is_blank

if TYPE_CHECKING:
    from actionculture.core.resources.events import EventResource

EVENT_FIELDS = (
    "nom_evenement",
    "description",
    "date_debut",
    "date_fin",
    "lieu",
    "adresse",
    "wilaya",
    "tarif",
    "capacite_max",
    "age_minimum",
    "type_evenement",
    "organisateur",
    "contact_email",
    "contact_telephone",
    "image_url",
)


class EventSubmitError(RuntimeError):
    """La création de l'événement a échoué côté API."""


def event_field_specs(
    initial: Mapping[str, Any] | None = None,
    *,
    now: Callable[[], datetime] = datetime.now,
) -> list[FieldSpec]:
    data = dict(initial or {})
    unknown = sorted(set(data) - set(EVENT_FIELDS))
    if unknown:
        raise ValueError(f"Champ(s) inconnu(s) pour le formulaire événement: {', '.join(unknown)}")

    def spec(name: str, *, required: bool = False, rules: tuple[r.Rule, ...] = ()) -> FieldSpec:
        value = data.get(name)
        return FieldSpec(name, "" if value is None else value, required, rules)

    return [
        spec("nom_evenement", required=True, rules=(r.min_length(3, "Le nom doit contenir au moins 3 caractères"),)),
        spec(
            "description",
            required=True,
            rules=(r.min_length(20, "La description doit contenir au moins 20 caractères"),),
        ),
        spec(
            "date_debut",
            required=True,
            rules=(r.future_datetime("La date de début doit être dans le futur", now=now),),
        ),
        spec("date_fin", required=True),
        spec("lieu", required=True),
        spec("adresse", required=True),
        spec("wilaya", required=True, rules=(r.integer("Wilaya invalide"),)),
        spec("tarif", rules=(r.number_at_least(0, "Le tarif ne peut pas être négatif"),)),
        spec(
            "capacite_max",
            rules=(
                r.integer("La capacité doit être un nombre entier"),
                r.number_above(0, "La capacité doit être supérieure à 0"),
            ),
        ),
        spec(
            "age_minimum",
            rules=(
                r.integer("L'âge minimum doit être un nombre entier"),
                r.number_between(0, 99, "L'âge minimum doit être entre 0 et 99 ans"),
            ),
        ),
        spec("type_evenement", required=True, rules=(r.integer("Type d'événement invalide"),)),
        spec("organisateur", required=True),
        spec("contact_email", required=True, rules=(r.email(),)),
        spec("contact_telephone", rules=(r.algerian_phone(),)),
        spec("image_url"),
    ]


def _number(value: Any) -> int | float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    text = str(value).strip().replace(",", ".")
    number = float(text)
    return int(number) if number.is_integer() else number


def _integer(value: Any) -> int:
    number = _number(value)
    if not float(number).is_integer():
        raise ValueError(f"Valeur entière attendue: {value!r}")
    return int(number)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def event_payload(values: Mapping[str, Any]) -> dict[str, Any]:
    """Convertit les valeurs saisies en corps de requête de création."""
    payload: dict[str, Any] = {
        "nom_evenement": _text(values.get("nom_evenement")),
        "description": _text(values.get("description")),
        "date_debut": _text(values.get("date_debut")),
        "date_fin": _text(values.get("date_fin")),
        "lieu": _text(values.get("lieu")),
        "adresse": _text(values.get("adresse")),
        "wilaya": _integer(values.get("wilaya")),
        "tarif": 0 if is_blank(values.get("tarif")) else _number(values.get("tarif")),
        "type_evenement": _integer(values.get("type_evenement")),
        "organisateur": _text(values.get("organisateur")),
        "contact_email": _text(values.get("contact_email")),
    }
    for key in ("capacite_max", "age_minimum"):
        if not is_blank(values.get(key)):
            payload[key] = _integer(values.get(key))
    for key in ("contact_telephone", "image_url"):
        if not is_blank(values.get(key)):
            payload[key] = _text(values.get(key))
    return payload


def build_event_form(
    on_submit: SubmitAction,
    *,
    initial: Mapping[str, Any] | None = None,
    now: Callable[[], datetime] = datetime.now,
    on_error: Callable[[Exception], None] | None = None,
) -> FormController:
    form = FormController(
        event_field_specs(initial, now=now),
        on_submit,
        to_payload=event_payload,
        on_error=on_error,
    )
    form.add_cross_check(DateOrderCheck("date_debut", "date_fin"))
    return form


def event_form_for(
    resource: EventResource,
    *,
    initial: Mapping[str, Any] | None = None,
    now: Callable[[], datetime] = datetime.now,
    on_error: Callable[[Exception], None] | None = None,
) -> FormController:
    """Formulaire branché sur `EventResource.create` ; un échec API devient `EventSubmitError`."""

    async def _submit(payload: Mapping[str, Any]) -> None:
        created = await resource.create(payload)
        if created is None:
            raise EventSubmitError(resource.error or "Erreur lors de la création de l'événement")

    return build_event_form(_submit, initial=initial, now=now, on_error=on_error)
