"""Tests du formulaire de création d'événement."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

import pytest

from actionculture.core.api.evenements import EvenementService
from actionculture.core.forms.cross_field import DATE_ORDER_MESSAGE
from actionculture.core.forms.event_form import (
    EventSubmitError,
    build_event_form,
    event_form_for,
    event_payload,
)
from actionculture.core.resources.events import EventResource

NOW = datetime(2030, 1, 1, 9, 0)

VALID = {
    "nom_evenement": "Festival du malouf",
    "description": "Trois soirées de musique andalouse à Constantine.",
    "date_debut": "2030-07-01T20:00",
    "date_fin": "2030-07-03T23:00",
    "lieu": "Palais de la culture",
    "adresse": "Rue Larbi Ben M'hidi",
    "wilaya": "25",
    "tarif": "",
    "capacite_max": "500",
    "age_minimum": "",
    "type_evenement": "3",
    "organisateur": "Association El Bahdja",
    "contact_email": "contact@malouf.dz",
    "contact_telephone": "",
    "image_url": "",
}


async def _noop(payload: Any) -> None:
    return None


def test_valid_form_submits_api_payload() -> None:
    sent: list[dict] = []

    async def _submit(payload: Any) -> None:
        sent.append(dict(payload))

    form = build_event_form(_submit, initial=VALID, now=lambda: NOW)

    assert asyncio.run(form.submit()) is True

    assert sent[0]["wilaya"] == 25
    assert sent[0]["type_evenement"] == 3
    assert sent[0]["tarif"] == 0
    assert sent[0]["capacite_max"] == 500
    assert "age_minimum" not in sent[0]
    assert "contact_telephone" not in sent[0]


def test_empty_form_reports_required_fields() -> None:
    form = build_event_form(_noop, now=lambda: NOW)

    assert form.validate_form() is False

    assert set(form.errors) == {
        "nom_evenement",
        "description",
        "date_debut",
        "date_fin",
        "lieu",
        "adresse",
        "wilaya",
        "type_evenement",
        "organisateur",
        "contact_email",
    }


@pytest.mark.parametrize(
    ("field", "value", "message"),
    [
        ("nom_evenement", "Ab", "Le nom doit contenir au moins 3 caractères"),
        ("description", "Trop court", "La description doit contenir au moins 20 caractères"),
        ("date_debut", "2029-12-31T10:00", "La date de début doit être dans le futur"),
        ("tarif", "-5", "Le tarif ne peut pas être négatif"),
        ("capacite_max", "0", "La capacité doit être supérieure à 0"),
        ("age_minimum", "120", "L'âge minimum doit être entre 0 et 99 ans"),
        ("capacite_max", "2.5", "La capacité doit être un nombre entier"),
        ("age_minimum", "12,5", "L'âge minimum doit être un nombre entier"),
        ("wilaya", "Alger", "Wilaya invalide"),
        ("type_evenement", "concert", "Type d'événement invalide"),
        ("contact_email", "contact", "Format d'email invalide"),
        ("contact_telephone", "12345", "Format de téléphone algérien invalide"),
    ],
)
def test_field_rules(field, value, message) -> None:
    form = build_event_form(_noop, initial=VALID, now=lambda: NOW)

    form.set_value(field, value)

    assert form.errors.get(field) == message


def test_date_order_is_enforced() -> None:
    form = build_event_form(_noop, initial=VALID, now=lambda: NOW)

    form.set_value("date_fin", "2030-06-30T10:00")

    assert form.errors == {"date_fin": DATE_ORDER_MESSAGE}
    assert asyncio.run(form.submit()) is False


def test_unknown_initial_keys_are_rejected() -> None:
    with pytest.raises(ValueError, match="inconnu"):
        build_event_form(_noop, initial={"titre": "x"})


def test_event_payload_keeps_decimal_tariffs() -> None:
    payload = event_payload({**VALID, "tarif": "250,5", "age_minimum": 0, "image_url": " https://img.dz/a.jpg "})

    assert payload["tarif"] == 250.5
    assert payload["age_minimum"] == 0
    assert payload["image_url"] == "https://img.dz/a.jpg"


def test_event_form_for_creates_through_resource(api) -> None:
    api.add("POST", "/evenements", status=201, json_data={"success": True, "data": {"id_evenement": 11, "nom_evenement": "Festival du malouf"}})
    resource = EventResource(EvenementService(api.client()))
    form = event_form_for(resource, initial=VALID, now=lambda: NOW)

    assert asyncio.run(form.submit()) is True

    assert [e.id for e in resource.items] == [11]


def test_event_form_for_surfaces_api_errors(api) -> None:
    api.add("POST", "/evenements", status=422, json_data={"errors": {"nom_evenement": "Nom déjà pris"}})
    resource = EventResource(EvenementService(api.client()))
    errors: list[Exception] = []
    form = event_form_for(resource, initial=VALID, now=lambda: NOW, on_error=errors.append)

    assert asyncio.run(form.submit()) is False

    assert isinstance(errors[0], EventSubmitError)
    assert str(errors[0]) == "Erreur de validation: Nom déjà pris"
    assert form.values["nom_evenement"] == "Festival du malouf"


def test_non_numeric_selection_blocks_submit_without_raising() -> None:
    sent: list[dict] = []

    async def _submit(payload: Any) -> None:
        sent.append(dict(payload))

    form = build_event_form(_submit, initial={**VALID, "wilaya": "Alger"}, now=lambda: NOW)

    assert asyncio.run(form.submit()) is False
    assert form.errors == {"wilaya": "Wilaya invalide"}
    assert sent == []


def test_fractional_capacity_is_never_truncated() -> None:
    sent: list[dict] = []

    async def _submit(payload: Any) -> None:
        sent.append(dict(payload))

    form = build_event_form(_submit, initial={**VALID, "capacite_max": "2.5"}, now=lambda: NOW)

    assert asyncio.run(form.submit()) is False
    assert form.errors == {"capacite_max": "La capacité doit être un nombre entier"}
    assert sent == []
    with pytest.raises(ValueError, match="entière"):
        event_payload({**VALID, "capacite_max": "2.5"})
