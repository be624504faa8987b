"""Tests de la ligne de commande `actionculture sites ...`."""

from __future__ import annotations

import io
from pathlib import Path

import httpx
import pytest

from actionculture.app.main import build_parser, format_site_line, main
from actionculture.core.models import Site


def _run(api, *argv: str) -> tuple[int, str, str]:
    out, err = io.StringIO(), io.StringIO()
    code = main(list(argv), transport=httpx.MockTransport(api.handler), out=out, err=err)
    return code, out.getvalue(), err.getvalue()


def test_sites_list_prints_one_line_per_site(api, site_row) -> None:
    api.add(
        "GET",
        "/patrimoine/sites",
        json_data={
            "items": [site_row(1, "Casbah", Wilaya={"nom": "Alger"}), site_row(2, "Tipasa")],
            "page": 1,
            "limit": 12,
            "total": 2,
        },
    )

    code, out, err = _run(api, "sites", "list", "--wilaya", "16")

    assert code == 0
    assert out.splitlines() == ["1  Casbah  (Alger)", "2  Tipasa  (-)", "Page 1/1 (2 site(s))"]
    assert err == ""
    assert dict(api.requests[0].url.params) == {"id_wilaya": "16", "page": "1", "limit": "12"}


def test_sites_show_prints_details(api) -> None:
    api.add(
        "GET",
        "/patrimoine/sites/3",
        json_data={"id_lieu": 3, "nom": "Timgad", "Wilaya": {"nom": "Batna"}, "latitude": 35.48, "longitude": 6.47},
    )

    code, out, _ = _run(api, "sites", "show", "3")

    assert code == 0
    assert out.splitlines()[0] == "Timgad"
    assert "Batna, Algérie" in out
    assert "35.48, 6.47" in out


def test_remote_error_goes_to_stderr_with_exit_code_1(api) -> None:
    api.add("GET", "/patrimoine/recherche", status=500, json_data={})

    code, out, err = _run(api, "sites", "search", "casbah")

    assert code == 1
    assert out == ""
    assert err.startswith("Erreur: Erreur serveur. Veuillez réessayer plus tard.")


def test_network_error_suggests_checking_base_url(api) -> None:
    api.add("GET", "/patrimoine/populaires", error=lambda req: httpx.ConnectError("refusé", request=req))

    code, _, err = _run(api, "sites", "popular")

    assert code == 1
    assert "Erreur de connexion au serveur" in err
    assert "Prochaine étape:" in err


def test_invalid_coordinates_exit_with_code_2(api) -> None:
    code, _, err = _run(api, "sites", "nearby", "120", "3")

    assert code == 2
    assert "Latitude hors bornes" in err
    assert api.requests == []


def test_config_file_sets_base_url(api, tmp_path: Path) -> None:
    config = tmp_path / "actionculture.toml"
    config.write_text('[api]\nbase_url = "http://autre-hote/api"\n', encoding="utf-8")
    api.add("GET", "/patrimoine/populaires", json_data=[])

    code, out, _ = _run(api, "--config", str(config), "sites", "popular")

    assert code == 0
    assert out.strip() == "Aucun site trouvé."
    assert api.requests[0].url.host == "autre-hote"


def test_token_from_environment_is_sent(api, make_jwt, monkeypatch: pytest.MonkeyPatch) -> None:
    token = make_jwt()
    monkeypatch.setenv("ACTIONCULTURE_TOKEN", token)
    api.add("GET", "/patrimoine/populaires", json_data=[])

    _run(api, "sites", "popular")

    assert api.requests[0].headers["Authorization"] == f"Bearer {token}"


def test_parser_requires_an_action() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["sites"])


def test_format_site_line() -> None:
    assert format_site_line(Site(id=4, nom="Djemila", wilaya="Sétif")) == "4  Djemila  (Sétif)"
